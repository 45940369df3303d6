# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme enrollments.user_id → users.id échouent
# avec NoReferencedTableError si user.py n'est pas chargé avant study_session.py.

from app.models.user import User  # noqa: F401  (doit précéder les autres modèles)
from app.models.study_session import Enrollment, StudySession  # noqa: F401
from app.models.attendance import Attendance  # noqa: F401
from app.models.course import Course  # noqa: F401
from app.models.question import Question, QuestionInteraction  # noqa: F401
