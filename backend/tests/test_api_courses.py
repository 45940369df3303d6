"""
Tests d'intégration API pour les cours.
Vérifient en particulier qu'un étudiant ne voit que les cours de sa séance.
"""

import uuid
from datetime import datetime
from unittest.mock import MagicMock, patch

from app.models.course import Course
from app.schemas.course import CourseResponse

ENROLLED = "app.auth.dependencies.session_service.get_enrolled_session_id"


def make_course_response(session_id="lundi-08h00", title="Algèbre") -> CourseResponse:
    return CourseResponse(
        id=uuid.uuid4(),
        title=title,
        content="Chapitre 1",
        session_id=session_id,
        created_by=uuid.uuid4(),
        created_at=datetime.now(),
    )


def make_course(session_id="lundi-08h00", title="Algèbre linéaire"):
    c = MagicMock(spec=Course)
    c.id = uuid.uuid4()
    c.title = title
    c.content = "Vecteurs et matrices."
    c.session_id = session_id
    return c


# ============================================================
# GET /api/v1/courses
# ============================================================

def test_list_courses_admin_toutes_seances(client):
    with patch("app.routers.courses.course_service.get_courses", return_value=[]) as mock:
        response = client.get("/api/v1/courses")

    assert response.status_code == 200
    assert mock.call_args[0][1] is None


def test_list_courses_etudiant_sa_seance(student_client):
    with patch(ENROLLED, return_value="mardi-10h00"), \
         patch("app.routers.courses.course_service.get_courses") as mock:
        mock.return_value = [make_course_response("mardi-10h00")]
        response = student_client.get("/api/v1/courses")

    assert response.status_code == 200
    assert mock.call_args[0][1] == "mardi-10h00"


def test_list_courses_etudiant_autre_seance_refuse(student_client):
    with patch(ENROLLED, return_value="mardi-10h00"):
        response = student_client.get("/api/v1/courses?session_id=lundi-08h00")
    assert response.status_code == 403


def test_list_courses_etudiant_non_inscrit(student_client):
    with patch(ENROLLED, return_value=None), \
         patch("app.routers.courses.course_service.get_courses") as mock:
        response = student_client.get("/api/v1/courses")

    assert response.status_code == 200
    assert response.json() == []
    mock.assert_not_called()


# ============================================================
# POST / DELETE
# ============================================================

def test_create_course(client, admin_user):
    with patch("app.routers.courses.course_service.create_course") as mock:
        mock.return_value = make_course_response()
        response = client.post("/api/v1/courses", json={
            "title": "Algèbre", "content": "Chapitre 1", "session_id": "lundi-08h00",
        })

    assert response.status_code == 201
    assert mock.call_args[0][2] == admin_user.id


def test_create_course_champs_vides(client):
    response = client.post("/api/v1/courses", json={"title": " ", "content": "", "session_id": "lundi-08h00"})
    assert response.status_code == 422
    assert "Veuillez remplir tous les champs." in response.text


def test_create_course_seance_introuvable(client):
    with patch("app.routers.courses.course_service.create_course") as mock:
        mock.side_effect = ValueError("Séance introuvable.")
        response = client.post("/api/v1/courses", json={
            "title": "Algèbre", "content": "Chapitre 1", "session_id": "x",
        })
    assert response.status_code == 404


def test_create_course_refuse_aux_etudiants(student_client):
    response = student_client.post("/api/v1/courses", json={
        "title": "Algèbre", "content": "Chapitre 1", "session_id": "lundi-08h00",
    })
    assert response.status_code == 403


def test_delete_course_introuvable(client):
    with patch("app.routers.courses.course_service.delete_course", return_value=False):
        response = client.delete(f"/api/v1/courses/{uuid.uuid4()}")
    assert response.status_code == 404


# ============================================================
# GET /api/v1/courses/{id}/download
# ============================================================

def test_download_course(student_client):
    course = make_course()
    with patch(ENROLLED, return_value="lundi-08h00"), \
         patch("app.routers.courses.course_service.get_course", return_value=course):
        response = student_client.get(f"/api/v1/courses/{course.id}/download")

    assert response.status_code == 200
    assert response.text == "Vecteurs et matrices."
    assert "Alg%C3%A8bre%20lin%C3%A9aire.txt" in response.headers["content-disposition"]


def test_download_course_autre_seance_refuse(student_client):
    course = make_course(session_id="lundi-08h00")
    with patch(ENROLLED, return_value="mardi-10h00"), \
         patch("app.routers.courses.course_service.get_course", return_value=course):
        response = student_client.get(f"/api/v1/courses/{course.id}/download")
    assert response.status_code == 403


def test_download_course_introuvable(client):
    with patch("app.routers.courses.course_service.get_course", return_value=None):
        response = client.get(f"/api/v1/courses/{uuid.uuid4()}/download")
    assert response.status_code == 404
