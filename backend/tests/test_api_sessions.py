"""
Tests d'intégration API pour les séances et les inscriptions.
Testent les URLs, les codes HTTP, les droits et le format des réponses.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from app.schemas.study_session import SessionResponse, StudentSummary


# --- Helpers ---

def make_session_response(**kwargs) -> SessionResponse:
    day = kwargs.get("day", "Lundi")
    time = kwargs.get("time", "08h00")
    return SessionResponse(
        id=f"{day.lower()}-{time}",
        day=day,
        time=time,
        name=f"{day} - {time}",
        description=f"Séance du {day} à {time}",
        max_capacity=kwargs.get("max_capacity", 12),
        is_active=kwargs.get("is_active", True),
        enrollment_count=kwargs.get("enrollment_count", 0),
        created_at=datetime.now(),
    )


# ============================================================
# GET / POST /api/v1/sessions
# ============================================================

def test_list_sessions(student_client):
    with patch("app.routers.sessions.session_service.get_sessions") as mock:
        mock.return_value = [make_session_response(), make_session_response(day="Mardi")]
        response = student_client.get("/api/v1/sessions?active_only=true")

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == ["lundi-08h00", "mardi-08h00"]
    assert mock.call_args.kwargs["active_only"] is True


def test_create_session_succes(client):
    with patch("app.routers.sessions.session_service.create_session") as mock:
        mock.return_value = make_session_response()
        response = client.post("/api/v1/sessions", json={"day": "Lundi", "time": "08h00"})

    assert response.status_code == 201
    assert response.json()["id"] == "lundi-08h00"
    assert response.json()["max_capacity"] == 12


def test_create_session_heure_invalide(client):
    response = client.post("/api/v1/sessions", json={"day": "Lundi", "time": "8h"})
    assert response.status_code == 422
    assert "Format d'heure invalide" in response.text


def test_create_session_doublon(client):
    with patch("app.routers.sessions.session_service.create_session") as mock:
        mock.side_effect = ValueError("Cette séance existe déjà.")
        response = client.post("/api/v1/sessions", json={"day": "Lundi", "time": "08h00"})

    assert response.status_code == 409


def test_create_session_refuse_aux_etudiants(student_client):
    response = student_client.post("/api/v1/sessions", json={"day": "Lundi", "time": "08h00"})
    assert response.status_code == 403


# ============================================================
# GET /api/v1/sessions/me, /{id}
# ============================================================

def test_my_session_aucune(student_client):
    with patch("app.routers.sessions.session_service.get_user_session", return_value=None):
        response = student_client.get("/api/v1/sessions/me")

    assert response.status_code == 200
    assert response.json() is None


def test_get_session_introuvable(client):
    with patch("app.routers.sessions.session_service.get_session", return_value=None):
        response = client.get("/api/v1/sessions/dimanche-08h00")
    assert response.status_code == 404


# ============================================================
# PUT / toggle / DELETE
# ============================================================

def test_update_session_capacite_trop_basse(client):
    with patch("app.routers.sessions.session_service.update_session") as mock:
        mock.side_effect = ValueError("Impossible de réduire la capacité en dessous du nombre d'inscrits (8).")
        response = client.put("/api/v1/sessions/lundi-08h00", json={"max_capacity": 5})

    assert response.status_code == 400


def test_toggle_session(client):
    with patch("app.routers.sessions.session_service.toggle_session_status") as mock:
        mock.return_value = make_session_response(is_active=False)
        response = client.post("/api/v1/sessions/lundi-08h00/toggle")

    assert response.status_code == 200
    assert response.json()["is_active"] is False


def test_delete_session(client):
    with patch("app.routers.sessions.session_service.delete_session", return_value=True):
        response = client.delete("/api/v1/sessions/lundi-08h00")
    assert response.status_code == 204


def test_delete_session_introuvable(client):
    with patch("app.routers.sessions.session_service.delete_session", return_value=False):
        response = client.delete("/api/v1/sessions/lundi-08h00")
    assert response.status_code == 404


# ============================================================
# Inscriptions
# ============================================================

def test_enroll_soi_meme(student_client, student_user):
    with patch("app.routers.sessions.session_service.enroll") as mock:
        mock.return_value = make_session_response(enrollment_count=1)
        response = student_client.post("/api/v1/sessions/lundi-08h00/enroll", json={})

    assert response.status_code == 200
    assert response.json()["enrollment_count"] == 1
    mock.assert_called_once()
    assert mock.call_args[0][1:] == ("lundi-08h00", student_user.id)


def test_enroll_autre_etudiant_refuse(student_client):
    with patch("app.routers.sessions.session_service.enroll") as mock:
        response = student_client.post(
            "/api/v1/sessions/lundi-08h00/enroll", json={"user_id": str(uuid.uuid4())},
        )

    assert response.status_code == 403
    mock.assert_not_called()


def test_enroll_par_admin(client):
    target = uuid.uuid4()
    with patch("app.routers.sessions.session_service.enroll") as mock:
        mock.return_value = make_session_response(enrollment_count=3)
        response = client.post("/api/v1/sessions/lundi-08h00/enroll", json={"user_id": str(target)})

    assert response.status_code == 200
    assert mock.call_args[0][2] == target


def test_enroll_seance_complete(student_client):
    with patch("app.routers.sessions.session_service.enroll") as mock:
        mock.side_effect = ValueError("Cette séance est complète.")
        response = student_client.post("/api/v1/sessions/lundi-08h00/enroll", json={})

    assert response.status_code == 409
    assert response.json()["detail"] == "Cette séance est complète."


def test_enroll_seance_introuvable(student_client):
    with patch("app.routers.sessions.session_service.enroll") as mock:
        mock.side_effect = ValueError("Séance introuvable.")
        response = student_client.post("/api/v1/sessions/lundi-08h00/enroll", json={})

    assert response.status_code == 404


def test_remove_propre_inscription(student_client, student_user):
    with patch("app.routers.sessions.session_service.remove_enrollment", return_value=True):
        response = student_client.delete(f"/api/v1/sessions/lundi-08h00/students/{student_user.id}")
    assert response.status_code == 204


def test_remove_inscription_d_un_autre_refuse(student_client):
    with patch("app.routers.sessions.session_service.remove_enrollment") as mock:
        response = student_client.delete(f"/api/v1/sessions/lundi-08h00/students/{uuid.uuid4()}")

    assert response.status_code == 403
    mock.assert_not_called()


def test_list_session_students(client):
    student = StudentSummary(
        id=uuid.uuid4(), first_name="Alice", last_name="Bernard",
        email="alice@ecole.be", session_id="lundi-08h00",
    )
    with patch("app.routers.sessions.session_service.session_exists", return_value=True), \
         patch("app.routers.sessions.session_service.get_session_students", return_value=[student]):
        response = client.get("/api/v1/sessions/lundi-08h00/students")

    assert response.status_code == 200
    assert response.json()[0]["first_name"] == "Alice"


def test_list_session_students_seance_introuvable(client):
    with patch("app.routers.sessions.session_service.session_exists", return_value=False), \
         patch("app.routers.sessions.session_service.get_session_students") as mock:
        response = client.get("/api/v1/sessions/dimanche-08h00/students")

    assert response.status_code == 404
    assert response.json()["detail"] == "Séance introuvable."
    mock.assert_not_called()


# ============================================================
# POST /api/v1/sessions/move
# ============================================================

def test_move_student_succes(client):
    with patch("app.routers.sessions.session_service.move_student") as mock:
        mock.return_value = make_session_response(day="Mardi", enrollment_count=4)
        response = client.post("/api/v1/sessions/move", json={
            "user_id": str(uuid.uuid4()),
            "from_session_id": "lundi-08h00",
            "to_session_id": "mardi-08h00",
        })

    assert response.status_code == 200
    assert response.json()["id"] == "mardi-08h00"


def test_move_student_meme_seance(client):
    response = client.post("/api/v1/sessions/move", json={
        "user_id": str(uuid.uuid4()),
        "from_session_id": "lundi-08h00",
        "to_session_id": "lundi-08h00",
    })
    assert response.status_code == 422


def test_move_student_destination_complete(client):
    with patch("app.routers.sessions.session_service.move_student") as mock:
        mock.side_effect = ValueError("Cette séance est complète.")
        response = client.post("/api/v1/sessions/move", json={
            "user_id": str(uuid.uuid4()),
            "from_session_id": "lundi-08h00",
            "to_session_id": "mardi-08h00",
        })

    assert response.status_code == 409


# ============================================================
# Export et liste des étudiants
# ============================================================

def test_export_enrollments_csv(client):
    with patch("app.routers.sessions.session_service.export_enrollments_csv") as mock:
        mock.return_value = "\ufeffJour;Heure;Prénom;Nom;Email\nLundi;08h00;Alice;Bernard;alice@ecole.be\n"
        response = client.get("/api/v1/sessions/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "liste_etudiants.csv" in response.headers["content-disposition"]
    assert "Alice" in response.text


def test_list_students_non_inscrits(client):
    with patch("app.routers.users.session_service.list_students", return_value=[]) as mock:
        response = client.get("/api/v1/users/students?unassigned_only=true")

    assert response.status_code == 200
    assert mock.call_args.kwargs["unassigned_only"] is True


def test_list_students_refuse_aux_etudiants(student_client):
    response = student_client.get("/api/v1/users/students")
    assert response.status_code == 403
