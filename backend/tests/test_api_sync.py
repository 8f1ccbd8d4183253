"""
Tests d'intégration API pour la synchronisation offline → online.
Endpoints : POST /api/v1/attendance/sync, GET /api/v1/attendance/sync/status
"""

from datetime import datetime
from unittest.mock import patch

from app.exceptions import EmptyBatch, StoreUnavailable
from app.schemas.sync import FailedRecord, SyncResponse, SyncStatus


# --- Helper ---

def make_entry_payload(**kwargs) -> dict:
    payload = {
        "offlineId": kwargs.get("offlineId", "dev1-0001"),
        "studentId": kwargs.get("studentId", 1),
        "courseId": kwargs.get("courseId", 10),
        "date": kwargs.get("date", "2024-03-01"),
        "status": kwargs.get("status", "Present"),
    }
    for optional in ("timeIn", "remarks", "fingerprintVerified"):
        if optional in kwargs:
            payload[optional] = kwargs[optional]
    return payload


# ============================================================
# POST /api/v1/attendance/sync
# ============================================================

def test_sync_succes(client):
    """Batch valide → 200 avec rapport complet en camelCase."""
    with patch("app.routers.attendance.sync_service.sync_attendances") as mock:
        mock.return_value = SyncResponse(
            total=2, created=1, updated=0, failed=1,
            failed_records=[FailedRecord(offline_id="dev1-0002", error="MissingFields")],
        )
        response = client.post("/api/v1/attendance/sync", json={
            "attendanceRecords": [
                make_entry_payload(timeIn="08:05:00", fingerprintVerified=True),
                make_entry_payload(offlineId="dev1-0002"),
            ],
        })

    assert response.status_code == 200
    assert response.json() == {
        "total": 2,
        "created": 1,
        "updated": 0,
        "failed": 1,
        "failedRecords": [{"offlineId": "dev1-0002", "error": "MissingFields"}],
    }
    entries = mock.call_args[0][1]
    assert entries[0].offline_id == "dev1-0001"
    assert entries[0].fingerprint_verified is True


def test_sync_entree_incomplete_transmise_au_service(client):
    """Champ obligatoire manquant → pas de 422, l'entrée est traitée (et rejetée) par le service."""
    entry = make_entry_payload()
    del entry["status"]
    with patch("app.routers.attendance.sync_service.sync_attendances") as mock:
        mock.return_value = SyncResponse(total=1)
        response = client.post("/api/v1/attendance/sync", json={"attendanceRecords": [entry]})

    assert response.status_code == 200
    assert mock.call_args[0][1][0].missing_fields() == ["status"]


def test_sync_batch_vide(client):
    """Batch vide → 400."""
    with patch("app.routers.attendance.sync_service.sync_attendances") as mock:
        mock.side_effect = EmptyBatch("Aucune présence à synchroniser.")
        response = client.post("/api/v1/attendance/sync", json={"attendanceRecords": []})

    assert response.status_code == 400


def test_sync_base_indisponible(client):
    """Panne de base en cours de batch → 500."""
    with patch("app.routers.attendance.sync_service.sync_attendances") as mock:
        mock.side_effect = StoreUnavailable("connection lost")
        response = client.post("/api/v1/attendance/sync", json={"attendanceRecords": [make_entry_payload()]})

    assert response.status_code == 500
    assert "connection lost" not in response.json()["detail"]


def test_sync_offline_id_trop_long(client):
    """offlineId de plus de 100 caractères (taille de la colonne) → 422, service jamais appelé."""
    with patch("app.routers.attendance.sync_service.sync_attendances") as mock:
        response = client.post("/api/v1/attendance/sync", json={
            "attendanceRecords": [make_entry_payload(offlineId="x" * 101)]
        })

    assert response.status_code == 422
    mock.assert_not_called()


def test_sync_offline_id_de_100_caracteres_accepte(client):
    with patch("app.routers.attendance.sync_service.sync_attendances") as mock:
        mock.return_value = SyncResponse(total=1, created=1)
        response = client.post("/api/v1/attendance/sync", json={
            "attendanceRecords": [make_entry_payload(offlineId="x" * 100)]
        })

    assert response.status_code == 200
    assert mock.call_args[0][1][0].offline_id == "x" * 100


def test_sync_statut_invalide(client):
    """Statut inconnu → 422."""
    response = client.post("/api/v1/attendance/sync", json={
        "attendanceRecords": [make_entry_payload(status="Excused")]
    })
    assert response.status_code == 422


def test_sync_student_id_mal_type(client):
    """studentId non entier → 422."""
    response = client.post("/api/v1/attendance/sync", json={
        "attendanceRecords": [make_entry_payload(studentId="abc")]
    })
    assert response.status_code == 422


def test_sync_date_invalide(client):
    response = client.post("/api/v1/attendance/sync", json={
        "attendanceRecords": [make_entry_payload(date="01/03/2024")]
    })
    assert response.status_code == 422


def test_sync_batch_trop_grand(client):
    """Batch de plus de 500 entrées → 422."""
    records = [make_entry_payload(offlineId=f"dev1-{i}") for i in range(501)]
    response = client.post("/api/v1/attendance/sync", json={"attendanceRecords": records})
    assert response.status_code == 422


def test_sync_sans_body(client):
    """Requête sans body → 422."""
    response = client.post("/api/v1/attendance/sync")
    assert response.status_code == 422


# ============================================================
# GET /api/v1/attendance/sync/status
# ============================================================

def test_sync_status(client, current_teacher):
    with patch("app.routers.attendance.sync_service.get_sync_status") as mock:
        mock.return_value = SyncStatus(teacher_id=1, last_sync=datetime(2024, 3, 1, 18, 30))
        response = client.get("/api/v1/attendance/sync/status")

    assert response.status_code == 200
    assert response.json() == {"teacherId": 1, "lastSync": "2024-03-01T18:30:00"}
    mock.assert_called_once_with(current_teacher)
