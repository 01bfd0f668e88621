from __future__ import annotations

from datetime import datetime

from app.core.config import settings
from app.models.job import JobType, LogisticsJob


def _job_payload(**overrides):
    payload = {
        "title": "Kigali consolidation",
        "client_id": 1,
        "job_type": "AIR_FREIGHT_IMPORT",
        "port_of_loading": "JFK",
        "port_of_discharge": "KGL",
        "chargeable_weight": "550",
    }
    payload.update(overrides)
    return payload


def test_create_job_allocates_numbers_in_sequence(client, acme, fixed_year):
    first = client.post("/api/v1/jobs/", json=_job_payload(), headers={"X-User-Email": "Ops@AAL.rw"})
    second = client.post("/api/v1/jobs/", json=_job_payload(job_number="   "))

    assert first.status_code == 201, first.text
    assert second.status_code == 201, second.text
    assert first.json()["job_number"] == "AAL-AI-24-001"
    assert second.json()["job_number"] == "AAL-AI-24-002"


def test_create_job_records_user(client, acme, fixed_year, db_session):
    response = client.post("/api/v1/jobs/", json=_job_payload(), headers={"X-User-Email": "Ops@AAL.rw"})

    job = db_session.get(LogisticsJob, response.json()["id"])
    assert job.created_by == "ops@aal.rw"


def test_create_job_with_explicit_number(client, acme):
    response = client.post("/api/v1/jobs/", json=_job_payload(job_number="AAL-AI-24-050"))
    assert response.status_code == 201
    assert response.json()["job_number"] == "AAL-AI-24-050"


def test_create_job_rejects_legacy_type(client, acme):
    response = client.post("/api/v1/jobs/", json=_job_payload(job_type="AIR_FREIGHT"))

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "LEGACY_JOB_TYPE"
    assert "AIR_FREIGHT_IMPORT" in detail["message"]


def test_create_job_unknown_client(client, acme):
    response = client.post("/api/v1/jobs/", json=_job_payload(client_id=42))
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "NOT_FOUND"


def test_create_job_duplicate_number(client, acme, make_job):
    make_job("AAL-SE-24-001", JobType.SEA_FREIGHT_EXPORT)

    response = client.post(
        "/api/v1/jobs/",
        json=_job_payload(job_type="SEA_FREIGHT_EXPORT", job_number="AAL-SE-24-001"),
    )

    assert response.status_code == 409
    assert response.json()["detail"]["value"] == "AAL-SE-24-001"


def test_create_job_unknown_type_is_rejected_by_schema(client, acme):
    response = client.post("/api/v1/jobs/", json=_job_payload(job_type="RAIL_FREIGHT"))
    assert response.status_code == 422


def test_get_job(client, make_job):
    job = make_job("AAL-RE-24-003", JobType.ROAD_FREIGHT_EXPORT)

    response = client.get(f"/api/v1/jobs/{job.id}")

    assert response.status_code == 200
    assert response.json()["job_type"] == "ROAD_FREIGHT_EXPORT"
    assert client.get("/api/v1/jobs/999").status_code == 404


def test_next_number_preview_does_not_reserve(client, make_job, fixed_year):
    make_job("AAL-SI-24-007", JobType.SEA_FREIGHT_IMPORT)

    first = client.get("/api/v1/jobs/next-number", params={"job_type": "SEA_FREIGHT_IMPORT"})
    second = client.get("/api/v1/jobs/next-number", params={"job_type": "SEA_FREIGHT_IMPORT"})

    assert first.json() == {"job_type": "SEA_FREIGHT_IMPORT", "year": 2024, "next_number": "AAL-SI-24-008"}
    assert second.json()["next_number"] == "AAL-SI-24-008"


def test_next_number_for_other_year(client, make_job, fixed_year):
    make_job("AAL-SI-24-007", JobType.SEA_FREIGHT_IMPORT)

    response = client.get(
        "/api/v1/jobs/next-number", params={"job_type": "SEA_FREIGHT_IMPORT", "year": 2025}
    )

    assert response.json()["next_number"] == "AAL-SI-25-001"


def test_next_number_rejects_legacy_type(client):
    response = client.get("/api/v1/jobs/next-number", params={"job_type": "SEA_FREIGHT"})
    assert response.status_code == 400


def test_migrate_job_types_endpoint(client, make_job, fixed_year, db_session):
    make_job("AAL-SI-24-003", JobType.SEA_FREIGHT_IMPORT)
    legacy = make_job("SF-2024-001", JobType.SEA_FREIGHT, created_at=datetime(2024, 1, 5))

    response = client.post("/api/v1/jobs/migrate-job-types")

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["migrated"] == [legacy.id]
    assert body["failed"] == []
    assert body["entries"][0]["new_job_number"] == "AAL-SI-24-004"

    db_session.expire_all()
    assert db_session.get(LogisticsJob, legacy.id).job_type is JobType.SEA_FREIGHT_IMPORT

    rerun = client.post("/api/v1/jobs/migrate-job-types")
    assert rerun.json()["migrated"] == []


def test_migrate_job_types_with_mapping_override(client, make_job, fixed_year):
    legacy = make_job("RF-2024-001", JobType.ROAD_FREIGHT)

    response = client.post(
        "/api/v1/jobs/migrate-job-types",
        json={"mapping": {"ROAD_FREIGHT": "ROAD_FREIGHT_EXPORT"}, "year": 2023},
    )

    assert response.status_code == 200
    entry = response.json()["entries"][0]
    assert entry["job_id"] == legacy.id
    assert entry["new_job_type"] == "ROAD_FREIGHT_EXPORT"
    assert entry["new_job_number"] == "AAL-RE-23-001"


def test_health(client):
    assert client.get("/health").json() == {"status": "up"}


def test_migrate_job_types_with_malformed_configured_map(client, make_job, monkeypatch):
    monkeypatch.setattr(settings, "JOB_TYPE_MIGRATION_MAP", "SEA_FREIGHT")
    make_job("SF-2024-001", JobType.SEA_FREIGHT)

    response = client.post("/api/v1/jobs/migrate-job-types")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_MIGRATION_MAP"
