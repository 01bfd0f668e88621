from __future__ import annotations

import os
import sys
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import importlib

fastapi_app = importlib.import_module("app.main").app
from app.db.base import Base
from app.db.session import get_db

# Ensure all models are registered with SQLAlchemy metadata
import app.models  # noqa: F401
from app.models.client import Client
from app.models.job import JobType, LogisticsJob
from app.services.job_number_service import JobNumberService


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db_session(engine):
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(engine, db_session):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def fixed_year(monkeypatch):
    """Pin the allocation clock to 2024."""
    monkeypatch.setattr(JobNumberService, "current_year", staticmethod(lambda: 2024))
    return 2024


@pytest.fixture
def acme(db_session) -> Client:
    client = Client(id=1, name="Acme Corp", address="1 Main St", phone="+123456", tin="TIN123456789")
    db_session.add(client)
    db_session.commit()
    return client


@pytest.fixture
def make_job(db_session, acme):
    def _make_job(
        job_number: str,
        job_type: JobType,
        created_at: datetime | None = None,
        title: str | None = None,
    ) -> LogisticsJob:
        job = LogisticsJob(
            job_number=job_number,
            job_type=job_type,
            title=title or f"Job {job_number}",
            client_id=acme.id,
        )
        if created_at is not None:
            job.created_at = created_at
        db_session.add(job)
        db_session.commit()
        return job

    return _make_job
