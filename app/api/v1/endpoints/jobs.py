from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Header, Query, status
from sqlalchemy.orm import Session

from app.api.errors import raise_domain_error
from app.core.errors import DomainError
from app.db.session import get_db
from app.models.job import JobType
from app.schemas.job import JobCreate, JobResponse, NextJobNumberResponse
from app.schemas.job_migration import MigrationReportResponse, MigrationRequest
from app.services.job_migration_service import JobTypeMigrationService
from app.services.job_number_service import JobNumberService
from app.services.job_service import JobService

router = APIRouter()


def _user_email(x_user_email: Optional[str]) -> str:
    return (x_user_email or "").strip().lower() or "system@local"


@router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    x_user_email: Optional[str] = Header(default=None),
):
    """Create a job. A blank job_number is allocated as AAL-<ABBR>-<YY>-<SEQ>."""
    try:
        return JobService.create_job(db, payload, _user_email(x_user_email))
    except DomainError as e:
        raise_domain_error(e)


@router.get("/next-number", response_model=NextJobNumberResponse)
def preview_next_job_number(
    job_type: JobType,
    year: Optional[int] = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    """Next number for the bucket. Not reserved: creating the job may still collide."""
    resolved_year = year if year is not None else JobNumberService.current_year()
    try:
        next_number = JobService.preview_next_number(db, job_type, resolved_year)
    except DomainError as e:
        raise_domain_error(e)
    return NextJobNumberResponse(job_type=job_type, year=resolved_year, next_number=next_number)


@router.post("/migrate-job-types", response_model=MigrationReportResponse)
def migrate_job_types(
    payload: Optional[MigrationRequest] = Body(default=None),
    db: Session = Depends(get_db),
):
    """Relabel every legacy job type and renumber those jobs. Safe to re-run."""
    payload = payload or MigrationRequest()
    try:
        report = JobTypeMigrationService.migrate_all(db, mapping=payload.mapping, year=payload.year)
    except DomainError as e:
        raise_domain_error(e)
    return report.as_dict()


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: int, db: Session = Depends(get_db)):
    try:
        return JobService.get_job(db, job_id)
    except DomainError as e:
        raise_domain_error(e)
