from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, UniquenessConflict, ValidationFailure
from app.core.flow_logging import flow_info
from app.models.client import Client
from app.models.job import JobType, LogisticsJob
from app.schemas.job import JobCreate
from app.services.job_number_service import JobNumberService

logger = logging.getLogger(__name__)


class JobService:
    @staticmethod
    def get_job(db: Session, job_id: int) -> LogisticsJob:
        job = db.get(LogisticsJob, job_id)
        if job is None:
            raise NotFoundError(f"Job {job_id} not found.")
        return job

    @staticmethod
    def preview_next_number(db: Session, job_type: JobType, year: int | None = None) -> str:
        """Next number for the bucket without reserving it."""
        return JobNumberService.allocate(db, job_type, year)

    @staticmethod
    def create_job(db: Session, job_in: JobCreate, user_email: str = "system@local") -> LogisticsJob:
        """
        Job creation:
        1. Client must exist, job type must be canonical.
        2. A supplied job_number is stored as-is; a duplicate is a conflict.
        3. A blank job_number is allocated. Losing the insert race on
           job_number re-allocates, up to JOB_NUMBER_ALLOCATION_RETRIES times.
        """
        if job_in.job_type.is_legacy:
            raise ValidationFailure(
                f"Job type {job_in.job_type.value} is no longer accepted; "
                f"use {job_in.job_type.to_canonical().value} or its export variant.",
                code="LEGACY_JOB_TYPE",
            )
        if db.get(Client, job_in.client_id) is None:
            raise NotFoundError(f"Client {job_in.client_id} not found.")

        job_data = job_in.model_dump(exclude={"job_number"})

        if job_in.job_number:
            return JobService._insert(db, job_data, job_in.job_number, user_email)

        attempts = max(1, settings.JOB_NUMBER_ALLOCATION_RETRIES)
        for attempt in range(1, attempts + 1):
            job_number = JobNumberService.allocate(db, job_in.job_type)
            try:
                return JobService._insert(db, job_data, job_number, user_email)
            except UniquenessConflict:
                logger.warning(
                    "job_number_collision number=%s attempt=%s/%s",
                    job_number,
                    attempt,
                    attempts,
                )

        raise UniquenessConflict(
            f"Could not allocate a free job number for {job_in.job_type.value} "
            f"after {attempts} attempts.",
        )

    @staticmethod
    def _insert(db: Session, job_data: dict, job_number: str, user_email: str) -> LogisticsJob:
        job = LogisticsJob(
            **job_data,
            job_number=job_number,
            created_by=user_email,
            last_changed_by=user_email,
        )
        db.add(job)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if JobNumberService.is_job_number_conflict(e):
                raise UniquenessConflict(
                    f"Job number {job_number} already exists.", value=job_number
                ) from e
            raise ValidationFailure(f"Data integrity violation: {e.orig}") from e
        db.refresh(job)
        flow_info(
            logger,
            "job_created id=%s number=%s job_type=%s",
            job.id,
            job.job_number,
            job.job_type.value,
            category="job_numbering",
        )
        return job
