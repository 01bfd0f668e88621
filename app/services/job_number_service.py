from __future__ import annotations

import logging
from datetime import datetime
from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ValidationFailure
from app.core.flow_logging import flow_info
from app.models.job import JOB_TYPE_ABBREVIATIONS, JobType, LogisticsJob

logger = logging.getLogger(__name__)

JOB_NUMBER_UNIQUE_CONSTRAINT = "uq_logistics_jobs_job_number"


class JobNumberParts(NamedTuple):
    prefix: str
    abbreviation: str
    year: str
    sequence: int


class JobNumberService:
    """
    Allocates job numbers of the form AAL-<ABBR>-<YY>-<SEQ>.

    The next sequence is always recomputed from the stored job numbers; there
    is no counter row and nothing is reserved. Two callers allocating in the
    same bucket at the same time get the same number, and the unique
    constraint on logistics_jobs.job_number rejects the second insert. Callers
    must catch that (see is_job_number_conflict) and allocate again.
    """

    @staticmethod
    def current_year() -> int:
        return datetime.now().year

    @staticmethod
    def abbreviation_for(job_type: JobType | str) -> str:
        try:
            job_type = JobType(job_type)
        except ValueError as e:
            raise ValidationFailure(f"Unknown job type {job_type!r}.") from e

        abbreviation = JOB_TYPE_ABBREVIATIONS.get(job_type)
        if abbreviation is None:
            raise ValidationFailure(
                f"Job type {job_type.value} is a legacy type and cannot be numbered.",
                code="LEGACY_JOB_TYPE",
            )
        return abbreviation

    @staticmethod
    def year_token(year: int) -> str:
        if year < 0:
            raise ValidationFailure(f"Invalid allocation year {year}.")
        return f"{year % 100:02d}"

    @staticmethod
    def bucket_prefix(job_type: JobType | str, year: int) -> str:
        abbreviation = JobNumberService.abbreviation_for(job_type)
        return f"{settings.JOB_NUMBER_PREFIX}-{abbreviation}-{JobNumberService.year_token(year)}-"

    @staticmethod
    def format_job_number(job_type: JobType | str, year: int, sequence: int) -> str:
        if sequence < 1:
            raise ValidationFailure(f"Sequence must be positive, got {sequence}.")
        padding = max(1, settings.JOB_NUMBER_SEQUENCE_PADDING)
        # Zero padding is a minimum width: 1000 stays 1000.
        return f"{JobNumberService.bucket_prefix(job_type, year)}{sequence:0{padding}d}"

    @staticmethod
    def parse_job_number(value: str | None) -> JobNumberParts | None:
        """Split a job number into its four parts; None if it is not well formed."""
        parts = (value or "").split("-")
        if len(parts) != 4:
            return None
        prefix, abbreviation, year, sequence = parts
        if not (sequence.isascii() and sequence.isdigit()):
            return None
        return JobNumberParts(prefix, abbreviation, year, int(sequence))

    @staticmethod
    def max_sequence(db: Session, prefix: str) -> int:
        """Highest well formed sequence stored under `prefix`, 0 for an empty bucket."""
        stmt = select(LogisticsJob.job_number).where(
            LogisticsJob.job_number.startswith(prefix, autoescape=True)
        )
        highest = 0
        for job_number in db.scalars(stmt):
            # LIKE is case-insensitive on some backends
            if not job_number.startswith(prefix):
                continue
            parts = JobNumberService.parse_job_number(job_number)
            if parts is None:
                logger.debug("job_number_ignored value=%s prefix=%s", job_number, prefix)
                continue
            highest = max(highest, parts.sequence)
        return highest

    @staticmethod
    def allocate(db: Session, job_type: JobType | str, year: int | None = None) -> str:
        """
        Next unused job number for the (type, year) bucket at query time.
        Read-only: the caller persists the job and handles a lost race.
        """
        if year is None:
            year = JobNumberService.current_year()
        prefix = JobNumberService.bucket_prefix(job_type, year)
        next_sequence = JobNumberService.max_sequence(db, prefix) + 1
        job_number = JobNumberService.format_job_number(job_type, year, next_sequence)
        flow_info(
            logger,
            "job_number_allocated job_type=%s year=%s number=%s",
            JobType(job_type).value,
            year,
            job_number,
            category="job_numbering",
        )
        return job_number

    @staticmethod
    def is_job_number_conflict(exc: IntegrityError) -> bool:
        """True only for a duplicate job number, not for other violations on that column."""
        detail = str(getattr(exc, "orig", None) or exc).lower()
        if JOB_NUMBER_UNIQUE_CONSTRAINT in detail:
            return True
        # SQLite names the column instead of the constraint
        return "unique constraint failed" in detail and "logistics_jobs.job_number" in detail
