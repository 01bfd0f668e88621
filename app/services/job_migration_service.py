from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import DisconnectionError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import PersistenceFailure, ValidationFailure
from app.core.flow_logging import flow_info
from app.models.job import DEFAULT_LEGACY_MAPPING, LEGACY_JOB_TYPES, JobType, LogisticsJob
from app.services.job_number_service import JobNumberService

logger = logging.getLogger(__name__)

MIGRATED = "migrated"
SKIPPED = "skipped"
FAILED = "failed"

MIGRATION_USER = "migration@system"


@dataclass
class MigrationEntry:
    job_id: int
    outcome: str
    old_job_type: JobType | None = None
    old_job_number: str | None = None
    new_job_type: JobType | None = None
    new_job_number: str | None = None
    reason: str | None = None


@dataclass
class MigrationReport:
    migrated: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: list[tuple[int, str]] = field(default_factory=list)
    entries: list[MigrationEntry] = field(default_factory=list)

    def record(self, entry: MigrationEntry) -> None:
        self.entries.append(entry)
        if entry.outcome == MIGRATED:
            self.migrated.append(entry.job_id)
        elif entry.outcome == SKIPPED:
            self.skipped.append(entry.job_id)
        else:
            self.failed.append((entry.job_id, entry.reason or "unknown error"))

    def as_dict(self) -> dict:
        return {
            "migrated": list(self.migrated),
            "skipped": list(self.skipped),
            "failed": [{"job_id": job_id, "reason": reason} for job_id, reason in self.failed],
            "entries": [asdict(entry) for entry in self.entries],
        }


def parse_migration_map(raw: str | None) -> dict[JobType, JobType]:
    """
    Parse `LEGACY=CANONICAL` pairs (comma separated) into a mapping.
    Raises ValueError on unknown types, non-legacy keys or legacy targets.
    """
    mapping: dict[JobType, JobType] = {}
    for pair in (raw or "").split(","):
        pair = pair.strip()
        if not pair:
            continue
        if "=" not in pair:
            raise ValueError(f"Invalid job type mapping entry {pair!r}; expected LEGACY=CANONICAL.")
        source_raw, target_raw = pair.split("=", 1)
        try:
            source = JobType(source_raw.strip().upper())
            target = JobType(target_raw.strip().upper())
        except ValueError as e:
            raise ValueError(f"Invalid job type mapping entry {pair!r}: {e}") from e
        if not source.is_legacy:
            raise ValueError(f"{source.value} is not a legacy job type.")
        if target.is_legacy:
            raise ValueError(f"{target.value} is not a canonical job type.")
        mapping[source] = target
    return mapping


def _is_systemic(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, (OperationalError, DisconnectionError)):
        return True
    return bool(getattr(exc, "connection_invalidated", False))


class JobTypeMigrationService:
    """
    One-shot relabelling of legacy job types.

    Every job still carrying AIR_FREIGHT / SEA_FREIGHT / ROAD_FREIGHT gets a
    canonical type and a freshly allocated job number. Each job is its own
    unit of work: type and number are committed together, a failing record is
    rolled back and reported, and the batch moves on. Only a systemic store
    failure stops the batch (PersistenceFailure with the partial report).
    Running it again only touches jobs that are still legacy.
    """

    @staticmethod
    def resolve_mapping(mapping: dict[JobType, JobType] | None = None) -> dict[JobType, JobType]:
        resolved = dict(DEFAULT_LEGACY_MAPPING)
        try:
            resolved.update(parse_migration_map(settings.JOB_TYPE_MIGRATION_MAP))
        except ValueError as e:
            raise ValidationFailure(
                f"Invalid JOB_TYPE_MIGRATION_MAP: {e}", code="INVALID_MIGRATION_MAP"
            ) from e
        if mapping:
            resolved.update({JobType(k): JobType(v) for k, v in mapping.items()})
        return resolved

    @staticmethod
    def candidate_ids(db: Session) -> list[int]:
        # Oldest first so renumbering follows creation order.
        stmt = (
            select(LogisticsJob.id)
            .where(LogisticsJob.job_type.in_(sorted(LEGACY_JOB_TYPES)))
            .order_by(LogisticsJob.created_at.asc(), LogisticsJob.id.asc())
        )
        return list(db.scalars(stmt))

    @staticmethod
    def bucket_year(job: LogisticsJob, year: int | None = None) -> int:
        if year is not None:
            return year
        if settings.JOB_MIGRATION_YEAR_SOURCE == "created" and job.created_at is not None:
            return job.created_at.year
        return JobNumberService.current_year()

    @staticmethod
    def migrate_all(
        db: Session,
        mapping: dict[JobType, JobType] | None = None,
        year: int | None = None,
    ) -> MigrationReport:
        effective_mapping = JobTypeMigrationService.resolve_mapping(mapping)
        report = MigrationReport()

        try:
            job_ids = JobTypeMigrationService.candidate_ids(db)
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceFailure(f"Could not load migration candidates: {e}", report=report) from e

        flow_info(logger, "job_migration_started candidates=%s", len(job_ids), category="job_migration")

        for job_id in job_ids:
            JobTypeMigrationService._migrate_one(db, job_id, effective_mapping, year, report)

        flow_info(
            logger,
            "job_migration_finished migrated=%s skipped=%s failed=%s",
            len(report.migrated),
            len(report.skipped),
            len(report.failed),
            category="job_migration",
        )
        return report

    @staticmethod
    def _migrate_one(
        db: Session,
        job_id: int,
        mapping: dict[JobType, JobType],
        year: int | None,
        report: MigrationReport,
    ) -> None:
        try:
            job = db.get(LogisticsJob, job_id)
        except SQLAlchemyError as e:
            entry = MigrationEntry(job_id=job_id, outcome=FAILED)
            JobTypeMigrationService._handle_store_error(db, entry, e, report)
            logger.warning("job_migration_failed job_id=%s reason=%s", job_id, entry.reason)
            report.record(entry)
            return

        if job is None or not job.job_type.is_legacy:
            # Deleted or migrated by someone else since the candidate scan.
            report.record(
                MigrationEntry(
                    job_id=job_id,
                    outcome=SKIPPED,
                    old_job_type=job.job_type if job else None,
                    old_job_number=job.job_number if job else None,
                    reason="not a legacy job" if job else "job no longer exists",
                )
            )
            return

        entry = MigrationEntry(
            job_id=job_id,
            outcome=FAILED,
            old_job_type=job.job_type,
            old_job_number=job.job_number,
        )

        try:
            new_type = job.job_type.to_canonical(mapping)
            if new_type.is_legacy:
                raise ValidationFailure(
                    f"No canonical mapping for legacy type {job.job_type.value}.",
                    code="UNMAPPED_JOB_TYPE",
                )
        except ValidationFailure as e:
            entry.reason = e.message
            logger.warning("job_migration_failed job_id=%s reason=%s", job_id, e.message)
            report.record(entry)
            return

        entry.new_job_type = new_type
        bucket_year = JobTypeMigrationService.bucket_year(job, year)
        attempts = max(1, settings.JOB_NUMBER_ALLOCATION_RETRIES)

        for attempt in range(1, attempts + 1):
            new_number = None
            try:
                new_number = JobNumberService.allocate(db, new_type, bucket_year)
                JobTypeMigrationService._apply(db, job, new_type, new_number)
            except IntegrityError as e:
                db.rollback()
                if JobNumberService.is_job_number_conflict(e):
                    entry.reason = f"job number {new_number} already taken"
                    logger.warning(
                        "job_migration_collision job_id=%s number=%s attempt=%s/%s",
                        job_id,
                        new_number,
                        attempt,
                        attempts,
                    )
                    continue
                entry.reason = f"integrity violation: {e.orig}"
                break
            except ValidationFailure as e:
                db.rollback()
                entry.reason = e.message
                break
            except SQLAlchemyError as e:
                JobTypeMigrationService._handle_store_error(db, entry, e, report)
                break
            else:
                entry.outcome = MIGRATED
                entry.new_job_number = new_number
                entry.reason = None
                report.record(entry)
                flow_info(
                    logger,
                    "job_migrated job_id=%s %s -> %s (%s -> %s)",
                    job_id,
                    entry.old_job_number,
                    new_number,
                    entry.old_job_type.value,
                    new_type.value,
                    category="job_migration",
                )
                return

        logger.warning("job_migration_failed job_id=%s reason=%s", job_id, entry.reason)
        report.record(entry)

    @staticmethod
    def _handle_store_error(
        db: Session,
        entry: MigrationEntry,
        exc: SQLAlchemyError,
        report: MigrationReport,
    ) -> None:
        """Roll back and note the error on `entry`; a systemic error ends the batch."""
        db.rollback()
        entry.reason = f"persistence error: {exc}"
        if _is_systemic(exc):
            report.record(entry)
            logger.error("job_migration_aborted job_id=%s error=%s", entry.job_id, exc)
            raise PersistenceFailure(
                f"Job type migration aborted at job {entry.job_id}: {exc}",
                report=report,
            ) from exc

    @staticmethod
    def _apply(db: Session, job: LogisticsJob, new_type: JobType, new_number: str) -> None:
        # Type and number always change together in one commit.
        job.job_type = new_type
        job.job_number = new_number
        job.last_changed_by = MIGRATION_USER
        db.commit()
