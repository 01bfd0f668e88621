from typing import Optional

from app.models.job import JobType
from app.schemas.base import BaseSchema


class MigrationEntryView(BaseSchema):
    job_id: int
    outcome: str
    old_job_type: Optional[JobType] = None
    new_job_type: Optional[JobType] = None
    old_job_number: Optional[str] = None
    new_job_number: Optional[str] = None
    reason: Optional[str] = None


class MigrationFailureView(BaseSchema):
    job_id: int
    reason: str


class MigrationReportResponse(BaseSchema):
    migrated: list[int]
    skipped: list[int]
    failed: list[MigrationFailureView]
    entries: list[MigrationEntryView]


class MigrationRequest(BaseSchema):
    # Optional overrides, e.g. {"AIR_FREIGHT": "AIR_FREIGHT_EXPORT"}
    mapping: Optional[dict[JobType, JobType]] = None
    year: Optional[int] = None
