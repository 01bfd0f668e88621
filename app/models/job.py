from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import AuditMixin

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.invoice import Invoice


class FreightMode(str, enum.Enum):
    AIR = "AIR"
    SEA = "SEA"
    ROAD = "ROAD"


class JobType(str, enum.Enum):
    """
    Both generations of the job type taxonomy in one closed enumeration.

    Legacy values only carry a mode. Canonical values carry mode and
    direction and are the only ones accepted for new jobs.
    """

    # Legacy generation (direction agnostic)
    AIR_FREIGHT = "AIR_FREIGHT"
    SEA_FREIGHT = "SEA_FREIGHT"
    ROAD_FREIGHT = "ROAD_FREIGHT"

    # Canonical generation
    AIR_FREIGHT_IMPORT = "AIR_FREIGHT_IMPORT"
    AIR_FREIGHT_EXPORT = "AIR_FREIGHT_EXPORT"
    SEA_FREIGHT_IMPORT = "SEA_FREIGHT_IMPORT"
    SEA_FREIGHT_EXPORT = "SEA_FREIGHT_EXPORT"
    ROAD_FREIGHT_IMPORT = "ROAD_FREIGHT_IMPORT"
    ROAD_FREIGHT_EXPORT = "ROAD_FREIGHT_EXPORT"

    @property
    def is_legacy(self) -> bool:
        return self in LEGACY_JOB_TYPES

    @property
    def mode(self) -> FreightMode:
        return FreightMode(self.value.split("_", 1)[0])

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    def to_canonical(self, mapping: dict["JobType", "JobType"] | None = None) -> "JobType":
        """
        Total mapping onto the canonical generation.

        Canonical values map to themselves. Legacy values use `mapping` when it
        has an entry, otherwise the default import counterpart.
        """
        if not self.is_legacy:
            return self
        if mapping and self in mapping:
            return mapping[self]
        return DEFAULT_LEGACY_MAPPING[self]

    @classmethod
    def legacy_types(cls) -> list["JobType"]:
        return [member for member in cls if member.is_legacy]

    @classmethod
    def canonical_types(cls) -> list["JobType"]:
        return [member for member in cls if not member.is_legacy]


LEGACY_JOB_TYPES = frozenset(
    {JobType.AIR_FREIGHT, JobType.SEA_FREIGHT, JobType.ROAD_FREIGHT}
)

# No direction is stored on legacy jobs, so they default to IMPORT.
DEFAULT_LEGACY_MAPPING: dict[JobType, JobType] = {
    JobType.AIR_FREIGHT: JobType.AIR_FREIGHT_IMPORT,
    JobType.SEA_FREIGHT: JobType.SEA_FREIGHT_IMPORT,
    JobType.ROAD_FREIGHT: JobType.ROAD_FREIGHT_IMPORT,
}

# Two-letter code used in job numbers, one per canonical type.
JOB_TYPE_ABBREVIATIONS: dict[JobType, str] = {
    JobType.AIR_FREIGHT_IMPORT: "AI",
    JobType.AIR_FREIGHT_EXPORT: "AE",
    JobType.SEA_FREIGHT_IMPORT: "SI",
    JobType.SEA_FREIGHT_EXPORT: "SE",
    JobType.ROAD_FREIGHT_IMPORT: "RI",
    JobType.ROAD_FREIGHT_EXPORT: "RE",
}


class LogisticsJob(AuditMixin, Base):
    """
    A single freight operation.
    job_number is globally unique; the unique constraint is the race breaker
    for concurrent allocations.
    """

    __tablename__ = "logistics_jobs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    job_number: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    job_type: Mapped[JobType] = mapped_column(
        SAEnum(JobType, name="job_type_enum", native_enum=False, length=32),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="OPEN")

    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Routing & cargo
    port_of_loading: Mapped[str | None] = mapped_column(String(120), nullable=True)
    port_of_discharge: Mapped[str | None] = mapped_column(String(120), nullable=True)
    gross_weight: Mapped[float | None] = mapped_column(Numeric(15, 3), nullable=True)
    chargeable_weight: Mapped[float | None] = mapped_column(Numeric(15, 3), nullable=True)
    shipper: Mapped[str | None] = mapped_column(String(255), nullable=True)
    consignee: Mapped[str | None] = mapped_column(String(255), nullable=True)
    package: Mapped[str | None] = mapped_column(String(255), nullable=True)
    good_description: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Mode specific documents
    master_air_waybill: Mapped[str | None] = mapped_column(String(60), nullable=True)
    house_air_waybill: Mapped[str | None] = mapped_column(String(60), nullable=True)
    master_bl: Mapped[str | None] = mapped_column(String(60), nullable=True)
    house_bl: Mapped[str | None] = mapped_column(String(60), nullable=True)
    plate_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    container_number: Mapped[str | None] = mapped_column(String(30), nullable=True)

    client: Mapped["Client"] = relationship("Client", back_populates="jobs")
    invoices: Mapped[list["Invoice"]] = relationship("Invoice", back_populates="job")
