from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from app.models.job import JobType
from app.schemas.base import BaseSchema


class JobBase(BaseSchema):
    title: str = Field(min_length=1, max_length=255)
    client_id: int = Field(ge=1)
    job_type: JobType
    status: str = "OPEN"

    port_of_loading: Optional[str] = None
    port_of_discharge: Optional[str] = None
    gross_weight: Optional[Decimal] = Field(default=None, ge=0)
    chargeable_weight: Optional[Decimal] = Field(default=None, ge=0)
    shipper: Optional[str] = None
    consignee: Optional[str] = None
    package: Optional[str] = None
    good_description: Optional[str] = None

    master_air_waybill: Optional[str] = None
    house_air_waybill: Optional[str] = None
    master_bl: Optional[str] = None
    house_bl: Optional[str] = None
    plate_number: Optional[str] = None
    container_number: Optional[str] = None


class JobCreate(JobBase):
    # Blank => allocated as AAL-<ABBR>-<YY>-<SEQ>
    job_number: Optional[str] = Field(default=None, max_length=40)

    @field_validator("job_number")
    @classmethod
    def strip_job_number(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class JobResponse(JobBase):
    id: int
    job_number: str
    created_at: datetime
    updated_at: datetime


class NextJobNumberResponse(BaseSchema):
    job_type: JobType
    year: int
    next_number: str
