from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema


class LineItemBase(BaseSchema):
    description: str = Field(min_length=1, max_length=255)
    based_on: Optional[str] = None
    rate: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    billing_amount: Decimal = Field(default=Decimal("0"), ge=0)


class LineItemCreate(LineItemBase):
    pass


class LineItemResponse(LineItemBase):
    id: int
    position: int


class InvoiceFields(BaseSchema):
    """Header fields an update may touch. Unset fields are left alone."""

    client_id: Optional[int] = Field(default=None, ge=1)
    job_id: Optional[int] = Field(default=None, ge=1)
    booking_number: Optional[str] = None
    status: Optional[str] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    sub_total: Optional[Decimal] = Field(default=None, ge=0)
    total: Optional[Decimal] = Field(default=None, ge=0)


class InvoiceCreate(BaseSchema):
    number: str = Field(min_length=1, max_length=40)
    client_id: int = Field(ge=1)
    job_id: Optional[int] = Field(default=None, ge=1)
    booking_number: Optional[str] = None
    status: str = "UNPAID"
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: str = Field(default="USD", min_length=3, max_length=3)
    line_items: list[LineItemCreate] = Field(default_factory=list)


class InvoiceUpdate(InvoiceFields):
    # None/absent => keep existing items; [] => remove all items
    line_items: Optional[list[LineItemCreate]] = None


class InvoiceResponse(BaseSchema):
    id: int
    number: str
    client_id: int
    job_id: Optional[int] = None
    booking_number: Optional[str] = None
    status: str
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    sub_total: Decimal
    total: Decimal
    currency: str
    amount_in_words: Optional[str] = None
    line_items: list[LineItemResponse] = []
    created_at: datetime
    updated_at: datetime
