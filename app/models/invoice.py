from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import AuditMixin

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.job import LogisticsJob


class Invoice(AuditMixin, Base):
    """
    Billing document for a client, optionally tied to a job.
    Owns its line items: they are replaced as a whole, never merged.
    """

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)

    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    job_id: Mapped[int | None] = mapped_column(
        ForeignKey("logistics_jobs.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    booking_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="UNPAID")
    invoice_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    sub_total: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=0)
    total: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    amount_in_words: Mapped[str | None] = mapped_column(String(500), nullable=True)

    client: Mapped["Client"] = relationship("Client", back_populates="invoices")
    job: Mapped["LogisticsJob"] = relationship("LogisticsJob", back_populates="invoices")
    line_items: Mapped[list["InvoiceLineItem"]] = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        order_by="InvoiceLineItem.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class InvoiceLineItem(Base):
    """Charge line on an invoice. Has no identity outside its invoice."""

    __tablename__ = "invoice_line_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    description: Mapped[str] = mapped_column(String(255), nullable=False)
    # e.g. 'Shipment', 'Qty & UOM'
    based_on: Mapped[str | None] = mapped_column(String(60), nullable=True)
    rate: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=0)
    billing_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=0)

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="line_items")
