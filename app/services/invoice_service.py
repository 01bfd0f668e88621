from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import NotFoundError, UniquenessConflict, ValidationFailure
from app.models.client import Client
from app.models.invoice import Invoice, InvoiceLineItem
from app.models.job import LogisticsJob
from app.schemas.invoice import InvoiceCreate, InvoiceFields, LineItemCreate
from app.services.amount_words import amount_to_words

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(InvoiceFields.model_fields)


def _as_dict(value: BaseModel | dict | None, *, exclude_unset: bool = False) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=exclude_unset)
    return dict(value)


def _validate(schema: type[BaseModel], data: dict[str, Any]) -> BaseModel:
    try:
        return schema.model_validate(data)
    except SchemaValidationError as e:
        raise ValidationFailure(str(e)) from e


def _line_item_payloads(line_items: Iterable[LineItemCreate | dict]) -> list[dict[str, Any]]:
    payloads = []
    for item in line_items:
        if isinstance(item, dict):
            item = _validate(LineItemCreate, item)
        payloads.append(item.model_dump())
    return payloads


class InvoiceService:
    @staticmethod
    def get_invoice(db: Session, invoice_id: int) -> Invoice:
        invoice = (
            db.query(Invoice)
            .options(selectinload(Invoice.line_items))
            .filter(Invoice.id == invoice_id)
            .first()
        )
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found.")
        return invoice

    @staticmethod
    def create_invoice(db: Session, invoice_in: InvoiceCreate, user_email: str = "system@local") -> Invoice:
        InvoiceService._check_references(db, invoice_in.client_id, invoice_in.job_id)

        header = invoice_in.model_dump(exclude={"line_items"})
        items = _line_item_payloads(invoice_in.line_items)
        invoice = Invoice(**header, created_by=user_email, last_changed_by=user_email)
        invoice.line_items = [
            InvoiceLineItem(position=position, **item)
            for position, item in enumerate(items, start=1)
        ]
        InvoiceService._apply_totals(invoice, items)
        db.add(invoice)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if "number" in str(e.orig).lower() and "unique" in str(e.orig).lower():
                raise UniquenessConflict(
                    f"Invoice {invoice_in.number} already exists.", value=invoice_in.number
                ) from e
            raise ValidationFailure(f"Data integrity violation: {e.orig}") from e
        except Exception:
            db.rollback()
            raise
        return InvoiceService.get_invoice(db, invoice.id)

    @staticmethod
    def update_invoice(
        db: Session,
        invoice_id: int,
        fields: InvoiceFields | dict | None = None,
        line_items: list[LineItemCreate | dict] | None = None,
        user_email: str = "system@local",
    ) -> Invoice:
        """
        Apply header `fields` and, when `line_items` is given, replace the
        whole line item set in the same transaction.

        - line_items is None: existing items are kept as they are.
        - line_items == []:   every existing item is removed.
        Items are never merged or patched by id. Totals are recomputed from
        billing amounts whenever the set is replaced. Any failure rolls the
        invoice back to its state before the call.
        """
        invoice = InvoiceService.get_invoice(db, invoice_id)

        changes = _as_dict(fields, exclude_unset=True)
        changes.pop("line_items", None)
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailure(f"Unknown invoice fields: {', '.join(sorted(unknown))}.")
        if not isinstance(fields, BaseModel):
            changes = _validate(InvoiceFields, changes).model_dump(exclude_unset=True)
        if changes.get("client_id") is None:
            changes.pop("client_id", None)
        InvoiceService._check_references(db, changes.get("client_id"), changes.get("job_id"))

        items = _line_item_payloads(line_items) if line_items is not None else None

        try:
            for key, value in changes.items():
                setattr(invoice, key, value)
            invoice.last_changed_by = user_email

            if items is not None:
                # Delete the whole previous generation before inserting the new one.
                invoice.line_items.clear()
                db.flush()
                for position, item in enumerate(items, start=1):
                    invoice.line_items.append(InvoiceLineItem(position=position, **item))
                InvoiceService._apply_totals(invoice, items)

            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ValidationFailure(f"Data integrity violation: {e.orig}") from e
        except Exception:
            db.rollback()
            raise

        logger.info(
            "invoice_updated id=%s fields=%s line_items=%s",
            invoice_id,
            ",".join(sorted(changes)) or "-",
            "kept" if items is None else len(items),
        )
        db.expire(invoice)
        return InvoiceService.get_invoice(db, invoice_id)

    @staticmethod
    def _check_references(db: Session, client_id: int | None, job_id: int | None) -> None:
        if client_id is not None and db.get(Client, client_id) is None:
            raise NotFoundError(f"Client {client_id} not found.")
        if job_id is not None and db.get(LogisticsJob, job_id) is None:
            raise NotFoundError(f"Job {job_id} not found.")

    @staticmethod
    def _apply_totals(invoice: Invoice, items: list[dict[str, Any]]) -> None:
        # Server-side totals; client supplied sub_total/total are overridden.
        sub_total = sum((Decimal(str(item["billing_amount"])) for item in items), Decimal("0"))
        invoice.sub_total = sub_total
        invoice.total = sub_total
        invoice.amount_in_words = amount_to_words(sub_total)
