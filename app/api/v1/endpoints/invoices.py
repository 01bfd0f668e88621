from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from app.api.errors import raise_domain_error
from app.core.errors import DomainError
from app.db.session import get_db
from app.schemas.invoice import InvoiceCreate, InvoiceFields, InvoiceResponse, InvoiceUpdate
from app.services.invoice_service import InvoiceService

router = APIRouter()


def _user_email(x_user_email: Optional[str]) -> str:
    return (x_user_email or "").strip().lower() or "system@local"


@router.post("/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    x_user_email: Optional[str] = Header(default=None),
):
    try:
        return InvoiceService.create_invoice(db, payload, _user_email(x_user_email))
    except DomainError as e:
        raise_domain_error(e)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    try:
        return InvoiceService.get_invoice(db, invoice_id)
    except DomainError as e:
        raise_domain_error(e)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    x_user_email: Optional[str] = Header(default=None),
):
    """
    Update header fields. When `line_items` is present (even empty) the whole
    set is replaced; when it is omitted the existing items stay.
    """
    provided = payload.model_dump(exclude_unset=True)
    line_items = payload.line_items if "line_items" in provided else None
    fields = InvoiceFields(**{k: v for k, v in provided.items() if k != "line_items"})
    try:
        return InvoiceService.update_invoice(
            db,
            invoice_id,
            fields,
            line_items,
            user_email=_user_email(x_user_email),
        )
    except DomainError as e:
        raise_domain_error(e)
