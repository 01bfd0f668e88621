from fastapi import HTTPException

from app.core.errors import DomainError


def raise_domain_error(exc: DomainError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=exc.to_detail()) from exc
