from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class DomainError(Exception):
    code: str
    message: str
    status_code: int = 400

    def __str__(self) -> str:
        return self.message

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationFailure(DomainError):
    """Malformed or missing input (e.g. a legacy job type on a new job)."""

    def __init__(self, message: str, code: str = "VALIDATION_FAILED"):
        super().__init__(code=code, message=message, status_code=400)


class NotFoundError(DomainError):
    def __init__(self, message: str, code: str = "NOT_FOUND"):
        super().__init__(code=code, message=message, status_code=404)


class UniquenessConflict(DomainError):
    """The store rejected a duplicate value. Callers re-allocate and retry."""

    def __init__(self, message: str, value: str | None = None, code: str = "UNIQUENESS_CONFLICT"):
        super().__init__(code=code, message=message, status_code=409)
        self.value = value

    def to_detail(self) -> dict:
        detail = super().to_detail()
        if self.value:
            detail["value"] = self.value
        return detail


class PersistenceFailure(DomainError):
    """Store unavailable or transaction aborted. Never retried by the core."""

    def __init__(self, message: str, report: Any = None, code: str = "PERSISTENCE_FAILURE"):
        super().__init__(code=code, message=message, status_code=503)
        self.report = report
