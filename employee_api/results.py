"""Result types returned by the service layer.

Every :class:`~employee_api.service.EmployeeService` operation returns a
:class:`ServiceResult`. Failures carry a :class:`ServiceError` whose ``kind``
is one of the closed set in :class:`ErrorKind`; the HTTP layer is the only
place that turns a kind into a status code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    VALIDATION_FAILED = "validation_failed"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ServiceError:
    """Structured failure payload within a :class:`ServiceResult`."""

    kind: ErrorKind
    message: str
    errors: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        errors: Optional[Dict[str, str]] = None,
    ) -> "ServiceResult[T]":
        return cls(error=ServiceError(kind=kind, message=message, errors=dict(errors or {})))


def not_found(employee_id: int) -> ServiceResult:
    return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Employee not found with ID: {employee_id}")


def already_exists(email: str) -> ServiceResult:
    return ServiceResult.failure(
        ErrorKind.ALREADY_EXISTS, f"Employee with email {email} already exists"
    )


__all__ = [
    "ErrorKind",
    "ServiceError",
    "ServiceResult",
    "already_exists",
    "not_found",
]
