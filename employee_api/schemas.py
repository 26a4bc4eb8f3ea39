"""Wire models for the employee HTTP API."""
from __future__ import annotations

from datetime import datetime
from typing import Dict

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmployeeRequest(_WireModel):
    """Body accepted by both the create and the update endpoints."""

    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    email: str = Field(..., max_length=255)
    department: str = Field(..., max_length=100)
    position: str = Field(..., max_length=100)

    @field_validator("first_name", "last_name", "email", "department", "position", mode="before")
    @classmethod
    def _reject_blank(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValueError("must not be blank")
            return stripped
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        # Validated only; the address is stored as submitted.
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(f"value is not a valid email address: {exc}") from exc
        return value


class EmployeeResponse(_WireModel):
    id: int
    first_name: str
    last_name: str
    email: str
    department: str
    position: str
    created_at: datetime
    updated_at: datetime


class ErrorResponse(BaseModel):
    status: int
    message: str
    timestamp: datetime


class ValidationErrorResponse(ErrorResponse):
    errors: Dict[str, str] = Field(default_factory=dict)


__all__ = [
    "EmployeeRequest",
    "EmployeeResponse",
    "ErrorResponse",
    "ValidationErrorResponse",
]
