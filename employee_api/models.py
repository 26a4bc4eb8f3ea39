"""Domain model for the employee records service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Represents an employee record stored in the database.

    ``id`` and both timestamps are assigned by the store and stay ``None``
    until the record has been saved.
    """

    first_name: str
    last_name: str
    email: str
    department: str
    position: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


__all__ = ["Employee"]
