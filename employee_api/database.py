"""SQLite-backed persistence for employee records."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from .models import Employee

logger = logging.getLogger("employees.database")

DEFAULT_BUSY_TIMEOUT = 5.0


class DuplicateEmailError(ValueError):
    """Raised when a write would give two employees the same email address."""

    def __init__(self, email: str) -> None:
        super().__init__(f"An employee with email {email} already exists")
        self.email = email


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(value: Optional[str]) -> Path:
    """Resolve the on-disk path for the employee database."""

    if value:
        return Path(value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "employees.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _is_email_conflict(exc: sqlite3.IntegrityError) -> bool:
    return "employees.email" in str(exc)


class EmployeeStore:
    """Single-table record store bound to one open connection.

    Instances are handed out by :meth:`Database.transaction`; every call made
    through one store runs inside that transaction.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def save(self, employee: Employee) -> Employee:
        """Insert a new record or rewrite an existing one.

        Records without an ``id`` are inserted and receive an id plus both
        timestamps. Records with an ``id`` keep ``created_at`` and get a
        refreshed ``updated_at``.
        """

        if employee.id is None:
            return self._insert(employee)
        return self._update(employee)

    def find_by_id(self, employee_id: int) -> Optional[Employee]:
        row = self._conn.execute(
            "SELECT * FROM employees WHERE id = ?",
            (employee_id,),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_employee(row)

    def find_all(self) -> List[Employee]:
        rows = self._conn.execute("SELECT * FROM employees ORDER BY id").fetchall()
        return [self._row_to_employee(row) for row in rows]

    def exists_by_email(self, email: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM employees WHERE email = ?",
            (email,),
        ).fetchone()
        return row is not None

    def exists_by_id(self, employee_id: int) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM employees WHERE id = ?",
            (employee_id,),
        ).fetchone()
        return row is not None

    def delete_by_id(self, employee_id: int) -> bool:
        cursor = self._conn.execute("DELETE FROM employees WHERE id = ?", (employee_id,))
        return cursor.rowcount > 0

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) AS total FROM employees").fetchone()
        return int(row["total"])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _insert(self, employee: Employee) -> Employee:
        created_at = _current_timestamp()
        serialized = _serialize_datetime(created_at)
        try:
            cursor = self._conn.execute(
                """
                INSERT INTO employees (
                    first_name, last_name, email, department, position, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    employee.first_name,
                    employee.last_name,
                    employee.email,
                    employee.department,
                    employee.position,
                    serialized,
                    serialized,
                ),
            )
        except sqlite3.IntegrityError as exc:
            if _is_email_conflict(exc):
                raise DuplicateEmailError(employee.email) from exc
            raise

        return replace(
            employee,
            id=int(cursor.lastrowid),
            created_at=created_at,
            updated_at=created_at,
        )

    def _update(self, employee: Employee) -> Employee:
        updated_at = _current_timestamp()
        if employee.updated_at is not None and employee.updated_at > updated_at:
            updated_at = employee.updated_at

        try:
            cursor = self._conn.execute(
                """
                UPDATE employees
                   SET first_name = ?, last_name = ?, email = ?, department = ?, position = ?,
                       updated_at = ?
                 WHERE id = ?
                """,
                (
                    employee.first_name,
                    employee.last_name,
                    employee.email,
                    employee.department,
                    employee.position,
                    _serialize_datetime(updated_at),
                    employee.id,
                ),
            )
        except sqlite3.IntegrityError as exc:
            if _is_email_conflict(exc):
                raise DuplicateEmailError(employee.email) from exc
            raise

        if cursor.rowcount == 0:
            raise LookupError(f"Employee {employee.id} vanished before it could be updated")

        refreshed = self.find_by_id(int(employee.id))
        if refreshed is None:  # pragma: no cover - guarded by the rowcount check
            raise RuntimeError("Failed to load employee after update")
        return refreshed

    def _row_to_employee(self, row: sqlite3.Row) -> Employee:
        return Employee(
            id=int(row["id"]),
            first_name=str(row["first_name"]),
            last_name=str(row["last_name"]),
            email=str(row["email"]),
            department=str(row["department"]),
            position=str(row["position"]),
            created_at=_parse_datetime(str(row["created_at"])),
            updated_at=_parse_datetime(str(row["updated_at"])),
        )


class Database:
    """Simple wrapper around SQLite for persisting employees."""

    def __init__(self, path: Path, *, busy_timeout: float = DEFAULT_BUSY_TIMEOUT) -> None:
        _ensure_directory(path)
        self._path = path
        self._busy_timeout = busy_timeout

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        # Transactions are issued explicitly by ``transaction``.
        conn = sqlite3.connect(
            self._path,
            timeout=self._busy_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        conn = self._connect()
        try:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS employees (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    department TEXT NOT NULL,
                    position TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
        finally:
            conn.close()
        logger.debug("Employee schema ready at %s", self._path)

    @contextmanager
    def transaction(self, *, read_only: bool = False) -> Iterator[EmployeeStore]:
        """Yield an :class:`EmployeeStore` whose calls share one transaction.

        Write transactions take SQLite's reserved lock up front so that a
        check followed by a write cannot interleave with another writer.
        """

        conn = self._connect()
        try:
            conn.execute("BEGIN" if read_only else "BEGIN IMMEDIATE")
            try:
                yield EmployeeStore(conn)
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()


__all__ = [
    "Database",
    "DuplicateEmailError",
    "EmployeeStore",
    "resolve_database_path",
]
