"""Tests for the employee service layer against a real SQLite file."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from employee_api.database import Database, EmployeeStore
from employee_api.results import ErrorKind
from employee_api.schemas import EmployeeRequest
from employee_api.service import EmployeeService


def _request(**overrides: str) -> EmployeeRequest:
    values = {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john.doe@example.com",
        "department": "Engineering",
        "position": "Software Engineer",
    }
    values.update(overrides)
    return EmployeeRequest(**values)


class EmployeeServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.database = Database(Path(self._tempdir.name) / "employees.sqlite3")
        self.database.initialize()
        self.service = EmployeeService(self.database)

    def tearDown(self) -> None:
        self._tempdir.cleanup()

    def _count(self) -> int:
        with self.database.transaction(read_only=True) as store:
            return store.count()

    def test_create_echoes_input_and_assigns_id(self) -> None:
        result = self.service.create(_request())

        self.assertTrue(result.ok)
        response = result.value
        self.assertIsNotNone(response.id)
        self.assertEqual(response.first_name, "John")
        self.assertEqual(response.last_name, "Doe")
        self.assertEqual(response.email, "john.doe@example.com")
        self.assertEqual(response.department, "Engineering")
        self.assertEqual(response.position, "Software Engineer")
        self.assertEqual(response.created_at, response.updated_at)

    def test_create_with_existing_email_fails_without_writing(self) -> None:
        self.service.create(_request())

        with mock.patch.object(EmployeeStore, "save") as save:
            result = self.service.create(_request(first_name="Jane"))

        self.assertFalse(result.ok)
        self.assertEqual(result.error.kind, ErrorKind.ALREADY_EXISTS)
        self.assertIn("john.doe@example.com", result.error.message)
        self.assertIn("already exists", result.error.message)
        save.assert_not_called()
        self.assertEqual(self._count(), 1)

    def test_create_translates_store_conflict_when_precheck_misses(self) -> None:
        self.service.create(_request())

        # Simulates a concurrent writer that inserted between check and write.
        with mock.patch.object(EmployeeStore, "exists_by_email", return_value=False):
            result = self.service.create(_request(first_name="Jane"))

        self.assertEqual(result.error.kind, ErrorKind.ALREADY_EXISTS)
        self.assertEqual(
            result.error.message, "Employee with email john.doe@example.com already exists"
        )
        self.assertEqual(self._count(), 1)

    def test_get_by_id_returns_stored_employee(self) -> None:
        created = self.service.create(_request()).value

        result = self.service.get_by_id(created.id)

        self.assertTrue(result.ok)
        self.assertEqual(result.value, created)

    def test_get_by_id_for_unknown_id_is_not_found(self) -> None:
        result = self.service.get_by_id(999)

        self.assertEqual(result.error.kind, ErrorKind.NOT_FOUND)
        self.assertEqual(result.error.message, "Employee not found with ID: 999")

    def test_get_all_returns_every_created_employee(self) -> None:
        emails = [f"user{index}@example.com" for index in range(3)]
        for email in emails:
            self.service.create(_request(email=email))

        result = self.service.get_all()

        self.assertTrue(result.ok)
        self.assertEqual([item.email for item in result.value], emails)

    def test_get_all_on_empty_store(self) -> None:
        self.assertEqual(self.service.get_all().value, [])

    def test_update_replaces_fields_and_keeps_created_at(self) -> None:
        created = self.service.create(_request()).value

        result = self.service.update(
            created.id,
            _request(
                first_name="Jane",
                email="jane.doe@example.com",
                department="Marketing",
                position="Marketing Manager",
            ),
        )

        self.assertTrue(result.ok)
        updated = result.value
        self.assertEqual(updated.id, created.id)
        self.assertEqual(updated.first_name, "Jane")
        self.assertEqual(updated.last_name, "Doe")
        self.assertEqual(updated.email, "jane.doe@example.com")
        self.assertEqual(updated.department, "Marketing")
        self.assertEqual(updated.position, "Marketing Manager")
        self.assertEqual(updated.created_at, created.created_at)
        self.assertGreaterEqual(updated.updated_at, created.updated_at)

    def test_update_with_own_email_is_not_a_conflict(self) -> None:
        created = self.service.create(_request()).value

        result = self.service.update(created.id, _request(position="Staff Engineer"))

        self.assertTrue(result.ok)
        self.assertEqual(result.value.position, "Staff Engineer")

    def test_update_to_email_of_another_employee_fails(self) -> None:
        self.service.create(_request())
        other = self.service.create(_request(email="jane.doe@example.com")).value

        result = self.service.update(other.id, _request())

        self.assertEqual(result.error.kind, ErrorKind.ALREADY_EXISTS)
        self.assertIn("john.doe@example.com", result.error.message)
        self.assertEqual(self.service.get_by_id(other.id).value.email, "jane.doe@example.com")

    def test_update_unknown_id_is_not_found(self) -> None:
        result = self.service.update(999, _request())

        self.assertEqual(result.error.kind, ErrorKind.NOT_FOUND)
        self.assertEqual(self._count(), 0)

    def test_delete_removes_employee(self) -> None:
        created = self.service.create(_request()).value

        result = self.service.delete(created.id)

        self.assertTrue(result.ok)
        self.assertIsNone(result.value)
        self.assertEqual(self.service.get_by_id(created.id).error.kind, ErrorKind.NOT_FOUND)

    def test_delete_unknown_id_is_not_found_and_deletes_nothing(self) -> None:
        self.service.create(_request())

        with mock.patch.object(EmployeeStore, "delete_by_id") as delete_by_id:
            result = self.service.delete(999)

        self.assertEqual(result.error.kind, ErrorKind.NOT_FOUND)
        delete_by_id.assert_not_called()
        self.assertEqual(self._count(), 1)

    def test_map_to_response_projects_every_field(self) -> None:
        created = self.service.create(_request()).value
        with self.database.transaction(read_only=True) as store:
            employee = store.find_by_id(created.id)

        response = EmployeeService.map_to_response(employee)

        self.assertEqual(
            response.model_dump(),
            {
                "id": employee.id,
                "first_name": "John",
                "last_name": "Doe",
                "email": "john.doe@example.com",
                "department": "Engineering",
                "position": "Software Engineer",
                "created_at": employee.created_at,
                "updated_at": employee.updated_at,
            },
        )


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
