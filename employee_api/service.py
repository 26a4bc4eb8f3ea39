"""Employee lifecycle operations: validation, persistence and mapping."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from .database import Database, DuplicateEmailError
from .models import Employee
from .results import ServiceResult, already_exists, not_found
from .schemas import EmployeeRequest, EmployeeResponse

logger = logging.getLogger("employees.service")


class EmployeeService:
    """Coordinates the record store for the employee endpoints.

    Email uniqueness is checked before every insert or email change. The
    check only short-circuits the common case; the ``UNIQUE`` constraint on
    the table is what actually guarantees it, and a conflict reported by the
    store is returned as the same ``ALREADY_EXISTS`` failure.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    def create(self, request: EmployeeRequest) -> ServiceResult[EmployeeResponse]:
        logger.info("Creating new employee with email: %s", request.email)
        try:
            with self._database.transaction() as store:
                if store.exists_by_email(request.email):
                    return already_exists(request.email)

                saved = store.save(
                    Employee(
                        first_name=request.first_name,
                        last_name=request.last_name,
                        email=request.email,
                        department=request.department,
                        position=request.position,
                    )
                )
        except DuplicateEmailError as exc:
            return already_exists(exc.email)

        logger.info("Successfully created employee with ID: %s", saved.id)
        return ServiceResult.success(self.map_to_response(saved))

    def get_by_id(self, employee_id: int) -> ServiceResult[EmployeeResponse]:
        logger.info("Fetching employee with ID: %s", employee_id)
        with self._database.transaction(read_only=True) as store:
            employee = store.find_by_id(employee_id)
        if employee is None:
            return not_found(employee_id)
        return ServiceResult.success(self.map_to_response(employee))

    def get_all(self) -> ServiceResult[List[EmployeeResponse]]:
        logger.info("Fetching all employees")
        with self._database.transaction(read_only=True) as store:
            employees = store.find_all()
        return ServiceResult.success([self.map_to_response(employee) for employee in employees])

    def update(self, employee_id: int, request: EmployeeRequest) -> ServiceResult[EmployeeResponse]:
        logger.info("Updating employee with ID: %s", employee_id)
        try:
            with self._database.transaction() as store:
                employee = store.find_by_id(employee_id)
                if employee is None:
                    return not_found(employee_id)

                if employee.email != request.email and store.exists_by_email(request.email):
                    return already_exists(request.email)

                saved = store.save(
                    replace(
                        employee,
                        first_name=request.first_name,
                        last_name=request.last_name,
                        email=request.email,
                        department=request.department,
                        position=request.position,
                    )
                )
        except DuplicateEmailError as exc:
            return already_exists(exc.email)

        logger.info("Successfully updated employee with ID: %s", saved.id)
        return ServiceResult.success(self.map_to_response(saved))

    def delete(self, employee_id: int) -> ServiceResult[None]:
        logger.info("Deleting employee with ID: %s", employee_id)
        with self._database.transaction() as store:
            if not store.exists_by_id(employee_id):
                return not_found(employee_id)
            store.delete_by_id(employee_id)

        logger.info("Successfully deleted employee with ID: %s", employee_id)
        return ServiceResult.success()

    @staticmethod
    def map_to_response(employee: Employee) -> EmployeeResponse:
        return EmployeeResponse(
            id=employee.id,
            first_name=employee.first_name,
            last_name=employee.last_name,
            email=employee.email,
            department=employee.department,
            position=employee.position,
            created_at=employee.created_at,
            updated_at=employee.updated_at,
        )


__all__ = ["EmployeeService"]
