"""FastAPI application exposing the employee CRUD endpoints."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Sequence

from fastapi import APIRouter, Depends, FastAPI, Path, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings
from .database import Database
from .results import ErrorKind, ServiceError, ServiceResult
from .schemas import EmployeeRequest, EmployeeResponse, ErrorResponse, ValidationErrorResponse
from .service import EmployeeService

logger = logging.getLogger("employees.api")

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
VALIDATION_FAILED_MESSAGE = "Validation failed"

# SQLite stores INTEGER PRIMARY KEY as a signed 64-bit value.
EmployeeId = Annotated[int, Path(ge=1, le=2**63 - 1)]

_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def error_response(error: ServiceError) -> JSONResponse:
    """Translate a service failure into the HTTP error body."""

    status_code = _STATUS_BY_KIND[error.kind]
    body: ErrorResponse
    if error.kind is ErrorKind.VALIDATION_FAILED:
        body = ValidationErrorResponse(
            status=status_code,
            message=error.message,
            errors=error.errors,
            timestamp=_now(),
        )
    elif error.kind is ErrorKind.UNEXPECTED:
        body = ErrorResponse(status=status_code, message=UNEXPECTED_ERROR_MESSAGE, timestamp=_now())
    else:
        body = ErrorResponse(status=status_code, message=error.message, timestamp=_now())
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _respond(result: ServiceResult) -> Any:
    if result.error is not None:
        if result.error.kind is ErrorKind.NOT_FOUND:
            logger.info("Employee not found: %s", result.error.message)
        elif result.error.kind is ErrorKind.ALREADY_EXISTS:
            logger.warning("Employee already exists: %s", result.error.message)
        return error_response(result.error)
    return result.value


def _field_name(location: Sequence[object]) -> str:
    parts = [str(part) for part in location[1:]]
    if parts:
        return ".".join(parts)
    return str(location[0]) if location else "request"


def _error_message(error: Dict[str, Any]) -> str:
    message = str(error.get("msg", "Invalid value"))
    prefix = "Value error, "
    if message.startswith(prefix):
        message = message[len(prefix):]
    return message


def collect_field_errors(errors: Sequence[Dict[str, Any]]) -> Dict[str, str]:
    """Flatten pydantic error entries into a ``field -> message`` mapping."""

    collected: Dict[str, str] = {}
    for error in errors:
        if error.get("type") == "json_invalid":
            field = "body"
        else:
            field = _field_name(error.get("loc", ()))
        collected.setdefault(field, _error_message(error))
    return collected


def create_app(
    *,
    database: Database | None = None,
    settings: Settings | None = None,
    initialize_database: bool = False,
) -> FastAPI:
    if settings is None:
        settings = load_settings()

    if database is None:
        database = Database(settings.database_path, busy_timeout=settings.busy_timeout)
        database.initialize()
    elif initialize_database:
        database.initialize()

    service = EmployeeService(database)

    app = FastAPI(
        title="Employee Records API",
        description="CRUD service for managing employee records",
        version="1.0.0",
    )
    app.state.database = database
    app.state.service = service

    def get_service() -> EmployeeService:
        return service

    @app.get("/health")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    router = APIRouter(prefix="/employees", tags=["employees"])

    @router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
    def create_employee(
        payload: EmployeeRequest,
        employees: EmployeeService = Depends(get_service),
    ) -> Any:
        logger.info("Received request to create employee with email: %s", payload.email)
        return _respond(employees.create(payload))

    @router.get("", response_model=List[EmployeeResponse])
    def list_employees(employees: EmployeeService = Depends(get_service)) -> Any:
        logger.info("Received request to get all employees")
        return _respond(employees.get_all())

    @router.get("/{id}", response_model=EmployeeResponse)
    def read_employee(id: EmployeeId, employees: EmployeeService = Depends(get_service)) -> Any:
        logger.info("Received request to get employee with ID: %s", id)
        return _respond(employees.get_by_id(id))

    @router.put("/{id}", response_model=EmployeeResponse)
    def update_employee(
        id: EmployeeId,
        payload: EmployeeRequest,
        employees: EmployeeService = Depends(get_service),
    ) -> Any:
        logger.info("Received request to update employee with ID: %s", id)
        return _respond(employees.update(id, payload))

    @router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_employee(id: EmployeeId, employees: EmployeeService = Depends(get_service)) -> Response:
        logger.info("Received request to delete employee with ID: %s", id)
        result = employees.delete(id)
        if not result.ok:
            return _respond(result)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.include_router(router, prefix=settings.api_prefix)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = collect_field_errors(exc.errors())
        logger.info("Validation failed: %s", errors)
        return error_response(
            ServiceError(
                kind=ErrorKind.VALIDATION_FAILED,
                message=VALIDATION_FAILED_MESSAGE,
                errors=errors,
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        body = ErrorResponse(status=exc.status_code, message=str(exc.detail), timestamp=_now())
        return JSONResponse(
            status_code=exc.status_code,
            content=body.model_dump(mode="json"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error while handling %s %s", request.method, request.url.path)
        return error_response(ServiceError(kind=ErrorKind.UNEXPECTED, message=str(exc)))

    return app


__all__ = ["create_app", "collect_field_errors", "error_response"]
