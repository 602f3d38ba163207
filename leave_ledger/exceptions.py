from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidRange(AppError):
    """A leave request's date/time range cannot be evaluated."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class InvalidRoster(AppError):
    """The roster template or working-day codes are malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class DuplicateConflict(AppError):
    """A plain append hit an idempotency key that already exists."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class EmployeeNotFound(AppError):
    """The employee reader has no record for the requested employee."""

    def __init__(self, employee_id: object) -> None:
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found", status_code=status.HTTP_404_NOT_FOUND)


def _error_response(error: str, detail: str | None, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail, status_code=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(type(exc).__name__, exc.message, exc.status_code)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response("ValidationError", str(exc.errors()), status.HTTP_422_UNPROCESSABLE_ENTITY)


def setup_exception_handlers(app: FastAPI) -> None:
    """Render AppError subclasses and request validation failures as ErrorResponse."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
