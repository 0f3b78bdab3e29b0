"""Custom exceptions and RFC 7807 Problem Detail error handlers.

Error kinds:
  - InvalidInput          → malformed dates, out-of-range hours (422)
  - BusinessRuleViolation → rejected submissions, lifecycle violations (409/422)
  - NotFound              → missing period / payroll / employee (404)

Storage errors (``sqlalchemy.exc.*``) are not wrapped; they reach the
framework unchanged.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://payslip.local/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class NoPeriodFoundError(NotFoundException):
    """404 — no attendance period covers the submitted date."""

    def __init__(self, target_date: Any) -> None:
        AppException.__init__(
            self,
            status_code=404,
            error_type="no-period-found",
            title="Attendance Period Not Found",
            detail=f"No attendance period found for date '{target_date}'.",
        )


class ConflictError(AppException):
    """409 — unique-constraint / duplicate."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ForbiddenException(AppException):
    """403 — insufficient permissions."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class ValidationException(AppException):
    """422 — business-logic validation failures."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


# ── Invalid input ───────────────────────────────────────────────────

class InvalidInputError(AppException):
    """422 — a single field is malformed or out of range."""

    error_code = "invalid-input"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            status_code=422,
            error_type=self.error_code,
            title="Invalid Input",
            detail=message,
            errors={field: [message]},
        )


class InvalidDateFormatError(InvalidInputError):
    error_code = "invalid-date-format"

    def __init__(self, value: Any) -> None:
        super().__init__("date", f"Invalid date format '{value}', expected YYYY-MM-DD.")


class InvalidHoursError(InvalidInputError):
    error_code = "invalid-hours"

    def __init__(self, message: str) -> None:
        super().__init__("hours", message)


# ── Business rule violations ────────────────────────────────────────

class BusinessRuleViolation(AppException):
    """Submission or lifecycle request rejected by a business rule."""

    error_code = "business-rule-violation"
    status = 422

    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=self.status,
            error_type=self.error_code,
            title="Business Rule Violation",
            detail=detail,
        )


class NonWorkingDayError(BusinessRuleViolation):
    error_code = "non-working-day"

    def __init__(self) -> None:
        super().__init__("Cannot submit attendance for non-working days.")


class FutureDateError(BusinessRuleViolation):
    error_code = "future-date"

    def __init__(self) -> None:
        super().__init__("Cannot submit attendance for a future date.")


class TooEarlyError(BusinessRuleViolation):
    error_code = "too-early"

    def __init__(self) -> None:
        super().__init__("Overtime can only be submitted after working hours.")


class DuplicateSubmissionError(BusinessRuleViolation):
    error_code = "duplicate-submission"
    status = 409

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind.capitalize()} already submitted for this date.")


class PayrollAlreadyProcessedError(BusinessRuleViolation):
    error_code = "payroll-already-processed"
    status = 409

    def __init__(self) -> None:
        super().__init__("Payroll already processed for this period.")


class PeriodOverlapError(BusinessRuleViolation):
    error_code = "period-overlap"
    status = 409

    def __init__(self) -> None:
        super().__init__("The period overlaps with another existing period.")


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
