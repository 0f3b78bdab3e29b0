"""Common module — shared utilities for the payslip service."""

from payslip.common.audit import AuditTrail, create_audit_entry
from payslip.common.constants import (
    DATE_FORMAT,
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    PayrollStatus,
    SubmissionKind,
    UserRole,
)
from payslip.common.exceptions import (
    AppException,
    BusinessRuleViolation,
    ConflictError,
    DuplicateSubmissionError,
    ForbiddenException,
    FutureDateError,
    InvalidDateFormatError,
    InvalidHoursError,
    InvalidInputError,
    NonWorkingDayError,
    NoPeriodFoundError,
    NotFoundException,
    PayrollAlreadyProcessedError,
    PeriodOverlapError,
    TooEarlyError,
    ValidationException,
    register_exception_handlers,
)
from payslip.common.pagination import (
    PageWindow,
    PaginationMeta,
    PaginationParams,
    normalize_page_params,
    page_window,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "PayrollStatus",
    "SubmissionKind",
    "UserRole",
    "DATE_FORMAT",
    "DEFAULT_PAGE_LIMIT",
    "MAX_PAGE_LIMIT",
    # Exceptions
    "AppException",
    "BusinessRuleViolation",
    "ConflictError",
    "DuplicateSubmissionError",
    "ForbiddenException",
    "FutureDateError",
    "InvalidDateFormatError",
    "InvalidHoursError",
    "InvalidInputError",
    "NonWorkingDayError",
    "NoPeriodFoundError",
    "NotFoundException",
    "PayrollAlreadyProcessedError",
    "PeriodOverlapError",
    "TooEarlyError",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PageWindow",
    "PaginationMeta",
    "PaginationParams",
    "normalize_page_params",
    "page_window",
    "paginate",
]
