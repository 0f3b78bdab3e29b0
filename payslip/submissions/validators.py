"""Eligibility rules for submissions.

Each check raises the matching ``InvalidInputError`` or
``BusinessRuleViolation`` subclass; callers run them in a fixed order and
the first failure is what gets reported.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal

from payslip.common.constants import (
    DATE_FORMAT,
    MAX_OVERTIME_HOURS,
    OVERTIME_CUTOFF,
    OVERTIME_HOURS_SCALE,
)
from payslip.common.exceptions import (
    FutureDateError,
    InvalidDateFormatError,
    InvalidHoursError,
    NonWorkingDayError,
    TooEarlyError,
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_submission_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise InvalidDateFormatError(value)
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise InvalidDateFormatError(value)


def ensure_working_day(target_date: date) -> None:
    # Monday=0 … Friday=4
    if target_date.weekday() > 4:
        raise NonWorkingDayError()


def ensure_not_future(target_date: date, today: date) -> None:
    if target_date > today:
        raise FutureDateError()


def ensure_overtime_hours(hours: float) -> Decimal:
    """Check overtime hours and return them as the exact stored value."""
    if not math.isfinite(hours):
        raise InvalidHoursError("Hours must be a finite number.")
    if hours <= 0:
        raise InvalidHoursError("Hours must be greater than 0.")
    if hours > MAX_OVERTIME_HOURS:
        raise InvalidHoursError(f"Hours must not exceed {MAX_OVERTIME_HOURS} per day.")

    value = Decimal(str(hours))
    if value.as_tuple().exponent < -OVERTIME_HOURS_SCALE:
        raise InvalidHoursError(
            f"Hours must have at most {OVERTIME_HOURS_SCALE} decimal places."
        )
    return value


def ensure_after_working_hours(target_date: date, now: datetime) -> None:
    """Same-day overtime may only be filed from 17:00 (inclusive) onwards."""
    if target_date != now.date():
        return
    if now.time() < OVERTIME_CUTOFF:
        raise TooEarlyError()
