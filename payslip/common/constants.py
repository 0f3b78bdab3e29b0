"""Enums and constants for the payslip service."""

from __future__ import annotations

import enum
from datetime import time


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    admin = "admin"


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollStatus(str, enum.Enum):
    pending = "pending"
    processed = "processed"


# ── Submissions ─────────────────────────────────────────────────────

class SubmissionKind(str, enum.Enum):
    attendance = "attendance"
    overtime = "overtime"
    reimbursement = "reimbursement"


# ── Pay rules ───────────────────────────────────────────────────────

WORKING_DAYS_PER_PERIOD = 20.0
WORKING_HOURS_PER_PERIOD = 160.0
OVERTIME_MULTIPLIER = 2
MAX_OVERTIME_HOURS = 3
# Matches the scale of overtimes.hours
OVERTIME_HOURS_SCALE = 4
OVERTIME_CUTOFF = time(17, 0)

# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
