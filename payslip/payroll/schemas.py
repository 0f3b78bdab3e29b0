"""Payroll Pydantic v2 schemas — request / response validation."""


from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from payslip.common.constants import PayrollStatus
from payslip.common.pagination import PaginationMeta


# ═════════════════════════════════════════════════════════════════════
# Attendance period
# ═════════════════════════════════════════════════════════════════════


class AttendancePeriodCreate(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_range(self) -> "AttendancePeriodCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be before or equal to end_date.")
        return self


class AttendancePeriodOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    start_date: date
    end_date: date


class AttendancePeriodListResponse(BaseModel):
    data: list[AttendancePeriodOut]
    meta: PaginationMeta


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


class PayrollCreate(BaseModel):
    period_id: int = Field(..., ge=1)


class PayrollOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    period_id: int
    status: PayrollStatus
    processed_at: Optional[datetime] = None


class PayrollListItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: PayrollStatus
    processed_at: Optional[datetime] = None
    start_date: date
    end_date: date


class PayrollListResponse(BaseModel):
    data: list[PayrollListItemOut]
    meta: PaginationMeta


# ═════════════════════════════════════════════════════════════════════
# Payslip / summary (derived, never persisted)
# ═════════════════════════════════════════════════════════════════════


class PeriodInfo(BaseModel):
    start_date: date
    end_date: date


class EmployeePayslip(BaseModel):
    """Pay figures for one employee in one payroll period."""

    payroll_id: int
    user_id: int
    full_name: str
    base_salary: float
    attendance_days: int
    attendance_pay: float
    overtime_hours: float
    overtime_pay: float
    reimbursements: float
    take_home_pay: float


class PayrollSummary(BaseModel):
    """One page of payslips for a payroll, plus the page's take-home total."""

    payroll_id: int
    period: PeriodInfo
    employees: list[EmployeePayslip]
    total_take_home_pay: float
    total_records: int
    total_pages: int
    page: int
    limit: int
