"""Payroll service layer — attendance periods, payroll lifecycle, payslips.

Business logic:
  - Attendance periods never overlap (inclusive bounds)
  - One payroll per period; pending → processed exactly once
  - A processed payroll locks its period against further submissions
  - Payslips and period summaries are computed on read, never stored
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from payslip.common.audit import create_audit_entry
from payslip.common.clock import Clock, local_now
from payslip.common.constants import PayrollStatus
from payslip.common.exceptions import (
    ConflictError,
    NotFoundException,
    PayrollAlreadyProcessedError,
    PeriodOverlapError,
    ValidationException,
)
from payslip.common.pagination import normalize_page_params, page_window
from payslip.payroll.calculator import PayFigures, compute_pay, round_half_away
from payslip.payroll.models import AttendancePeriod, Payroll
from payslip.payroll.repository import (
    PayrollRepository,
    PeriodRepository,
    SqlPayrollRepository,
    SqlPeriodRepository,
)
from payslip.payroll.schemas import (
    AttendancePeriodListResponse,
    AttendancePeriodOut,
    EmployeePayslip,
    PayrollListItemOut,
    PayrollListResponse,
    PayrollSummary,
    PeriodInfo,
)
from payslip.submissions.repository import SqlSubmissionRepository, SubmissionRepository
from payslip.users.repository import EmployeeRepository, SqlEmployeeRepository

logger = logging.getLogger(__name__)


class PayrollService:
    """Administrative payroll operations and pay computation."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        periods: Optional[PeriodRepository] = None,
        payrolls: Optional[PayrollRepository] = None,
        submissions: Optional[SubmissionRepository] = None,
        employees: Optional[EmployeeRepository] = None,
        clock: Clock = local_now,
    ) -> None:
        self._db = db
        self._periods = periods or SqlPeriodRepository(db)
        self._payrolls = payrolls or SqlPayrollRepository(db)
        self._submissions = submissions or SqlSubmissionRepository(db)
        self._employees = employees or SqlEmployeeRepository(db)
        self._clock = clock

    # ── Attendance periods ──────────────────────────────────────────

    async def create_attendance_period(
        self,
        start_date: date,
        end_date: date,
        *,
        by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> AttendancePeriod:
        if start_date > end_date:
            raise ValidationException(
                {"date_range": ["start_date must be before or equal to end_date."]}
            )
        if await self._periods.has_overlapping_period(start_date, end_date):
            logger.info("Rejected period %s..%s: overlaps an existing period", start_date, end_date)
            raise PeriodOverlapError()

        period = await self._periods.create_period(start_date, end_date, by)
        await create_audit_entry(
            self._db,
            action="create",
            entity_type="attendance_period",
            entity_id=period.id,
            actor_id=by,
            new_values={
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
            ip_address=ip_address,
        )
        logger.info("Attendance period %s created (%s..%s)", period.id, start_date, end_date)
        return period

    async def list_attendance_periods(
        self, page: int, limit: int,
    ) -> AttendancePeriodListResponse:
        page, limit = normalize_page_params(page, limit)
        periods, meta = await self._periods.list_periods(page, limit)
        return AttendancePeriodListResponse(
            data=[AttendancePeriodOut.model_validate(p) for p in periods],
            meta=meta,
        )

    # ── Payroll lifecycle ───────────────────────────────────────────

    async def create_payroll(
        self,
        period_id: int,
        *,
        by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> Payroll:
        """Create a pending payroll; a period can own only one payroll."""
        if await self._periods.get_period(period_id) is None:
            raise NotFoundException("AttendancePeriod", period_id)
        if await self._payrolls.get_payroll_by_period(period_id) is not None:
            raise ConflictError("period_id", period_id)

        payroll = await self._payrolls.create_payroll(period_id, by)
        await create_audit_entry(
            self._db,
            action="create",
            entity_type="payroll",
            entity_id=payroll.id,
            actor_id=by,
            new_values={"period_id": period_id, "status": PayrollStatus.pending.value},
            ip_address=ip_address,
        )
        logger.info("Payroll %s created for period %s", payroll.id, period_id)
        return payroll

    async def list_payrolls(self, page: int, limit: int) -> PayrollListResponse:
        page, limit = normalize_page_params(page, limit)
        items, meta = await self._payrolls.list_payrolls(page, limit)
        return PayrollListResponse(
            data=[PayrollListItemOut.model_validate(i) for i in items],
            meta=meta,
        )

    async def run_payroll(
        self,
        payroll_id: int,
        *,
        by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> Payroll:
        """Process a payroll, freezing its period against new submissions."""
        payroll = await self._payrolls.get_payroll(payroll_id)
        if payroll is None:
            raise NotFoundException("Payroll", payroll_id)
        if payroll.status == PayrollStatus.processed:
            raise PayrollAlreadyProcessedError()

        old_status = payroll.status.value
        payroll = await self._payrolls.update_payroll_status(
            payroll, PayrollStatus.processed, by, self._clock(),
        )
        await create_audit_entry(
            self._db,
            action="run",
            entity_type="payroll",
            entity_id=payroll.id,
            actor_id=by,
            old_values={"status": old_status},
            new_values={"status": PayrollStatus.processed.value},
            ip_address=ip_address,
        )
        logger.info("Payroll %s processed; period %s is now locked", payroll.id, payroll.period_id)
        return payroll

    # ── Payslip (single employee) ───────────────────────────────────

    async def generate_payslip(self, user_id: int, payroll_id: int) -> EmployeePayslip:
        """Compute one employee's figures for the payroll's period.

        Works for pending and processed payrolls alike; only a missing
        payroll or employee is an error.
        """
        payroll = await self._payrolls.get_payroll(payroll_id)
        if payroll is None:
            raise NotFoundException("Payroll", payroll_id)

        employee = await self._employees.get_employee(user_id)
        if employee is None:
            raise NotFoundException("Employee", user_id)

        period_id = payroll.period_id
        attendance_days = await self._submissions.count_attendance(user_id, period_id)
        overtime_hours = await self._submissions.sum_overtime_hours(user_id, period_id)
        overtime_pay = await self._submissions.sum_overtime_pay(
            user_id, period_id, employee.base_salary,
        )
        reimbursements = await self._submissions.sum_reimbursement(user_id, period_id)

        figures, _ = compute_pay(
            employee.base_salary, attendance_days, overtime_hours, reimbursements,
            precomputed_overtime_pay=overtime_pay,
        )
        return _to_payslip(payroll_id, user_id, employee.full_name, figures)

    # ── Summary (all eligible employees, one page) ──────────────────

    async def summarize_payroll(
        self, payroll_id: int, page: int, limit: int,
    ) -> PayrollSummary:
        """Payslips for one page of eligible employees.

        ``total_take_home_pay`` covers the returned page only.
        """
        page, limit = normalize_page_params(page, limit)

        payroll = await self._payrolls.get_payroll(payroll_id)
        if payroll is None:
            raise NotFoundException("Payroll", payroll_id)
        period = await self._periods.get_period(payroll.period_id)
        if period is None:
            raise NotFoundException("AttendancePeriod", payroll.period_id)

        total = await self._payrolls.count_eligible_employees(period.id)
        window = page_window(total, page, limit)
        summary = PayrollSummary(
            payroll_id=payroll_id,
            period=PeriodInfo(start_date=period.start_date, end_date=period.end_date),
            employees=[],
            total_take_home_pay=0.0,
            total_records=total,
            total_pages=window.total_pages,
            page=page,
            limit=limit,
        )
        if window.is_empty:
            return summary

        user_ids = list(
            await self._payrolls.list_eligible_employees_page(period.id, limit, window.offset)
        )
        employees = await self._employees.get_employees(user_ids)
        missing = [uid for uid in user_ids if uid not in employees]
        if missing:
            raise NotFoundException("Employee", missing[0])

        totals = await self._submissions.period_totals(period.id, user_ids)

        page_total = 0.0
        for uid in user_ids:
            employee = employees[uid]
            t = totals[uid]
            figures, unrounded_thp = compute_pay(
                employee.base_salary, t.attendance_days, t.overtime_hours, t.reimbursements,
            )
            summary.employees.append(
                _to_payslip(payroll_id, uid, employee.full_name, figures)
            )
            page_total += unrounded_thp

        summary.total_take_home_pay = round_half_away(page_total, 2)
        return summary


def _to_payslip(
    payroll_id: int, user_id: int, full_name: str, figures: PayFigures,
) -> EmployeePayslip:
    return EmployeePayslip(
        payroll_id=payroll_id,
        user_id=user_id,
        full_name=full_name,
        base_salary=figures.base_salary,
        attendance_days=figures.attendance_days,
        attendance_pay=figures.attendance_pay,
        overtime_hours=figures.overtime_hours,
        overtime_pay=figures.overtime_pay,
        reimbursements=figures.reimbursements,
        take_home_pay=figures.take_home_pay,
    )
