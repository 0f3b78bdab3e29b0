"""Submission service tests — rule order, gate interaction, duplicates.

Each test runs the service against the in-memory store with a fixed clock.
June 2025: the 15th is a Sunday, the 16th a Monday.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from payslip.common.audit import AuditTrail
from payslip.common.constants import PayrollStatus, SubmissionKind
from payslip.common.exceptions import (
    DuplicateSubmissionError,
    FutureDateError,
    InvalidDateFormatError,
    InvalidHoursError,
    NoPeriodFoundError,
    NonWorkingDayError,
    PayrollAlreadyProcessedError,
    TooEarlyError,
)
from payslip.submissions.models import Attendance, Overtime
from payslip.submissions.repository import SqlSubmissionRepository
from payslip.submissions.schemas import AttendanceCreate, OvertimeCreate, ReimbursementCreate
from payslip.submissions.service import SubmissionService
from tests.conftest import _make_payroll, fixed_clock


def _service(db, *clock_args) -> SubmissionService:
    return SubmissionService(db, clock=fixed_clock(*clock_args))


# ═════════════════════════════════════════════════════════════════════
# 1. ATTENDANCE
# ═════════════════════════════════════════════════════════════════════


async def test_attendance_recorded_with_resolved_period(db, employee, period):
    service = _service(db, 2025, 6, 20)

    record = await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))

    assert record.id is not None
    assert record.period_id == period.id
    assert record.date == date(2025, 6, 16)
    assert record.created_by == employee.id


async def test_attendance_on_sunday_is_rejected(db, employee, period):
    service = _service(db, 2025, 6, 20)

    with pytest.raises(NonWorkingDayError):
        await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-15"))


async def test_locked_period_reported_before_weekday(db, employee, period):
    await _make_payroll(db, period, PayrollStatus.processed)
    service = _service(db, 2025, 6, 20)

    with pytest.raises(PayrollAlreadyProcessedError):
        await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))
    # A Sunday in a locked period still reports the lock, not the weekend.
    with pytest.raises(PayrollAlreadyProcessedError):
        await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-15"))


async def test_pending_payroll_does_not_block(db, employee, period):
    await _make_payroll(db, period, PayrollStatus.pending)
    service = _service(db, 2025, 6, 20)

    record = await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))
    assert record.period_id == period.id


async def test_attendance_outside_any_period(db, employee, period):
    service = _service(db, 2025, 7, 20)

    with pytest.raises(NoPeriodFoundError):
        await service.submit_attendance(employee.id, AttendanceCreate(date="2025-07-01"))


async def test_malformed_date_reported_first(db, employee):
    # No period exists at all; the format error still wins.
    service = _service(db, 2025, 6, 20)

    with pytest.raises(InvalidDateFormatError):
        await service.submit_attendance(employee.id, AttendanceCreate(date="2025-13-01"))


async def test_future_attendance_is_rejected(db, employee, period):
    service = _service(db, 2025, 6, 10)

    with pytest.raises(FutureDateError):
        await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))


async def test_attendance_for_today_is_accepted(db, employee, period):
    service = _service(db, 2025, 6, 16, 8, 0)

    record = await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))
    assert record.date == date(2025, 6, 16)


async def test_duplicate_attendance_is_rejected(db, employee, period):
    service = _service(db, 2025, 6, 20)
    await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))

    with pytest.raises(DuplicateSubmissionError):
        await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))

    rows = (await db.execute(select(Attendance))).scalars().all()
    assert len(rows) == 1


async def test_submission_writes_audit_entry(db, employee, period):
    service = _service(db, 2025, 6, 20)
    record = await service.submit_attendance(
        employee.id, AttendanceCreate(date="2025-06-16"), ip_address="10.0.0.1",
    )

    entry = (await db.execute(select(AuditTrail))).scalars().one()
    assert entry.action == "submit"
    assert entry.entity_type == "attendance"
    assert entry.entity_id == record.id
    assert entry.actor_id == employee.id
    assert entry.ip_address == "10.0.0.1"


async def test_constraint_violation_maps_to_duplicate(db, employee, period):
    repo = SqlSubmissionRepository(db)
    await repo.insert_attendance(
        Attendance(user_id=employee.id, period_id=period.id, date=date(2025, 6, 16)),
    )

    with pytest.raises(DuplicateSubmissionError):
        await repo.insert_attendance(
            Attendance(user_id=employee.id, period_id=period.id, date=date(2025, 6, 16)),
        )
    await db.rollback()


async def test_other_integrity_errors_propagate(db, employee, period):
    repo = SqlSubmissionRepository(db)

    with pytest.raises(IntegrityError):
        await repo.insert_attendance(
            Attendance(user_id=None, period_id=period.id, date=date(2025, 6, 16)),
        )
    await db.rollback()


async def test_overtime_not_null_failure_is_not_a_duplicate(db, employee, period):
    repo = SqlSubmissionRepository(db)

    with pytest.raises(IntegrityError):
        await repo.insert_overtime(
            Overtime(user_id=employee.id, period_id=period.id, date=date(2025, 6, 16), hours=None),
        )
    await db.rollback()

    rows = (await db.execute(select(Overtime))).scalars().all()
    assert rows == []


# ═════════════════════════════════════════════════════════════════════
# 2. OVERTIME
# ═════════════════════════════════════════════════════════════════════


async def test_overtime_before_cutoff_is_too_early(db, employee, period):
    service = _service(db, 2025, 6, 16, 16, 59)

    with pytest.raises(TooEarlyError):
        await service.submit_overtime(employee.id, OvertimeCreate(date="2025-06-16", hours=2))


async def test_overtime_at_cutoff_is_accepted(db, employee, period):
    service = _service(db, 2025, 6, 16, 17, 0)

    record = await service.submit_overtime(employee.id, OvertimeCreate(date="2025-06-16", hours=2))
    assert record.period_id == period.id
    assert float(record.hours) == 2.0


async def test_overtime_for_earlier_day_ignores_cutoff(db, employee, period):
    service = _service(db, 2025, 6, 17, 9, 0)

    record = await service.submit_overtime(employee.id, OvertimeCreate(date="2025-06-16", hours=3))
    assert float(record.hours) == 3.0


async def test_overtime_on_weekend_is_allowed(db, employee, period):
    service = _service(db, 2025, 6, 16, 9, 0)

    record = await service.submit_overtime(employee.id, OvertimeCreate(date="2025-06-15", hours=1))
    assert record.date == date(2025, 6, 15)


@pytest.mark.parametrize("hours", [0, 3.0001, 4])
async def test_overtime_hours_out_of_bounds(db, employee, period, hours):
    service = _service(db, 2025, 6, 17)

    with pytest.raises(InvalidHoursError):
        await service.submit_overtime(
            employee.id, OvertimeCreate(date="2025-06-16", hours=hours),
        )


@pytest.mark.parametrize("hours", [float("nan"), float("inf")])
async def test_non_finite_overtime_hours(db, employee, period, hours):
    service = _service(db, 2025, 6, 17)
    # Bypass request validation to exercise the service rule directly.
    body = OvertimeCreate.model_construct(date="2025-06-16", hours=hours)

    with pytest.raises(InvalidHoursError):
        await service.submit_overtime(employee.id, body)

    rows = (await db.execute(select(Overtime))).scalars().all()
    assert rows == []


async def test_overtime_hours_beyond_storage_scale(db, employee, period):
    service = _service(db, 2025, 6, 17)

    with pytest.raises(InvalidHoursError):
        await service.submit_overtime(
            employee.id, OvertimeCreate(date="2025-06-16", hours=2.99999),
        )


async def test_overtime_hours_stored_exactly(db, employee, period):
    service = _service(db, 2025, 6, 17)

    record = await service.submit_overtime(
        employee.id, OvertimeCreate(date="2025-06-16", hours=1.2345),
    )
    assert record.hours == Decimal("1.2345")


async def test_hours_checked_before_date(db, employee):
    service = _service(db, 2025, 6, 17)

    with pytest.raises(InvalidHoursError):
        await service.submit_overtime(employee.id, OvertimeCreate(date="not-a-date", hours=4))


async def test_duplicate_overtime_is_rejected(db, employee, period):
    service = _service(db, 2025, 6, 17)
    await service.submit_overtime(employee.id, OvertimeCreate(date="2025-06-16", hours=1))

    with pytest.raises(DuplicateSubmissionError):
        await service.submit_overtime(employee.id, OvertimeCreate(date="2025-06-16", hours=1))

    rows = (await db.execute(select(Overtime))).scalars().all()
    assert len(rows) == 1


async def test_overtime_in_locked_period(db, employee, period):
    await _make_payroll(db, period, PayrollStatus.processed)
    service = _service(db, 2025, 6, 17)

    with pytest.raises(PayrollAlreadyProcessedError):
        await service.submit_overtime(employee.id, OvertimeCreate(date="2025-06-16", hours=1))


# ═════════════════════════════════════════════════════════════════════
# 3. REIMBURSEMENT
# ═════════════════════════════════════════════════════════════════════


async def test_reimbursement_recorded(db, employee, period):
    service = _service(db, 2025, 6, 20)

    record = await service.submit_reimbursement(
        employee.id,
        ReimbursementCreate(date="2025-06-15", amount=Decimal("150000"), description="Hotel"),
    )
    assert record.period_id == period.id
    assert record.amount == Decimal("150000")


async def test_multiple_reimbursements_same_day(db, employee, period):
    service = _service(db, 2025, 6, 20)
    body = ReimbursementCreate(date="2025-06-16", amount=Decimal("50000"), description="Taxi")

    first = await service.submit_reimbursement(employee.id, body)
    second = await service.submit_reimbursement(employee.id, body)
    assert first.id != second.id


async def test_reimbursement_in_locked_period(db, employee, period):
    await _make_payroll(db, period, PayrollStatus.processed)
    service = _service(db, 2025, 6, 20)

    with pytest.raises(PayrollAlreadyProcessedError):
        await service.submit_reimbursement(
            employee.id,
            ReimbursementCreate(date="2025-06-16", amount=Decimal("1"), description="Lunch"),
        )


async def test_reimbursement_bad_date(db, employee, period):
    service = _service(db, 2025, 6, 20)

    with pytest.raises(InvalidDateFormatError):
        await service.submit_reimbursement(
            employee.id,
            ReimbursementCreate(date="20250616", amount=Decimal("1"), description="Lunch"),
        )


# ═════════════════════════════════════════════════════════════════════
# 4. OWN RECORDS
# ═════════════════════════════════════════════════════════════════════


async def test_list_own_attendance(db, employee, period):
    service = _service(db, 2025, 6, 20)
    for day in ("2025-06-16", "2025-06-17", "2025-06-18"):
        await service.submit_attendance(employee.id, AttendanceCreate(date=day))

    rows, meta = await service.list_submissions(SubmissionKind.attendance, employee.id, 1, 2)

    assert meta.total == 3
    assert meta.total_pages == 2
    assert len(rows) == 2
    assert all(r.user_id == employee.id for r in rows)


async def test_list_is_scoped_to_user(db, employee, period):
    service = _service(db, 2025, 6, 20)
    await service.submit_attendance(employee.id, AttendanceCreate(date="2025-06-16"))

    rows, meta = await service.list_submissions(
        SubmissionKind.attendance, employee.id + 100, 1, 20,
    )
    assert rows == []
    assert meta.total == 0
