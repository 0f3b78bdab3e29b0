"""Period gate tests — against in-memory repositories and the real store."""

from __future__ import annotations

from datetime import date
from typing import Optional

import pytest

from payslip.common.constants import PayrollStatus
from payslip.common.exceptions import NoPeriodFoundError, PayrollAlreadyProcessedError
from payslip.payroll.gate import PeriodGate
from payslip.payroll.repository import SqlPayrollRepository, SqlPeriodRepository
from tests.conftest import _make_payroll, _make_period


class _Periods:
    def __init__(self, period_id: int) -> None:
        self.period_id = period_id

    async def find_period_containing(self, target_date: date) -> int:
        return self.period_id


class _Payrolls:
    def __init__(self, status: Optional[PayrollStatus]) -> None:
        self.status = status
        self.calls: list[int] = []

    async def get_payroll_status(self, period_id: int) -> Optional[PayrollStatus]:
        self.calls.append(period_id)
        return self.status


# ── In-memory collaborators ─────────────────────────────────────────


async def test_open_period_without_payroll():
    gate = PeriodGate(_Periods(7), _Payrolls(None))
    assert await gate.resolve_period_for_submission(date(2025, 6, 16)) == 7


async def test_pending_payroll_does_not_lock():
    gate = PeriodGate(_Periods(7), _Payrolls(PayrollStatus.pending))
    assert await gate.resolve_period_for_submission(date(2025, 6, 16)) == 7


async def test_processed_payroll_locks_period():
    gate = PeriodGate(_Periods(7), _Payrolls(PayrollStatus.processed))
    with pytest.raises(PayrollAlreadyProcessedError):
        await gate.resolve_period_for_submission(date(2025, 6, 16))


async def test_missing_period_skips_status_lookup():
    payrolls = _Payrolls(PayrollStatus.processed)
    gate = PeriodGate(_Periods(0), payrolls)

    with pytest.raises(NoPeriodFoundError):
        await gate.resolve_period_for_submission(date(2025, 6, 16))
    assert payrolls.calls == []


# ── SQL collaborators ───────────────────────────────────────────────


async def test_bounds_are_inclusive(db, period):
    gate = PeriodGate(SqlPeriodRepository(db), SqlPayrollRepository(db))

    assert await gate.resolve_period_for_submission(date(2025, 6, 1)) == period.id
    assert await gate.resolve_period_for_submission(date(2025, 6, 30)) == period.id
    with pytest.raises(NoPeriodFoundError):
        await gate.resolve_period_for_submission(date(2025, 7, 1))
    with pytest.raises(NoPeriodFoundError):
        await gate.resolve_period_for_submission(date(2025, 5, 31))


async def test_processed_payroll_locks_only_its_period(db, period):
    july = await _make_period(db, date(2025, 7, 1), date(2025, 7, 31))
    await _make_payroll(db, period, PayrollStatus.processed)
    gate = PeriodGate(SqlPeriodRepository(db), SqlPayrollRepository(db))

    with pytest.raises(PayrollAlreadyProcessedError):
        await gate.resolve_period_for_submission(date(2025, 6, 16))
    assert await gate.resolve_period_for_submission(date(2025, 7, 1)) == july.id
