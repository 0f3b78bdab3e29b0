"""Persistence for attendance, overtime and reimbursement submissions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from payslip.common.constants import OVERTIME_MULTIPLIER, SubmissionKind
from payslip.common.exceptions import DuplicateSubmissionError
from payslip.common.pagination import PaginationMeta, paginate
from payslip.payroll.calculator import hourly_rate
from payslip.submissions.models import Attendance, Overtime, Reimbursement

_MODELS: dict[SubmissionKind, Any] = {
    SubmissionKind.attendance: Attendance,
    SubmissionKind.overtime: Overtime,
    SubmissionKind.reimbursement: Reimbursement,
}

_USER_DATE_CONSTRAINTS: dict[str, str] = {
    Attendance.__tablename__: "uq_attendance_user_date",
    Overtime.__tablename__: "uq_overtime_user_date",
}


@dataclass(frozen=True)
class PeriodTotals:
    attendance_days: int = 0
    overtime_hours: float = 0.0
    reimbursements: float = 0.0


class SubmissionRepository(Protocol):
    async def has_submitted(self, kind: SubmissionKind, user_id: int, target_date: date) -> bool:
        raise NotImplementedError

    async def insert_attendance(self, record: Attendance) -> Attendance:
        raise NotImplementedError

    async def insert_overtime(self, record: Overtime) -> Overtime:
        raise NotImplementedError

    async def insert_reimbursement(self, record: Reimbursement) -> Reimbursement:
        raise NotImplementedError

    async def list_for_user(
        self, kind: SubmissionKind, user_id: int, page: int, limit: int,
    ) -> tuple[list[Any], PaginationMeta]:
        raise NotImplementedError

    async def count_attendance(self, user_id: int, period_id: int) -> int:
        raise NotImplementedError

    async def sum_overtime_hours(self, user_id: int, period_id: int) -> float:
        raise NotImplementedError

    async def sum_overtime_pay(
        self, user_id: int, period_id: int, base_salary: float,
    ) -> float:
        raise NotImplementedError

    async def sum_reimbursement(self, user_id: int, period_id: int) -> float:
        raise NotImplementedError

    async def period_totals(
        self, period_id: int, user_ids: list[int],
    ) -> dict[int, PeriodTotals]:
        raise NotImplementedError


class SqlSubmissionRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    # ── Duplicate check ─────────────────────────────────────────────

    async def has_submitted(self, kind: SubmissionKind, user_id: int, target_date: date) -> bool:
        model = _MODELS[kind]
        result = await self._db.execute(
            select(
                select(model.id)
                .where(model.user_id == user_id, model.date == target_date)
                .exists()
            )
        )
        return bool(result.scalar())

    # ── Inserts ─────────────────────────────────────────────────────

    async def _insert_unique(self, record: Any, kind: SubmissionKind) -> Any:
        self._db.add(record)
        try:
            await self._db.flush()
        except IntegrityError as exc:
            # Only a lost race on (user_id, date) is a duplicate; any other
            # integrity failure propagates unchanged.
            if _is_user_date_conflict(exc, _MODELS[kind].__tablename__):
                raise DuplicateSubmissionError(kind.value) from exc
            raise
        return record

    async def insert_attendance(self, record: Attendance) -> Attendance:
        return await self._insert_unique(record, SubmissionKind.attendance)

    async def insert_overtime(self, record: Overtime) -> Overtime:
        return await self._insert_unique(record, SubmissionKind.overtime)

    async def insert_reimbursement(self, record: Reimbursement) -> Reimbursement:
        self._db.add(record)
        await self._db.flush()
        return record

    # ── Own records ─────────────────────────────────────────────────

    async def list_for_user(
        self, kind: SubmissionKind, user_id: int, page: int, limit: int,
    ) -> tuple[list[Any], PaginationMeta]:
        model = _MODELS[kind]
        query = (
            select(model)
            .where(model.user_id == user_id)
            .order_by(model.created_at.desc(), model.id.desc())
        )
        return await paginate(self._db, query, page, limit)

    # ── Aggregates per (user, period) ───────────────────────────────

    async def count_attendance(self, user_id: int, period_id: int) -> int:
        result = await self._db.execute(
            select(func.count(func.distinct(Attendance.id))).where(
                Attendance.user_id == user_id,
                Attendance.period_id == period_id,
            )
        )
        return int(result.scalar_one())

    async def sum_overtime_hours(self, user_id: int, period_id: int) -> float:
        result = await self._db.execute(
            select(func.coalesce(func.sum(Overtime.hours), 0)).where(
                Overtime.user_id == user_id,
                Overtime.period_id == period_id,
            )
        )
        return _as_float(result.scalar_one())

    async def sum_overtime_pay(
        self, user_id: int, period_id: int, base_salary: float,
    ) -> float:
        """Overtime pay summed per record at the employee's hourly rate."""
        rate = hourly_rate(base_salary) * OVERTIME_MULTIPLIER
        result = await self._db.execute(
            select(func.coalesce(func.sum(Overtime.hours * rate), 0)).where(
                Overtime.user_id == user_id,
                Overtime.period_id == period_id,
            )
        )
        return _as_float(result.scalar_one())

    async def sum_reimbursement(self, user_id: int, period_id: int) -> float:
        result = await self._db.execute(
            select(func.coalesce(func.sum(Reimbursement.amount), 0)).where(
                Reimbursement.user_id == user_id,
                Reimbursement.period_id == period_id,
            )
        )
        return _as_float(result.scalar_one())

    async def period_totals(
        self, period_id: int, user_ids: list[int],
    ) -> dict[int, PeriodTotals]:
        """Per-user totals for a page of users, one grouped query per table.

        Aggregating each table separately avoids the row fan-out a single
        three-way LEFT JOIN would produce.
        """
        if not user_ids:
            return {}

        att = await self._db.execute(
            select(Attendance.user_id, func.count(Attendance.id))
            .where(Attendance.period_id == period_id, Attendance.user_id.in_(user_ids))
            .group_by(Attendance.user_id)
        )
        ot = await self._db.execute(
            select(Overtime.user_id, func.sum(Overtime.hours))
            .where(Overtime.period_id == period_id, Overtime.user_id.in_(user_ids))
            .group_by(Overtime.user_id)
        )
        rb = await self._db.execute(
            select(Reimbursement.user_id, func.sum(Reimbursement.amount))
            .where(Reimbursement.period_id == period_id, Reimbursement.user_id.in_(user_ids))
            .group_by(Reimbursement.user_id)
        )
        days = {uid: int(n) for uid, n in att.all()}
        hours = {uid: _as_float(h) for uid, h in ot.all()}
        amounts = {uid: _as_float(a) for uid, a in rb.all()}

        return {
            uid: PeriodTotals(
                attendance_days=days.get(uid, 0),
                overtime_hours=hours.get(uid, 0.0),
                reimbursements=amounts.get(uid, 0.0),
            )
            for uid in user_ids
        }


def _is_user_date_conflict(exc: IntegrityError, table: str) -> bool:
    """True when *exc* is the (user_id, date) unique violation on *table*.

    PostgreSQL names the constraint in the message, SQLite names the columns.
    """
    message = str(exc.orig)
    return (
        _USER_DATE_CONSTRAINTS[table] in message
        or f"UNIQUE constraint failed: {table}.user_id, {table}.date" in message
    )


def _as_float(value: Optional[Decimal | float | int]) -> float:
    return float(value) if value is not None else 0.0
