"""Persistence for attendance periods and payrolls.

The ``*Repository`` protocols are the capabilities the services consume;
the ``Sql*`` classes implement them over an explicitly passed AsyncSession.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from sqlalchemy import func, not_, or_, select, union
from sqlalchemy.ext.asyncio import AsyncSession

from payslip.common.constants import PayrollStatus
from payslip.common.pagination import PaginationMeta, paginate
from payslip.payroll.models import AttendancePeriod, Payroll
from payslip.submissions.models import Attendance, Overtime, Reimbursement


@dataclass(frozen=True)
class PayrollListItem:
    id: int
    status: PayrollStatus
    processed_at: Optional[datetime]
    start_date: date
    end_date: date


# ═════════════════════════════════════════════════════════════════════
# Attendance periods
# ═════════════════════════════════════════════════════════════════════


class PeriodRepository(Protocol):
    async def find_period_containing(self, target_date: date) -> int:
        """Return the id of the period covering *target_date*, or 0."""
        raise NotImplementedError

    async def has_overlapping_period(self, start_date: date, end_date: date) -> bool:
        raise NotImplementedError

    async def get_period(self, period_id: int) -> Optional[AttendancePeriod]:
        raise NotImplementedError

    async def create_period(
        self, start_date: date, end_date: date, created_by: Optional[int],
    ) -> AttendancePeriod:
        raise NotImplementedError

    async def list_periods(
        self, page: int, limit: int,
    ) -> tuple[list[AttendancePeriod], PaginationMeta]:
        raise NotImplementedError


class SqlPeriodRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_period_containing(self, target_date: date) -> int:
        result = await self._db.execute(
            select(AttendancePeriod.id)
            .where(
                AttendancePeriod.start_date <= target_date,
                AttendancePeriod.end_date >= target_date,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() or 0

    async def has_overlapping_period(self, start_date: date, end_date: date) -> bool:
        # Two inclusive ranges overlap unless one ends before the other starts.
        result = await self._db.execute(
            select(func.count())
            .select_from(AttendancePeriod)
            .where(
                not_(
                    or_(
                        AttendancePeriod.start_date > end_date,
                        AttendancePeriod.end_date < start_date,
                    )
                )
            )
        )
        return result.scalar_one() > 0

    async def get_period(self, period_id: int) -> Optional[AttendancePeriod]:
        return await self._db.get(AttendancePeriod, period_id)

    async def create_period(
        self, start_date: date, end_date: date, created_by: Optional[int],
    ) -> AttendancePeriod:
        period = AttendancePeriod(
            start_date=start_date,
            end_date=end_date,
            created_by=created_by,
            updated_by=created_by,
        )
        self._db.add(period)
        await self._db.flush()
        return period

    async def list_periods(
        self, page: int, limit: int,
    ) -> tuple[list[AttendancePeriod], PaginationMeta]:
        query = select(AttendancePeriod).order_by(
            AttendancePeriod.created_at.desc(), AttendancePeriod.id.desc()
        )
        return await paginate(self._db, query, page, limit)


# ═════════════════════════════════════════════════════════════════════
# Payrolls
# ═════════════════════════════════════════════════════════════════════


class PayrollRepository(Protocol):
    async def get_payroll(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    async def get_payroll_by_period(self, period_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    async def get_payroll_status(self, period_id: int) -> Optional[PayrollStatus]:
        """Status of the period's payroll, or None when it has none yet."""
        raise NotImplementedError

    async def create_payroll(self, period_id: int, created_by: Optional[int]) -> Payroll:
        raise NotImplementedError

    async def update_payroll_status(
        self,
        payroll: Payroll,
        status: PayrollStatus,
        updated_by: Optional[int],
        processed_at: datetime,
    ) -> Payroll:
        raise NotImplementedError

    async def list_payrolls(
        self, page: int, limit: int,
    ) -> tuple[list[PayrollListItem], PaginationMeta]:
        raise NotImplementedError

    async def count_eligible_employees(self, period_id: int) -> int:
        raise NotImplementedError

    async def list_eligible_employees_page(
        self, period_id: int, limit: int, offset: int,
    ) -> Sequence[int]:
        raise NotImplementedError


class SqlPayrollRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_payroll(self, payroll_id: int) -> Optional[Payroll]:
        return await self._db.get(Payroll, payroll_id)

    async def get_payroll_by_period(self, period_id: int) -> Optional[Payroll]:
        result = await self._db.execute(
            select(Payroll).where(Payroll.period_id == period_id)
        )
        return result.scalars().first()

    async def get_payroll_status(self, period_id: int) -> Optional[PayrollStatus]:
        # FOR SHARE: run_payroll's UPDATE waits for in-flight submissions.
        result = await self._db.execute(
            select(Payroll.status)
            .where(Payroll.period_id == period_id)
            .with_for_update(read=True)
        )
        return result.scalars().first()

    async def create_payroll(self, period_id: int, created_by: Optional[int]) -> Payroll:
        payroll = Payroll(
            period_id=period_id,
            status=PayrollStatus.pending,
            created_by=created_by,
            updated_by=created_by,
        )
        self._db.add(payroll)
        await self._db.flush()
        return payroll

    async def update_payroll_status(
        self,
        payroll: Payroll,
        status: PayrollStatus,
        updated_by: Optional[int],
        processed_at: datetime,
    ) -> Payroll:
        payroll.status = status
        payroll.processed_at = processed_at
        payroll.updated_by = updated_by
        await self._db.flush()
        return payroll

    async def list_payrolls(
        self, page: int, limit: int,
    ) -> tuple[list[PayrollListItem], PaginationMeta]:
        query = (
            select(
                Payroll.id,
                Payroll.status,
                Payroll.processed_at,
                AttendancePeriod.start_date,
                AttendancePeriod.end_date,
            )
            .join(AttendancePeriod, Payroll.period_id == AttendancePeriod.id)
            .order_by(Payroll.created_at.desc(), Payroll.id.desc())
        )
        rows, meta = await paginate(self._db, query, page, limit)
        items = [
            PayrollListItem(
                id=r.id,
                status=r.status,
                processed_at=r.processed_at,
                start_date=r.start_date,
                end_date=r.end_date,
            )
            for r in rows
        ]
        return items, meta

    # ── Eligible employees ──────────────────────────────────────────

    @staticmethod
    def _eligible_user_ids(period_id: int):
        """Users with at least one attendance, overtime or reimbursement row."""
        return union(
            select(Attendance.user_id).where(Attendance.period_id == period_id),
            select(Overtime.user_id).where(Overtime.period_id == period_id),
            select(Reimbursement.user_id).where(Reimbursement.period_id == period_id),
        ).subquery()

    async def count_eligible_employees(self, period_id: int) -> int:
        eligible = self._eligible_user_ids(period_id)
        result = await self._db.execute(select(func.count()).select_from(eligible))
        return result.scalar_one()

    async def list_eligible_employees_page(
        self, period_id: int, limit: int, offset: int,
    ) -> Sequence[int]:
        eligible = self._eligible_user_ids(period_id)
        user_id = eligible.c.user_id
        result = await self._db.execute(
            select(user_id).order_by(user_id).limit(limit).offset(offset)
        )
        return list(result.scalars().all())
