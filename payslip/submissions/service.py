"""Submission service layer — attendance, overtime and reimbursement.

Rule order per submission type (the first failing rule is reported):
  - Attendance:    date format → period gate → weekday → not in future → duplicate
  - Overtime:      hours bounds → date format → period gate → 17:00 cut-off → duplicate
  - Reimbursement: date format → period gate
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from payslip.common.audit import create_audit_entry
from payslip.common.clock import Clock, local_now
from payslip.common.constants import SubmissionKind
from payslip.common.exceptions import DuplicateSubmissionError
from payslip.common.pagination import PaginationMeta, normalize_page_params
from payslip.payroll.gate import PeriodGate
from payslip.payroll.repository import SqlPayrollRepository, SqlPeriodRepository
from payslip.submissions import validators
from payslip.submissions.models import Attendance, Overtime, Reimbursement
from payslip.submissions.repository import SqlSubmissionRepository, SubmissionRepository
from payslip.submissions.schemas import (
    AttendanceCreate,
    OvertimeCreate,
    ReimbursementCreate,
)

logger = logging.getLogger(__name__)


class SubmissionService:
    """Validates and records employee submissions."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        submissions: Optional[SubmissionRepository] = None,
        gate: Optional[PeriodGate] = None,
        clock: Clock = local_now,
    ) -> None:
        self._db = db
        self._submissions = submissions or SqlSubmissionRepository(db)
        self._gate = gate or PeriodGate(SqlPeriodRepository(db), SqlPayrollRepository(db))
        self._clock = clock

    async def _ensure_not_submitted(
        self, kind: SubmissionKind, user_id: int, target_date,
    ) -> None:
        if await self._submissions.has_submitted(kind, user_id, target_date):
            logger.info("Duplicate %s for user %s on %s", kind.value, user_id, target_date)
            raise DuplicateSubmissionError(kind.value)

    # ── Attendance ──────────────────────────────────────────────────

    async def submit_attendance(
        self,
        user_id: int,
        request: AttendanceCreate,
        *,
        by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> Attendance:
        target_date = validators.parse_submission_date(request.date)
        period_id = await self._gate.resolve_period_for_submission(target_date)

        validators.ensure_working_day(target_date)
        validators.ensure_not_future(target_date, self._clock().date())
        await self._ensure_not_submitted(SubmissionKind.attendance, user_id, target_date)

        record = await self._submissions.insert_attendance(
            Attendance(
                user_id=user_id,
                period_id=period_id,
                date=target_date,
                created_by=by if by is not None else user_id,
            )
        )
        await create_audit_entry(
            self._db,
            action="submit",
            entity_type="attendance",
            entity_id=record.id,
            actor_id=by if by is not None else user_id,
            new_values={"date": target_date.isoformat(), "period_id": period_id},
            ip_address=ip_address,
        )
        logger.info("Attendance %s recorded for user %s", record.id, user_id)
        return record

    # ── Overtime ────────────────────────────────────────────────────

    async def submit_overtime(
        self,
        user_id: int,
        request: OvertimeCreate,
        *,
        by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> Overtime:
        hours = validators.ensure_overtime_hours(request.hours)
        target_date = validators.parse_submission_date(request.date)
        period_id = await self._gate.resolve_period_for_submission(target_date)

        validators.ensure_after_working_hours(target_date, self._clock())
        await self._ensure_not_submitted(SubmissionKind.overtime, user_id, target_date)

        record = await self._submissions.insert_overtime(
            Overtime(
                user_id=user_id,
                period_id=period_id,
                date=target_date,
                hours=hours,
                created_by=by if by is not None else user_id,
            )
        )
        await create_audit_entry(
            self._db,
            action="submit",
            entity_type="overtime",
            entity_id=record.id,
            actor_id=by if by is not None else user_id,
            new_values={
                "date": target_date.isoformat(),
                "hours": float(hours),
                "period_id": period_id,
            },
            ip_address=ip_address,
        )
        logger.info("Overtime %s (%sh) recorded for user %s", record.id, hours, user_id)
        return record

    # ── Reimbursement ───────────────────────────────────────────────

    async def submit_reimbursement(
        self,
        user_id: int,
        request: ReimbursementCreate,
        *,
        by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> Reimbursement:
        target_date = validators.parse_submission_date(request.date)
        period_id = await self._gate.resolve_period_for_submission(target_date)

        record = await self._submissions.insert_reimbursement(
            Reimbursement(
                user_id=user_id,
                period_id=period_id,
                date=target_date,
                amount=request.amount,
                description=request.description,
                created_by=by if by is not None else user_id,
            )
        )
        await create_audit_entry(
            self._db,
            action="submit",
            entity_type="reimbursement",
            entity_id=record.id,
            actor_id=by if by is not None else user_id,
            new_values={
                "date": target_date.isoformat(),
                "amount": float(request.amount),
                "period_id": period_id,
            },
            ip_address=ip_address,
        )
        logger.info("Reimbursement %s recorded for user %s", record.id, user_id)
        return record

    # ── Own records ─────────────────────────────────────────────────

    async def list_submissions(
        self, kind: SubmissionKind, user_id: int, page: int, limit: int,
    ) -> tuple[list[Any], PaginationMeta]:
        """List a user's own submissions of one kind, newest first."""
        page, limit = normalize_page_params(page, limit)
        return await self._submissions.list_for_user(kind, user_id, page, limit)
