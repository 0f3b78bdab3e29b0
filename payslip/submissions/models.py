"""Submission ORM models: Attendance, Overtime, Reimbursement.

Every row is stamped with the period resolved from its date at submission
time. Attendance and overtime are unique per (user_id, date); the
constraint is the authoritative duplicate guard under concurrent load.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from payslip.database import Base


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
        sa.Index("ix_attendances_period_user", "period_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id"), nullable=False
    )
    period_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("attendance_periods.id"), nullable=False
    )
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


class Overtime(Base):
    __tablename__ = "overtimes"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "date", name="uq_overtime_user_date"),
        sa.CheckConstraint("hours > 0 AND hours <= 3", name="ck_overtime_hours"),
        sa.Index("ix_overtimes_period_user", "period_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id"), nullable=False
    )
    period_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("attendance_periods.id"), nullable=False
    )
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    hours: Mapped[Decimal] = mapped_column(sa.Numeric(6, 4), nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


class Reimbursement(Base):
    __tablename__ = "reimbursements"
    __table_args__ = (
        sa.Index("ix_reimbursements_period_user", "period_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id"), nullable=False
    )
    period_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("attendance_periods.id"), nullable=False
    )
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(sa.Numeric(14, 2), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
