"""Payroll ORM models: AttendancePeriod, Payroll."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payslip.common.constants import PayrollStatus
from payslip.database import Base


class AttendancePeriod(Base):
    """Inclusive date range within which submissions are collected."""

    __tablename__ = "attendance_periods"
    __table_args__ = (
        sa.CheckConstraint("start_date <= end_date", name="ck_period_range"),
        sa.Index("ix_attendance_periods_range", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id")
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    payroll: Mapped[Optional[Payroll]] = relationship(back_populates="period")

    def __repr__(self) -> str:
        return f"<AttendancePeriod {self.start_date}..{self.end_date}>"


class Payroll(Base):
    """A payroll run for one attendance period."""

    __tablename__ = "payrolls"
    __table_args__ = (
        sa.UniqueConstraint("period_id", name="uq_payroll_period"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    period_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("attendance_periods.id"), nullable=False
    )
    status: Mapped[PayrollStatus] = mapped_column(
        sa.Enum(PayrollStatus, name="payroll_status"),
        nullable=False,
        default=PayrollStatus.pending,
    )
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    created_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id")
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    period: Mapped[AttendancePeriod] = relationship(back_populates="payroll")

    def __repr__(self) -> str:
        return f"<Payroll {self.id} period={self.period_id} {self.status.value}>"
