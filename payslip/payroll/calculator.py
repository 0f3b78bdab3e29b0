"""Pay arithmetic.

All functions are pure. Money is rounded to 2 places, overtime hours to 0,
using half-away-from-zero rounding (``round(x * 10^p) / 10^p``), which is
not what the builtin ``round`` does.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from payslip.common.constants import (
    OVERTIME_MULTIPLIER,
    WORKING_DAYS_PER_PERIOD,
    WORKING_HOURS_PER_PERIOD,
)


@dataclass(frozen=True)
class PayFigures:
    base_salary: float
    attendance_days: int
    attendance_pay: float
    overtime_hours: float
    overtime_pay: float
    reimbursements: float
    take_home_pay: float


def round_half_away(value: float, precision: int = 2) -> float:
    ratio = 10 ** precision
    scaled = abs(value) * ratio
    return math.copysign(math.floor(scaled + 0.5), value) / ratio


def attendance_pay(base_salary: float, attendance_days: int) -> float:
    return base_salary / WORKING_DAYS_PER_PERIOD * attendance_days


def hourly_rate(base_salary: float) -> float:
    return base_salary / WORKING_HOURS_PER_PERIOD


def overtime_pay(base_salary: float, overtime_hours: float) -> float:
    """Overtime is paid at twice the hourly rate.

    Summing per record and multiplying the summed hours give the same
    result as long as the salary is constant over the period.
    """
    return overtime_hours * hourly_rate(base_salary) * OVERTIME_MULTIPLIER


def take_home_pay(att_pay: float, ot_pay: float, reimbursements: float) -> float:
    return att_pay + ot_pay + reimbursements


def compute_pay(
    base_salary: float,
    attendance_days: int,
    overtime_hours: float,
    reimbursements: float,
    *,
    precomputed_overtime_pay: float | None = None,
) -> tuple[PayFigures, float]:
    """Compute a payslip's figures.

    Returns the rounded figures plus the unrounded take-home pay, which is
    what period totals are summed from. Overtime pay summed by the store
    can be passed in; otherwise it is derived from the total hours.
    """
    att_pay = attendance_pay(base_salary, attendance_days)
    ot_pay = (
        precomputed_overtime_pay
        if precomputed_overtime_pay is not None
        else overtime_pay(base_salary, overtime_hours)
    )
    thp = take_home_pay(att_pay, ot_pay, reimbursements)

    figures = PayFigures(
        base_salary=round_half_away(base_salary, 2),
        attendance_days=attendance_days,
        attendance_pay=round_half_away(att_pay, 2),
        overtime_hours=round_half_away(overtime_hours, 0),
        overtime_pay=round_half_away(ot_pay, 2),
        reimbursements=round_half_away(reimbursements, 2),
        take_home_pay=round_half_away(thp, 2),
    )
    return figures, thp
