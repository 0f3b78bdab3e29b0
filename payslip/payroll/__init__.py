"""Payroll module — attendance periods, payroll lifecycle, pay calculation."""

from payslip.payroll.models import AttendancePeriod, Payroll

__all__ = ["AttendancePeriod", "Payroll"]
