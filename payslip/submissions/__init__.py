"""Submissions module — attendance, overtime and reimbursement records."""

from payslip.submissions.models import Attendance, Overtime, Reimbursement

__all__ = ["Attendance", "Overtime", "Reimbursement"]
