"""Users module — employees and their salaries."""

from payslip.users.models import User, UserSalary

__all__ = ["User", "UserSalary"]
