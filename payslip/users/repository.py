"""Employee lookups used by payroll calculation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payslip.users.models import User, UserSalary


@dataclass(frozen=True)
class EmployeeSalary:
    user_id: int
    full_name: str
    base_salary: float


class EmployeeRepository(Protocol):
    async def get_employee(self, user_id: int) -> Optional[EmployeeSalary]:
        """Return the employee joined with the current salary, or None."""
        raise NotImplementedError

    async def get_employees(self, user_ids: list[int]) -> dict[int, EmployeeSalary]:
        raise NotImplementedError


class SqlEmployeeRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    @staticmethod
    def _current_salary_query(user_ids: list[int]):
        latest = (
            select(UserSalary.amount)
            .where(UserSalary.user_id == User.id)
            .order_by(UserSalary.effective_from.desc())
            .limit(1)
            .correlate(User)
            .scalar_subquery()
        )
        return (
            select(User.id, User.full_name, latest.label("base_salary"))
            .where(User.id.in_(user_ids))
        )

    async def get_employee(self, user_id: int) -> Optional[EmployeeSalary]:
        return (await self.get_employees([user_id])).get(user_id)

    async def get_employees(self, user_ids: list[int]) -> dict[int, EmployeeSalary]:
        if not user_ids:
            return {}
        result = await self._db.execute(self._current_salary_query(user_ids))
        employees: dict[int, EmployeeSalary] = {}
        for row in result.all():
            # Users without any salary row do not join.
            if row.base_salary is None:
                continue
            employees[row.id] = EmployeeSalary(
                user_id=row.id,
                full_name=row.full_name,
                base_salary=float(row.base_salary),
            )
        return employees
