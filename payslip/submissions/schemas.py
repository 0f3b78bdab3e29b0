"""Submission Pydantic v2 schemas — request / response validation.

Dates arrive as raw strings; their format is checked by the service so
that the rule order of each submission type is preserved.
"""


from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from payslip.common.pagination import PaginationMeta


# ═════════════════════════════════════════════════════════════════════
# Requests
# ═════════════════════════════════════════════════════════════════════


class AttendanceCreate(BaseModel):
    date: str = Field(..., description="Attendance date, YYYY-MM-DD")


class OvertimeCreate(BaseModel):
    date: str = Field(..., description="Overtime date, YYYY-MM-DD")
    hours: float = Field(
        ..., allow_inf_nan=False, description="Overtime hours, at most 3 per day",
    )


class ReimbursementCreate(BaseModel):
    date: str = Field(..., description="Expense date, YYYY-MM-DD")
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=2000)

    @field_validator("description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description must not be blank.")
        return value


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class AttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    period_id: int
    date: date
    created_at: datetime


class OvertimeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    period_id: int
    date: date
    hours: float
    created_at: datetime


class ReimbursementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    period_id: int
    date: date
    amount: float
    description: str
    created_at: datetime


class AttendanceListResponse(BaseModel):
    data: list[AttendanceOut]
    meta: PaginationMeta


class OvertimeListResponse(BaseModel):
    data: list[OvertimeOut]
    meta: PaginationMeta


class ReimbursementListResponse(BaseModel):
    data: list[ReimbursementOut]
    meta: PaginationMeta
