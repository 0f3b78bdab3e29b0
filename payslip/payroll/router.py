"""Admin router — attendance periods and payroll runs.

All endpoints require the admin role.
"""


from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from payslip.auth.dependencies import client_ip, require_role
from payslip.common.constants import UserRole
from payslip.common.pagination import PaginationParams
from payslip.database import get_db
from payslip.payroll.schemas import (
    AttendancePeriodCreate,
    AttendancePeriodListResponse,
    AttendancePeriodOut,
    PayrollCreate,
    PayrollListResponse,
    PayrollOut,
    PayrollSummary,
)
from payslip.payroll.service import PayrollService
from payslip.users.models import User

router = APIRouter(prefix="", tags=["admin"])

require_admin = require_role(UserRole.admin)


def get_payroll_service(db: AsyncSession = Depends(get_db)) -> PayrollService:
    return PayrollService(db)


# ── POST /attendance-periods ────────────────────────────────────────

@router.post("/attendance-periods", response_model=AttendancePeriodOut, status_code=201)
async def create_attendance_period(
    body: AttendancePeriodCreate,
    request: Request,
    admin: User = Depends(require_admin),
    service: PayrollService = Depends(get_payroll_service),
    db: AsyncSession = Depends(get_db),
):
    """Create a new attendance period; overlapping ranges are rejected."""
    period = await service.create_attendance_period(
        body.start_date,
        body.end_date,
        by=admin.id,
        ip_address=client_ip(request),
    )
    await db.commit()
    return AttendancePeriodOut.model_validate(period)


# ── GET /attendance-periods ─────────────────────────────────────────

@router.get("/attendance-periods", response_model=AttendancePeriodListResponse)
async def list_attendance_periods(
    pagination: PaginationParams = Depends(),
    admin: User = Depends(require_admin),
    service: PayrollService = Depends(get_payroll_service),
):
    """List attendance periods, newest first."""
    return await service.list_attendance_periods(pagination.page, pagination.limit)


# ── POST /payrolls ──────────────────────────────────────────────────

@router.post("/payrolls", response_model=PayrollOut, status_code=201)
async def create_payroll(
    body: PayrollCreate,
    request: Request,
    admin: User = Depends(require_admin),
    service: PayrollService = Depends(get_payroll_service),
    db: AsyncSession = Depends(get_db),
):
    """Create a pending payroll for an attendance period."""
    payroll = await service.create_payroll(
        body.period_id, by=admin.id, ip_address=client_ip(request),
    )
    await db.commit()
    return PayrollOut.model_validate(payroll)


# ── GET /payrolls ───────────────────────────────────────────────────

@router.get("/payrolls", response_model=PayrollListResponse)
async def list_payrolls(
    pagination: PaginationParams = Depends(),
    admin: User = Depends(require_admin),
    service: PayrollService = Depends(get_payroll_service),
):
    """List payrolls with their period dates, newest first."""
    return await service.list_payrolls(pagination.page, pagination.limit)


# ── POST /payrolls/{payroll_id}/run ─────────────────────────────────

@router.post("/payrolls/{payroll_id}/run", response_model=PayrollOut)
async def run_payroll(
    payroll_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    service: PayrollService = Depends(get_payroll_service),
    db: AsyncSession = Depends(get_db),
):
    """Process a payroll; its period stops accepting submissions."""
    payroll = await service.run_payroll(
        payroll_id, by=admin.id, ip_address=client_ip(request),
    )
    await db.commit()
    return PayrollOut.model_validate(payroll)


# ── GET /payrolls/{payroll_id}/summary ──────────────────────────────

@router.get("/payrolls/{payroll_id}/summary", response_model=PayrollSummary)
async def payroll_summary(
    payroll_id: int,
    pagination: PaginationParams = Depends(),
    admin: User = Depends(require_admin),
    service: PayrollService = Depends(get_payroll_service),
):
    """Payslips of one page of eligible employees with the page total."""
    return await service.summarize_payroll(payroll_id, pagination.page, pagination.limit)
