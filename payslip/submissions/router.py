"""Employee router — own submissions and payslips.

All endpoints require authentication; records are always written for the
authenticated user.
"""


from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from payslip.auth.dependencies import client_ip, get_current_user
from payslip.common.constants import SubmissionKind
from payslip.common.pagination import PaginationParams
from payslip.database import get_db
from payslip.payroll.router import get_payroll_service
from payslip.payroll.schemas import EmployeePayslip
from payslip.payroll.service import PayrollService
from payslip.submissions.schemas import (
    AttendanceCreate,
    AttendanceListResponse,
    AttendanceOut,
    OvertimeCreate,
    OvertimeListResponse,
    OvertimeOut,
    ReimbursementCreate,
    ReimbursementListResponse,
    ReimbursementOut,
)
from payslip.submissions.service import SubmissionService
from payslip.users.models import User

router = APIRouter(prefix="", tags=["employee"])


def get_submission_service(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


# ── Attendance ──────────────────────────────────────────────────────

@router.post("/attendances", response_model=AttendanceOut, status_code=201)
async def submit_attendance(
    body: AttendanceCreate,
    request: Request,
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
    db: AsyncSession = Depends(get_db),
):
    """Submit attendance for a working day."""
    record = await service.submit_attendance(
        user.id, body, by=user.id, ip_address=client_ip(request),
    )
    await db.commit()
    return AttendanceOut.model_validate(record)


@router.get("/attendances", response_model=AttendanceListResponse)
async def my_attendances(
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    rows, meta = await service.list_submissions(
        SubmissionKind.attendance, user.id, pagination.page, pagination.limit,
    )
    return AttendanceListResponse(
        data=[AttendanceOut.model_validate(r) for r in rows], meta=meta,
    )


# ── Overtime ────────────────────────────────────────────────────────

@router.post("/overtimes", response_model=OvertimeOut, status_code=201)
async def submit_overtime(
    body: OvertimeCreate,
    request: Request,
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
    db: AsyncSession = Depends(get_db),
):
    """Submit overtime hours (at most 3, after 17:00 when filed same-day)."""
    record = await service.submit_overtime(
        user.id, body, by=user.id, ip_address=client_ip(request),
    )
    await db.commit()
    return OvertimeOut.model_validate(record)


@router.get("/overtimes", response_model=OvertimeListResponse)
async def my_overtimes(
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    rows, meta = await service.list_submissions(
        SubmissionKind.overtime, user.id, pagination.page, pagination.limit,
    )
    return OvertimeListResponse(
        data=[OvertimeOut.model_validate(r) for r in rows], meta=meta,
    )


# ── Reimbursement ───────────────────────────────────────────────────

@router.post("/reimbursements", response_model=ReimbursementOut, status_code=201)
async def submit_reimbursement(
    body: ReimbursementCreate,
    request: Request,
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
    db: AsyncSession = Depends(get_db),
):
    """Submit a reimbursement claim."""
    record = await service.submit_reimbursement(
        user.id, body, by=user.id, ip_address=client_ip(request),
    )
    await db.commit()
    return ReimbursementOut.model_validate(record)


@router.get("/reimbursements", response_model=ReimbursementListResponse)
async def my_reimbursements(
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    rows, meta = await service.list_submissions(
        SubmissionKind.reimbursement, user.id, pagination.page, pagination.limit,
    )
    return ReimbursementListResponse(
        data=[ReimbursementOut.model_validate(r) for r in rows], meta=meta,
    )


# ── Payslip ─────────────────────────────────────────────────────────

@router.get("/payslips/{payroll_id}", response_model=EmployeePayslip)
async def my_payslip(
    payroll_id: int,
    user: User = Depends(get_current_user),
    service: PayrollService = Depends(get_payroll_service),
):
    """Payslip of the authenticated user for a processed payroll."""
    return await service.generate_payslip(user.id, payroll_id)
