"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from payslip.common.constants import PayrollStatus, UserRole
from payslip.config import settings
from payslip.database import Base, get_db
from payslip.main import create_app

# Import ALL model modules so every table is registered on Base.metadata
import payslip.common.audit  # noqa: F401
import payslip.payroll.models  # noqa: F401
import payslip.submissions.models  # noqa: F401
import payslip.users.models  # noqa: F401

from payslip.payroll.models import AttendancePeriod, Payroll
from payslip.submissions.models import Attendance, Overtime, Reimbursement
from payslip.users.models import User, UserSalary

# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)

LOCAL_TZ = ZoneInfo(settings.TIMEZONE)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from payslip.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Clock ───────────────────────────────────────────────────────────

def fixed_clock(
    year: int, month: int, day: int, hour: int = 12, minute: int = 0, second: int = 0,
):
    """A clock frozen at the given local wall-clock time."""
    moment = datetime(year, month, day, hour, minute, second, tzinfo=LOCAL_TZ)
    return lambda: moment


# ── Model factories ─────────────────────────────────────────────────

async def _make_user(
    db: AsyncSession,
    *,
    username: str = "jdoe",
    full_name: str = "John Doe",
    role: UserRole = UserRole.employee,
    salary: Optional[float] = 4_000_000,
    is_active: bool = True,
) -> User:
    user = User(username=username, full_name=full_name, role=role, is_active=is_active)
    db.add(user)
    await db.flush()
    if salary is not None:
        db.add(UserSalary(
            user_id=user.id,
            amount=Decimal(str(salary)),
            effective_from=date(2024, 1, 1),
        ))
        await db.flush()
    return user


async def _make_period(
    db: AsyncSession,
    start_date: date = date(2025, 6, 1),
    end_date: date = date(2025, 6, 30),
) -> AttendancePeriod:
    period = AttendancePeriod(start_date=start_date, end_date=end_date)
    db.add(period)
    await db.flush()
    return period


async def _make_payroll(
    db: AsyncSession,
    period: AttendancePeriod,
    status: PayrollStatus = PayrollStatus.pending,
) -> Payroll:
    payroll = Payroll(period_id=period.id, status=status)
    if status == PayrollStatus.processed:
        payroll.processed_at = datetime.now(timezone.utc)
    db.add(payroll)
    await db.flush()
    return payroll


async def _add_attendance(db: AsyncSession, user: User, period: AttendancePeriod, *days: date) -> None:
    for d in days:
        db.add(Attendance(user_id=user.id, period_id=period.id, date=d, created_by=user.id))
    await db.flush()


async def _add_overtime(
    db: AsyncSession, user: User, period: AttendancePeriod, d: date, hours: float,
) -> None:
    db.add(Overtime(
        user_id=user.id, period_id=period.id, date=d,
        hours=Decimal(str(hours)), created_by=user.id,
    ))
    await db.flush()


async def _add_reimbursement(
    db: AsyncSession, user: User, period: AttendancePeriod, d: date, amount: float,
    description: str = "Taxi to client site",
) -> None:
    db.add(Reimbursement(
        user_id=user.id, period_id=period.id, date=d,
        amount=Decimal(str(amount)), description=description, created_by=user.id,
    ))
    await db.flush()


@pytest.fixture
async def employee(db) -> User:
    return await _make_user(db)


@pytest.fixture
async def admin(db) -> User:
    return await _make_user(
        db, username="admin", full_name="Payroll Admin", role=UserRole.admin, salary=None,
    )


@pytest.fixture
async def period(db) -> AttendancePeriod:
    """June 2025, no payroll yet."""
    return await _make_period(db)


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: int,
    role: UserRole = UserRole.employee,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=8)
    payload = {
        "sub": str(user_id),
        "role": role.value,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, role=user.role)}"}


@pytest.fixture
async def admin_headers(db, admin) -> dict[str, str]:
    await db.commit()
    return _auth_headers(admin)


@pytest.fixture
async def employee_headers(db, employee) -> dict[str, str]:
    await db.commit()
    return _auth_headers(employee)
