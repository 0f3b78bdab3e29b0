"""Async SQLAlchemy engine, session factory and the request-scoped session."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from payslip.config import settings

# SQL echo follows LOG_LEVEL=debug rather than the environment name
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.LOG_LEVEL.lower() == "debug",
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by users, payroll, submissions and audit models."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request: committed when the handler returns, rolled
    back when it raises. Handlers that must persist before responding call
    ``commit()`` themselves."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close pooled connections; called on application shutdown."""
    await engine.dispose()
