"""
Shared pytest fixtures.

Every test gets its own SQLite database file with the schema created from
the ORM metadata and the clinic data from ``clinic_data`` committed.
"""

import logging
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import DbManager
from common.config import configure_structlog
from tests.clinic_data import seed_clinic

configure_structlog(logging.DEBUG)


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def db_manager(tmp_path) -> AsyncGenerator[DbManager, None]:
    manager = DbManager(sqlite_url(tmp_path / "clinic.db"))
    await manager.create_schema()
    await seed_clinic(manager)
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def session(db_manager: DbManager) -> AsyncGenerator[AsyncSession, None]:
    """Session that commits on exit, like a request-scoped one."""
    async with db_manager.session() as db:
        yield db
