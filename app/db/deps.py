# app/db/deps.py
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator

# Note: No import from main.py here!


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped database session.

    The manager lives on app.state (set by the lifespan), so several app
    instances, including test apps, can each carry their own database.
    """
    manager = getattr(request.app.state, "db_manager", None)

    if not manager:
        # Dependency called on an app whose lifespan never ran
        raise RuntimeError(
            "DbManager not found in app.state. Ensure lifespan is configured."
        )

    async with manager.session() as session:
        yield session


__all__ = ["get_db"]
