# app/api/deps.py
"""
Request-level dependencies shared by the v1 routers.

Authentication happens upstream; the gateway forwards the authenticated
user as ``X-User-Id`` / ``X-User-Role`` headers.
"""

from datetime import datetime
from typing import Callable, Optional
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.db import get_db
from app.services.v1 import (
    Actor,
    ActorRole,
    AvailabilityService,
    BookingService,
)
from common.api_error import AuthorizationError
from common.config import AppConfig, BookingConfig


async def get_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    if not x_user_id or not x_user_role:
        raise AuthorizationError("Authentication required", authenticated=False)
    try:
        role = ActorRole(x_user_role.strip().capitalize())
    except ValueError:
        raise AuthorizationError(
            f"Unknown role: {x_user_role}", authenticated=False
        ) from None
    return Actor(user_id=x_user_id.strip(), role=role)


def get_booking_config(request: Request) -> BookingConfig:
    config: AppConfig = request.app.state.config
    return config.booking


def get_clock() -> Callable[[], datetime]:
    """Override in tests to pin "now"."""
    return datetime.now


def get_booking_service(
    db: AsyncSession = Depends(get_db),
    booking_config: BookingConfig = Depends(get_booking_config),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> BookingService:
    return BookingService(db, booking_config, clock=clock)


def get_availability_service(
    db: AsyncSession = Depends(get_db),
    booking_config: BookingConfig = Depends(get_booking_config),
) -> AvailabilityService:
    return AvailabilityService(db, booking_config)


__all__ = [
    "get_actor",
    "get_booking_config",
    "get_clock",
    "get_booking_service",
    "get_availability_service",
]
