# app/db/models/service_table.py
from __future__ import annotations
from decimal import Decimal
from typing import TYPE_CHECKING
from sqlalchemy import String, Text, Numeric, Integer, Boolean, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .appointment_table import Appointment


class Service(DbBaseModel):
    """A bookable clinic service (consultation type) with its price."""

    __tablename__ = "services"

    service_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    appointments: Mapped[list["Appointment"]] = relationship(
        "Appointment", back_populates="service"
    )

    __table_args__ = (
        CheckConstraint("price >= 0 AND price <= 10000", name="ck_service_price_range"),
        CheckConstraint("duration_minutes > 0", name="ck_service_duration_positive"),
    )


__all__ = ["Service"]
