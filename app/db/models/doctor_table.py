# app/db/models/doctor_table.py
from __future__ import annotations
from typing import TYPE_CHECKING
from sqlalchemy import String, Boolean
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .schedules import Schedule
    from .appointment_table import Appointment


class Doctor(DbBaseModel):
    __tablename__ = "doctors"

    doctor_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )

    doctor_code: Mapped[str] = mapped_column(
        String(12),
        nullable=False,
        default=DbBaseModel.generate_short_code,
        unique=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    specialization: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    schedules: Mapped[list["Schedule"]] = relationship(
        "Schedule", back_populates="doctor"
    )

    appointments: Mapped[list["Appointment"]] = relationship(
        "Appointment", back_populates="doctor"
    )


__all__ = ["Doctor"]
