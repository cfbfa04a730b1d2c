# app/db/models/schedules.py
from __future__ import annotations
from datetime import date, time
from enum import Enum
from typing import TYPE_CHECKING
from sqlalchemy import (
    String,
    Integer,
    Boolean,
    Time,
    ForeignKey,
    CheckConstraint,
    Index,
    Enum as sqlalchemy_enum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .doctor_table import Doctor


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        # date.weekday(): Monday == 0, matches declaration order
        return list(cls)[value.weekday()]

    @property
    def iso_number(self) -> int:
        """1 (Monday) .. 7 (Sunday)."""
        return list(DayOfWeek).index(self) + 1


class Schedule(DbBaseModel):
    """A doctor's recurring availability window for one weekday."""

    __tablename__ = "schedules"

    schedule_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )
    doctor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("doctors.doctor_id", ondelete="RESTRICT"),
        nullable=False,
    )
    day_of_week: Mapped[DayOfWeek] = mapped_column(
        sqlalchemy_enum(DayOfWeek, name="day_of_week"),
        nullable=False,
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    # Informational, not enforced as a cap when booking
    max_appointments: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    doctor: Mapped["Doctor"] = relationship("Doctor", back_populates="schedules")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_schedule_time_order"),
        Index("ix_schedule_doctor_day", "doctor_id", "day_of_week"),
    )


__all__ = ["Schedule", "DayOfWeek"]
