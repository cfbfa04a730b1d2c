# app/db/models/clinic_settings_table.py
from datetime import date, time
from typing import Any
from sqlalchemy import String, Integer, Time, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from .db_base_model import DbBaseModel

DEFAULT_OPENING_TIME = time(9, 0)
DEFAULT_CLOSING_TIME = time(17, 0)
DEFAULT_APPOINTMENT_DURATION_MINUTES = 30


class ClinicSettings(DbBaseModel):
    """
    Singleton row with clinic-wide booking settings.

    Read-only for the booking core; edited by configuration management.
    """

    __tablename__ = "clinic_settings"

    settings_id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)

    clinic_name: Mapped[str] = mapped_column(
        String(100), nullable=False, default="Smart Clinic"
    )
    opening_time: Mapped[time] = mapped_column(
        Time, nullable=False, default=DEFAULT_OPENING_TIME
    )
    closing_time: Mapped[time] = mapped_column(
        Time, nullable=False, default=DEFAULT_CLOSING_TIME
    )
    appointment_duration_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_APPOINTMENT_DURATION_MINUTES
    )
    max_appointments_per_day_per_patient: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1
    )
    # ISO dates; stored for the settings screen, not consulted by the engine
    holidays: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint("opening_time < closing_time", name="ck_clinic_hours_order"),
        CheckConstraint(
            "appointment_duration_minutes > 0", name="ck_clinic_duration_positive"
        ),
    )

    @classmethod
    def defaults(cls, appointment_duration_minutes: int = DEFAULT_APPOINTMENT_DURATION_MINUTES) -> "ClinicSettings":
        """Transient settings used while no row has been stored."""
        return cls(
            settings_id=1,
            clinic_name="Smart Clinic",
            opening_time=DEFAULT_OPENING_TIME,
            closing_time=DEFAULT_CLOSING_TIME,
            appointment_duration_minutes=appointment_duration_minutes,
            max_appointments_per_day_per_patient=1,
            holidays=[],
        )

    @property
    def holiday_dates(self) -> list[date]:
        return [date.fromisoformat(str(d)) for d in self.holidays or []]


__all__ = [
    "ClinicSettings",
    "DEFAULT_APPOINTMENT_DURATION_MINUTES",
]
