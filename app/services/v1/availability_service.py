# app/services/v1/availability_service.py
"""
Availability engine.

Answers three read-only questions for the booking workflow:
which slots a doctor offers on a date, whether a slot is already held by an
active appointment, and whether a patient is still free to book on a date.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import (
    Appointment,
    ACTIVE_STATUSES,
    ClinicSettings,
    DayOfWeek,
    Schedule,
)
from common.config import BookingConfig
from common.logger import get_app_logger

logger = get_app_logger(__name__)


@dataclass(frozen=True)
class TimeSlot:
    start_time: time
    end_time: time

    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


def generate_time_slots(
    window_start: time, window_end: time, duration_minutes: int
) -> list[TimeSlot]:
    """
    Split ``[window_start, window_end)`` into consecutive slots of
    ``duration_minutes``. A trailing remainder shorter than one slot is dropped.

    >>> [s.label for s in generate_time_slots(time(9), time(10), 30)]
    ['09:00 - 09:30', '09:30 - 10:00']
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

    # Arithmetic on a fixed day so slots never wrap past midnight
    anchor = date(2000, 1, 1)
    cursor = datetime.combine(anchor, window_start)
    end = datetime.combine(anchor, window_end)
    step = timedelta(minutes=duration_minutes)

    slots: list[TimeSlot] = []
    while cursor + step <= end:
        slots.append(TimeSlot(cursor.time(), (cursor + step).time()))
        cursor += step
    return slots


class AvailabilityService:
    def __init__(self, db: AsyncSession, booking_config: Optional[BookingConfig] = None):
        self.db = db
        self.booking_config = booking_config or BookingConfig()

    async def get_clinic_settings(self) -> ClinicSettings:
        """Stored settings row, or transient defaults when none exists."""
        query = (
            select(ClinicSettings)
            .order_by(ClinicSettings.settings_id)
            .limit(1)
            .execution_options(logging_token="AvailabilityService.get_clinic_settings")
        )
        settings = (await self.db.execute(query)).scalar_one_or_none()
        if settings is None:
            return ClinicSettings.defaults(self.booking_config.default_slot_minutes)
        return settings

    async def get_schedule_for(self, doctor_id: str, on_date: date) -> Optional[Schedule]:
        """First active schedule of the doctor for the weekday of ``on_date``."""
        query = (
            select(Schedule)
            .where(
                Schedule.doctor_id == doctor_id,
                Schedule.day_of_week == DayOfWeek.from_date(on_date),
                Schedule.is_active.is_(True),
            )
            .order_by(Schedule.start_time)
            .limit(1)
            .execution_options(logging_token="AvailabilityService.get_schedule_for")
        )
        return (await self.db.execute(query)).scalar_one_or_none()

    async def compute_available_slots(self, doctor_id: str, on_date: date) -> list[TimeSlot]:
        """
        Candidate slots for the doctor on ``on_date``, ascending.

        Booked slots are not removed; the booking workflow rejects taken
        slots at booking time.
        """
        schedule = await self.get_schedule_for(doctor_id, on_date)
        if schedule is None:
            logger.debug(
                "No active schedule",
                doctor_id=doctor_id,
                date=on_date.isoformat(),
            )
            return []

        settings = await self.get_clinic_settings()
        return generate_time_slots(
            schedule.start_time,
            schedule.end_time,
            settings.appointment_duration_minutes,
        )

    async def count_slot_conflicts(
        self,
        doctor_id: str,
        on_date: date,
        start_time: time,
        end_time: time,
    ) -> int:
        """Active appointments of the doctor holding exactly this slot."""
        query = (
            select(func.count())
            .select_from(Appointment)
            .where(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == on_date,
                Appointment.start_time == start_time,
                Appointment.end_time == end_time,
                Appointment.status.in_(ACTIVE_STATUSES),
            )
            .execution_options(logging_token="AvailabilityService.count_slot_conflicts")
        )
        return int((await self.db.execute(query)).scalar_one())

    async def is_slot_taken(
        self, doctor_id: str, on_date: date, start_time: time, end_time: time
    ) -> bool:
        return await self.count_slot_conflicts(doctor_id, on_date, start_time, end_time) > 0

    async def can_patient_book(self, patient_id: str, on_date: date) -> bool:
        """True while the patient holds no active appointment on ``on_date``."""
        query = (
            select(func.count())
            .select_from(Appointment)
            .where(
                Appointment.patient_id == patient_id,
                Appointment.appointment_date == on_date,
                Appointment.status.in_(ACTIVE_STATUSES),
            )
            .execution_options(logging_token="AvailabilityService.can_patient_book")
        )
        return int((await self.db.execute(query)).scalar_one()) == 0


__all__ = ["AvailabilityService", "TimeSlot", "generate_time_slots"]
