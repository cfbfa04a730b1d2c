# app/db/schemas/appointment_schemas.py
from pydantic import BaseModel, Field, ConfigDict, computed_field
from datetime import date, time, datetime
from typing import Optional
from ..models import AppointmentStatus


class AppointmentCreate(BaseModel):
    """
    Booking request for both flows.

    Clients book for themselves (``patient_id`` is ignored); staff and admins
    book on behalf of ``patient_id`` and may omit ``service_id``. Which ids are
    required is decided by the booking workflow, per role.
    """

    patient_id: Optional[str] = Field(None, description="Staff flow only")
    doctor_id: Optional[str] = None
    service_id: Optional[str] = None
    appointment_date: date
    start_time: time
    end_time: time
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    appointment_code: str
    status: AppointmentStatus
    patient_id: str
    doctor_id: str
    service_id: str
    appointment_date: date
    start_time: time
    end_time: time
    notes: Optional[str] = None
    created_at: datetime


class TimeSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: time
    end_time: time

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


class DashboardStats(BaseModel):
    """Per-role counters; fields that do not apply to the role stay None."""

    total_appointments: Optional[int] = None
    upcoming_appointments: int = 0
    pending_appointments: int = 0
    completed_appointments: Optional[int] = None
    today_appointments: Optional[int] = None
    total_patients: Optional[int] = None
    total_doctors: Optional[int] = None
    active_doctors: Optional[int] = None
