# app/db/models/appointment_table.py
from __future__ import annotations
from datetime import date, time, datetime
from typing import TYPE_CHECKING, Optional
from enum import Enum
from sqlalchemy import (
    String,
    Integer,
    Date,
    Time,
    ForeignKey,
    Text,
    Index,
    CheckConstraint,
    text,
    Enum as sqlalchemy_Enum,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel


class AppointmentStatus(str, Enum):
    PENDING = "Pending"  # Requested by the client, awaiting staff confirmation
    CONFIRMED = "Confirmed"  # Accepted by staff, or created by staff directly
    COMPLETED = "Completed"  # Visit happened
    CANCELLED = "Cancelled"  # Withdrawn by the patient or the clinic

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES


# Active appointments hold the patient's day and the doctor's slot
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)

# The Enum column stores member names
_ACTIVE_STATUS_CLAUSE = "status IN ({})".format(
    ", ".join(f"'{status.name}'" for status in ACTIVE_STATUSES)
)


if TYPE_CHECKING:
    from .patient_table import Patient
    from .doctor_table import Doctor
    from .service_table import Service


class Appointment(DbBaseModel):
    __tablename__ = "appointments"

    appointment_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )

    # Human-readable SC-NNN code derived from sequence_number
    appointment_code: Mapped[str] = mapped_column(
        String(16), nullable=False, unique=True
    )
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    patient_id: Mapped[str] = mapped_column(
        ForeignKey("patients.patient_id", ondelete="RESTRICT"),
        nullable=False,
    )
    doctor_id: Mapped[str] = mapped_column(
        ForeignKey("doctors.doctor_id", ondelete="RESTRICT"),
        nullable=False,
    )
    service_id: Mapped[str] = mapped_column(
        ForeignKey("services.service_id", ondelete="RESTRICT"),
        nullable=False,
    )

    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    status: Mapped[AppointmentStatus] = mapped_column(
        sqlalchemy_Enum(AppointmentStatus, name="appointment_status"),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="appointments")
    doctor: Mapped["Doctor"] = relationship("Doctor", back_populates="appointments")
    service: Mapped["Service"] = relationship("Service", back_populates="appointments")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_appointment_time_order"),
        # One active appointment per patient per day
        Index(
            "uq_appointment_patient_day_active",
            "patient_id",
            "appointment_date",
            unique=True,
            postgresql_where=text(_ACTIVE_STATUS_CLAUSE),
            sqlite_where=text(_ACTIVE_STATUS_CLAUSE),
        ),
        # One active appointment per doctor slot (exact range)
        Index(
            "uq_appointment_doctor_slot_active",
            "doctor_id",
            "appointment_date",
            "start_time",
            "end_time",
            unique=True,
            postgresql_where=text(_ACTIVE_STATUS_CLAUSE),
            sqlite_where=text(_ACTIVE_STATUS_CLAUSE),
        ),
        Index("ix_appointment_doctor_date", "doctor_id", "appointment_date"),
    )

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.appointment_date, self.start_time)


__all__ = ["Appointment", "AppointmentStatus", "ACTIVE_STATUSES"]
