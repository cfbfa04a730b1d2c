# common/api_error/booking_error.py
"""Booking workflow errors. All are recoverable and user-facing."""

from datetime import date
from .ApiError import AppError


class BookingValidationError(AppError):
    """A required field is missing or a value is out of range."""

    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")


class DuplicateBookingError(AppError):
    def __init__(self, patient_id: str, appointment_date: date):
        self.patient_id = patient_id
        self.appointment_date = appointment_date
        super().__init__(
            "You already have an appointment scheduled for "
            f"{appointment_date.isoformat()}. Only one appointment per day is allowed.",
            status_code=409,
            code="DUPLICATE_BOOKING",
        )


class SlotUnavailableError(AppError):
    def __init__(self, doctor_id: str, appointment_date: date, slot: str):
        self.doctor_id = doctor_id
        self.appointment_date = appointment_date
        super().__init__(
            f"The time slot {slot} on {appointment_date.isoformat()} is no longer "
            "available. Please choose a different time.",
            status_code=409,
            code="SLOT_UNAVAILABLE",
        )


class TooLateToCancelError(AppError):
    def __init__(self, appointment_code: str, notice_hours: float):
        self.appointment_code = appointment_code
        super().__init__(
            f"Appointment {appointment_code} can only be cancelled at least "
            f"{notice_hours:g} hours in advance.",
            status_code=409,
            code="TOO_LATE_TO_CANCEL",
        )


__all__ = [
    "BookingValidationError",
    "DuplicateBookingError",
    "SlotUnavailableError",
    "TooLateToCancelError",
]
