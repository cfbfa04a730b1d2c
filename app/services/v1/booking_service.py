# app/services/v1/booking_service.py
"""
Booking workflow.

    validate request -> patient free that day -> slot free -> allocate code -> insert

The checks give friendly errors in the common case; the partial unique
indexes on active appointments and the unique appointment code make the
insert itself safe when two requests race between check and insert.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Optional
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentStatus,
    Doctor,
    Patient,
    Service,
)
from app.db.schemas import AppointmentCreate, DashboardStats
from common.api_error import (
    AuthorizationError,
    BookingValidationError,
    DatabaseError,
    DuplicateBookingError,
    NotFoundError,
    SlotUnavailableError,
    TooLateToCancelError,
)
from common.config import BookingConfig
from common.logger import get_app_logger
from .access import Actor, ActorRole, STAFF_ROLES, require_role
from .appointment_codes import format_appointment_code
from .availability_service import AvailabilityService, TimeSlot

logger = get_app_logger(__name__)

_FINISHED_STATUSES = (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)


class BookingService:
    def __init__(
        self,
        db: AsyncSession,
        booking_config: Optional[BookingConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.booking_config = booking_config or BookingConfig()
        # Local wall-clock time; appointment dates and times are clinic-local
        self.clock = clock
        self.availability = AvailabilityService(db, self.booking_config)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    async def book_appointment(self, actor: Actor, request: AppointmentCreate) -> Appointment:
        """
        Create an appointment.

        Clients book for themselves and get a Pending appointment. Staff and
        admins book for a visible patient and get a Confirmed one; they may
        leave the service out.
        """
        staff_flow = actor.role.is_staff

        if staff_flow:
            if not request.patient_id:
                raise BookingValidationError("patient_id is required")
            patient_id = request.patient_id
            status = AppointmentStatus.CONFIRMED
        else:
            patient_id = actor.user_id
            status = AppointmentStatus.PENDING
            if not request.service_id:
                raise BookingValidationError("service_id is required")

        if not request.doctor_id:
            raise BookingValidationError("doctor_id is required")
        if request.start_time >= request.end_time:
            raise BookingValidationError("start_time must be before end_time")

        await self._ensure_patient_can_book_as(actor, patient_id)
        doctor_id = await self._get_active_doctor_id(request.doctor_id)
        service_id = await self._resolve_service_id(request.service_id, staff_flow)

        slot = TimeSlot(request.start_time, request.end_time)
        log = logger.bind(
            patient_id=patient_id,
            doctor_id=doctor_id,
            date=request.appointment_date.isoformat(),
            slot=slot.label,
        )

        await self._ensure_available(patient_id, doctor_id, request.appointment_date, slot)

        last_error: Optional[IntegrityError] = None
        for attempt in range(1, self.booking_config.max_code_attempts + 1):
            sequence_number = await self._next_sequence_number()
            appointment = Appointment(
                appointment_code=format_appointment_code(sequence_number),
                sequence_number=sequence_number,
                patient_id=patient_id,
                doctor_id=doctor_id,
                service_id=service_id,
                appointment_date=request.appointment_date,
                start_time=request.start_time,
                end_time=request.end_time,
                status=status,
                notes=request.notes,
            )
            self.db.add(appointment)
            try:
                await self.db.flush()
            except IntegrityError as e:
                # Rollback expires every loaded instance; only plain values are used below
                await self.db.rollback()
                await self._ensure_available(
                    patient_id, doctor_id, request.appointment_date, slot
                )
                last_error = e
                log.warning(
                    "Appointment code taken concurrently, retrying",
                    attempt=attempt,
                    appointment_code=format_appointment_code(sequence_number),
                )
                continue
            except SQLAlchemyError as e:
                await self.db.rollback()
                log.error("Appointment insert failed", error=str(e))
                raise DatabaseError(str(getattr(e, "orig", None) or e)) from e

            log.info(
                "Appointment booked",
                appointment_code=appointment.appointment_code,
                status=status.value,
                booked_by=actor.role.value,
            )
            return appointment

        log.error("Could not allocate an appointment code", attempts=self.booking_config.max_code_attempts)
        raise DatabaseError(
            f"Could not allocate an appointment code: {getattr(last_error, 'orig', last_error)}"
        )

    async def _ensure_available(
        self, patient_id: str, doctor_id: str, on_date: date, slot: TimeSlot
    ) -> None:
        if not await self.availability.can_patient_book(patient_id, on_date):
            raise DuplicateBookingError(patient_id, on_date)
        if await self.availability.is_slot_taken(
            doctor_id, on_date, slot.start_time, slot.end_time
        ):
            raise SlotUnavailableError(doctor_id, on_date, slot.label)

    async def _next_sequence_number(self) -> int:
        query = select(func.max(Appointment.sequence_number)).execution_options(
            logging_token="BookingService._next_sequence_number"
        )
        current = (await self.db.execute(query)).scalar_one_or_none()
        return (current or 0) + 1

    async def _ensure_patient_can_book_as(self, actor: Actor, patient_id: str) -> None:
        query = select(Patient.patient_id).where(
            Patient.patient_id == patient_id, Patient.is_visible()
        )
        if (await self.db.execute(query)).scalar_one_or_none() is not None:
            return
        if actor.role.is_staff:
            raise NotFoundError("Patient", patient_id)
        raise AuthorizationError("Your account is not approved for booking")

    async def _get_active_doctor_id(self, doctor_id: str) -> str:
        query = select(Doctor.doctor_id).where(
            Doctor.doctor_id == doctor_id, Doctor.is_active.is_(True)
        )
        found = (await self.db.execute(query)).scalar_one_or_none()
        if found is None:
            raise NotFoundError("Doctor", doctor_id)
        return found

    async def _resolve_service_id(self, service_id: Optional[str], allow_fallback: bool) -> str:
        """Requested service, else the configured default, else the earliest active one."""
        candidate = service_id or None
        if candidate is None and allow_fallback:
            candidate = self.booking_config.default_service_id

        if candidate is None:
            query = (
                select(Service.service_id)
                .where(Service.is_active.is_(True))
                .order_by(Service.created_at, Service.name)
                .limit(1)
            )
            fallback = (await self.db.execute(query)).scalar_one_or_none()
            if fallback is None:
                raise BookingValidationError("No active service is available")
            return fallback

        query = select(Service.service_id).where(
            Service.service_id == candidate, Service.is_active.is_(True)
        )
        found = (await self.db.execute(query)).scalar_one_or_none()
        if found is None:
            raise NotFoundError("Service", candidate)
        return found

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def get_appointment(self, actor: Actor, appointment_code: str) -> Appointment:
        """Staff see every appointment; clients only their own."""
        appointment = await self._get_by_code(appointment_code)
        if not actor.role.is_staff and appointment.patient_id != actor.user_id:
            raise AuthorizationError("You can only view your own appointments")
        return appointment

    async def cancel_appointment(self, actor: Actor, appointment_code: str) -> Appointment:
        """
        Cancel on behalf of the owning patient.

        Allowed only while the appointment is still open and starts strictly
        more than the notice period from now.
        """
        appointment = await self._get_by_code(appointment_code)

        if appointment.patient_id != actor.user_id:
            raise AuthorizationError("Only the patient who booked it can cancel this appointment")

        if appointment.status in _FINISHED_STATUSES:
            raise BookingValidationError(
                f"Appointment {appointment_code} is already {appointment.status.value}"
            )

        notice_hours = self.booking_config.cancellation_notice_hours
        if appointment.starts_at <= self.clock() + timedelta(hours=notice_hours):
            raise TooLateToCancelError(appointment_code, notice_hours)

        appointment.status = AppointmentStatus.CANCELLED
        await self.db.flush()

        logger.info(
            "Appointment cancelled",
            appointment_code=appointment_code,
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            date=appointment.appointment_date.isoformat(),
        )
        return appointment

    async def update_status(
        self, actor: Actor, appointment_code: str, new_status: AppointmentStatus
    ) -> Appointment:
        """
        Overwrite the status. Any status may follow any other.

        Reopening a Cancelled or Completed appointment still has to respect
        the one-per-day and one-per-slot rules.
        """
        require_role(actor, *STAFF_ROLES)
        appointment = await self._get_by_code(appointment_code)

        previous = appointment.status
        patient_id = appointment.patient_id
        doctor_id = appointment.doctor_id
        on_date = appointment.appointment_date
        slot = TimeSlot(appointment.start_time, appointment.end_time)
        reopening = previous not in ACTIVE_STATUSES and new_status in ACTIVE_STATUSES
        if reopening:
            # Row is still inactive here, so only other appointments are counted
            await self._ensure_available(patient_id, doctor_id, on_date, slot)

        appointment.status = new_status
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if reopening:
                await self._ensure_available(patient_id, doctor_id, on_date, slot)
            logger.error(
                "Appointment status update failed",
                appointment_code=appointment_code,
                error=str(e.orig),
            )
            raise DatabaseError(str(e.orig)) from e

        logger.info(
            "Appointment status updated",
            appointment_code=appointment_code,
            previous_status=previous.value,
            status=new_status.value,
            updated_by=actor.user_id,
        )
        return appointment

    async def _get_by_code(self, appointment_code: str) -> Appointment:
        query = (
            select(Appointment)
            .where(Appointment.appointment_code == appointment_code)
            .execution_options(logging_token="BookingService._get_by_code")
        )
        appointment = (await self.db.execute(query)).scalar_one_or_none()
        if appointment is None:
            raise NotFoundError("Appointment", appointment_code)
        return appointment

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_patient_appointments(self, patient_id: str) -> list[Appointment]:
        """Newest first."""
        query = (
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.start_time.desc())
        )
        return list((await self.db.execute(query)).scalars().all())

    async def list_appointments(
        self, actor: Actor, on_date: Optional[date] = None
    ) -> list[Appointment]:
        """All appointments (date descending), or one day's agenda by start time."""
        require_role(actor, *STAFF_ROLES)
        query = select(Appointment)
        if on_date is not None:
            query = query.where(Appointment.appointment_date == on_date)
        query = query.order_by(Appointment.appointment_date.desc(), Appointment.start_time)
        return list((await self.db.execute(query)).scalars().all())

    async def get_dashboard_stats(self, actor: Actor, today: Optional[date] = None) -> DashboardStats:
        today = today or self.clock().date()

        async def count(*conditions) -> int:  # type: ignore[no-untyped-def]
            query = select(func.count()).select_from(Appointment).where(*conditions)
            return int((await self.db.execute(query)).scalar_one())

        upcoming = (
            Appointment.appointment_date >= today,
            Appointment.status == AppointmentStatus.CONFIRMED,
        )
        pending = Appointment.status == AppointmentStatus.PENDING

        if actor.role == ActorRole.CLIENT:
            mine = Appointment.patient_id == actor.user_id
            return DashboardStats(
                total_appointments=await count(mine),
                upcoming_appointments=await count(mine, *upcoming),
                pending_appointments=await count(mine, pending),
                completed_appointments=await count(
                    mine, Appointment.status == AppointmentStatus.COMPLETED
                ),
            )

        patients_query = select(func.count()).select_from(Patient).where(Patient.is_visible())
        stats = DashboardStats(
            today_appointments=await count(Appointment.appointment_date == today),
            upcoming_appointments=await count(*upcoming),
            pending_appointments=await count(pending),
            total_patients=int((await self.db.execute(patients_query)).scalar_one()),
        )
        if actor.role == ActorRole.ADMIN:
            doctors_query = select(func.count()).select_from(Doctor)
            stats.total_appointments = await count()
            stats.total_doctors = int((await self.db.execute(doctors_query)).scalar_one())
            stats.active_doctors = int(
                (
                    await self.db.execute(doctors_query.where(Doctor.is_active.is_(True)))
                ).scalar_one()
            )
        return stats


__all__ = ["BookingService"]
