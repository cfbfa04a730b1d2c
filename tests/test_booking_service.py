from datetime import date, datetime, time
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from app.db.models import Appointment, AppointmentStatus
from app.db.schemas import AppointmentCreate
from app.services.v1 import Actor, ActorRole, BookingService
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
from tests.clinic_data import (
    ADMIN,
    ALICE,
    BOB,
    CAROL,
    DOCTOR_2_ID,
    DOCTOR_ID,
    HIDDEN_PATIENT_ID,
    INACTIVE_DOCTOR_ID,
    INACTIVE_SERVICE_ID,
    MONDAY,
    NINE,
    NINE_THIRTY,
    NOW,
    PATIENT_2_ID,
    PATIENT_ID,
    SERVICE_2_ID,
    SERVICE_ID,
    STAFF,
    TEN,
    TEN_THIRTY,
    TUESDAY,
)


def booking_request(
    start: time = NINE,
    end: time = NINE_THIRTY,
    on_date: date = MONDAY,
    doctor_id=DOCTOR_ID,
    service_id=SERVICE_ID,
    patient_id=None,
    notes=None,
) -> AppointmentCreate:
    return AppointmentCreate(
        patient_id=patient_id,
        doctor_id=doctor_id,
        service_id=service_id,
        appointment_date=on_date,
        start_time=start,
        end_time=end,
        notes=notes,
    )


def booking_service(session, now: datetime = NOW, **config) -> BookingService:
    return BookingService(session, BookingConfig(**config), clock=lambda: now)


async def count_appointments(db_manager) -> int:
    async with db_manager.session() as session:
        return (await session.execute(select(func.count()).select_from(Appointment))).scalar_one()


async def appointment_status(db_manager, code: str) -> AppointmentStatus:
    async with db_manager.session() as session:
        query = select(Appointment.status).where(Appointment.appointment_code == code)
        return (await session.execute(query)).scalar_one()


class TestClientBooking:
    async def test_first_booking_is_pending_sc_001(self, session):
        appointment = await booking_service(session).book_appointment(
            ALICE, booking_request(notes="Chest pain")
        )

        assert appointment.appointment_code == "SC-001"
        assert appointment.status == AppointmentStatus.PENDING
        assert appointment.patient_id == PATIENT_ID
        assert appointment.doctor_id == DOCTOR_ID
        assert appointment.service_id == SERVICE_ID
        assert appointment.notes == "Chest pain"
        assert appointment.created_at is not None

    async def test_client_cannot_book_for_someone_else(self, session):
        appointment = await booking_service(session).book_appointment(
            ALICE, booking_request(patient_id=PATIENT_2_ID)
        )

        assert appointment.patient_id == PATIENT_ID

    async def test_codes_are_sequential(self, session):
        service = booking_service(session)

        codes = [
            (await service.book_appointment(ALICE, booking_request(NINE, NINE_THIRTY))).appointment_code,
            (await service.book_appointment(BOB, booking_request(NINE_THIRTY, TEN))).appointment_code,
            (await service.book_appointment(CAROL, booking_request(TEN, TEN_THIRTY))).appointment_code,
        ]

        assert codes == ["SC-001", "SC-002", "SC-003"]

    async def test_second_booking_same_day_is_duplicate(self, session):
        service = booking_service(session)
        await service.book_appointment(ALICE, booking_request(NINE, NINE_THIRTY))

        # Another doctor and slot does not matter: one appointment per day
        with pytest.raises(DuplicateBookingError):
            await service.book_appointment(
                ALICE, booking_request(time(13, 0), time(13, 30), doctor_id=DOCTOR_2_ID)
            )

    async def test_next_day_is_allowed(self, session):
        service = booking_service(session)
        await service.book_appointment(ALICE, booking_request(on_date=MONDAY))

        appointment = await service.book_appointment(ALICE, booking_request(on_date=TUESDAY))

        assert appointment.appointment_code == "SC-002"

    async def test_taken_slot_is_unavailable(self, session):
        service = booking_service(session)
        await service.book_appointment(ALICE, booking_request(NINE, NINE_THIRTY))

        with pytest.raises(SlotUnavailableError) as exc_info:
            await service.book_appointment(BOB, booking_request(NINE, NINE_THIRTY))

        assert "09:00 - 09:30" in exc_info.value.message

    async def test_overlapping_slot_is_not_detected(self, session):
        service = booking_service(session)
        await service.book_appointment(ALICE, booking_request(NINE, NINE_THIRTY))

        appointment = await service.book_appointment(BOB, booking_request(time(9, 15), time(9, 45)))

        assert appointment.appointment_code == "SC-002"

    async def test_cancelled_appointment_frees_day_and_slot(self, session):
        service = booking_service(session)
        first = await service.book_appointment(ALICE, booking_request())
        await service.cancel_appointment(ALICE, first.appointment_code)

        again = await service.book_appointment(ALICE, booking_request())
        other = await service.book_appointment(BOB, booking_request(TEN, TEN_THIRTY))

        assert again.appointment_code == "SC-002"
        assert other.appointment_code == "SC-003"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"doctor_id": None}, "doctor_id"),
            ({"doctor_id": ""}, "doctor_id"),
            ({"service_id": None}, "service_id"),
            ({"start": TEN, "end": NINE}, "start_time"),
            ({"start": NINE, "end": NINE}, "start_time"),
        ],
    )
    async def test_invalid_requests(self, session, overrides, message):
        with pytest.raises(BookingValidationError) as exc_info:
            await booking_service(session).book_appointment(ALICE, booking_request(**overrides))

        assert message in exc_info.value.message
        assert exc_info.value.status_code == 422

    async def test_inactive_doctor_is_not_found(self, session):
        with pytest.raises(NotFoundError) as exc_info:
            await booking_service(session).book_appointment(
                ALICE, booking_request(doctor_id=INACTIVE_DOCTOR_ID)
            )

        assert exc_info.value.entity == "Doctor"

    async def test_inactive_service_is_not_found(self, session):
        with pytest.raises(NotFoundError) as exc_info:
            await booking_service(session).book_appointment(
                ALICE, booking_request(service_id=INACTIVE_SERVICE_ID)
            )

        assert exc_info.value.entity == "Service"

    async def test_unapproved_client_is_refused(self, session):
        with pytest.raises(AuthorizationError):
            await booking_service(session).book_appointment(
                Actor(HIDDEN_PATIENT_ID, ActorRole.CLIENT), booking_request()
            )


class TestStaffBooking:
    async def test_staff_booking_is_confirmed(self, session):
        appointment = await booking_service(session).book_appointment(
            STAFF, booking_request(patient_id=PATIENT_ID, service_id=SERVICE_2_ID)
        )

        assert appointment.status == AppointmentStatus.CONFIRMED
        assert appointment.patient_id == PATIENT_ID
        assert appointment.service_id == SERVICE_2_ID

    async def test_service_falls_back_to_earliest_active(self, session):
        appointment = await booking_service(session).book_appointment(
            ADMIN, booking_request(patient_id=PATIENT_ID, service_id=None)
        )

        assert appointment.service_id == SERVICE_ID

    async def test_empty_service_id_falls_back_like_a_missing_one(self, session):
        appointment = await booking_service(session).book_appointment(
            STAFF, booking_request(patient_id=PATIENT_2_ID, service_id="")
        )

        assert appointment.service_id == SERVICE_ID

    async def test_service_falls_back_to_configured_default(self, session):
        service = booking_service(session, default_service_id=SERVICE_2_ID)

        appointment = await service.book_appointment(
            STAFF, booking_request(patient_id=PATIENT_ID, service_id=None)
        )

        assert appointment.service_id == SERVICE_2_ID

    async def test_patient_is_required(self, session):
        with pytest.raises(BookingValidationError):
            await booking_service(session).book_appointment(STAFF, booking_request())

    async def test_hidden_patient_is_not_found(self, session):
        with pytest.raises(NotFoundError):
            await booking_service(session).book_appointment(
                STAFF, booking_request(patient_id=HIDDEN_PATIENT_ID)
            )

    async def test_same_invariants_as_client_flow(self, session):
        service = booking_service(session)
        await service.book_appointment(ALICE, booking_request())

        with pytest.raises(DuplicateBookingError):
            await service.book_appointment(
                STAFF, booking_request(TEN, TEN_THIRTY, patient_id=PATIENT_ID)
            )
        with pytest.raises(SlotUnavailableError):
            await service.book_appointment(STAFF, booking_request(patient_id=PATIENT_2_ID))


class TestConcurrentInsert:
    """The unique indexes catch what the checks missed."""

    async def test_slot_conflict_at_insert_is_reported_as_unavailable(self, db_manager):
        async with db_manager.session() as session:
            await booking_service(session).book_appointment(ALICE, booking_request())

        async with db_manager.session() as session:
            service = booking_service(session)
            # First check misses the competing booking, the re-check sees it
            with patch.object(
                service.availability, "count_slot_conflicts", AsyncMock(side_effect=[0, 1])
            ):
                with pytest.raises(SlotUnavailableError):
                    await service.book_appointment(BOB, booking_request())

        assert await count_appointments(db_manager) == 1

    async def test_duplicate_day_at_insert_is_reported_as_duplicate(self, db_manager):
        async with db_manager.session() as session:
            await booking_service(session).book_appointment(ALICE, booking_request())

        async with db_manager.session() as session:
            service = booking_service(session)
            with patch.object(
                service.availability, "can_patient_book", AsyncMock(side_effect=[True, False])
            ):
                with pytest.raises(DuplicateBookingError):
                    await service.book_appointment(ALICE, booking_request(TEN, TEN_THIRTY))

        assert await count_appointments(db_manager) == 1

    async def test_code_collision_is_retried(self, db_manager):
        async with db_manager.session() as session:
            await booking_service(session).book_appointment(ALICE, booking_request())

        async with db_manager.session() as session:
            service = booking_service(session)
            with patch.object(service, "_next_sequence_number", AsyncMock(side_effect=[1, 2])):
                appointment = await service.book_appointment(BOB, booking_request(TEN, TEN_THIRTY))
            code = appointment.appointment_code

        assert code == "SC-002"
        assert await count_appointments(db_manager) == 2

    async def test_code_allocation_gives_up_with_database_error(self, db_manager):
        async with db_manager.session() as session:
            await booking_service(session).book_appointment(ALICE, booking_request())

        async with db_manager.session() as session:
            service = booking_service(session, max_code_attempts=2)
            allocate = AsyncMock(return_value=1)
            with patch.object(service, "_next_sequence_number", allocate):
                with pytest.raises(DatabaseError) as exc_info:
                    await service.book_appointment(BOB, booking_request(TEN, TEN_THIRTY))

        assert allocate.await_count == 2
        assert exc_info.value.status_code == 500
        assert await count_appointments(db_manager) == 1


class TestCancelAppointment:
    async def book_at(self, session, start: time, end: time) -> str:
        appointment = await booking_service(session).book_appointment(
            ALICE, booking_request(start, end)
        )
        return appointment.appointment_code

    async def test_owner_cancels_well_ahead(self, session):
        code = await self.book_at(session, TEN, TEN_THIRTY)

        appointment = await booking_service(session).cancel_appointment(ALICE, code)

        assert appointment.status == AppointmentStatus.CANCELLED

    async def test_just_over_notice_period(self, session):
        code = await self.book_at(session, TEN, TEN_THIRTY)
        service = booking_service(session, now=datetime(2030, 1, 7, 7, 59))

        assert (await service.cancel_appointment(ALICE, code)).status == AppointmentStatus.CANCELLED

    @pytest.mark.parametrize("now", [datetime(2030, 1, 7, 8, 0), datetime(2030, 1, 7, 8, 1)])
    async def test_within_notice_period(self, session, now):
        code = await self.book_at(session, TEN, TEN_THIRTY)

        with pytest.raises(TooLateToCancelError):
            await booking_service(session, now=now).cancel_appointment(ALICE, code)

    async def test_notice_period_is_configurable(self, session):
        code = await self.book_at(session, TEN, TEN_THIRTY)
        service = booking_service(session, now=datetime(2030, 1, 7, 8, 30), cancellation_notice_hours=1)

        assert (await service.cancel_appointment(ALICE, code)).status == AppointmentStatus.CANCELLED

    async def test_unknown_code(self, session):
        with pytest.raises(NotFoundError):
            await booking_service(session).cancel_appointment(ALICE, "SC-999")

    @pytest.mark.parametrize("actor", [BOB, STAFF, ADMIN])
    async def test_only_the_owner_may_cancel(self, session, actor):
        code = await self.book_at(session, TEN, TEN_THIRTY)

        with pytest.raises(AuthorizationError) as exc_info:
            await booking_service(session).cancel_appointment(actor, code)

        assert exc_info.value.status_code == 403

    @pytest.mark.parametrize("status", [AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED])
    async def test_finished_appointment_cannot_be_cancelled(self, session, status):
        code = await self.book_at(session, TEN, TEN_THIRTY)
        await booking_service(session).update_status(STAFF, code, status)

        with pytest.raises(BookingValidationError):
            await booking_service(session).cancel_appointment(ALICE, code)


class TestUpdateStatus:
    async def test_any_transition_is_allowed(self, session):
        service = booking_service(session)
        code = (await service.book_appointment(ALICE, booking_request())).appointment_code

        for status in (
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.PENDING,
        ):
            appointment = await service.update_status(STAFF, code, status)
            assert appointment.status == status

    async def test_reopening_after_same_day_rebooking_is_a_duplicate(self, db_manager):
        async with db_manager.session() as session:
            service = booking_service(session)
            await service.book_appointment(ALICE, booking_request())
            await service.cancel_appointment(ALICE, "SC-001")
            await service.book_appointment(ALICE, booking_request(TEN, TEN_THIRTY))

        async with db_manager.session() as session:
            with pytest.raises(DuplicateBookingError):
                await booking_service(session).update_status(STAFF, "SC-001", AppointmentStatus.CONFIRMED)

        assert await appointment_status(db_manager, "SC-001") == AppointmentStatus.CANCELLED

    async def test_reopening_a_slot_taken_by_someone_else(self, db_manager):
        async with db_manager.session() as session:
            service = booking_service(session)
            await service.book_appointment(ALICE, booking_request())
            await service.cancel_appointment(ALICE, "SC-001")
            await service.book_appointment(BOB, booking_request())

        async with db_manager.session() as session:
            with pytest.raises(SlotUnavailableError):
                await booking_service(session).update_status(STAFF, "SC-001", AppointmentStatus.PENDING)

        assert await appointment_status(db_manager, "SC-001") == AppointmentStatus.CANCELLED

    async def test_reopening_a_free_slot(self, db_manager):
        async with db_manager.session() as session:
            service = booking_service(session)
            await service.book_appointment(ALICE, booking_request())
            await service.cancel_appointment(ALICE, "SC-001")

        async with db_manager.session() as session:
            await booking_service(session).update_status(STAFF, "SC-001", AppointmentStatus.CONFIRMED)

        assert await appointment_status(db_manager, "SC-001") == AppointmentStatus.CONFIRMED

    async def test_conflict_found_at_flush_is_reported_as_duplicate(self, db_manager):
        async with db_manager.session() as session:
            service = booking_service(session)
            await service.book_appointment(ALICE, booking_request())
            await service.cancel_appointment(ALICE, "SC-001")
            await service.book_appointment(ALICE, booking_request(TEN, TEN_THIRTY))

        async with db_manager.session() as session:
            service = booking_service(session)
            # First check misses the competing booking, the re-check sees it
            with patch.object(
                service.availability, "can_patient_book", AsyncMock(side_effect=[True, False])
            ):
                with pytest.raises(DuplicateBookingError):
                    await service.update_status(STAFF, "SC-001", AppointmentStatus.CONFIRMED)

        assert await appointment_status(db_manager, "SC-001") == AppointmentStatus.CANCELLED

    async def test_clients_may_not_update(self, session):
        service = booking_service(session)
        code = (await service.book_appointment(ALICE, booking_request())).appointment_code

        with pytest.raises(AuthorizationError):
            await service.update_status(ALICE, code, AppointmentStatus.CONFIRMED)

    async def test_unknown_code(self, session):
        with pytest.raises(NotFoundError):
            await booking_service(session).update_status(ADMIN, "SC-404", AppointmentStatus.CONFIRMED)


class TestListingsAndDashboard:
    async def seed_history(self, session) -> BookingService:
        service = booking_service(session)
        await service.book_appointment(ALICE, booking_request(TEN, TEN_THIRTY, on_date=MONDAY))
        await service.book_appointment(ALICE, booking_request(NINE, NINE_THIRTY, on_date=TUESDAY))
        await service.book_appointment(BOB, booking_request(NINE, NINE_THIRTY, on_date=MONDAY))
        await service.update_status(STAFF, "SC-003", AppointmentStatus.CONFIRMED)
        return service

    async def test_my_appointments_newest_first(self, session):
        service = await self.seed_history(session)

        mine = await service.list_patient_appointments(PATIENT_ID)

        assert [a.appointment_code for a in mine] == ["SC-002", "SC-001"]

    async def test_staff_listing_and_daily_agenda(self, session):
        service = await self.seed_history(session)

        everything = await service.list_appointments(STAFF)
        monday = await service.list_appointments(STAFF, on_date=MONDAY)

        assert [a.appointment_code for a in everything] == ["SC-002", "SC-003", "SC-001"]
        assert [a.appointment_code for a in monday] == ["SC-003", "SC-001"]

    async def test_clients_cannot_list_everything(self, session):
        with pytest.raises(AuthorizationError):
            await booking_service(session).list_appointments(ALICE)

    async def test_get_appointment_visibility(self, session):
        service = await self.seed_history(session)

        assert (await service.get_appointment(ALICE, "SC-001")).patient_id == PATIENT_ID
        assert (await service.get_appointment(STAFF, "SC-003")).patient_id == PATIENT_2_ID
        with pytest.raises(AuthorizationError):
            await service.get_appointment(ALICE, "SC-003")

    async def test_client_dashboard(self, session):
        service = await self.seed_history(session)

        stats = await service.get_dashboard_stats(ALICE, today=MONDAY)

        assert stats.total_appointments == 2
        assert stats.pending_appointments == 2
        assert stats.upcoming_appointments == 0
        assert stats.completed_appointments == 0
        assert stats.today_appointments is None

    async def test_staff_and_admin_dashboard(self, session):
        service = await self.seed_history(session)

        staff_stats = await service.get_dashboard_stats(STAFF, today=MONDAY)
        admin_stats = await service.get_dashboard_stats(ADMIN, today=MONDAY)

        assert staff_stats.today_appointments == 2
        assert staff_stats.pending_appointments == 2
        assert staff_stats.upcoming_appointments == 1
        assert staff_stats.total_patients == 3
        assert staff_stats.total_doctors is None
        assert admin_stats.total_appointments == 3
        assert admin_stats.total_doctors == 3
        assert admin_stats.active_doctors == 2
