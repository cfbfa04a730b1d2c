"""Shared clinic fixture data: fixed ids, actors and a seeding helper."""

from datetime import date, datetime, time
from decimal import Decimal

from app.db import DbManager
from app.db.models import DayOfWeek, Doctor, Patient, Schedule, Service
from app.services.v1 import Actor, ActorRole

MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
SUNDAY = date(2030, 1, 6)

# Early on the Monday; appointments that day are hours away
NOW = datetime(2030, 1, 7, 6, 0)

DOCTOR_ID = "doctor-johnson"
DOCTOR_2_ID = "doctor-chen"
INACTIVE_DOCTOR_ID = "doctor-davis"

SERVICE_ID = "service-general"
SERVICE_2_ID = "service-specialist"
INACTIVE_SERVICE_ID = "service-retired"

PATIENT_ID = "patient-alice"
PATIENT_2_ID = "patient-bob"
PATIENT_3_ID = "patient-carol"
HIDDEN_PATIENT_ID = "patient-unapproved"

ALICE = Actor(PATIENT_ID, ActorRole.CLIENT)
BOB = Actor(PATIENT_2_ID, ActorRole.CLIENT)
CAROL = Actor(PATIENT_3_ID, ActorRole.CLIENT)
STAFF = Actor("staff-1", ActorRole.STAFF)
ADMIN = Actor("admin-1", ActorRole.ADMIN)

NINE = time(9, 0)
NINE_THIRTY = time(9, 30)
TEN = time(10, 0)
TEN_THIRTY = time(10, 30)


async def seed_clinic(db_manager: DbManager) -> None:
    """Committed reference data: three doctors, three services, four patients."""
    async with db_manager.session() as session:
        session.add_all(
            [
                Doctor(
                    doctor_id=DOCTOR_ID,
                    name="Dr. Sarah Johnson",
                    specialization="Cardiology",
                    email="sarah.johnson@clinic.com",
                    phone="555-0101",
                ),
                Doctor(
                    doctor_id=DOCTOR_2_ID,
                    name="Dr. Michael Chen",
                    specialization="Dermatology",
                    email="michael.chen@clinic.com",
                    phone="555-0102",
                ),
                Doctor(
                    doctor_id=INACTIVE_DOCTOR_ID,
                    name="Dr. Emily Davis",
                    specialization="Pediatrics",
                    email="emily.davis@clinic.com",
                    phone="555-0103",
                    is_active=False,
                ),
                Service(
                    service_id=SERVICE_ID,
                    name="General Consultation",
                    price=Decimal("100.00"),
                    duration_minutes=30,
                ),
                Service(
                    service_id=SERVICE_2_ID,
                    name="Specialist Consultation",
                    price=Decimal("200.00"),
                    duration_minutes=45,
                ),
                Service(
                    service_id=INACTIVE_SERVICE_ID,
                    name="Retired Service",
                    price=Decimal("10.00"),
                    is_active=False,
                ),
                Patient(
                    patient_id=PATIENT_ID,
                    first_name="Alice",
                    last_name="Walker",
                    email="alice@example.com",
                    is_approved=True,
                    is_active=True,
                ),
                Patient(
                    patient_id=PATIENT_2_ID,
                    first_name="Bob",
                    last_name="Adams",
                    email="bob@example.com",
                    is_approved=True,
                    is_active=True,
                ),
                Patient(
                    patient_id=PATIENT_3_ID,
                    first_name="Carol",
                    last_name="Young",
                    email="carol@example.com",
                    is_approved=True,
                    is_active=True,
                ),
                Patient(
                    patient_id=HIDDEN_PATIENT_ID,
                    first_name="Dan",
                    last_name="Pending",
                    email="dan@example.com",
                    is_approved=False,
                    is_active=True,
                ),
            ]
        )
        await session.flush()

        for day in (
            DayOfWeek.MONDAY,
            DayOfWeek.TUESDAY,
            DayOfWeek.WEDNESDAY,
            DayOfWeek.THURSDAY,
            DayOfWeek.FRIDAY,
        ):
            session.add(
                Schedule(
                    doctor_id=DOCTOR_ID,
                    day_of_week=day,
                    start_time=NINE,
                    end_time=time(17, 0),
                    max_appointments=16,
                )
            )
        session.add(
            Schedule(
                doctor_id=DOCTOR_2_ID,
                day_of_week=DayOfWeek.MONDAY,
                start_time=time(13, 0),
                end_time=time(15, 0),
            )
        )
