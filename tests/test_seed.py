"""Reference data and test patient seeding."""

import pytest_asyncio
from sqlalchemy import func, select

from app.db import DbManager
from app.db.models import Doctor, Patient, Schedule
from app.services.v1 import AvailabilityService
from scripts.db import PATIENT_DATA_TEMPLATE, seed_db, seed_reference_data
from tests.clinic_data import MONDAY


@pytest_asyncio.fixture
async def empty_db(tmp_path):
    manager = DbManager(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
    await manager.create_schema()
    yield manager
    await manager.dispose()


class TestSeedReferenceData:
    async def test_seeds_every_table(self, empty_db: DbManager):
        """Fresh database gets settings, doctors, services and weekday schedules."""
        inserted = await seed_reference_data(empty_db)

        assert inserted == {"clinic_settings": 1, "doctors": 3, "services": 3, "schedules": 15}

    async def test_second_run_inserts_nothing(self, empty_db: DbManager):
        await seed_reference_data(empty_db)

        inserted = await seed_reference_data(empty_db)

        assert inserted == {"clinic_settings": 0, "doctors": 0, "services": 0, "schedules": 0}
        async with empty_db.session() as session:
            assert (await session.execute(select(func.count()).select_from(Schedule))).scalar_one() == 15

    async def test_seeded_doctors_offer_monday_slots(self, empty_db: DbManager):
        await seed_reference_data(empty_db)

        async with empty_db.session() as session:
            doctor_id = (
                await session.execute(select(Doctor.doctor_id).where(Doctor.name == "Dr. Sarah Johnson"))
            ).scalar_one()
            slots = await AvailabilityService(session).compute_available_slots(doctor_id, MONDAY)

        assert len(slots) == 16
        assert slots[-1].label == "16:30 - 17:00"


class TestSeedPatients:
    async def test_generates_numbered_patients(self, empty_db: DbManager):
        generated = await seed_db(empty_db, {"patients": PATIENT_DATA_TEMPLATE}, records=3, start_index=5)

        assert [p.last_name for p in generated["patients"]] == ["Patient_5", "Patient_6", "Patient_7"]
        async with empty_db.session() as session:
            emails = (await session.execute(select(Patient.email).order_by(Patient.email))).scalars().all()
            visible = (
                await session.execute(select(func.count()).select_from(Patient).where(Patient.is_visible()))
            ).scalar_one()

        assert emails == ["patient+5@example.com", "patient+6@example.com", "patient+7@example.com"]
        assert visible == 3
