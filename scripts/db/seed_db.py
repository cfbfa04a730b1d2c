# scripts/db/seed_db.py
from typing import Any
from sqlalchemy import select, func

from app.db import DbManager
from app.db.models import ClinicSettings, DayOfWeek, Doctor, Patient, Schedule, Service
from app.db.schemas import ClinicSettingsBase, DoctorCreate, PatientCreate, ServiceCreate
from common.logger import get_app_logger
from .data_template import (
    CLINIC_SETTINGS_DATA,
    DOCTORS_DATA,
    SERVICES_DATA,
    WEEKLY_SCHEDULE_DATA,
)

logger = get_app_logger(__name__)

SCHEMA_MAP = {
    "doctors": DoctorCreate,
    "patients": PatientCreate,
}

MODEL_MAP = {
    "doctors": Doctor,
    "patients": Patient,
}

WORKING_DAYS = (
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
)


async def _is_empty(session: Any, model: Any) -> bool:
    count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
    return count == 0


async def seed_reference_data(db_manager: DbManager) -> dict[str, int]:
    """
    Seed clinic settings, doctors, services and Mon-Fri schedules.

    Each table is only seeded while it is empty, so running this twice is safe.

    Returns:
        Dict mapping table names to the number of rows inserted
    """
    inserted = {"clinic_settings": 0, "doctors": 0, "services": 0, "schedules": 0}

    async with db_manager.session() as session:
        if await _is_empty(session, ClinicSettings):
            settings = ClinicSettingsBase(**CLINIC_SETTINGS_DATA)
            session.add(ClinicSettings(settings_id=1, **settings.model_dump()))
            inserted["clinic_settings"] = 1

        if await _is_empty(session, Doctor):
            doctors = [Doctor(**DoctorCreate(**data).model_dump()) for data in DOCTORS_DATA]
            session.add_all(doctors)
            inserted["doctors"] = len(doctors)

        if await _is_empty(session, Service):
            services = [Service(**ServiceCreate(**data).model_dump()) for data in SERVICES_DATA]
            session.add_all(services)
            inserted["services"] = len(services)

        await session.flush()

        if await _is_empty(session, Schedule):
            doctor_ids = (await session.execute(select(Doctor.doctor_id))).scalars().all()
            schedules = [
                Schedule(doctor_id=doctor_id, day_of_week=day, **WEEKLY_SCHEDULE_DATA)
                for doctor_id in doctor_ids
                for day in WORKING_DAYS
            ]
            session.add_all(schedules)
            inserted["schedules"] = len(schedules)
        # Commit happens automatically on context exit

    logger.info("Reference data seeded", **inserted)
    return inserted


async def seed_db(
    db_manager: DbManager,
    data_template: dict[str, dict],
    records: int,
    start_index: int = 0,
):
    """
    Seed database with generated records.

    Args:
        db_manager: Initialized DbManager instance
        data_template: Dict mapping table names to template dicts
        records: Number of records to generate per table
        start_index: Starting index for record generation

    Returns:
        Dict mapping table names to lists of generated Pydantic schemas
    """
    all_records_by_table = {}

    for table, template in data_template.items():
        schema_cls = SCHEMA_MAP[table]
        model_cls = MODEL_MAP[table]

        schema_records = schema_cls.seed_records(template, records, start_index)  # type: ignore[attr-defined]
        all_records_by_table[table] = schema_records

        orm_objects = [model_cls(**record.model_dump()) for record in schema_records]

        async with db_manager.session() as session:
            session.add_all(orm_objects)
            # Commit happens automatically on context exit

        logger.info("Records seeded", table=table, records=len(orm_objects))

    return all_records_by_table
