# app/services/v1/doctor_service.py
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import Appointment, Doctor, Schedule
from app.db.schemas import DoctorCreate
from common.api_error import BookingValidationError, NotFoundError
from common.logger import get_app_logger
from .access import Actor, ActorRole, require_role

logger = get_app_logger(__name__)


class DoctorService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_doctors(self, active_only: bool = False) -> list[Doctor]:
        query = select(Doctor).order_by(Doctor.name)
        if active_only:
            query = query.where(Doctor.is_active.is_(True))
        result = await self.db.execute(
            query.execution_options(logging_token="DoctorService.list_doctors")
        )
        return list(result.scalars().all())

    async def get_doctor(self, doctor_id: str) -> Doctor:
        doctor = await self.db.get(Doctor, doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor", doctor_id)
        return doctor

    async def add_doctor(self, actor: Actor, data: DoctorCreate) -> Doctor:
        require_role(actor, ActorRole.ADMIN)
        doctor = Doctor(**data.model_dump(), is_active=True)
        self.db.add(doctor)
        await self.db.flush()
        logger.info("Doctor added", doctor_id=doctor.doctor_id, name=doctor.name)
        return doctor

    async def toggle_status(self, actor: Actor, doctor_id: str) -> Doctor:
        require_role(actor, ActorRole.ADMIN)
        doctor = await self.get_doctor(doctor_id)
        doctor.is_active = not doctor.is_active
        await self.db.flush()
        logger.info("Doctor status toggled", doctor_id=doctor_id, is_active=doctor.is_active)
        return doctor

    async def delete_doctor(self, actor: Actor, doctor_id: str) -> None:
        """Refused while any appointment references the doctor; schedules go with it."""
        require_role(actor, ActorRole.ADMIN)
        doctor = await self.get_doctor(doctor_id)

        appointment_count = (
            await self.db.execute(
                select(func.count())
                .select_from(Appointment)
                .where(Appointment.doctor_id == doctor_id)
            )
        ).scalar_one()
        if appointment_count:
            raise BookingValidationError(
                f"Cannot delete doctor {doctor.name}: {appointment_count} appointment(s) "
                "reference this doctor. Deactivate the doctor instead."
            )

        schedules = (
            await self.db.execute(select(Schedule).where(Schedule.doctor_id == doctor_id))
        ).scalars().all()
        for schedule in schedules:
            await self.db.delete(schedule)
        await self.db.delete(doctor)
        await self.db.flush()
        logger.info("Doctor deleted", doctor_id=doctor_id, schedules_removed=len(schedules))


__all__ = ["DoctorService"]
