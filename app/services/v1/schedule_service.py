# app/services/v1/schedule_service.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import Doctor, Schedule
from app.db.schemas import ScheduleCreate, ScheduleUpdate
from common.api_error import BookingValidationError, NotFoundError
from common.logger import get_app_logger
from .access import Actor, STAFF_ROLES, require_role

logger = get_app_logger(__name__)


class ScheduleService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_schedules(self) -> list[Schedule]:
        """Active schedules ordered by doctor name, weekday, then start time."""
        query = (
            select(Schedule, Doctor.name)
            .join(Doctor, Doctor.doctor_id == Schedule.doctor_id)
            .where(Schedule.is_active.is_(True))
            .execution_options(logging_token="ScheduleService.list_schedules")
        )
        rows = (await self.db.execute(query)).all()
        # Weekday in calendar order; the enum column would sort alphabetically
        rows.sort(key=lambda row: (row[1], row[0].day_of_week.iso_number, row[0].start_time))
        return [schedule for schedule, _ in rows]

    async def get_schedule(self, schedule_id: str) -> Schedule:
        schedule = await self.db.get(Schedule, schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule", schedule_id)
        return schedule

    async def create_schedule(self, actor: Actor, data: ScheduleCreate) -> Schedule:
        require_role(actor, *STAFF_ROLES)
        if await self.db.get(Doctor, data.doctor_id) is None:
            raise NotFoundError("Doctor", data.doctor_id)

        schedule = Schedule(**data.model_dump(), is_active=True)
        self.db.add(schedule)
        await self.db.flush()
        logger.info(
            "Schedule created",
            schedule_id=schedule.schedule_id,
            doctor_id=schedule.doctor_id,
            day_of_week=schedule.day_of_week.value,
        )
        return schedule

    async def update_schedule(
        self, actor: Actor, schedule_id: str, data: ScheduleUpdate
    ) -> Schedule:
        require_role(actor, *STAFF_ROLES)
        schedule = await self.get_schedule(schedule_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        start = changes.get("start_time", schedule.start_time)
        end = changes.get("end_time", schedule.end_time)
        if start >= end:
            raise BookingValidationError("start_time must be before end_time")

        for field, value in changes.items():
            setattr(schedule, field, value)
        await self.db.flush()
        logger.info("Schedule updated", schedule_id=schedule_id, fields=sorted(changes))
        return schedule

    async def delete_schedule(self, actor: Actor, schedule_id: str) -> None:
        require_role(actor, *STAFF_ROLES)
        schedule = await self.get_schedule(schedule_id)
        await self.db.delete(schedule)
        await self.db.flush()
        logger.info("Schedule deleted", schedule_id=schedule_id)


__all__ = ["ScheduleService"]
