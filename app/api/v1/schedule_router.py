# app/api/v1/schedule_router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db import get_db
from app.db.schemas import ScheduleCreate, ScheduleResponse, ScheduleUpdate
from app.services.v1 import Actor, ScheduleService
from ..deps import get_actor

schedule_router = APIRouter(
    prefix="/schedules",
    tags=["Schedules"],
)


@schedule_router.get("", response_model=list[ScheduleResponse], summary="List active schedules")
async def list_schedules(
    actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)
):
    return await ScheduleService(db).list_schedules()


@schedule_router.post(
    "",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a weekly schedule",
    responses={404: {"description": "Doctor not found"}},
)
async def create_schedule(
    payload: ScheduleCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await ScheduleService(db).create_schedule(actor, payload)


@schedule_router.put(
    "/{schedule_id}",
    response_model=ScheduleResponse,
    summary="Edit a schedule",
    responses={404: {"description": "Schedule not found"}},
)
async def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await ScheduleService(db).update_schedule(actor, schedule_id, payload)


@schedule_router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a schedule",
)
async def delete_schedule(
    schedule_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> None:
    await ScheduleService(db).delete_schedule(actor, schedule_id)


__all__ = ["schedule_router"]
