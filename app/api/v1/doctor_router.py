# app/api/v1/doctor_router.py
from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db import get_db
from app.db.schemas import DoctorCreate, DoctorResponse, TimeSlotResponse
from app.services.v1 import Actor, AvailabilityService, DoctorService
from ..deps import get_actor, get_availability_service

doctor_router = APIRouter(
    prefix="/doctors",
    tags=["Doctors"],
)


@doctor_router.get(
    "",
    response_model=list[DoctorResponse],
    summary="List doctors",
)
async def list_doctors(
    active_only: bool = Query(False, description="Only doctors accepting bookings"),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await DoctorService(db).list_doctors(active_only=active_only)


@doctor_router.post(
    "",
    response_model=DoctorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a doctor",
    responses={403: {"description": "Admins only"}},
)
async def add_doctor(
    payload: DoctorCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await DoctorService(db).add_doctor(actor, payload)


@doctor_router.post(
    "/{doctor_id}/toggle",
    response_model=DoctorResponse,
    summary="Activate or deactivate a doctor",
    responses={404: {"description": "Doctor not found"}},
)
async def toggle_doctor(
    doctor_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await DoctorService(db).toggle_status(actor, doctor_id)


@doctor_router.delete(
    "/{doctor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a doctor without appointments",
    responses={
        404: {"description": "Doctor not found"},
        422: {"description": "Doctor still has appointments"},
    },
)
async def delete_doctor(
    doctor_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> None:
    await DoctorService(db).delete_doctor(actor, doctor_id)


@doctor_router.get(
    "/{doctor_id}/slots",
    response_model=list[TimeSlotResponse],
    summary="Candidate time slots for a date",
    description="""
    Slots generated from the doctor's schedule for the weekday of `date`,
    using the clinic appointment duration. Already booked slots are still
    listed; booking one of them fails with SLOT_UNAVAILABLE.
    """,
)
async def get_available_slots(
    doctor_id: str,
    on_date: date = Query(..., alias="date", description="YYYY-MM-DD"),
    actor: Actor = Depends(get_actor),
    availability: AvailabilityService = Depends(get_availability_service),
):
    slots = await availability.compute_available_slots(doctor_id, on_date)
    return [TimeSlotResponse.model_validate(slot) for slot in slots]


__all__ = ["doctor_router"]
