# app/api/v1/appointment_router.py
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from app.db.schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    DashboardStats,
)
from app.services.v1 import Actor, BookingService
from ..deps import get_actor, get_booking_service

appointment_router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
)

_BOOKING_ERRORS = {
    404: {"description": "Patient, doctor or service not found"},
    409: {"description": "DUPLICATE_BOOKING or SLOT_UNAVAILABLE"},
    422: {"description": "Missing field or start_time not before end_time"},
}


@appointment_router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
    description="""
    Clients book for themselves and get a **Pending** appointment.
    Staff and admins pass `patient_id`, may omit `service_id`, and get a
    **Confirmed** appointment.
    """,
    responses=_BOOKING_ERRORS,
)
async def book_appointment(
    payload: AppointmentCreate,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.book_appointment(actor, payload)


@appointment_router.get(
    "",
    response_model=list[AppointmentResponse],
    summary="List appointments",
    description="All appointments, newest date first, or one day's agenda when `date` is given.",
)
async def list_appointments(
    on_date: Optional[date] = Query(None, alias="date"),
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_appointments(actor, on_date)


@appointment_router.get(
    "/mine",
    response_model=list[AppointmentResponse],
    summary="My appointments",
)
async def list_my_appointments(
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_patient_appointments(actor.user_id)


@appointment_router.get(
    "/dashboard",
    response_model=DashboardStats,
    response_model_exclude_none=True,
    summary="Dashboard counters for the caller's role",
)
async def get_dashboard(
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_dashboard_stats(actor)


@appointment_router.get(
    "/{appointment_code}",
    response_model=AppointmentResponse,
    summary="Get an appointment",
    responses={404: {"description": "Appointment not found"}},
)
async def get_appointment(
    appointment_code: str,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_appointment(actor, appointment_code)


@appointment_router.post(
    "/{appointment_code}/cancel",
    response_model=AppointmentResponse,
    summary="Cancel my appointment",
    responses={
        403: {"description": "Not your appointment"},
        404: {"description": "Appointment not found"},
        409: {"description": "TOO_LATE_TO_CANCEL"},
        422: {"description": "Already completed or cancelled"},
    },
)
async def cancel_appointment(
    appointment_code: str,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.cancel_appointment(actor, appointment_code)


@appointment_router.patch(
    "/{appointment_code}/status",
    response_model=AppointmentResponse,
    summary="Set appointment status",
    description="Staff and admins only. Any status may be set from any other.",
    responses={404: {"description": "Appointment not found"}},
)
async def update_appointment_status(
    appointment_code: str,
    payload: AppointmentStatusUpdate,
    actor: Actor = Depends(get_actor),
    service: BookingService = Depends(get_booking_service),
):
    return await service.update_status(actor, appointment_code, payload.status)


__all__ = ["appointment_router"]
