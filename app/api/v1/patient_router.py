# app/api/v1/patient_router.py
from fastapi import APIRouter, Depends, status
from app.db.schemas import PatientResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.services.v1 import Actor, PatientService
from app.db import get_db
from ..deps import get_actor

patient_router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
)


@patient_router.get(
    "",
    response_model=list[PatientResponse],
    summary="List patients",
    description="Approved, active, not deleted patients ordered by last then first name. Staff and admins only.",
)
async def list_patients(
    actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)
):
    return await PatientService(db).list_patients(actor)


@patient_router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    status_code=status.HTTP_200_OK,
    summary="Get patient details",
    description="""
    Fetches the profile of a visible patient.

    Clients can only read their own profile.
    """,
    responses={
        403: {"description": "Not your profile"},
        404: {"description": "Patient not found"},
    },
)
async def get_patient(
    patient_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await PatientService(db).get_patient(actor, patient_id)


@patient_router.delete(
    "/{patient_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Soft-delete a patient",
    responses={404: {"description": "Patient not found"}},
)
async def delete_patient(
    patient_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> None:
    await PatientService(db).soft_delete(actor, patient_id)


__all__ = ["patient_router"]
