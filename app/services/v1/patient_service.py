# app/services/v1/patient_service.py
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import Patient, utc_now
from common.api_error import AuthorizationError, NotFoundError
from common.logger import get_app_logger
from .access import Actor, ActorRole, STAFF_ROLES, require_role
from sqlalchemy import select

logger = get_app_logger(__name__)


class PatientService:
    """Read side of patient accounts. Every query goes through Patient.is_visible()."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_patient_profile(self, patient_id: str) -> Patient:
        """
        Fetches a visible patient.
        Note: We use 'select' explicitly to stay in control of
        what is loaded and filtered.
        """
        query = (
            select(Patient)
            .where(Patient.patient_id == patient_id, Patient.is_visible())
            .execution_options(logging_token="PatientService.get_patient_profile")
        )

        patient = (await self.db.execute(query)).scalar_one_or_none()
        if patient is None:
            raise NotFoundError("Patient", patient_id)
        return patient

    async def get_patient(self, actor: Actor, patient_id: str) -> Patient:
        """Staff see any visible patient; clients only themselves."""
        if not actor.role.is_staff and actor.user_id != patient_id:
            raise AuthorizationError("You can only view your own profile")
        return await self.get_patient_profile(patient_id)

    async def list_patients(self, actor: Actor) -> list[Patient]:
        require_role(actor, *STAFF_ROLES)
        query = (
            select(Patient)
            .where(Patient.is_visible())
            .order_by(Patient.last_name, Patient.first_name)
            .execution_options(logging_token="PatientService.list_patients")
        )
        return list((await self.db.execute(query)).scalars().all())

    async def soft_delete(self, actor: Actor, patient_id: str) -> Patient:
        """Hide the patient everywhere; appointments stay for the record."""
        require_role(actor, ActorRole.ADMIN)
        patient = await self.get_patient_profile(patient_id)
        patient.is_deleted = True
        patient.deleted_at = utc_now()
        await self.db.flush()
        logger.info("Patient soft-deleted", patient_id=patient_id)
        return patient


__all__ = ["PatientService"]
