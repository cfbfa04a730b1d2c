# app/services/v1/catalog_service.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models import Service
from app.db.schemas import ServiceCreate
from common.logger import get_app_logger
from .access import Actor, ActorRole, require_role

logger = get_app_logger(__name__)


class CatalogService:
    """Bookable clinic services."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_services(self, active_only: bool = True) -> list[Service]:
        query = select(Service).order_by(Service.name)
        if active_only:
            query = query.where(Service.is_active.is_(True))
        result = await self.db.execute(
            query.execution_options(logging_token="CatalogService.list_services")
        )
        return list(result.scalars().all())

    async def add_service(self, actor: Actor, data: ServiceCreate) -> Service:
        require_role(actor, ActorRole.ADMIN)
        service = Service(**data.model_dump(), is_active=True)
        self.db.add(service)
        await self.db.flush()
        logger.info("Service added", service_id=service.service_id, name=service.name)
        return service


__all__ = ["CatalogService"]
