# app/api/v1/service_router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db import get_db
from app.db.schemas import ServiceCreate, ServiceResponse
from app.services.v1 import Actor, CatalogService
from ..deps import get_actor

service_router = APIRouter(
    prefix="/services",
    tags=["Services"],
)


@service_router.get("", response_model=list[ServiceResponse], summary="List active services")
async def list_services(
    actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)
):
    return await CatalogService(db).list_services()


@service_router.post(
    "",
    response_model=ServiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a service",
    responses={403: {"description": "Admins only"}},
)
async def add_service(
    payload: ServiceCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await CatalogService(db).add_service(actor, payload)


__all__ = ["service_router"]
