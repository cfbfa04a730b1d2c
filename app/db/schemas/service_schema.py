# app/db/schemas/service_schema.py
from pydantic import BaseModel, Field, ConfigDict
from decimal import Decimal


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field("", max_length=1000)
    price: Decimal = Field(..., ge=0, le=10000, max_digits=10, decimal_places=2)
    duration_minutes: int = Field(30, gt=0, le=480)


class ServiceResponse(ServiceCreate):
    model_config = ConfigDict(from_attributes=True)

    service_id: str
    is_active: bool
