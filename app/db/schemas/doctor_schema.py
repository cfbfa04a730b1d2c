# app/db/schemas/doctor_schema.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List


class DoctorBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    specialization: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=254)
    phone: str = Field(..., max_length=30)


class DoctorCreate(DoctorBase):
    @classmethod
    def seed_records(
        cls,
        template: dict,
        records: int,
        start_index: int = 0,
    ) -> List["DoctorCreate"]:
        result = []
        for i in range(start_index, start_index + records):
            record = cls(
                name=f"{template['name']} {i}",
                specialization=template["specialization"],
                email=template["email"].replace("@", f"+{i}@"),
                phone=f"{template['phone']}-{i:04d}",
            )
            result.append(record)
        return result


class DoctorResponse(DoctorBase):
    model_config = ConfigDict(from_attributes=True)

    doctor_id: str
    doctor_code: str
    is_active: bool
    created_at: datetime
