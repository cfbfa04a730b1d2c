# app/db/schemas/patient_schema.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, List


class PatientBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=254)
    phone: Optional[str] = Field(None, max_length=30)


class PatientCreate(PatientBase):
    # Seeded patients are already approved by user management
    is_approved: bool = True
    is_active: bool = True

    @classmethod
    def seed_records(
        cls,
        template: dict,
        records: int,
        start_index: int = 0,
    ) -> List["PatientCreate"]:
        result = []
        for i in range(start_index, start_index + records):
            local, _, domain = template["email"].partition("@")
            record = cls(
                first_name=template["first_name"],
                last_name=f"{template['last_name']}_{i}",
                email=f"{local}+{i}@{domain}",
                phone=f"{template['phone']}-{i:04d}",
                is_approved=template.get("is_approved", True),
                is_active=template.get("is_active", True),
            )
            result.append(record)
        return result


class PatientResponse(PatientBase):
    model_config = ConfigDict(
        from_attributes=True
    )  # Tells Pydantic to read SQLAlchemy objects

    patient_id: str
    patient_code: str
    created_at: datetime
