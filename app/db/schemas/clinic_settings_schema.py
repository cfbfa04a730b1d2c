# app/db/schemas/clinic_settings_schema.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from datetime import time


class ClinicSettingsBase(BaseModel):
    clinic_name: str = Field("Smart Clinic", min_length=1, max_length=100)
    opening_time: time = time(9, 0)
    closing_time: time = time(17, 0)
    appointment_duration_minutes: int = Field(30, gt=0, le=480)
    max_appointments_per_day_per_patient: int = Field(1, ge=1)
    holidays: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_opening_hours(self) -> "ClinicSettingsBase":
        if self.opening_time >= self.closing_time:
            raise ValueError("opening_time must be before closing_time")
        return self


class ClinicSettingsResponse(ClinicSettingsBase):
    model_config = ConfigDict(from_attributes=True)
