# app/db/schemas/schedule_schemas.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from datetime import time
from typing import Optional
from ..models import DayOfWeek


class ScheduleBase(BaseModel):
    day_of_week: DayOfWeek
    start_time: time = Field(..., description="Local clinic time, e.g. 09:00")
    end_time: time = Field(..., description="Local clinic time, e.g. 17:00")
    max_appointments: int = Field(10, ge=1, le=200)

    @model_validator(mode="after")
    def check_time_order(self) -> "ScheduleBase":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class ScheduleCreate(ScheduleBase):
    doctor_id: str = Field(..., min_length=1, description="The id of the doctor")


class ScheduleUpdate(BaseModel):
    # All fields optional for PUT-as-patch; time order is checked by the service
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    max_appointments: Optional[int] = Field(None, ge=1, le=200)
    is_active: Optional[bool] = None


class ScheduleResponse(ScheduleBase):
    model_config = ConfigDict(from_attributes=True)

    schedule_id: str
    doctor_id: str
    is_active: bool
