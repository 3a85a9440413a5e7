from pydantic import BaseModel, Field, field_validator, model_validator
import uuid
from datetime import date as Date, time as Time

from workforce.schemas.schedule import ScheduleOut
from workforce.schemas.shift import ShiftOut, check_half_hour


class GenerationSettings(BaseModel):
    min_hours_per_employee: float = Field(20, ge=0)
    max_hours_per_employee: float = Field(40, ge=0)
    start_hour: Time = Time(9, 0)
    end_hour: Time = Time(18, 0)
    distribute_evenly: bool = True
    respect_time_off_requests: bool = True

    @field_validator("start_hour", "end_hour")
    @classmethod
    def on_half_hour(cls, v):
        return check_half_hour(v)

    @model_validator(mode="after")
    def normalise(self) -> "GenerationSettings":
        # The engine expects min <= max; an inverted pair is swapped here
        if self.min_hours_per_employee > self.max_hours_per_employee:
            self.min_hours_per_employee, self.max_hours_per_employee = (
                self.max_hours_per_employee, self.min_hours_per_employee,
            )
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be after start_hour")
        return self


class GenerationRequest(BaseModel):
    start_date: Date
    end_date: Date
    employee_ids: list[uuid.UUID] = Field(min_length=1)
    settings: GenerationSettings = GenerationSettings()

    @model_validator(mode="after")
    def check_range(self) -> "GenerationRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class GeneratedShiftOut(BaseModel):
    user_id: uuid.UUID
    date: Date
    start_time: Time
    end_time: Time
    type: str

    model_config = {"from_attributes": True}


class UnmetEmployeeOut(BaseModel):
    user_id: uuid.UUID
    target_hours: float
    assigned_hours: float
    skipped_days: list[Date]

    model_config = {"from_attributes": True}


class PreviewOut(BaseModel):
    start_date: Date
    end_date: Date
    is_published: bool = False
    status: str  # assigned | partially_assigned
    shifts: list[GeneratedShiftOut]
    unmet: list[UnmetEmployeeOut]


class GenerateOut(BaseModel):
    schedule: ScheduleOut
    status: str
    shifts: list[ShiftOut]
    unmet: list[UnmetEmployeeOut]
