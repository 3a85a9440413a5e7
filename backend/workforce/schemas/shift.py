from pydantic import BaseModel, field_validator, model_validator
import uuid
from datetime import date as Date, time as Time
from typing import Literal, Optional

ShiftType = Literal["work", "vacation", "leave", "sick"]


def check_half_hour(value: Optional[Time]) -> Optional[Time]:
    """Shift boundaries sit on the half-hour grid: HH:00 or HH:30."""
    if value is None:
        return value
    if value.minute not in (0, 30) or value.second or value.microsecond:
        raise ValueError("time must be on a full or half hour (HH:00 or HH:30)")
    return value


class ShiftCreate(BaseModel):
    schedule_id: uuid.UUID
    user_id: uuid.UUID
    date: Date
    start_time: Time
    end_time: Time
    type: ShiftType = "work"
    notes: Optional[str] = None
    area: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def on_half_hour(cls, v):
        return check_half_hour(v)

    @model_validator(mode="after")
    def check_times(self) -> "ShiftCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ShiftUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    date: Optional[Date] = None
    start_time: Optional[Time] = None
    end_time: Optional[Time] = None
    type: Optional[ShiftType] = None
    notes: Optional[str] = None
    area: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def on_half_hour(cls, v):
        return check_half_hour(v)


class ShiftOut(BaseModel):
    id: uuid.UUID
    schedule_id: uuid.UUID
    user_id: uuid.UUID
    date: Date
    day_name: str
    start_time: Time
    end_time: Time
    type: str
    notes: Optional[str]
    area: Optional[str]

    model_config = {"from_attributes": True}


# ── Consolidated grid ────────────────────────────────────────────────────────

class ShiftBlockOut(BaseModel):
    start_time: Time
    end_time: Time
    type: str

    model_config = {"from_attributes": True}


class DayViewOut(BaseModel):
    user_id: uuid.UUID
    date: Date
    work_blocks: list[ShiftBlockOut]
    absences: list[str]
    work_hours: float

    model_config = {"from_attributes": True}
