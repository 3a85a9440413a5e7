from pydantic import BaseModel, model_validator
import uuid
from datetime import date, datetime


class ScheduleCreate(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_range(self) -> "ScheduleCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ScheduleUpdate(BaseModel):
    start_date: date | None = None
    end_date: date | None = None


class ScheduleOut(BaseModel):
    id: uuid.UUID
    start_date: date
    end_date: date
    is_published: bool
    published_at: datetime | None
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ScheduleResetOut(BaseModel):
    schedule_id: uuid.UUID
    deleted: int
