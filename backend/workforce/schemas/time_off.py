from pydantic import BaseModel, model_validator
import uuid
from datetime import date, datetime
from typing import Literal


class TimeOffRequestCreate(BaseModel):
    type: Literal["vacation", "personal", "sick"]
    start_date: date
    end_date: date
    duration: Literal["full_day", "morning", "afternoon"] = "full_day"
    reason: str | None = None

    @model_validator(mode="after")
    def check_range(self) -> "TimeOffRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TimeOffDecision(BaseModel):
    reason: str | None = None


class TimeOffRequestOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    start_date: date
    end_date: date
    duration: str
    reason: str | None
    status: str
    approved_by: uuid.UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
