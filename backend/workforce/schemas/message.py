from pydantic import BaseModel, field_validator
import uuid
from datetime import datetime


class MessageCreate(BaseModel):
    to_user_id: uuid.UUID
    subject: str
    content: str
    related_to_shift_id: uuid.UUID | None = None

    @field_validator("subject", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class MessageOut(BaseModel):
    id: uuid.UUID
    from_user_id: uuid.UUID
    to_user_id: uuid.UUID
    subject: str
    content: str
    is_read: bool
    related_to_shift_id: uuid.UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}
