from pydantic import BaseModel
import uuid
from datetime import datetime


class NotificationOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    message: str
    is_read: bool
    data: dict | None
    created_at: datetime

    model_config = {"from_attributes": True}
