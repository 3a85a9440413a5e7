from pydantic import BaseModel, field_validator
import base64
import binascii
import uuid
from datetime import datetime
from typing import Literal


class DocumentCreate(BaseModel):
    user_id: uuid.UUID
    type: Literal["payslip", "tax_document"]
    period: str
    filename: str
    file_data: str  # base64 encoded PDF

    @field_validator("file_data")
    @classmethod
    def must_be_base64(cls, v: str) -> str:
        # Data URLs from the browser carry a "data:application/pdf;base64," prefix
        payload = v.split(",", 1)[1] if v.startswith("data:") else v
        try:
            base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("file_data must be base64 encoded")
        return v


class DocumentOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    period: str
    filename: str
    file_data: str
    uploaded_by: uuid.UUID
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class DocumentSummaryOut(BaseModel):
    """Listing view without the payload."""
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    period: str
    filename: str
    uploaded_by: uuid.UUID
    uploaded_at: datetime

    model_config = {"from_attributes": True}
