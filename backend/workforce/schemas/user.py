from pydantic import BaseModel, EmailStr, field_validator
import uuid
from datetime import datetime
from typing import Literal

Role = Literal["admin", "employee"]


class UserOut(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    name: str
    phone: str | None
    position: str | None
    role: str
    is_active: bool
    last_login: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str
    name: str
    phone: str | None = None
    position: str | None = None
    role: Role = "employee"
    is_active: bool = True

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return v

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be empty")
        return v


class UserUpdate(BaseModel):
    """Username is immutable; everything else may change."""
    email: EmailStr | None = None
    name: str | None = None
    phone: str | None = None
    position: str | None = None
    role: Role | None = None
    is_active: bool | None = None
    password: str | None = None


class BulkUserCreate(BaseModel):
    # Rows are validated one by one so a bad row does not sink the batch
    users: list[dict]


class BulkUserResult(BaseModel):
    created_count: int = 0
    failed_count: int = 0
    failed: list[str] = []
