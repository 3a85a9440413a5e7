import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Text, Date
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workforce.core.database import Base

# Request type → shift type written into schedules on approval
SHIFT_TYPE_FOR_REQUEST = {
    "vacation": "vacation",
    "personal": "leave",
    "sick": "sick",
}


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    type: Mapped[str] = mapped_column(String(50), nullable=False)  # vacation | personal | sick
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    duration: Mapped[str] = mapped_column(String(20), default="full_day")  # full_day | morning | afternoon
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(50), default="pending")  # pending | approved | rejected
    approved_by: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="time_off_requests", foreign_keys=[user_id])

    @property
    def shift_type(self) -> str:
        return SHIFT_TYPE_FOR_REQUEST.get(self.type, "work")
