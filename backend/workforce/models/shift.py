import uuid
from datetime import date, datetime, time, timedelta

from sqlalchemy import String, ForeignKey, Time, Date, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workforce.core.database import Base

SHIFT_TYPES = ("work", "vacation", "leave", "sick")
ABSENCE_TYPES = ("vacation", "leave", "sick")

_DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    schedule_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    type: Mapped[str] = mapped_column(String(20), default="work")  # work | vacation | leave | sick
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    area: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Relationships
    schedule: Mapped["Schedule"] = relationship(back_populates="shifts")
    user: Mapped["User"] = relationship(back_populates="shifts")

    @property
    def day_name(self) -> str:
        return _DAY_NAMES[self.date.weekday()]

    @property
    def duration_hours(self) -> float:
        start = datetime.combine(self.date, self.start_time)
        end = datetime.combine(self.date, self.end_time)
        if end < start:
            end += timedelta(days=1)
        return (end - start).total_seconds() / 3600
