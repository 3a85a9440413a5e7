import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from workforce.core.database import Base


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    type: Mapped[str] = mapped_column(String(50), nullable=False)  # payslip | tax_document
    period: Mapped[str] = mapped_column(String(50), nullable=False)  # "June 2024", "2023"
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_data: Mapped[str] = mapped_column(Text, nullable=False)  # base64 encoded PDF

    uploaded_by: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    @property
    def label(self) -> str:
        return "payslip" if self.type == "payslip" else "tax document"
