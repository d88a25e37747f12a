"""SQLAlchemy ORM model for the Inspection entity."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fieldlogger.infrastructure.database.base import Base


class InspectionModel(Base):
    """ORM model — maps to the 'inspections' table."""

    __tablename__ = "inspections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    technician: Mapped[str] = mapped_column(String(255), nullable=False)
    findings: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    # Stored as UTC; SQLite drops the offset so readers re-attach it
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_inspections_status", "status"),
        Index("ix_inspections_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<InspectionModel(id={self.id}, status='{self.status}')>"
