from datetime import datetime, timezone
import uuid

from sqlalchemy import JSON, Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inspection_api.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LabelTemplate(Base):
    __tablename__ = "label_templates"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    label_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # List of element dicts (text, barcode, ...) positioned on the sticker.
    fields: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    paper_size: Mapped[str] = mapped_column(String(50), nullable=False)
    # Pixels at 96 DPI, derived from paper_size.
    width: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    copies: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
