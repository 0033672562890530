"""Remote ledger blobs, one row per owner."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from house_help.models.base import Base, JSONDocument


class AppBlob(Base):
    """Whole ledger document stored under an owner key."""

    __tablename__ = "app_blobs"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
