"""Per-user document table for the SQL document store."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from work_tracker.models.base import Base, TimestampMixin


class UserDocument(Base, TimestampMixin):
    """One snapshot document per (collection, user key).

    The payload is canonical JSON text so identical snapshots are stored
    byte-for-byte identically.
    """

    __tablename__ = "user_document"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
