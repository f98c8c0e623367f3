"""Durable blob row used by the database storage backend."""

from __future__ import annotations

from sqlalchemy import LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from frugal.models.base import Base, TimestampMixin


class StoredBlob(Base, TimestampMixin):
    __tablename__ = "frugal_blobs"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
