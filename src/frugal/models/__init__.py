"""SQLAlchemy models. Import all models here so metadata discovers them."""

from frugal.models.base import Base
from frugal.models.blob import StoredBlob

__all__ = [
    "Base",
    "StoredBlob",
]
