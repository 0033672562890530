"""SQLAlchemy ORM models."""

from house_help.models.base import Base, TimestampMixin
from house_help.models.blob import AppBlob
from house_help.models.share_link import WorkerShareLink

__all__ = ["AppBlob", "Base", "TimestampMixin", "WorkerShareLink"]
