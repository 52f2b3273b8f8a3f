"""SQLAlchemy ORM models for Sharebox."""

from sharebox.models.base import Base
from sharebox.models.file_record import FileRecord
from sharebox.models.user import User

__all__ = [
    "Base",
    "FileRecord",
    "User",
]
