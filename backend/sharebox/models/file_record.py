"""File record: an uploaded file or a shared local folder, tagged by is_folder."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from sharebox.models.base import Base


class FileRecord(Base):
    __tablename__ = "files"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    owner_email: Mapped[str] = mapped_column(String(320), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    size: Mapped[int] = mapped_column(Integer, default=0)
    mime_type: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    shared_with: Mapped[list[str]] = mapped_column(JSON, default=list)
    allow_download: Mapped[bool] = mapped_column(Boolean, default=False)
    is_folder: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    # Folder only
    structure: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    is_connected: Mapped[bool] = mapped_column(Boolean, default=False)
    connected_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_connected: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        kind = "folder" if self.is_folder else "file"
        return f"<FileRecord(id={self.id}, {kind}, name='{self.name}')>"
