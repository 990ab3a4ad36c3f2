from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class File(BaseModel):
    """
    A file stored in a course, group or user folder.
    https://canvas.instructure.com/doc/api/files.html
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    folder_id: int | None = None
    url: str | None = None
    uuid: str | None = None

    filename: str | None = None
    display_name: str

    content_type: str | None = Field(default=None, alias='content-type')
    size: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    modified_at: datetime | None = None

    locked: bool = False
    unlock_at: datetime | None = None
    hidden: bool = False
    lock_at: datetime | None = None

    hidden_for_user: bool = False
    thumbnail_url: str | None = None
    preview_url: str | None = None
    mime_class: str | None = None
    media_entry_id: str | None = None
    locked_for_user: bool = False
    lock_info: Any = None
    lock_explanation: str | None = None

    @property
    def name(self) -> str:
        return self.display_name
