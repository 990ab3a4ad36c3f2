from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Folder(BaseModel):
    """
    A folder in a course, group or user file tree.
    https://canvas.instructure.com/doc/api/files.html#Folder
    """
    id: int
    parent_folder_id: int | None = None  # None for the root folder
    foldername: str = Field(alias='name')
    full_name: str

    files_url: str | None = None
    folders_url: str | None = None

    context_type: str | None = None  # 'Course', 'Group' or 'User'
    context_id: int | None = None

    position: int | None = None
    files_count: int = 0
    folders_count: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None
    lock_at: datetime | None = None
    unlock_at: datetime | None = None
    locked: bool = False
    hidden: bool | None = None
    hidden_for_user: bool = False
    locked_for_user: bool = False
    for_submissions: bool = False

    @property
    def name(self) -> str:
        return self.foldername

    @property
    def is_root(self) -> bool:
        return self.parent_folder_id is None
