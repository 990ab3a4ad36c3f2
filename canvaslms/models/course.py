from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Course(BaseModel):
    """A Canvas course. Only the fields needed to reach its files are modelled."""
    id: int
    name: str | None = None
    course_code: str | None = None
    uuid: str | None = None
    workflow_state: str | None = None  # 'unpublished', 'available', 'completed' or 'deleted'
    account_id: int | None = None
    root_account_id: int | None = None
    enrollment_term_id: int | None = None
    created_at: datetime | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    locale: str | None = None
    time_zone: str | None = None
