from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: str
    type: str
    title: str
    message: str
    link: str | None
    read: bool
    created_at: datetime
