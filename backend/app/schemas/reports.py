from __future__ import annotations

from pydantic import BaseModel


class BatchResultRead(BaseModel):
    sent: int
    skipped: int
    failed: int
