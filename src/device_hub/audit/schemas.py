"""Pydantic schemas for audit ledger API responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class HistoryEntryResponse(BaseModel):
    id: int
    action: str
    timestamp: datetime
    actor_id: Optional[int] = None
    username: Optional[str] = None

    model_config = {"from_attributes": True}


class HistoryResponse(BaseModel):
    enroll_id: str
    entries: list[HistoryEntryResponse]


class ChainVerification(BaseModel):
    valid: bool
    entries_checked: int
    break_at: Optional[int] = None
