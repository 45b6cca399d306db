# app/db/models/security/suspicious_event.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

from ....db.types import UTCDateTime
from ....utils import utcnow


class SuspiciousEvent(SQLModel, table=True):
    __tablename__ = "suspicious_events"
    id: Optional[int] = Field(default=None, primary_key=True)
    reason_code: str = Field(max_length=40, index=True)
    severity: str = Field(default="medium", max_length=10)
    endpoint: Optional[str] = None
    method: Optional[str] = Field(default=None, max_length=10)
    ip_hash: Optional[str] = Field(default=None, max_length=64, index=True)
    user_agent_hash: Optional[str] = Field(default=None, max_length=64)
    session_id: Optional[str] = None
    details: Optional[str] = None  # JSON string
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
