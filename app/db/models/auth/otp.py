# app/db/models/auth/otp.py
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional
import uuid

from ....db.types import UTCDateTime
from ....utils import utcnow


class PhoneVerification(SQLModel, table=True):
    __tablename__ = "phone_verifications"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    lead_id: str = Field(foreign_key="leads.id", index=True)
    phone_number: str = Field(max_length=16)
    phone_hash: str = Field(max_length=64, index=True)
    otp_hash: str
    attempts: int = Field(default=0)
    max_attempts: int = Field(default=3)
    status: str = Field(default="pending", max_length=10)  # pending, verified, expired, failed
    expires_at: datetime = Field(sa_type=UTCDateTime)
    verified_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    ip_address: Optional[str] = Field(max_length=45, default=None)
    user_agent: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class RetrievalToken(SQLModel, table=True):
    __tablename__ = "retrieval_tokens"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    token_hash: str = Field(max_length=64, unique=True, index=True)
    lead_id: str = Field(foreign_key="leads.id", index=True)
    expires_at: datetime = Field(sa_type=UTCDateTime)
    used_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
