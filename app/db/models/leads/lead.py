# app/db/models/leads/lead.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ....db.types import UTCDateTime
from ....utils import utcnow


class Lead(SQLModel, table=True):
    __tablename__ = "leads"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=UTCDateTime)
    full_name: str = Field(max_length=100)
    email: str = Field(max_length=255, index=True)
    phone_e164: str = Field(max_length=16)
    phone_country: Optional[str] = Field(default=None, max_length=2)
    phone_calling_code: Optional[str] = Field(default=None, max_length=5)
    whatsapp_same_as_phone: bool = Field(default=True)
    whatsapp_e164: Optional[str] = Field(default=None, max_length=16)
    whatsapp_country: Optional[str] = Field(default=None, max_length=2)
    whatsapp_calling_code: Optional[str] = Field(default=None, max_length=5)
    company_name: Optional[str] = None
    website_url: Optional[str] = None
    industry: Optional[str] = None
    industry_other: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    location_area: Optional[str] = None
    goal_primary: str
    budget_currency: str = Field(max_length=3)
    monthly_budget_range: str
    response_within_5_min: bool = Field(default=False)
    decision_maker: bool = Field(default=False)
    timeline: str
    consent: bool = Field(default=False)
    lead_score: int = Field(default=0)
    lead_grade: str = Field(default="D", max_length=1, index=True)
    recommended_package: str = Field(default="starter")
    status: str = Field(default="new", index=True)
    phone_verified_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    raw_answers: Optional[str] = Field(default=None)  # JSON string
