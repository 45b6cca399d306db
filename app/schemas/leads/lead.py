# app/schemas/leads/lead.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class LeadCreate(BaseModel):
    """Public form payload. Field checks that must answer with {ok: false}
    (email, consent, E.164, currency) run in the lead service instead."""
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone_e164: Optional[str] = None
    phone_country: Optional[str] = None
    phone_calling_code: Optional[str] = None
    whatsapp_same_as_phone: bool = True
    whatsapp_e164: Optional[str] = None
    whatsapp_country: Optional[str] = None
    whatsapp_calling_code: Optional[str] = None
    company_name: Optional[str] = None
    website_url: Optional[str] = None
    industry: Optional[str] = None
    industry_other: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    location_area: Optional[str] = None
    goal_primary: Optional[str] = None
    budget_currency: Optional[str] = None
    monthly_budget_range: Optional[str] = None
    response_within_5_min: bool = False
    decision_maker: bool = False
    timeline: Optional[str] = None
    consent: bool = False
    honeypot: Optional[str] = None
    submit_timestamp: Optional[int] = Field(default=None, alias="_submit_timestamp")


class LeadCreateResponse(BaseModel):
    ok: bool = True
    lead_id: str
    lead_score: int
    lead_grade: str
    recommended_package: str
    retrieval_token: str


class LeadRetrieveResponse(BaseModel):
    ok: bool = True
    lead: Dict[str, Any]


class LeadSummary(BaseModel):
    id: str
    email: str
    full_name: str
    phone_e164: str
    created_at: str


class LeadSummaryResponse(BaseModel):
    ok: bool = True
    lead: LeadSummary


class LeadListResponse(BaseModel):
    leads: List[Dict[str, Any]]
    total: int


class LeadStatusUpdate(BaseModel):
    status: str
