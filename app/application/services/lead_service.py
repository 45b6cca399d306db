import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from .abuse_checks import check_request_timing, detect_suspicious_patterns, honeypot_is_clean
from .lead_scoring import calculate_lead_score
from .token_service import TokenService
from ..ports.audit_logger import ClientContext, SuspiciousEventLogger
from ..ports.lead_repo import LeadRepository
from ...exceptions import APIException
from ...utils import is_valid_email, is_valid_phone_number, isoformat_utc

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("full_name", "phone_e164", "goal_primary", "monthly_budget_range", "timeline", "budget_currency")
LEAD_STATUSES = ["new", "contacted", "qualified", "converted", "unqualified"]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class LeadService:
    repo: LeadRepository
    tokens: Optional[TokenService] = None
    event_logger: Optional[SuspiciousEventLogger] = None
    min_fill_ms: int = 2000
    max_fill_ms: int = 600000

    def capture(self, data: Dict[str, Any], client: ClientContext) -> Dict[str, Any]:
        """Validate a form submission, score it, store it and hand back a retrieval token."""
        if not honeypot_is_clean(data.get("honeypot")):
            self.event_logger.log(client.event("honeypot_triggered", "high", email_domain=_email_domain(data.get("email"))))
            raise APIException(400, "Invalid submission", ok=False)

        valid_timing, elapsed = check_request_timing(data.get("_submit_timestamp"), self.min_fill_ms, self.max_fill_ms)
        if not valid_timing:
            self.event_logger.log(client.event("timing_anomaly", "medium", elapsed_ms=elapsed))
            raise APIException(400, "Invalid submission timing. Please try again.", ok=False)

        patterns = detect_suspicious_patterns(data)
        if patterns:
            # Logged only; free-text answers trip these patterns too often to reject on them
            self.event_logger.log(client.event("suspicious_pattern", "medium", patterns=patterns))

        if not is_valid_email(data.get("email") or ""):
            raise APIException(400, "Invalid email format", ok=False)
        if not data.get("consent"):
            raise APIException(400, "Consent is required", ok=False)
        missing = [f for f in REQUIRED_FIELDS if not data.get(f)]
        if missing:
            raise APIException(400, "Missing required fields", ok=False, missing=missing)
        if data.get("budget_currency") not in ("AED", "USD"):
            raise APIException(400, "Invalid budget currency", ok=False)
        if not is_valid_phone_number(data["phone_e164"]):
            raise APIException(400, "Invalid phone number format. Use E.164 format (e.g., +14155552671)", ok=False)

        result = calculate_lead_score(data)
        industry = data.get("industry") or None
        raw_answers = {k: v for k, v in data.items() if k not in ("honeypot", "_submit_timestamp")}
        fields = {
            "full_name": data["full_name"].strip(),
            "email": data["email"].lower().strip(),
            "phone_e164": data["phone_e164"],
            "phone_country": data.get("phone_country"),
            "phone_calling_code": data.get("phone_calling_code"),
            "whatsapp_same_as_phone": bool(data.get("whatsapp_same_as_phone", True)),
            "whatsapp_e164": data.get("whatsapp_e164") or None,
            "whatsapp_country": data.get("whatsapp_country") or None,
            "whatsapp_calling_code": data.get("whatsapp_calling_code") or None,
            "company_name": _clean(data.get("company_name")),
            "website_url": _clean(data.get("website_url")),
            "industry": industry,
            "industry_other": _clean(data.get("industry_other")) if industry == "Other" else None,
            "country": data.get("country"),
            "city": data.get("city"),
            "location_area": data.get("location_area"),
            "goal_primary": data["goal_primary"],
            "budget_currency": data["budget_currency"],
            "monthly_budget_range": data["monthly_budget_range"],
            "response_within_5_min": bool(data.get("response_within_5_min")),
            "decision_maker": bool(data.get("decision_maker")),
            "timeline": data["timeline"],
            "consent": True,
            "lead_score": result.score,
            "lead_grade": result.grade,
            "recommended_package": result.recommended_package,
            "status": "new",
            "raw_answers": json.dumps(raw_answers, default=str),
        }
        lead = self.repo.create(fields)
        token = self.tokens.issue(lead.id)
        logger.info(f"Lead {lead.id} captured with grade {result.grade} (score {result.score})")

        return {
            "ok": True,
            "lead_id": lead.id,
            "lead_score": result.score,
            "lead_grade": result.grade,
            "recommended_package": result.recommended_package,
            "retrieval_token": token,
        }

    def retrieve(self, token: Optional[str], client: ClientContext) -> Dict[str, Any]:
        """Single-use lookup of a lead by retrieval token"""
        if not token:
            raise APIException(400, "Missing token", ok=False)
        lead_id = self.tokens.consume(token)
        if not lead_id:
            self.event_logger.log(client.event("invalid_token", "low"))
            raise APIException(401, "Invalid, expired, or already used token", ok=False)
        lead = self.repo.get_full(lead_id)
        if not lead:
            raise APIException(404, "Lead not found", ok=False)
        return {"ok": True, "lead": lead}

    def get_summary(self, lead_id: str) -> Dict[str, Any]:
        lead = self.repo.get_by_id(lead_id)
        if not lead:
            raise APIException(404, "Lead not found", ok=False)
        return {
            "ok": True,
            "lead": {
                "id": lead.id,
                "email": lead.email,
                "full_name": lead.full_name,
                "phone_e164": lead.phone_e164,
                "created_at": isoformat_utc(lead.created_at),
            },
        }

    def list_leads(self, grade: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.repo.list(grade=grade, status=status)

    def update_status(self, lead_id: str, status: str) -> None:
        if status not in LEAD_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status. Must be one of: {LEAD_STATUSES}")
        if not self.repo.update_status(lead_id, status):
            raise HTTPException(status_code=404, detail="Lead not found")


def _email_domain(email: Optional[str]) -> Optional[str]:
    if not email or "@" not in email:
        return None
    return email.rsplit("@", 1)[1].lower()
