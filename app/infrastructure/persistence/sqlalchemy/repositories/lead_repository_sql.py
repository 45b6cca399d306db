import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from .....db.models import Lead
from .....application.ports.lead_repo import LeadRepository, LeadDto
from .....utils import isoformat_utc


def _serialize(lead: Lead) -> Dict[str, Any]:
    data = lead.model_dump()
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = isoformat_utc(value)
    if data.get("raw_answers"):
        try:
            data["raw_answers"] = json.loads(data["raw_answers"])
        except ValueError:
            pass
    return data


class SqlLeadRepository(LeadRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, lead: Lead) -> LeadDto:
        return LeadDto(
            id=lead.id,
            full_name=lead.full_name,
            email=lead.email,
            phone_e164=lead.phone_e164,
            lead_score=lead.lead_score,
            lead_grade=lead.lead_grade,
            recommended_package=lead.recommended_package,
            status=lead.status,
            created_at=lead.created_at,
            phone_verified_at=lead.phone_verified_at,
        )

    def create(self, fields: Dict[str, Any]) -> LeadDto:
        lead = Lead(**fields)
        self.session.add(lead)
        self.session.commit()
        self.session.refresh(lead)
        return self._to_dto(lead)

    def get_by_id(self, lead_id: str) -> Optional[LeadDto]:
        lead = self.session.get(Lead, lead_id)
        return self._to_dto(lead) if lead else None

    def get_full(self, lead_id: str) -> Optional[Dict[str, Any]]:
        lead = self.session.get(Lead, lead_id)
        return _serialize(lead) if lead else None

    def list(self, grade: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        query = select(Lead)
        if grade:
            query = query.where(Lead.lead_grade == grade)
        if status:
            query = query.where(Lead.status == status)
        rows = self.session.exec(query.order_by(Lead.created_at.desc())).all()
        return [_serialize(r) for r in rows]

    def set_phone_verified(self, lead_id: str, verified_at: datetime) -> None:
        lead = self.session.get(Lead, lead_id)
        if not lead:
            return
        lead.phone_verified_at = verified_at
        self.session.add(lead)
        self.session.commit()

    def update_status(self, lead_id: str, status: str) -> bool:
        lead = self.session.get(Lead, lead_id)
        if not lead:
            return False
        lead.status = status
        self.session.add(lead)
        self.session.commit()
        return True
