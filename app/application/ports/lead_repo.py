from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Protocol
from datetime import datetime


@dataclass
class LeadDto:
    id: str
    full_name: str
    email: str
    phone_e164: str
    lead_score: int
    lead_grade: str
    recommended_package: str
    status: str
    created_at: datetime
    phone_verified_at: Optional[datetime] = None


class LeadRepository(Protocol):
    def create(self, fields: Dict[str, Any]) -> LeadDto:
        ...

    def get_by_id(self, lead_id: str) -> Optional[LeadDto]:
        ...

    def get_full(self, lead_id: str) -> Optional[Dict[str, Any]]:
        ...

    def list(self, grade: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        ...

    def set_phone_verified(self, lead_id: str, verified_at: datetime) -> None:
        ...

    def update_status(self, lead_id: str, status: str) -> bool:
        ...
