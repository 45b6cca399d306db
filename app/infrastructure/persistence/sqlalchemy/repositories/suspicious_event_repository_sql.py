import json
from typing import Any, Dict, Optional
from sqlmodel import Session

from .....db.models import SuspiciousEvent
from .....application.ports.audit_logger import SuspiciousEventRepository


class SqlSuspiciousEventRepository(SuspiciousEventRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, reason_code: str, severity: str, endpoint: Optional[str], method: Optional[str],
            ip_hash: Optional[str], user_agent_hash: Optional[str], session_id: Optional[str],
            details: Dict[str, Any]) -> None:
        event = SuspiciousEvent(
            reason_code=reason_code,
            severity=severity,
            endpoint=endpoint,
            method=method,
            ip_hash=ip_hash,
            user_agent_hash=user_agent_hash,
            session_id=session_id,
            details=json.dumps(details, default=str) if details else None,
        )
        self.session.add(event)
        self.session.commit()
