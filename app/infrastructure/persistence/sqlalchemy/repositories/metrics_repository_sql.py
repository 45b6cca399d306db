from datetime import datetime
from typing import Dict
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import Booking, Lead, SuspiciousEvent
from .....application.ports.metrics_repo import MetricsRepository


class SqlMetricsRepository(MetricsRepository):
    def __init__(self, session: Session):
        self.session = session

    def count_leads_since(self, since: datetime) -> int:
        return self.session.exec(select(func.count(Lead.id)).where(Lead.created_at >= since)).one()

    def count_bookings_since(self, since: datetime) -> int:
        return self.session.exec(select(func.count(Booking.id)).where(Booking.created_at >= since)).one()

    def suspicious_events_by_reason(self, since: datetime) -> Dict[str, int]:
        rows = self.session.exec(
            select(SuspiciousEvent.reason_code, func.count(SuspiciousEvent.id))
            .where(SuspiciousEvent.created_at >= since)
            .group_by(SuspiciousEvent.reason_code)
        ).all()
        return {reason: count for reason, count in rows}
