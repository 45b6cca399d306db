from typing import Dict, Protocol
from datetime import datetime


class MetricsRepository(Protocol):
    def count_leads_since(self, since: datetime) -> int:
        ...

    def count_bookings_since(self, since: datetime) -> int:
        ...

    def suspicious_events_by_reason(self, since: datetime) -> Dict[str, int]:
        """Event counts keyed by reason_code for events created at or after since."""
        ...
