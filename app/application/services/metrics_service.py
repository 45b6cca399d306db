import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..ports.metrics_repo import MetricsRepository
from ...utils import isoformat_utc, to_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass
class MetricsService:
    """Lead, booking and abuse counts for the operations dashboard."""

    repo: MetricsRepository

    def summary(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = to_utc(now or utcnow())
        last_24h = now - timedelta(hours=24)
        last_7d = now - timedelta(days=7)

        by_reason = self.repo.suspicious_events_by_reason(last_24h)
        ranked = sorted(by_reason.items(), key=lambda item: (-item[1], item[0]))
        result = {
            "timestamp": isoformat_utc(now),
            "period": {"last_24h": isoformat_utc(last_24h), "last_7d": isoformat_utc(last_7d)},
            "leads": {
                "last_24h": self.repo.count_leads_since(last_24h),
                "last_7d": self.repo.count_leads_since(last_7d),
            },
            "bookings": {
                "last_24h": self.repo.count_bookings_since(last_24h),
                "last_7d": self.repo.count_bookings_since(last_7d),
            },
            "security": {
                "suspicious_events_24h": sum(by_reason.values()),
                "by_reason": [{"reason": reason, "count": count} for reason, count in ranked],
            },
        }
        logger.info(
            f"[Metrics] leads 24h={result['leads']['last_24h']} bookings 24h={result['bookings']['last_24h']} "
            f"suspicious 24h={result['security']['suspicious_events_24h']}"
        )
        return result
