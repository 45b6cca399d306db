from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Protocol

REASON_CODES = (
    "rate_limit_exceeded",
    "honeypot_triggered",
    "timing_anomaly",
    "invalid_payload",
    "suspicious_pattern",
    "otp_rate_limit_ip",
    "otp_rate_limit_phone",
    "otp_phone_mismatch",
    "otp_max_attempts",
    "otp_invalid_attempt",
    "invalid_token",
)

SEVERITIES = ("low", "medium", "high")


@dataclass
class SuspiciousEventData:
    reason_code: str
    severity: str = "medium"
    endpoint: Optional[str] = None
    method: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    session_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class SuspiciousEventLogger(Protocol):
    def log(self, event: SuspiciousEventData) -> None:
        ...


class SuspiciousEventRepository(Protocol):
    def add(self, reason_code: str, severity: str, endpoint: Optional[str], method: Optional[str],
            ip_hash: Optional[str], user_agent_hash: Optional[str], session_id: Optional[str],
            details: Dict[str, Any]) -> None:
        ...


@dataclass
class ClientContext:
    """Who made the request; raw values here are hashed before storage."""
    ip_address: str = "unknown"
    user_agent: str = "unknown"
    endpoint: Optional[str] = None
    method: Optional[str] = None

    def event(self, reason_code: str, severity: str, **details: Any) -> SuspiciousEventData:
        return SuspiciousEventData(
            reason_code=reason_code,
            severity=severity,
            endpoint=self.endpoint,
            method=self.method,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
            details=details,
        )
