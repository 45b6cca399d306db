from dataclasses import dataclass
from typing import Optional, Protocol
from datetime import datetime


@dataclass
class VerificationDto:
    id: str
    lead_id: str
    phone_hash: str
    otp_hash: str
    attempts: int
    max_attempts: int
    status: str
    expires_at: datetime
    verified_at: Optional[datetime] = None


class VerificationRepository(Protocol):
    def delete_inactive_for_phone(self, phone_hash: str) -> int:
        ...

    def create(self, lead_id: str, phone_number: str, phone_hash: str, otp_hash: str, max_attempts: int,
               expires_at: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> VerificationDto:
        ...

    def get(self, verification_id: str) -> Optional[VerificationDto]:
        ...

    def set_status(self, verification_id: str, status: str) -> bool:
        """Move a pending verification to status; False when it already left pending."""
        ...

    def record_failed_attempt(self, verification_id: str) -> Optional[int]:
        """Atomically charge one attempt; the new count, or None once locked or no longer pending."""
        ...

    def mark_verified(self, verification_id: str, verified_at: datetime) -> bool:
        ...
