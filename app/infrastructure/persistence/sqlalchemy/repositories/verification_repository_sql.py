from datetime import datetime
from typing import Optional
from sqlalchemy import delete, update
from sqlmodel import Session, select

from .....db.models import PhoneVerification
from .....application.ports.verification_repo import VerificationRepository, VerificationDto


class SqlVerificationRepository(VerificationRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, v: PhoneVerification) -> VerificationDto:
        return VerificationDto(
            id=v.id,
            lead_id=v.lead_id,
            phone_hash=v.phone_hash,
            otp_hash=v.otp_hash,
            attempts=v.attempts,
            max_attempts=v.max_attempts,
            status=v.status,
            expires_at=v.expires_at,
            verified_at=v.verified_at,
        )

    def delete_inactive_for_phone(self, phone_hash: str) -> int:
        # Verified rows are kept as the audit trail
        result = self.session.exec(
            delete(PhoneVerification)
            .where(PhoneVerification.phone_hash == phone_hash)
            .where(PhoneVerification.status != "verified")
        )
        self.session.commit()
        return result.rowcount or 0

    def create(self, lead_id: str, phone_number: str, phone_hash: str, otp_hash: str, max_attempts: int,
               expires_at: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> VerificationDto:
        v = PhoneVerification(
            lead_id=lead_id,
            phone_number=phone_number,
            phone_hash=phone_hash,
            otp_hash=otp_hash,
            max_attempts=max_attempts,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
            status="pending",
        )
        self.session.add(v)
        self.session.commit()
        self.session.refresh(v)
        return self._to_dto(v)

    def get(self, verification_id: str) -> Optional[VerificationDto]:
        v = self.session.get(PhoneVerification, verification_id, populate_existing=True)
        return self._to_dto(v) if v else None

    def _transition(self, verification_id: str, values: dict, within_budget: bool = False) -> bool:
        stmt = (
            update(PhoneVerification)
            .where(PhoneVerification.id == verification_id)
            .where(PhoneVerification.status == "pending")
        )
        if within_budget:
            stmt = stmt.where(PhoneVerification.attempts < PhoneVerification.max_attempts)
        result = self.session.exec(stmt.values(**values))
        self.session.commit()
        return result.rowcount == 1

    def set_status(self, verification_id: str, status: str) -> bool:
        return self._transition(verification_id, {"status": status})

    def mark_verified(self, verification_id: str, verified_at: datetime) -> bool:
        return self._transition(verification_id, {"status": "verified", "verified_at": verified_at}, within_budget=True)

    def record_failed_attempt(self, verification_id: str) -> Optional[int]:
        # Increment happens in the database so parallel wrong guesses are each charged
        result = self.session.exec(
            update(PhoneVerification)
            .where(PhoneVerification.id == verification_id)
            .where(PhoneVerification.status == "pending")
            .where(PhoneVerification.attempts < PhoneVerification.max_attempts)
            .values(attempts=PhoneVerification.attempts + 1)
        )
        if result.rowcount != 1:
            self.session.rollback()
            return None
        attempts = self.session.exec(
            select(PhoneVerification.attempts).where(PhoneVerification.id == verification_id)
        ).one()
        self.session.commit()
        return attempts
