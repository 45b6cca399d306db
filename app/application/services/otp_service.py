"""Phone verification: OTP issue over SMS and the verify state machine.

A verification moves pending -> verified | expired | failed. Verify checks,
in order: already verified (idempotent success), expiry, exhausted attempts,
then the bcrypt comparison. Malformed codes are rejected before any state
is touched. Wrong guesses are charged by a conditional increment in the
repository, so parallel guesses cannot share one attempt.
"""
import json
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict

from passlib.context import CryptContext

from ..ports.audit_logger import ClientContext, SuspiciousEventLogger
from ..ports.lead_repo import LeadRepository
from ..ports.otp_provider import SMSProvider
from ..ports.rate_limiter import RateLimiter
from ..ports.verification_repo import VerificationRepository
from ...exceptions import APIException
from ...utils import (
    format_phone_for_display,
    generate_otp,
    hash_phone_number,
    is_valid_phone_number,
    phone_digits,
    to_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

OTP_FORMAT = re.compile(r"\d{6}")

SMS_ERROR_MESSAGES = {
    "invalid_phone": "Invalid phone number format. Please check and try again.",
    "throttled": "SMS service is temporarily unavailable. Please try again in a few minutes.",
    "not_configured": "SMS service not configured. Please contact support.",
}


def build_otp_message(otp: str, company_name: str, expiry_minutes: int) -> str:
    return (
        f"Your {company_name} verification code is: {otp}. "
        f"Valid for {expiry_minutes} minutes. Do not share this code."
    )


@dataclass
class OTPService:
    verifications: VerificationRepository
    leads: LeadRepository
    sms: SMSProvider
    rate_limiter: RateLimiter
    event_logger: SuspiciousEventLogger
    expiry_minutes: int = 5
    max_attempts: int = 3
    company_name: str = "Google Ads System"
    ip_limit: int = 2
    ip_window_seconds: int = 60
    phone_limit: int = 3
    phone_window_seconds: int = 15 * 60
    hasher: CryptContext = field(default_factory=lambda: pwd_context)

    def send(self, lead_id: str, phone_number: str, client: ClientContext) -> Dict[str, Any]:
        started = time.monotonic()
        if not lead_id or not phone_number:
            raise APIException(400, "Missing leadId or phoneNumber")
        if not is_valid_phone_number(phone_number):
            raise APIException(400, "Invalid phone number format. Use E.164 format (e.g., +14155552671)")

        ip_key = f"otp-ip:{client.ip_address}"
        if not self.rate_limiter.allow(ip_key, self.ip_limit, self.ip_window_seconds):
            reset_in = self.rate_limiter.retry_after(ip_key, self.ip_window_seconds)
            self.event_logger.log(client.event("otp_rate_limit_ip", "medium", leadId=lead_id, resetIn=reset_in))
            raise APIException(429, "Too many requests. Please wait before requesting another code.", resetIn=reset_in)

        phone_hash = hash_phone_number(phone_number)
        phone_key = f"otp-phone:{phone_hash}"
        if not self.rate_limiter.allow(phone_key, self.phone_limit, self.phone_window_seconds):
            reset_in = self.rate_limiter.retry_after(phone_key, self.phone_window_seconds)
            self.event_logger.log(client.event("otp_rate_limit_phone", "medium", leadId=lead_id, phoneHash=phone_hash, resetIn=reset_in))
            raise APIException(
                429,
                "Too many verification attempts for this phone number. Please try again later.",
                resetIn=reset_in,
            )

        lead = self.leads.get_by_id(lead_id)
        if not lead:
            raise APIException(404, "Lead not found")

        if phone_digits(lead.phone_e164) != phone_digits(phone_number):
            self.event_logger.log(client.event("otp_phone_mismatch", "high", leadId=lead_id, providedPhone=phone_hash))
            raise APIException(403, "Phone number does not match lead record")

        if lead.phone_verified_at:
            return {"success": True, "alreadyVerified": True, "message": "Phone number already verified"}

        # Only one active challenge per phone
        self.verifications.delete_inactive_for_phone(phone_hash)

        otp = generate_otp()
        verification = self.verifications.create(
            lead_id=lead_id,
            phone_number=phone_number,
            phone_hash=phone_hash,
            otp_hash=self.hasher.hash(otp),
            max_attempts=self.max_attempts,
            expires_at=utcnow() + timedelta(minutes=self.expiry_minutes),
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )

        result = self.sms.send(phone_number, build_otp_message(otp, self.company_name, self.expiry_minutes))
        if not result.success:
            self.verifications.set_status(verification.id, "failed")
            logger.error(f"OTP SMS failed via {result.provider}: {result.error_code} {result.error}")
            raise APIException(500, SMS_ERROR_MESSAGES.get(result.error_code, "Failed to send SMS. Please try again."))

        display = f"***{format_phone_for_display(phone_number)}"
        logger.info(json.dumps({
            "event": "OTP_SENT",
            "leadId": lead_id,
            "verificationId": verification.id,
            "phoneDisplay": display,
            "provider": result.provider,
            "messageId": result.message_id,
            "ip": client.ip_address,
            "duration_ms": int((time.monotonic() - started) * 1000),
        }))
        return {
            "success": True,
            "verificationId": verification.id,
            "expiresIn": self.expiry_minutes * 60,
            "phoneDisplay": display,
        }

    def verify(self, verification_id: str, otp: str, client: ClientContext) -> Dict[str, Any]:
        started = time.monotonic()
        if not verification_id or not otp:
            raise APIException(400, "Missing verificationId or otp")
        if not OTP_FORMAT.fullmatch(otp):
            raise APIException(400, "Invalid OTP format. Must be 6 digits.")

        verification = self.verifications.get(verification_id)
        if not verification:
            raise APIException(404, "Verification record not found")

        if verification.status == "verified":
            return _already_verified(verification.lead_id)

        now = utcnow()
        if now > to_utc(verification.expires_at):
            self.verifications.set_status(verification.id, "expired")
            raise APIException(410, "OTP expired", expired=True)

        if verification.attempts >= verification.max_attempts:
            self.verifications.set_status(verification.id, "failed")
            self.event_logger.log(client.event(
                "otp_max_attempts", "high",
                verificationId=verification.id, leadId=verification.lead_id, attempts=verification.attempts,
            ))
            raise APIException(429, "Maximum verification attempts exceeded", locked=True)

        if not self.hasher.verify(otp, verification.otp_hash):
            attempts = self.verifications.record_failed_attempt(verification.id)
            if attempts is None or attempts >= verification.max_attempts:
                attempts = verification.max_attempts if attempts is None else attempts
                self.verifications.set_status(verification.id, "failed")
                self.event_logger.log(client.event(
                    "otp_max_attempts", "high",
                    verificationId=verification.id, leadId=verification.lead_id, attempts=attempts,
                ))
                raise APIException(429, "Invalid code. Maximum attempts exceeded.", locked=True, remainingAttempts=0)

            self.event_logger.log(client.event(
                "otp_invalid_attempt", "low",
                verificationId=verification.id, leadId=verification.lead_id, attempts=attempts,
            ))
            raise APIException(401, "Invalid verification code", remainingAttempts=verification.max_attempts - attempts)

        if not self.verifications.mark_verified(verification.id, now):
            # Lost a race with a concurrent verify on the same record
            current = self.verifications.get(verification.id)
            if current and current.status == "verified":
                return _already_verified(current.lead_id)
            raise APIException(429, "Maximum verification attempts exceeded", locked=True)

        self.leads.set_phone_verified(verification.lead_id, now)

        logger.info(json.dumps({
            "event": "OTP_VERIFIED",
            "verificationId": verification.id,
            "leadId": verification.lead_id,
            "attempts": verification.attempts + 1,
            "ip": client.ip_address,
            "duration_ms": int((time.monotonic() - started) * 1000),
        }))
        return {"success": True, "verified": True, "leadId": verification.lead_id}


def _already_verified(lead_id: str) -> Dict[str, Any]:
    return {
        "success": True,
        "alreadyVerified": True,
        "verified": True,
        "leadId": lead_id,
        "message": "Phone already verified",
    }
