from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from .deps import get_client_context, get_event_logger, get_rate_limiter, get_sms_provider
from ..application.ports.audit_logger import SuspiciousEventLogger
from ..application.ports.otp_provider import SMSProvider
from ..application.ports.rate_limiter import RateLimiter
from ..application.services.otp_service import OTPService
from ..core.config import settings
from ..db.session import get_session
from ..infrastructure.persistence.sqlalchemy.repositories.lead_repository_sql import SqlLeadRepository
from ..infrastructure.persistence.sqlalchemy.repositories.verification_repository_sql import SqlVerificationRepository
from ..schemas.otp.otp import SendOTPRequest, SendOTPResponse, VerifyOTPRequest, VerifyOTPResponse

router = APIRouter(prefix="/otp", tags=["OTP"])


def get_otp_service(
    session: Session = Depends(get_session),
    sms: SMSProvider = Depends(get_sms_provider),
    limiter: RateLimiter = Depends(get_rate_limiter),
    events: SuspiciousEventLogger = Depends(get_event_logger),
) -> OTPService:
    return OTPService(
        verifications=SqlVerificationRepository(session),
        leads=SqlLeadRepository(session),
        sms=sms,
        rate_limiter=limiter,
        event_logger=events,
        expiry_minutes=settings.OTP_EXPIRY_MINUTES,
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        company_name=settings.OTP_COMPANY_NAME,
        ip_limit=settings.OTP_IP_RATE_LIMIT_MAX,
        ip_window_seconds=settings.OTP_IP_RATE_LIMIT_WINDOW_SEC,
        phone_limit=settings.OTP_PHONE_RATE_LIMIT_MAX,
        phone_window_seconds=settings.OTP_PHONE_RATE_LIMIT_WINDOW_SEC,
    )


@router.post("/send", response_model=SendOTPResponse, response_model_exclude_none=True)
def send_otp(payload: SendOTPRequest, request: Request, service: OTPService = Depends(get_otp_service)):
    return service.send(payload.leadId, payload.phoneNumber, get_client_context(request))


@router.post("/verify", response_model=VerifyOTPResponse, response_model_exclude_none=True)
def verify_otp(payload: VerifyOTPRequest, request: Request, service: OTPService = Depends(get_otp_service)):
    return service.verify(payload.verificationId, payload.otp, get_client_context(request))
