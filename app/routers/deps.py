# app/routers/deps.py
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Header, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from ..application.ports.audit_logger import ClientContext, SuspiciousEventLogger
from ..application.ports.email_sender import EmailSender
from ..application.ports.otp_provider import SMSProvider
from ..application.ports.rate_limiter import RateLimiter
from ..core.config import settings
from ..db.session import engine
from ..exceptions import APIException
from ..infrastructure.audit.suspicious_event_logger import QueuedSuspiciousEventLogger
from ..infrastructure.email.development_sender import DevelopmentEmailSender
from ..infrastructure.email.smtp_sender import SMTPEmailSender
from ..infrastructure.otp.development_provider import DevelopmentSMSProvider
from ..infrastructure.otp.twilio_provider import TwilioSMSProvider
from ..infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from ..infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter
from ..utils import constant_time_equals, decode_jwt_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."


def get_client_ip(request: Request) -> str:
    """First x-forwarded-for hop, then x-real-ip. Both are client-controlled."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return "unknown"


def get_client_context(request: Request) -> ClientContext:
    return ClientContext(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", "unknown"),
        endpoint=request.url.path,
        method=request.method,
    )


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(settings.REDIS_URL)
    return InMemoryRateLimiter()


@lru_cache()
def get_event_logger() -> QueuedSuspiciousEventLogger:
    return QueuedSuspiciousEventLogger(lambda: Session(engine), maxsize=settings.EVENT_QUEUE_SIZE)


@lru_cache()
def get_sms_provider() -> SMSProvider:
    provider = settings.SMS_PROVIDER.lower()
    if provider == "twilio":
        return TwilioSMSProvider(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_PHONE_NUMBER)
    if provider not in ("mock", "development"):
        raise RuntimeError(f"Unknown SMS_PROVIDER: {settings.SMS_PROVIDER}")
    return DevelopmentSMSProvider()


@lru_cache()
def get_email_sender() -> EmailSender:
    if settings.EMAIL_PROVIDER.lower() == "smtp":
        return SMTPEmailSender(
            settings.SMTP_HOST,
            settings.SMTP_PORT,
            settings.SMTP_USER,
            settings.SMTP_PASSWORD,
            settings.SMTP_FROM_EMAIL,
        )
    return DevelopmentEmailSender()


def rate_limit(bucket: str, max_requests: int, window_seconds: int) -> Callable[..., None]:
    """Per-client fixed-window limit for one endpoint class."""

    def dependency(
        request: Request,
        limiter: RateLimiter = Depends(get_rate_limiter),
        events: SuspiciousEventLogger = Depends(get_event_logger),
    ) -> None:
        client = get_client_context(request)
        key = f"{bucket}:{client.ip_address}"
        if not limiter.allow(key, max_requests, window_seconds):
            retry_after = limiter.retry_after(key, window_seconds)
            events.log(client.event("rate_limit_exceeded", "medium", bucket=bucket, limit=max_requests))
            logger.warning(f"Rate limit exceeded for {bucket} from {client.ip_address}")
            raise APIException(429, RATE_LIMIT_MESSAGE, headers={"Retry-After": str(retry_after)})

    return dependency


def require_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Dict[str, Any]:
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload = decode_jwt_token(credentials.credentials, settings.SECRET_KEY, settings.ALGORITHM)
    if not payload:
        logger.warning("Admin JWT decode failed - invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if payload.get("role") != "admin":
        raise HTTPException(status_code=401, detail="Admin access required")
    return payload


def require_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    expected = settings.CRON_SECRET
    if not expected or not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not constant_time_equals(authorization[len("Bearer "):], expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
