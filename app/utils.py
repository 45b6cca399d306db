import hashlib
import hmac
import re
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat_utc(value: datetime) -> str:
    return to_utc(value).isoformat().replace("+00:00", "Z")


# =========================
# Hashing
# =========================
def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()


def hash_phone_number(phone: str) -> str:
    """Hash phone number for rate-limit keys and deduplication (one-way)"""
    return sha256_hex(phone)


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


# =========================
# OTP Generation
# =========================
def generate_otp(length: int = 6) -> str:
    """Generate a secure numeric OTP."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def is_valid_phone_number(phone: str) -> bool:
    return bool(phone) and bool(E164_PATTERN.match(phone))


def is_valid_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def phone_digits(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


def format_phone_for_display(phone: str) -> str:
    """Last 4 digits of a phone number"""
    return phone_digits(phone)[-4:]


# =========================
# JWT Token Handling
# =========================
def create_jwt_token(data: Dict[str, Any], secret_key: str, algorithm: str = "HS256", expires_minutes: int = 60) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_jwt_token(token: str, secret_key: str, algorithm: str = "HS256") -> Optional[Dict[str, Any]]:
    """Decode and verify JWT token"""
    if not secret_key or secret_key == "change-me-in-prod":
        return None
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
