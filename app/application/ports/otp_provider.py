from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class SendResult:
    success: bool
    provider: str
    message_id: Optional[str] = None
    error: Optional[str] = None
    # invalid_phone | throttled | auth_failed | provider_down | network_error | not_configured | provider_error
    error_code: Optional[str] = None


class SMSProvider(Protocol):
    def send(self, phone: str, message: str) -> SendResult:
        ...
