import logging
from typing import Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from ...application.ports.otp_provider import SMSProvider, SendResult

logger = logging.getLogger(__name__)


def normalize_twilio_error(code: Optional[int]) -> str:
    """Map Twilio REST error codes onto provider-neutral codes"""
    if code in (21211, 21614):
        return "invalid_phone"
    if code in (20429, 88888):
        return "throttled"
    if code in (20003, 20005):
        return "auth_failed"
    if code is not None and 30000 <= code < 40000:
        return "provider_down"
    return "provider_error"


class TwilioSMSProvider(SMSProvider):
    name = "twilio"

    def __init__(self, account_sid: str, auth_token: str, from_number: str, client: Optional[Client] = None):
        if not (account_sid and auth_token and from_number):
            raise RuntimeError("Twilio credentials not configured")
        self.client = client or Client(account_sid, auth_token)
        self.from_number = from_number

    def send(self, phone: str, message: str) -> SendResult:
        try:
            msg = self.client.messages.create(to=phone, from_=self.from_number, body=message)
        except TwilioRestException as e:
            logger.error(f"Twilio rejected SMS (code {e.code}): {e.msg}")
            return SendResult(success=False, provider=self.name, error=e.msg or "Twilio API error",
                              error_code=normalize_twilio_error(e.code))
        except Exception as e:
            logger.error(f"Twilio request failed: {e}")
            return SendResult(success=False, provider=self.name, error=str(e) or "Network error",
                              error_code="network_error")
        return SendResult(success=True, provider=self.name, message_id=msg.sid)
