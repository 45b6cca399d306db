import logging
import uuid

from ...application.ports.otp_provider import SMSProvider, SendResult
from ...utils import format_phone_for_display

logger = logging.getLogger(__name__)


class DevelopmentSMSProvider(SMSProvider):
    """Logs messages instead of sending them; never use in production."""

    name = "development"

    def send(self, phone: str, message: str) -> SendResult:
        logger.info(f"[DEV SMS] to ***{format_phone_for_display(phone)}: {message}")
        return SendResult(success=True, provider=self.name, message_id=f"dev_{uuid.uuid4().hex[:12]}")
