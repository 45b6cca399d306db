import logging
import uuid

from ...application.ports.email_sender import EmailSender, EmailResult

logger = logging.getLogger(__name__)


class DevelopmentEmailSender(EmailSender):
    def send(self, to: str, subject: str, body: str) -> EmailResult:
        logger.info(f"[DEV EMAIL] to {to}: {subject}\n{body}")
        return EmailResult(success=True, email_id=f"dev_{uuid.uuid4().hex[:12]}")
