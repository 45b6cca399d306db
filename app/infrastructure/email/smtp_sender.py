import logging
import smtplib
import uuid
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ...application.ports.email_sender import EmailSender, EmailResult

logger = logging.getLogger(__name__)


class SMTPEmailSender(EmailSender):
    def __init__(self, host: str, port: int, user: str, password: str, from_email: str = "", timeout: float = 15.0):
        if not host:
            raise ValueError("SMTP_HOST not configured")
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email or user
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> EmailResult:
        msg = MIMEMultipart()
        msg["From"] = self.from_email
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))
        email_id = f"<{uuid.uuid4().hex}@{self.host}>"
        msg["Message-ID"] = email_id

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                if self.user:
                    server.login(self.user, self.password)
                server.send_message(msg, to_addrs=[to])
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return EmailResult(success=False, error=str(e))

        logger.info(f"Email sent to {to}: {subject}")
        return EmailResult(success=True, email_id=email_id)
