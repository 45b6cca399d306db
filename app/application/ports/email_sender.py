from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class EmailResult:
    success: bool
    email_id: Optional[str] = None
    error: Optional[str] = None


class EmailSender(Protocol):
    def send(self, to: str, subject: str, body: str) -> EmailResult:
        ...
