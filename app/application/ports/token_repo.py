from typing import Optional, Protocol
from datetime import datetime


class RetrievalTokenRepository(Protocol):
    def store(self, token_hash: str, lead_id: str, expires_at: datetime) -> None:
        ...

    def consume(self, token_hash: str, now: datetime) -> Optional[str]:
        """Mark the token used if it is unused and unexpired; return its lead id, else None."""
        ...
