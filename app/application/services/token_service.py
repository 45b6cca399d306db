import base64
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..ports.token_repo import RetrievalTokenRepository
from ...utils import sha256_hex, utcnow

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def hash_token(token: str) -> str:
    return sha256_hex(token)


@dataclass
class TokenService:
    repo: RetrievalTokenRepository
    expiry_minutes: int = 15

    def issue(self, lead_id: str) -> str:
        """Return a fresh bearer token; only its SHA-256 hash is stored."""
        token = base64.urlsafe_b64encode(secrets.token_bytes(TOKEN_BYTES)).rstrip(b"=").decode()
        expires_at = utcnow() + timedelta(minutes=self.expiry_minutes)
        self.repo.store(hash_token(token), lead_id, expires_at)
        return token

    def consume(self, token: str) -> Optional[str]:
        """Lead id for a valid token, None for invalid, expired or already used ones."""
        if not token:
            return None
        lead_id = self.repo.consume(hash_token(token), utcnow())
        if lead_id is None:
            logger.info("Retrieval token rejected")
        return lead_id
