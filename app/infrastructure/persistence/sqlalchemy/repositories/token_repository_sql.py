from datetime import datetime
from typing import Optional
from sqlalchemy import update
from sqlmodel import Session, select

from .....db.models import RetrievalToken
from .....application.ports.token_repo import RetrievalTokenRepository


class SqlRetrievalTokenRepository(RetrievalTokenRepository):
    def __init__(self, session: Session):
        self.session = session

    def store(self, token_hash: str, lead_id: str, expires_at: datetime) -> None:
        self.session.add(RetrievalToken(token_hash=token_hash, lead_id=lead_id, expires_at=expires_at))
        self.session.commit()

    def consume(self, token_hash: str, now: datetime) -> Optional[str]:
        # Single conditional UPDATE: of two concurrent callers only one sees rowcount == 1
        result = self.session.exec(
            update(RetrievalToken)
            .where(RetrievalToken.token_hash == token_hash)
            .where(RetrievalToken.used_at.is_(None))
            .where(RetrievalToken.expires_at > now)
            .values(used_at=now)
        )
        if result.rowcount != 1:
            self.session.rollback()
            return None
        lead_id = self.session.exec(
            select(RetrievalToken.lead_id).where(RetrievalToken.token_hash == token_hash)
        ).first()
        self.session.commit()
        return lead_id
