import logging
import queue
import threading
import time
from typing import Callable, Optional

from sqlmodel import Session

from ...application.ports.audit_logger import REASON_CODES, SEVERITIES, SuspiciousEventData, SuspiciousEventLogger
from ..persistence.sqlalchemy.repositories.suspicious_event_repository_sql import SqlSuspiciousEventRepository
from ...utils import sha256_hex


def _hash_or_none(value: Optional[str]) -> Optional[str]:
    return sha256_hex(value) if value else None


class QueuedSuspiciousEventLogger(SuspiciousEventLogger):
    """Fire-and-forget sink for abuse signals.

    ``log`` only enqueues; a daemon worker persists events with retries.
    Nothing raised while persisting ever reaches the caller.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        maxsize: int = 1000,
        retries: int = 3,
        backoff_seconds: float = 0.5,
        start: bool = True,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._session_factory = session_factory
        self._queue: "queue.Queue[Optional[SuspiciousEventData]]" = queue.Queue(maxsize=maxsize)
        self._retries = retries
        self._backoff = backoff_seconds
        self._worker: Optional[threading.Thread] = None
        if start:
            self.start()

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        if self._worker and self._worker.is_alive():
            return
        self._worker = threading.Thread(target=self._run, name="suspicious-event-writer", daemon=True)
        self._worker.start()

    def log(self, event: SuspiciousEventData) -> None:
        if event.reason_code not in REASON_CODES or event.severity not in SEVERITIES:
            self._logger.warning(f"[Security] Unrecognised event {event.reason_code}/{event.severity}")
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self._logger.warning(f"[Security] Event queue full, dropping {event.reason_code} event")

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Block until queued events are handled; False on timeout."""
        if timeout is None:
            self._queue.join()
            return True
        deadline = time.monotonic() + timeout
        while self._queue.unfinished_tasks:
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.01)
        return True

    def close(self, timeout: float = 5.0) -> None:
        if not self._worker:
            return
        self._queue.put(None)
        self._worker.join(timeout)
        self._worker = None

    def _run(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is None:
                    return
                self._persist(event)
            finally:
                self._queue.task_done()

    def _persist(self, event: SuspiciousEventData) -> None:
        for attempt in range(1, self._retries + 1):
            try:
                with self._session_factory() as session:
                    SqlSuspiciousEventRepository(session).add(
                        reason_code=event.reason_code,
                        severity=event.severity,
                        endpoint=event.endpoint,
                        method=event.method,
                        ip_hash=_hash_or_none(event.ip_address),
                        user_agent_hash=_hash_or_none(event.user_agent),
                        session_id=event.session_id,
                        details=event.details,
                    )
                self._logger.info(
                    f"SUSPICIOUS_EVENT_LOGGED reason={event.reason_code} endpoint={event.endpoint} severity={event.severity}"
                )
                return
            except Exception as e:
                self._logger.error(f"[Security] Failed to log suspicious event (attempt {attempt}/{self._retries}): {e}")
                if attempt < self._retries:
                    time.sleep(self._backoff * attempt)
        self._logger.error(f"[Security] Giving up on {event.reason_code} event")
