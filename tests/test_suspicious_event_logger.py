import json

from sqlmodel import Session, select

from app.application.ports.audit_logger import ClientContext, SuspiciousEventData
from app.db.models import SuspiciousEvent
from app.infrastructure.audit.suspicious_event_logger import QueuedSuspiciousEventLogger
from app.utils import sha256_hex


def test_events_are_persisted_with_hashed_client_data(file_engine):
    logger = QueuedSuspiciousEventLogger(lambda: Session(file_engine), backoff_seconds=0)
    client = ClientContext(ip_address="198.51.100.4", user_agent="curl/8.0", endpoint="/leads", method="POST")
    logger.log(client.event("honeypot_triggered", "high", email_domain="example.com"))
    assert logger.drain(timeout=5)
    logger.close()

    with Session(file_engine) as s:
        rows = s.exec(select(SuspiciousEvent)).all()
    assert len(rows) == 1
    row = rows[0]
    assert (row.reason_code, row.severity, row.endpoint, row.method) == ("honeypot_triggered", "high", "/leads", "POST")
    assert row.ip_hash == sha256_hex("198.51.100.4")
    assert row.user_agent_hash == sha256_hex("curl/8.0")
    assert "198.51.100.4" not in (row.details or "")
    assert json.loads(row.details) == {"email_domain": "example.com"}


def test_persistence_failure_never_reaches_caller():
    calls = []

    def broken_session():
        calls.append(1)
        raise RuntimeError("database unavailable")

    logger = QueuedSuspiciousEventLogger(broken_session, retries=3, backoff_seconds=0)
    logger.log(SuspiciousEventData(reason_code="invalid_token", severity="low"))
    assert logger.drain(timeout=5)
    logger.close()
    assert len(calls) == 3


def test_full_queue_drops_events_without_raising():
    logger = QueuedSuspiciousEventLogger(lambda: None, maxsize=1, start=False)
    logger.log(SuspiciousEventData(reason_code="rate_limit_exceeded"))
    logger.log(SuspiciousEventData(reason_code="rate_limit_exceeded"))
    assert logger._queue.qsize() == 1


def test_app_restart_resumes_event_writer(monkeypatch, file_engine):
    from fastapi.testclient import TestClient
    import app.main as main

    writer = QueuedSuspiciousEventLogger(lambda: Session(file_engine), backoff_seconds=0, start=False)
    monkeypatch.setattr(main, "create_db_and_tables", lambda: None)
    monkeypatch.setattr(main, "get_event_logger", lambda: writer)

    for _ in range(2):
        with TestClient(main.app):
            assert writer.is_running
            writer.log(SuspiciousEventData(reason_code="invalid_token", severity="low"))
        assert not writer.is_running

    with Session(file_engine) as s:
        assert len(s.exec(select(SuspiciousEvent)).all()) == 2
