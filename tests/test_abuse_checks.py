from app.application.services.abuse_checks import (
    check_request_timing,
    detect_suspicious_patterns,
    honeypot_is_clean,
)


def test_honeypot():
    assert honeypot_is_clean(None)
    assert honeypot_is_clean("")
    assert not honeypot_is_clean("http://spam.example")


def test_timing_window():
    now = 1_000_000
    assert check_request_timing(now - 5000, now_ms=now) == (True, 5000)
    assert check_request_timing(now - 500, now_ms=now) == (False, 500)
    assert check_request_timing(now - 11 * 60 * 1000, now_ms=now)[0] is False
    assert check_request_timing(None, now_ms=now) == (False, None)


def test_detect_suspicious_patterns():
    assert detect_suspicious_patterns({"name": "Jane"}) == []
    assert detect_suspicious_patterns({"name": "x' UNION SELECT * FROM users"}) == ["sql_injection_attempt"]
    assert "xss_attempt" in detect_suspicious_patterns({"company": "<script>alert(1)</script>"})
    assert "path_traversal_attempt" in detect_suspicious_patterns({"website": "../../etc/passwd"})
