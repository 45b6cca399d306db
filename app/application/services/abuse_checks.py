import json
import re
import time
from typing import Any, List, Optional, Tuple

SUSPICIOUS_PATTERNS = (
    ("sql_injection_attempt", re.compile(r"(\bunion\b|\bselect\b|\bdrop\b|\binsert\b|\bupdate\b|\bdelete\b)", re.I)),
    ("xss_attempt", re.compile(r"<script|javascript:|onerror=|onload=", re.I)),
    ("path_traversal_attempt", re.compile(r"\.\.[/\\]|%2e%2e", re.I)),
)


def honeypot_is_clean(value: Optional[str]) -> bool:
    """Legitimate users never fill the hidden field."""
    return not value


def check_request_timing(client_timestamp_ms: Optional[int], min_ms: int = 2000, max_ms: int = 600000,
                         now_ms: Optional[int] = None) -> Tuple[bool, Optional[int]]:
    if not client_timestamp_ms:
        return False, None
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    elapsed = now_ms - int(client_timestamp_ms)
    return min_ms <= elapsed <= max_ms, elapsed


def detect_suspicious_patterns(payload: Any) -> List[str]:
    text = json.dumps(payload, default=str).lower()
    return [name for name, pattern in SUSPICIOUS_PATTERNS if pattern.search(text)]
