from datetime import datetime
from typing import Optional

from ..ports.booking_repo import BookingDto
from ...utils import to_utc, utcnow

PRODID = "-//Google Ads Audit//Booking System//EN"
SUMMARY = "Google Ads Audit Call"
ORGANIZER = 'ORGANIZER;CN="Audit Team":mailto:onboarding@resend.dev'


def format_ics_date(value: datetime) -> str:
    """UTC datetime as YYYYMMDDTHHMMSSZ"""
    return to_utc(value).strftime("%Y%m%dT%H%M%SZ")


def escape_text(value: str) -> str:
    """TEXT value escaping; bare CRs are dropped."""
    return (
        value.replace("\r", "")
        .replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def quote_param(value: str) -> str:
    """Parameter values are DQUOTE-wrapped and may not carry quotes or control characters."""
    cleaned = "".join(ch for ch in value if ch != '"' and (ch == "\t" or ord(ch) >= 32) and ord(ch) != 127)
    return f'"{cleaned}"'


def fold_line(line: str, limit: int = 75) -> str:
    """Fold a content line at 75 octets without splitting a UTF-8 sequence."""
    chunks = []
    current, size = "", 0
    for ch in line:
        width = len(ch.encode("utf-8"))
        if size + width > limit:
            chunks.append(current)
            current, size = " ", 1
        current += ch
        size += width
    chunks.append(current)
    return "\r\n".join(chunks)


def build_ics(booking: BookingDto, now: Optional[datetime] = None) -> str:
    """RFC 5545 calendar with one event and a display alarm one hour before."""
    description = f"{SUMMARY}\\n\\n"
    if booking.meet_url:
        description += f"Join meeting: {escape_text(booking.meet_url)}\\n\\n"
    description += escape_text("We look forward to helping you optimize your Google Ads campaigns!")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{booking.id}@audit-booking-system.com",
        f"DTSTAMP:{format_ics_date(now or utcnow())}",
        f"DTSTART:{format_ics_date(booking.selected_start)}",
        f"DTEND:{format_ics_date(booking.selected_end)}",
        f"SUMMARY:{SUMMARY}",
        f"DESCRIPTION:{description}",
        ORGANIZER,
        f"ATTENDEE;CN={quote_param(booking.customer_name)};RSVP=TRUE:mailto:{booking.customer_email}",
        "STATUS:CONFIRMED",
        "SEQUENCE:0",
    ]
    if booking.meet_url:
        lines.append(f"LOCATION:{escape_text(booking.meet_url)}")
    lines += [
        "BEGIN:VALARM",
        "TRIGGER:-PT1H",
        "ACTION:DISPLAY",
        "DESCRIPTION:Meeting starts in 1 hour",
        "END:VALARM",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "".join(fold_line(line) + "\r\n" for line in lines)


def ics_filename(booking_id: str) -> str:
    return f"google-ads-audit-{booking_id[:8]}.ics"
