from datetime import datetime, timedelta, timezone

from app.application.ports.booking_repo import BookingDto
from app.application.ports.email_sender import EmailResult
from app.application.services.calendar_service import build_ics, escape_text, fold_line, ics_filename, quote_param
from app.application.services.reminder_service import ReminderService, build_reminder_email


def make_booking(booking_id="3f2a9c1e-aaaa-bbbb-cccc-000000000001", start=datetime(2025, 3, 3, 10, 30, tzinfo=timezone.utc), **kw):
    fields = dict(
        id=booking_id, lead_id="lead-1", selected_start=start, selected_end=start + timedelta(minutes=15),
        booking_timezone="Asia/Dubai", local_start_display="Monday, March 3, 2025 at 2:30 PM", status="confirmed",
        customer_name="Jane, Doe", customer_email="jane@example.com", meet_url=None, calendar_event_id=None,
        reminder_sent_at=None, created_at=start,
    )
    fields.update(kw)
    return BookingDto(**fields)


def test_ics_document_structure():
    ics = build_ics(make_booking(), now=datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))
    assert ics.endswith("\r\n")
    lines = ics.rstrip("\r\n").split("\r\n")
    assert lines[0] == "BEGIN:VCALENDAR"
    assert lines[-1] == "END:VCALENDAR"
    assert "DTSTART:20250303T103000Z" in lines
    assert "DTEND:20250303T104500Z" in lines
    assert "DTSTAMP:20250301T090000Z" in lines
    assert "TRIGGER:-PT1H" in lines
    assert 'ATTENDEE;CN="Jane, Doe";RSVP=TRUE:mailto:jane@example.com' in lines
    assert not any(line.startswith("LOCATION:") for line in lines)
    assert lines.index("BEGIN:VALARM") < lines.index("END:VALARM") < lines.index("END:VEVENT")


def test_ics_includes_meet_link_when_present():
    ics = build_ics(make_booking(meet_url="https://meet.google.com/abc-defg-hij"))
    unfolded = ics.replace("\r\n ", "")
    assert "LOCATION:https://meet.google.com/abc-defg-hij\r\n" in unfolded
    assert "Join meeting: https://meet.google.com/abc-defg-hij" in unfolded


def test_ics_filename_and_escaping():
    assert ics_filename("3f2a9c1e-aaaa") == "google-ads-audit-3f2a9c1e.ics"
    assert escape_text("a;b,c\\d\ne") == "a\\;b\\,c\\\\d\\ne"
    assert escape_text("line one\r\nline two") == "line one\\nline two"
    assert quote_param('Smith, "JJ" John\r\n') == '"Smith, JJ John"'


def test_long_lines_are_folded_at_75_octets():
    name = "Zoë Müller-Lüdenscheidt " * 4
    link = "https://meet.example/" + "x" * 90
    ics = build_ics(make_booking(customer_name=name, meet_url=link))
    for line in ics.split("\r\n"):
        assert len(line.encode("utf-8")) <= 75

    unfolded = ics.replace("\r\n ", "")
    assert f"LOCATION:{link}\r\n" in unfolded
    assert f'CN="{name}"' in unfolded

    folded = fold_line("DESCRIPTION:" + "é" * 40)
    assert [len(part.encode("utf-8")) for part in folded.split("\r\n")] == [74, 19]


class FakeBookings:
    def __init__(self, due):
        self.due = due
        self.marked = []
        self.window = None

    def due_for_reminder(self, window_start, window_end):
        self.window = (window_start, window_end)
        return self.due

    def mark_reminder_sent(self, booking_id, sent_at):
        self.marked.append(booking_id)


class FakeEmail:
    def __init__(self, fail_for=(), explode_for=()):
        self.sent = []
        self.fail_for = set(fail_for)
        self.explode_for = set(explode_for)

    def send(self, to, subject, body):
        if to in self.explode_for:
            raise ConnectionError("smtp down")
        if to in self.fail_for:
            return EmailResult(success=False, error="rejected")
        self.sent.append((to, subject, body))
        return EmailResult(success=True, email_id=f"e-{len(self.sent)}")


def test_reminder_email_content():
    msg = build_reminder_email(make_booking(meet_url="https://meet.example/x"), "http://testserver/")
    assert "Monday, March 3, 2025 at 2:30 PM - 2:45 PM (Asia/Dubai)" in msg["body"]
    assert "Join: https://meet.example/x" in msg["body"]
    assert "http://testserver/ics?booking_id=" in msg["body"]


def test_reminders_continue_after_individual_failures():
    due = [
        make_booking("b-1", customer_email="ok@example.com"),
        make_booking("b-2", customer_email="bounce@example.com"),
        make_booking("b-3", customer_email="boom@example.com"),
        make_booking("b-4", customer_email="ok2@example.com"),
    ]
    bookings = FakeBookings(due)
    email = FakeEmail(fail_for={"bounce@example.com"}, explode_for={"boom@example.com"})
    now = datetime(2025, 3, 3, 9, 30, tzinfo=timezone.utc)

    result = ReminderService(bookings, email).send_due_reminders("http://testserver", now=now)

    assert bookings.window == (now + timedelta(minutes=55), now + timedelta(minutes=65))
    assert (result["processed"], result["success"], result["failed"]) == (4, 2, 2)
    assert [r["status"] for r in result["results"]] == ["success", "email_failed", "error", "success"]
    assert bookings.marked == ["b-1", "b-4"]
