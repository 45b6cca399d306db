from datetime import datetime, timedelta, timezone
from typing import List
from zoneinfo import ZoneInfo

import pytest

from app.application.ports.booking_repo import BookingDto, SlotConflictError
from app.application.ports.lead_repo import LeadDto
from app.application.services.booking_service import (
    BookingService,
    format_long_display,
    format_slot_label,
    parse_instant,
)
from app.exceptions import APIException
from app.utils import utcnow

DUBAI = ZoneInfo("Asia/Dubai")


def booking(start: datetime, minutes: int = 15, **kw) -> BookingDto:
    fields = dict(
        id="b-1", lead_id="lead-1", selected_start=start, selected_end=start + timedelta(minutes=minutes),
        booking_timezone="Asia/Dubai", local_start_display=None, status="confirmed",
        customer_name="Jane", customer_email="jane@example.com", meet_url=None, calendar_event_id=None,
        reminder_sent_at=None, created_at=utcnow(),
    )
    fields.update(kw)
    return BookingDto(**fields)


class FakeBookingRepo:
    def __init__(self, existing: List[BookingDto] = None, conflict: bool = False):
        self.bookings = list(existing or [])
        self.conflict = conflict

    def create(self, lead_id, selected_start, selected_end, booking_timezone, local_start_display, customer_name, customer_email):
        if self.conflict:
            raise SlotConflictError("taken")
        b = booking(selected_start, id=f"b-{len(self.bookings) + 1}", lead_id=lead_id,
                    selected_end=selected_end, booking_timezone=booking_timezone,
                    local_start_display=local_start_display)
        self.bookings.append(b)
        return b

    def get(self, booking_id):
        return next((b for b in self.bookings if b.id == booking_id), None)

    def find_confirmed_between(self, start, end):
        return [b for b in self.bookings if b.status == "confirmed" and b.selected_start < end and b.selected_end > start]


class FakeLeads:
    def get_by_id(self, lead_id):
        if lead_id != "lead-1":
            return None
        return LeadDto(id="lead-1", full_name="Jane", email="jane@example.com", phone_e164="+14155552671",
                       lead_score=70, lead_grade="B", recommended_package="growth", status="new",
                       created_at=utcnow())


def tomorrow_local(hour: int, minute: int = 0) -> datetime:
    local = (datetime.now(DUBAI) + timedelta(days=1)).replace(hour=hour, minute=minute, second=0, microsecond=0)
    return local


def iso(local: datetime) -> str:
    return local.astimezone(ZoneInfo("UTC")).isoformat().replace("+00:00", "Z")


def test_parse_instant_normalizes_to_utc():
    assert parse_instant("2025-03-03T10:00:00+04:00") == datetime(2025, 3, 3, 6, 0, tzinfo=timezone.utc)
    assert parse_instant("2025-03-03T06:00:00Z") == datetime(2025, 3, 3, 6, 0, tzinfo=timezone.utc)
    assert parse_instant("2025-03-03T06:00:00") == datetime(2025, 3, 3, 6, 0, tzinfo=timezone.utc)


def test_display_formats():
    local = datetime(2025, 3, 3, 14, 30, tzinfo=DUBAI)
    assert format_long_display(local) == "Monday, March 3, 2025 at 2:30 PM"
    assert format_slot_label(local, local) == "Today, 2:30 PM"
    assert format_slot_label(local + timedelta(days=1), local) == "Tomorrow, 2:30 PM"
    assert format_slot_label(local + timedelta(days=3), local) == "Thu, 2:30 PM"


def test_book_valid_slot():
    repo = FakeBookingRepo()
    svc = BookingService(repo, FakeLeads())
    start = tomorrow_local(10)
    result = svc.book("lead-1", iso(start), iso(start + timedelta(minutes=15)))
    assert result["ok"] is True
    assert repo.bookings[0].local_start_display.endswith("at 10:00 AM")
    assert repo.bookings[0].booking_timezone == "Asia/Dubai"


@pytest.mark.parametrize("start_hour,start_minute,length,message", [
    (7, 45, 15, "Slots must fall between 08:00 and 20:00"),
    (19, 45, 30, "Slots must fall between 08:00 and 20:00"),
    (10, 10, 15, "Slots must align to 15-minute boundaries"),
    (10, 0, 0, "Slot end must be after slot start"),
])
def test_book_rejects_invalid_slots(start_hour, start_minute, length, message):
    svc = BookingService(FakeBookingRepo(), FakeLeads())
    start = tomorrow_local(start_hour, start_minute)
    with pytest.raises(APIException) as exc:
        svc.book("lead-1", iso(start), iso(start + timedelta(minutes=length)))
    assert exc.value.status_code == 400
    assert exc.value.detail == message


def test_book_rejects_past_slot():
    svc = BookingService(FakeBookingRepo(), FakeLeads())
    now = utcnow()
    with pytest.raises(APIException) as exc:
        svc.validate_slot(now - timedelta(hours=1), now, DUBAI, now=now)
    assert exc.value.detail == "Slot date cannot be in the past"


def test_book_missing_and_malformed_input():
    svc = BookingService(FakeBookingRepo(), FakeLeads())
    with pytest.raises(APIException) as exc:
        svc.book("lead-1", "", "")
    assert exc.value.status_code == 400
    with pytest.raises(APIException) as exc:
        svc.book("lead-1", "tomorrow", "later")
    assert exc.value.detail == "Invalid date format"
    with pytest.raises(APIException) as exc:
        svc.book("lead-1", iso(tomorrow_local(10)), iso(tomorrow_local(10, 15)), "Mars/Olympus")
    assert exc.value.status_code == 400


def test_book_unknown_lead():
    svc = BookingService(FakeBookingRepo(), FakeLeads())
    with pytest.raises(APIException) as exc:
        svc.book("lead-2", iso(tomorrow_local(10)), iso(tomorrow_local(10, 15)))
    assert exc.value.status_code == 404


def test_overlapping_booking_conflicts():
    start = tomorrow_local(10)
    existing = booking(parse_instant(iso(start)), minutes=30)
    svc = BookingService(FakeBookingRepo([existing]), FakeLeads())
    with pytest.raises(APIException) as exc:
        svc.book("lead-1", iso(start + timedelta(minutes=15)), iso(start + timedelta(minutes=30)))
    assert exc.value.status_code == 409


def test_database_uniqueness_violation_is_a_conflict():
    svc = BookingService(FakeBookingRepo(conflict=True), FakeLeads())
    with pytest.raises(APIException) as exc:
        svc.book("lead-1", iso(tomorrow_local(11)), iso(tomorrow_local(11, 15)))
    assert exc.value.status_code == 409
    assert exc.value.detail == "This time slot is no longer available. Please select another."


def test_available_slots_respect_lead_time_and_bookings():
    # Monday 2025-03-03 08:00 in Dubai
    now = datetime(2025, 3, 3, 4, 0, tzinfo=timezone.utc)
    taken = booking(datetime(2025, 3, 3, 6, 0, tzinfo=timezone.utc))
    svc = BookingService(FakeBookingRepo([taken]), FakeLeads())

    result = svc.available_slots(now=now)
    slots = result["slots"]
    assert result["timezone"] == "Asia/Dubai"
    assert len(slots) == 8
    assert slots[0] == {"start": "2025-03-03T06:30:00Z", "end": "2025-03-03T06:45:00Z", "label": "Today, 10:30 AM"}
    assert slots[-1]["label"] == "Today, 2:00 PM"


def test_available_slots_roll_to_next_day():
    # 17:00 in Dubai; earliest start is 19:00, after business hours
    now = datetime(2025, 3, 3, 13, 0, tzinfo=timezone.utc)
    svc = BookingService(FakeBookingRepo(), FakeLeads())
    slots = svc.available_slots(now=now)["slots"]
    assert slots[0]["label"] == "Tomorrow, 10:00 AM"
    assert slots[0]["start"] == "2025-03-04T06:00:00Z"


@pytest.mark.parametrize("tz", ["A" * 300, "../../etc/passwd", "Asia/Dubai\x00", "Not/AZone"])
def test_book_rejects_unusable_timezone_names(tz):
    svc = BookingService(FakeBookingRepo(), FakeLeads())
    with pytest.raises(APIException) as exc:
        svc.book("lead-1", iso(tomorrow_local(10)), iso(tomorrow_local(10, 15)), tz)
    assert exc.value.status_code == 400
