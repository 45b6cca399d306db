import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..ports.booking_repo import BookingDto, BookingRepository, SlotConflictError
from ..ports.lead_repo import LeadRepository
from ...exceptions import APIException
from ...utils import isoformat_utc, to_utc, utcnow

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is no longer available. Please select another."
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
TIMEZONE_KEY = re.compile(r"[A-Za-z0-9_+\-/]{1,64}")


def parse_instant(value: str) -> datetime:
    """ISO-8601 string to aware UTC; naive input is taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(value))


def as_local(instant: datetime, tz: ZoneInfo) -> datetime:
    return to_utc(instant).astimezone(tz)


def format_time(local: datetime) -> str:
    hour = local.hour % 12 or 12
    return f"{hour}:{local.minute:02d} {'PM' if local.hour >= 12 else 'AM'}"


def format_long_display(local: datetime) -> str:
    return f"{local.strftime('%A, %B')} {local.day}, {local.year} at {format_time(local)}"


def format_slot_label(local: datetime, local_now: datetime) -> str:
    day_diff = (local.date() - local_now.date()).days
    if day_diff == 0:
        return f"Today, {format_time(local)}"
    if day_diff == 1:
        return f"Tomorrow, {format_time(local)}"
    return f"{WEEKDAYS[local.weekday()]}, {format_time(local)}"


def overlaps(start: datetime, end: datetime, bookings: List[BookingDto]) -> bool:
    return any(to_utc(b.selected_start) < end and to_utc(b.selected_end) > start for b in bookings)


def booking_to_dict(booking: BookingDto) -> Dict[str, Any]:
    return {
        "id": booking.id,
        "lead_id": booking.lead_id,
        "selected_start": isoformat_utc(booking.selected_start),
        "selected_end": isoformat_utc(booking.selected_end),
        "booking_timezone": booking.booking_timezone,
        "local_start_display": booking.local_start_display,
        "status": booking.status,
        "meet_url": booking.meet_url,
        "calendar_event_id": booking.calendar_event_id,
    }


@dataclass
class BookingService:
    repo: BookingRepository
    leads: LeadRepository
    default_timezone: str = "Asia/Dubai"
    open_hour: int = 8
    close_hour: int = 20
    slot_minutes: int = 15

    def _zone(self, name: Optional[str]) -> ZoneInfo:
        name = name or self.default_timezone
        if not TIMEZONE_KEY.fullmatch(name):
            raise APIException(400, "Invalid timezone", ok=False)
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            raise APIException(400, f"Unknown timezone: {name}", ok=False)

    def _aligned(self, local: datetime) -> bool:
        return local.minute % self.slot_minutes == 0 and local.second == 0 and local.microsecond == 0

    def validate_slot(self, start: datetime, end: datetime, tz: ZoneInfo, now: Optional[datetime] = None) -> None:
        now = to_utc(now or utcnow())
        if end <= start:
            raise APIException(400, "Slot end must be after slot start", ok=False)
        if start <= now:
            raise APIException(400, "Slot date cannot be in the past", ok=False)

        local_start, local_end = as_local(start, tz), as_local(end, tz)
        if not (self._aligned(local_start) and self._aligned(local_end)):
            raise APIException(400, f"Slots must align to {self.slot_minutes}-minute boundaries", ok=False)

        opens = local_start.replace(hour=self.open_hour, minute=0, second=0, microsecond=0)
        closes = local_start.replace(hour=self.close_hour, minute=0, second=0, microsecond=0)
        if local_start < opens or local_end > closes:
            raise APIException(
                400,
                f"Slots must fall between {self.open_hour:02d}:00 and {self.close_hour:02d}:00",
                ok=False,
            )

    def book(self, lead_id: str, selected_start: str, selected_end: str, booking_timezone: Optional[str] = None) -> Dict[str, Any]:
        if not lead_id or not selected_start or not selected_end:
            raise APIException(400, "Missing required fields: lead_id, selected_start, selected_end", ok=False)
        try:
            start = parse_instant(selected_start)
            end = parse_instant(selected_end)
        except ValueError:
            raise APIException(400, "Invalid date format", ok=False)

        tz = self._zone(booking_timezone)
        self.validate_slot(start, end, tz)

        lead = self.leads.get_by_id(lead_id)
        if not lead:
            raise APIException(404, "Lead not found", ok=False)

        if overlaps(start, end, self.repo.find_confirmed_between(start, end)):
            raise APIException(409, SLOT_TAKEN_MESSAGE, ok=False)

        try:
            booking = self.repo.create(
                lead_id=lead_id,
                selected_start=start,
                selected_end=end,
                booking_timezone=tz.key,
                local_start_display=format_long_display(as_local(start, tz)),
                customer_name=lead.full_name,
                customer_email=lead.email,
            )
        except SlotConflictError:
            logger.info(f"Slot {start.isoformat()} claimed concurrently; rejecting lead {lead_id}")
            raise APIException(409, SLOT_TAKEN_MESSAGE, ok=False)

        logger.info(f"[Booking] Created booking {booking.id} for lead {lead_id}")
        return {
            "ok": True,
            "booking_id": booking.id,
            "meet_url": booking.meet_url,
            "calendar_event_id": booking.calendar_event_id,
        }

    def get(self, booking_id: str) -> BookingDto:
        booking = self.repo.get(booking_id)
        if not booking:
            raise APIException(404, "Booking not found", ok=False)
        return booking

    def available_slots(self, now: Optional[datetime] = None, max_slots: int = 8, days_ahead: int = 7,
                        day_start_hour: int = 10, day_end_hour: int = 18, meeting_minutes: int = 15,
                        buffer_minutes: int = 15, lead_time_hours: int = 2) -> Dict[str, Any]:
        tz = self._zone(None)
        now = to_utc(now or utcnow())
        earliest = now + timedelta(hours=lead_time_hours)
        booked = self.repo.find_confirmed_between(earliest, earliest + timedelta(days=days_ahead + 1))

        local_now = as_local(now, tz)
        day = as_local(earliest, tz).replace(hour=0, minute=0, second=0, microsecond=0)
        slots: List[Dict[str, str]] = []
        for _ in range(days_ahead):
            current = day.replace(hour=day_start_hour)
            end_of_day = day.replace(hour=day_end_hour)
            while current < end_of_day and len(slots) < max_slots:
                start = to_utc(current)
                end = start + timedelta(minutes=meeting_minutes)
                if start >= earliest and not overlaps(start, end, booked):
                    slots.append({
                        "start": isoformat_utc(start),
                        "end": isoformat_utc(end),
                        "label": format_slot_label(current, local_now),
                    })
                current = current + timedelta(minutes=meeting_minutes + buffer_minutes)
            if len(slots) >= max_slots:
                break
            day = (day + timedelta(days=1)).replace(hour=0)

        return {"ok": True, "timezone": tz.key, "slots": slots}
