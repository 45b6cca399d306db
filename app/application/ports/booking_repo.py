from dataclasses import dataclass
from typing import List, Optional, Protocol
from datetime import datetime


class SlotConflictError(Exception):
    """Raised when the slot uniqueness constraint rejects an insert."""


@dataclass
class BookingDto:
    id: str
    lead_id: str
    selected_start: datetime
    selected_end: datetime
    booking_timezone: str
    local_start_display: Optional[str]
    status: str
    customer_name: str
    customer_email: str
    meet_url: Optional[str]
    calendar_event_id: Optional[str]
    reminder_sent_at: Optional[datetime]
    created_at: datetime


class BookingRepository(Protocol):
    def create(self, lead_id: str, selected_start: datetime, selected_end: datetime, booking_timezone: str,
               local_start_display: str, customer_name: str, customer_email: str) -> BookingDto:
        ...

    def get(self, booking_id: str) -> Optional[BookingDto]:
        ...

    def find_confirmed_between(self, start: datetime, end: datetime) -> List[BookingDto]:
        ...

    def due_for_reminder(self, window_start: datetime, window_end: datetime) -> List[BookingDto]:
        ...

    def mark_reminder_sent(self, booking_id: str, sent_at: datetime) -> None:
        ...
