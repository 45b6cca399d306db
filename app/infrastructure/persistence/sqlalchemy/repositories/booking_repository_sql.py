import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Booking
from .....application.ports.booking_repo import BookingRepository, BookingDto, SlotConflictError

logger = logging.getLogger(__name__)


class SqlBookingRepository(BookingRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, b: Booking) -> BookingDto:
        return BookingDto(
            id=b.id,
            lead_id=b.lead_id,
            selected_start=b.selected_start,
            selected_end=b.selected_end,
            booking_timezone=b.booking_timezone,
            local_start_display=b.local_start_display,
            status=b.status,
            customer_name=b.customer_name,
            customer_email=b.customer_email,
            meet_url=b.meet_url,
            calendar_event_id=b.calendar_event_id,
            reminder_sent_at=b.reminder_sent_at,
            created_at=b.created_at,
        )

    def create(self, lead_id: str, selected_start: datetime, selected_end: datetime, booking_timezone: str,
               local_start_display: str, customer_name: str, customer_email: str) -> BookingDto:
        booking = Booking(
            lead_id=lead_id,
            selected_start=selected_start,
            selected_end=selected_end,
            booking_timezone=booking_timezone,
            local_start_display=local_start_display,
            customer_name=customer_name,
            customer_email=customer_email,
            status="confirmed",
        )
        self.session.add(booking)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Booking insert rejected by slot constraint: {e.orig}")
            raise SlotConflictError(f"{selected_start.isoformat()} - {selected_end.isoformat()}") from e
        self.session.refresh(booking)
        return self._to_dto(booking)

    def get(self, booking_id: str) -> Optional[BookingDto]:
        b = self.session.get(Booking, booking_id)
        return self._to_dto(b) if b else None

    def find_confirmed_between(self, start: datetime, end: datetime) -> List[BookingDto]:
        rows = self.session.exec(
            select(Booking)
            .where(Booking.status == "confirmed")
            .where(Booking.selected_start < end)
            .where(Booking.selected_end > start)
            .order_by(Booking.selected_start)
        ).all()
        return [self._to_dto(r) for r in rows]

    def due_for_reminder(self, window_start: datetime, window_end: datetime) -> List[BookingDto]:
        rows = self.session.exec(
            select(Booking)
            .where(Booking.status == "confirmed")
            .where(Booking.reminder_sent_at.is_(None))
            .where(Booking.selected_start >= window_start)
            .where(Booking.selected_start <= window_end)
            .order_by(Booking.selected_start)
        ).all()
        return [self._to_dto(r) for r in rows]

    def mark_reminder_sent(self, booking_id: str, sent_at: datetime) -> None:
        b = self.session.get(Booking, booking_id)
        if not b:
            return
        b.reminder_sent_at = sent_at
        self.session.add(b)
        self.session.commit()
