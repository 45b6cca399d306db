# app/db/models/bookings/booking.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from datetime import datetime
import uuid

from ....db.types import UTCDateTime
from ....utils import utcnow


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint("selected_start", "selected_end", name="uq_bookings_slot"),
    )
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    lead_id: str = Field(foreign_key="leads.id", index=True)
    selected_start: datetime = Field(index=True, sa_type=UTCDateTime)
    selected_end: datetime = Field(sa_type=UTCDateTime)
    booking_timezone: str = Field(default="Asia/Dubai", max_length=64)
    local_start_display: Optional[str] = None
    status: str = Field(default="confirmed")  # confirmed, cancelled
    customer_name: str
    customer_email: str
    meet_url: Optional[str] = None
    calendar_event_id: Optional[str] = None
    reminder_sent_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
