# app/schemas/bookings/booking.py
from pydantic import BaseModel
from typing import List, Optional


class BookingCreate(BaseModel):
    lead_id: Optional[str] = None
    selected_start: Optional[str] = None
    selected_end: Optional[str] = None
    timezone: Optional[str] = None


class BookingCreateResponse(BaseModel):
    ok: bool = True
    booking_id: str
    meet_url: Optional[str] = None
    calendar_event_id: Optional[str] = None


class BookingDetail(BaseModel):
    id: str
    lead_id: str
    selected_start: str
    selected_end: str
    booking_timezone: str
    local_start_display: Optional[str] = None
    status: str
    meet_url: Optional[str] = None
    calendar_event_id: Optional[str] = None


class BookingDetailResponse(BaseModel):
    ok: bool = True
    booking: BookingDetail


class Slot(BaseModel):
    start: str
    end: str
    label: str


class SlotsResponse(BaseModel):
    ok: bool = True
    timezone: str
    slots: List[Slot]
