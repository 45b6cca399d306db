from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from .deps import rate_limit
from ..application.services.booking_service import BookingService, booking_to_dict
from ..application.services.calendar_service import build_ics, ics_filename
from ..core.config import settings
from ..db.session import get_session
from ..exceptions import APIException
from ..infrastructure.persistence.sqlalchemy.repositories.booking_repository_sql import SqlBookingRepository
from ..infrastructure.persistence.sqlalchemy.repositories.lead_repository_sql import SqlLeadRepository
from ..schemas.bookings.booking import BookingCreate, BookingCreateResponse, BookingDetailResponse, SlotsResponse

router = APIRouter(tags=["Bookings"])

booking_limit = rate_limit("bookings", settings.PUBLIC_RATE_LIMIT_MAX, settings.PUBLIC_RATE_LIMIT_WINDOW_SEC)


def get_booking_service(session: Session = Depends(get_session)) -> BookingService:
    return BookingService(
        SqlBookingRepository(session),
        SqlLeadRepository(session),
        default_timezone=settings.BOOKING_TIMEZONE,
        open_hour=settings.BOOKING_OPEN_HOUR,
        close_hour=settings.BOOKING_CLOSE_HOUR,
        slot_minutes=settings.BOOKING_SLOT_MINUTES,
    )


@router.get("/slots", response_model=SlotsResponse)
def list_slots(service: BookingService = Depends(get_booking_service)):
    return service.available_slots()


@router.post("/bookings", status_code=201, response_model=BookingCreateResponse, dependencies=[Depends(booking_limit)])
def create_booking(payload: BookingCreate, service: BookingService = Depends(get_booking_service)):
    return service.book(payload.lead_id, payload.selected_start, payload.selected_end, payload.timezone)


@router.get("/bookings/{booking_id}", response_model=BookingDetailResponse)
def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    return {"ok": True, "booking": booking_to_dict(service.get(booking_id))}


@router.get("/ics")
def download_ics(booking_id: str = "", service: BookingService = Depends(get_booking_service)):
    if not booking_id:
        raise APIException(400, "Missing booking_id", ok=False)
    booking = service.get(booking_id)
    return Response(
        content=build_ics(booking),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{ics_filename(booking.id)}"'},
    )
