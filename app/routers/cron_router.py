from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from .deps import get_email_sender, require_cron_secret
from ..application.ports.email_sender import EmailSender
from ..application.services.reminder_service import ReminderService
from ..db.session import get_session
from ..infrastructure.persistence.sqlalchemy.repositories.booking_repository_sql import SqlBookingRepository
from ..schemas.common.common import ReminderRunResponse

router = APIRouter(prefix="/cron", tags=["Cron"], dependencies=[Depends(require_cron_secret)])


@router.get("/reminders", response_model=ReminderRunResponse)
def send_reminders(request: Request, session: Session = Depends(get_session),
                   email: EmailSender = Depends(get_email_sender)):
    service = ReminderService(SqlBookingRepository(session), email)
    return service.send_due_reminders(str(request.base_url))
