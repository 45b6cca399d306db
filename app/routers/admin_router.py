from typing import Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session

from .deps import require_admin
from ..application.services.lead_service import LeadService
from ..db.session import get_session
from ..infrastructure.persistence.sqlalchemy.repositories.lead_repository_sql import SqlLeadRepository
from ..schemas.common.common import MessageResponse
from ..schemas.leads.lead import LeadListResponse, LeadStatusUpdate

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


def get_admin_lead_service(session: Session = Depends(get_session)) -> LeadService:
    # Admin reads never issue tokens or log abuse signals
    return LeadService(SqlLeadRepository(session), tokens=None, event_logger=None)


@router.get("/leads", response_model=LeadListResponse)
def list_leads(grade: Optional[str] = None, status: Optional[str] = None,
               service: LeadService = Depends(get_admin_lead_service)):
    leads = service.list_leads(grade=grade, status=status)
    return {"leads": leads, "total": len(leads)}


@router.patch("/leads/{lead_id}/status", response_model=MessageResponse)
def update_lead_status(lead_id: str, payload: LeadStatusUpdate,
                       service: LeadService = Depends(get_admin_lead_service)):
    service.update_status(lead_id, payload.status)
    return {"message": f"Lead status updated to {payload.status}"}
