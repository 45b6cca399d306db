from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from .deps import get_client_context, get_event_logger, rate_limit
from ..application.ports.audit_logger import SuspiciousEventLogger
from ..application.services.lead_service import LeadService
from ..application.services.token_service import TokenService
from ..core.config import settings
from ..db.session import get_session
from ..infrastructure.persistence.sqlalchemy.repositories.lead_repository_sql import SqlLeadRepository
from ..infrastructure.persistence.sqlalchemy.repositories.token_repository_sql import SqlRetrievalTokenRepository
from ..schemas.leads.lead import LeadCreate, LeadCreateResponse, LeadRetrieveResponse, LeadSummaryResponse

router = APIRouter(prefix="/leads", tags=["Leads"])

public_limit = rate_limit("leads", settings.PUBLIC_RATE_LIMIT_MAX, settings.PUBLIC_RATE_LIMIT_WINDOW_SEC)
retrieve_limit = rate_limit("leads-retrieve", settings.PUBLIC_RATE_LIMIT_MAX, settings.PUBLIC_RATE_LIMIT_WINDOW_SEC)
lookup_limit = rate_limit("leads-lookup", settings.PUBLIC_RATE_LIMIT_MAX, settings.PUBLIC_RATE_LIMIT_WINDOW_SEC)


def get_lead_service(
    session: Session = Depends(get_session),
    events: SuspiciousEventLogger = Depends(get_event_logger),
) -> LeadService:
    tokens = TokenService(SqlRetrievalTokenRepository(session), settings.RETRIEVAL_TOKEN_EXPIRY_MINUTES)
    return LeadService(
        SqlLeadRepository(session),
        tokens,
        events,
        min_fill_ms=settings.FORM_MIN_FILL_MS,
        max_fill_ms=settings.FORM_MAX_FILL_MS,
    )


@router.post("", response_model=LeadCreateResponse, dependencies=[Depends(public_limit)])
def create_lead(payload: LeadCreate, request: Request, service: LeadService = Depends(get_lead_service)):
    return service.capture(payload.model_dump(by_alias=True), get_client_context(request))


@router.get("/retrieve", response_model=LeadRetrieveResponse, dependencies=[Depends(retrieve_limit)])
def retrieve_lead(request: Request, token: str = "", service: LeadService = Depends(get_lead_service)):
    return service.retrieve(token, get_client_context(request))


@router.get("/{lead_id}", response_model=LeadSummaryResponse, dependencies=[Depends(lookup_limit)])
def get_lead(lead_id: str, service: LeadService = Depends(get_lead_service)):
    return service.get_summary(lead_id)
