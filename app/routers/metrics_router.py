from fastapi import APIRouter, Depends
from sqlmodel import Session

from .deps import require_cron_secret
from ..application.services.metrics_service import MetricsService
from ..db.session import get_session
from ..infrastructure.persistence.sqlalchemy.repositories.metrics_repository_sql import SqlMetricsRepository
from ..schemas.metrics.metrics import MetricsSummaryResponse

router = APIRouter(prefix="/metrics", tags=["Metrics"], dependencies=[Depends(require_cron_secret)])


def get_metrics_service(session: Session = Depends(get_session)) -> MetricsService:
    return MetricsService(SqlMetricsRepository(session))


@router.get("/summary", response_model=MetricsSummaryResponse)
def metrics_summary(service: MetricsService = Depends(get_metrics_service)):
    return service.summary()
