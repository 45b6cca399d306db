from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from sqlalchemy import text
from sqlmodel import Session
import logging

# Load environment variables as early as possible
load_dotenv()

from .core.config import settings
from .db.session import create_db_and_tables, get_session
from .exceptions import http_exception_handler, validation_exception_handler
from .middleware import SecurityMiddleware, LoggingMiddleware, ErrorHandlingMiddleware, RequestSizeLimitMiddleware
from .routers import leads_router, otp_router, bookings_router, admin_router, cron_router, metrics_router
from .routers.deps import get_event_logger
from .utils import isoformat_utc, utcnow

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        app.state.db_init_error = str(e)
        logger.exception("Database initialization failed")
    event_logger = get_event_logger()
    event_logger.start()
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    event_logger.drain(timeout=5.0)
    event_logger.close()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)

origins = settings.allowed_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(leads_router.router)
app.include_router(otp_router.router)
app.include_router(bookings_router.router)
app.include_router(admin_router.router)
app.include_router(cron_router.router)
app.include_router(metrics_router.router)


@app.get("/health")
def health_check(session: Session = Depends(get_session)):
    checks = {
        "sms": settings.SMS_PROVIDER,
        "email": settings.EMAIL_PROVIDER,
        "rate_limiter": "redis" if settings.REDIS_URL else "memory",
    }
    try:
        session.exec(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        checks["database"] = "unhealthy"

    healthy = checks["database"] == "healthy" and getattr(app.state, "db_init_ok", True)
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": isoformat_utc(utcnow()),
            "checks": checks,
        },
    )
