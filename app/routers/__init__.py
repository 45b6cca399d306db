# Routers package
from . import leads_router
from . import otp_router
from . import bookings_router
from . import admin_router
from . import cron_router
from . import metrics_router

__all__ = [
    "leads_router",
    "otp_router",
    "bookings_router",
    "admin_router",
    "cron_router",
    "metrics_router",
]
