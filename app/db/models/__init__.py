# Models package (re-export feature modules for stable imports)
from .leads.lead import Lead
from .auth.otp import PhoneVerification, RetrievalToken
from .bookings.booking import Booking
from .security.suspicious_event import SuspiciousEvent

__all__ = [
    "Lead",
    "PhoneVerification",
    "RetrievalToken",
    "Booking",
    "SuspiciousEvent",
]
