# Schemas package (re-export feature modules for stable imports)
from .leads.lead import *
from .otp.otp import *
from .bookings.booking import *
from .common.common import *
from .metrics.metrics import *
