from booking_admin.models.base import Base
from booking_admin.models.user import User
from booking_admin.models.pricing import Zone, VehicleBasePrice, ZoneMultiplier, FixedRoute
from booking_admin.models.audit import PricingChangeLog, BookingActivityLog, DriverActivityLog

__all__ = [
    "Base",
    "User",
    "Zone",
    "VehicleBasePrice",
    "ZoneMultiplier",
    "FixedRoute",
    "PricingChangeLog",
    "BookingActivityLog",
    "DriverActivityLog",
]
