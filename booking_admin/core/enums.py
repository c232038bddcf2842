from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SUPPORT = "support"
    PARTNER = "partner"
    CUSTOMER = "customer"

    def __str__(self):
        return self.value


class PricingChangeType(str, Enum):
    BASE_PRICE = "base_price"
    ZONE_MULTIPLIER = "zone_multiplier"
    FIXED_ROUTE = "fixed_route"

    def __str__(self):
        return self.value


class ActivityKind(str, Enum):
    BOOKING = "booking"
    DRIVER = "driver"

    def __str__(self):
        return self.value


class PricingCollection(str, Enum):
    """Keys of the bulk pricing update payload and its results summary."""
    VEHICLE_PRICES = "vehiclePrices"
    ZONE_MULTIPLIERS = "zoneMultipliers"
    FIXED_ROUTES = "fixedRoutes"

    def __str__(self):
        return self.value
