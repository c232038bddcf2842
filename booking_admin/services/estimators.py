"""Distance and zone strategies used by the quote resolver.

Both defaults are stand-ins for a routing/geocoding service: the distance is a
random whole number of kilometres and every trip gets the same zone
multiplier. Swap them through the ``get_distance_estimator`` and
``get_zone_lookup`` dependencies.
"""
import random
from decimal import Decimal
from typing import Optional, Protocol
from booking_admin.core.config import settings


class DistanceEstimator(Protocol):
    async def estimate_km(self, origin: str, destination: str) -> Decimal:
        ...


class ZoneLookup(Protocol):
    async def multiplier_for(self, origin: str, destination: str) -> Decimal:
        ...


class RandomDistanceEstimator:
    def __init__(self, min_km: int, max_km: int, rng: Optional[random.Random] = None):
        if min_km < 0 or max_km < min_km:
            raise ValueError(f"Invalid distance range {min_km}-{max_km}km")
        self.min_km = min_km
        self.max_km = max_km
        self._rng = rng or random.Random()

    async def estimate_km(self, origin: str, destination: str) -> Decimal:
        return Decimal(self._rng.randint(self.min_km, self.max_km))


class FixedDistanceEstimator:
    def __init__(self, distance_km):
        self.distance_km = Decimal(str(distance_km))

    async def estimate_km(self, origin: str, destination: str) -> Decimal:
        return self.distance_km


class ConstantZoneLookup:
    def __init__(self, multiplier):
        self.multiplier = Decimal(str(multiplier))
        if self.multiplier <= 0:
            raise ValueError("Zone multiplier must be positive")

    async def multiplier_for(self, origin: str, destination: str) -> Decimal:
        return self.multiplier


def get_distance_estimator() -> DistanceEstimator:
    return RandomDistanceEstimator(settings.DISTANCE_MIN_KM, settings.DISTANCE_MAX_KM)


def get_zone_lookup() -> ZoneLookup:
    return ConstantZoneLookup(settings.DEFAULT_ZONE_MULTIPLIER)
