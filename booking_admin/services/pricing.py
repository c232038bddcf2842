import logging
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from booking_admin.db import store
from booking_admin.models.pricing import VehicleBasePrice, ZoneMultiplier, FixedRoute
from booking_admin.schemas.quote import PriceQuote, BreakdownLine
from booking_admin.schemas.pricing import PricingTablesOut
from booking_admin.core.errors import check_not_found
from booking_admin.core.response_builders import build_pricing_tables_response
from booking_admin.services.estimators import DistanceEstimator, ZoneLookup

logger = logging.getLogger(__name__)

FIXED_ROUTE_LINE = "Fixed Route Price"
ZONE_ADJUSTMENT_LINE = "Zone Multiplier Adjustment"


def format_amount(value: Decimal) -> str:
    """2.00 -> '2', 2.50 -> '2.5', 20 -> '20'"""
    return f"{Decimal(value).normalize():f}"


class PriceResolver:
    """Read-only quote computation: fixed route first, per-km rate otherwise."""

    def __init__(self, db: AsyncSession, distance_estimator: DistanceEstimator, zone_lookup: ZoneLookup):
        self.db = db
        self.distance_estimator = distance_estimator
        self.zone_lookup = zone_lookup

    async def quote(self, origin: str, destination: str, vehicle_type: str) -> PriceQuote:
        route = await self._find_fixed_route(origin, destination, vehicle_type)
        if route is not None:
            logger.info(f"Fixed route quote {origin} -> {destination} ({vehicle_type}): {route.fixed_price}")
            fixed_price = Decimal(route.fixed_price)
            return PriceQuote(
                distance_km=Decimal("0"),
                base_price=fixed_price,
                zone_multiplier=Decimal("1"),
                final_price=fixed_price,
                breakdown=[BreakdownLine(description=FIXED_ROUTE_LINE, amount=fixed_price)],
                is_fixed_route=True,
            )

        vehicle_price = await self._find_vehicle_price(vehicle_type)
        check_not_found(vehicle_price, "Vehicle type")

        per_km = Decimal(vehicle_price.base_price_per_km)
        distance_km = await self.distance_estimator.estimate_km(origin, destination)
        base_price = per_km * distance_km

        zone_multiplier = await self.zone_lookup.multiplier_for(origin, destination)
        final_price = base_price * zone_multiplier

        breakdown = [
            BreakdownLine(
                description=f"Base Rate ({format_amount(distance_km)}km × €{format_amount(per_km)}/km)",
                amount=base_price,
            ),
            BreakdownLine(
                description=ZONE_ADJUSTMENT_LINE,
                amount=base_price * (zone_multiplier - 1),
            ),
        ]
        return PriceQuote(
            distance_km=distance_km,
            base_price=base_price,
            zone_multiplier=zone_multiplier,
            final_price=final_price,
            breakdown=breakdown,
            is_fixed_route=False,
        )

    async def _find_fixed_route(self, origin: str, destination: str, vehicle_type: str):
        res = await store.execute(
            self.db,
            select(FixedRoute).where(
                FixedRoute.origin_name == origin,
                FixedRoute.destination_name == destination,
                FixedRoute.vehicle_type == vehicle_type,
            ),
            "select_fixed_route",
        )
        return res.scalars().first()

    async def _find_vehicle_price(self, vehicle_type: str):
        res = await store.execute(
            self.db,
            select(VehicleBasePrice).where(VehicleBasePrice.vehicle_type == vehicle_type),
            "select_vehicle_price",
        )
        return res.scalars().first()


async def load_pricing_tables(db: AsyncSession) -> PricingTablesOut:
    vehicle_prices = await store.execute(
        db, select(VehicleBasePrice).order_by(VehicleBasePrice.vehicle_type), "select_vehicle_prices"
    )
    zone_multipliers = await store.execute(
        db, select(ZoneMultiplier).order_by(ZoneMultiplier.created_at), "select_zone_multipliers"
    )
    fixed_routes = await store.execute(
        db,
        select(FixedRoute).order_by(FixedRoute.origin_name, FixedRoute.destination_name, FixedRoute.vehicle_type),
        "select_fixed_routes",
    )
    return build_pricing_tables_response(
        vehicle_prices.scalars().all(),
        zone_multipliers.scalars().all(),
        fixed_routes.scalars().all(),
    )
