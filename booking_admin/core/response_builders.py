from typing import Iterable, List
from booking_admin.core.enums import ActivityKind
from booking_admin.models.audit import BookingActivityLog, DriverActivityLog, PricingChangeLog
from booking_admin.models.pricing import VehicleBasePrice, ZoneMultiplier, FixedRoute
from booking_admin.schemas.activity import ActivityLogOut
from booking_admin.schemas.pricing import (
    VehicleBasePriceOut,
    ZoneMultiplierOut,
    FixedRouteOut,
    PricingTablesOut,
    PricingChangeLogOut,
)


def build_vehicle_price_response(row: VehicleBasePrice) -> VehicleBasePriceOut:
    return VehicleBasePriceOut(
        id=row.id,
        vehicle_type=row.vehicle_type,
        base_price_per_km=row.base_price_per_km,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def build_zone_multiplier_response(row: ZoneMultiplier) -> ZoneMultiplierOut:
    return ZoneMultiplierOut(
        id=row.id,
        zone_id=row.zone_id,
        multiplier=row.multiplier,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def build_fixed_route_response(row: FixedRoute) -> FixedRouteOut:
    return FixedRouteOut(
        id=row.id,
        origin_name=row.origin_name,
        destination_name=row.destination_name,
        vehicle_type=row.vehicle_type,
        fixed_price=row.fixed_price,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def build_pricing_tables_response(
    vehicle_prices: Iterable[VehicleBasePrice],
    zone_multipliers: Iterable[ZoneMultiplier],
    fixed_routes: Iterable[FixedRoute],
) -> PricingTablesOut:
    return PricingTablesOut(
        vehicle_prices=[build_vehicle_price_response(row) for row in vehicle_prices],
        zone_multipliers=[build_zone_multiplier_response(row) for row in zone_multipliers],
        fixed_routes=[build_fixed_route_response(row) for row in fixed_routes],
    )


def build_pricing_change_log_response(entry: PricingChangeLog) -> PricingChangeLogOut:
    return PricingChangeLogOut(
        id=entry.id,
        changed_by=entry.changed_by,
        change_type=entry.change_type,
        record_id=entry.record_id,
        previous_value=entry.previous_value,
        new_value=entry.new_value,
        notes=entry.notes,
        created_at=entry.created_at,
    )


def build_activity_response(entry) -> ActivityLogOut:
    if isinstance(entry, BookingActivityLog):
        kind, subject_id, actor_id = ActivityKind.BOOKING, entry.booking_id, entry.user_id
    elif isinstance(entry, DriverActivityLog):
        kind, subject_id, actor_id = ActivityKind.DRIVER, entry.driver_id, entry.admin_id
    else:
        raise TypeError(f"Not an activity log entry: {type(entry).__name__}")
    return ActivityLogOut(
        id=entry.id,
        kind=kind,
        subject_id=subject_id,
        actor_id=actor_id,
        action=entry.action,
        details=entry.details or {},
        created_at=entry.created_at,
    )


def build_activity_response_list(entries: Iterable) -> List[ActivityLogOut]:
    return [build_activity_response(entry) for entry in entries]


def build_pricing_change_log_response_list(entries: Iterable[PricingChangeLog]) -> List[PricingChangeLogOut]:
    return [build_pricing_change_log_response(entry) for entry in entries]
