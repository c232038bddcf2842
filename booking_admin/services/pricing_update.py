"""Bulk updates of the pricing tables with a before/after change log.

Each incoming row is its own unit of work: it is inserted or updated and
committed, then its change-log entry is written. A failing row is counted and
skipped, the rest of the batch carries on.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Tuple, Type

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from booking_admin.db import store
from booking_admin.models.base import BaseModel
from booking_admin.models.pricing import VehicleBasePrice, ZoneMultiplier, FixedRoute, Zone
from booking_admin.schemas.pricing import (
    CollectionResult,
    PendingRow,
    PricingRowIn,
    PricingUpdateRequest,
    PricingUpdateResults,
)
from booking_admin.core.audit_log import log_pricing_change
from booking_admin.core.enums import PricingChangeType, PricingCollection
from booking_admin.core.errors import BookingAdminError, RequestValidationFailed, check_not_found
from booking_admin.core.metrics import pricing_rows_processed
from booking_admin.services.cache_refresh import CacheRefresher

logger = logging.getLogger(__name__)


def _normalize(value):
    if value is None:
        return None
    return Decimal(value).normalize()


@dataclass(frozen=True)
class PricingTable:
    collection: PricingCollection
    label: str
    model: Type[BaseModel]
    change_type: PricingChangeType
    fields: Tuple[str, ...]
    decimal_fields: Tuple[str, ...]
    empty_shape: dict
    created_note: str
    updated_note: str
    positive_fields: Tuple[str, ...] = field(default=())

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def snapshot(self, values: dict) -> dict:
        return {
            name: float(values[name]) if name in self.decimal_fields and values[name] is not None else values[name]
            for name in self.fields
        }

    def comparable(self, values: dict) -> tuple:
        return tuple(
            _normalize(values[name]) if name in self.decimal_fields else values[name]
            for name in self.fields
        )

    def validate(self, values: dict) -> None:
        missing = [name for name in self.fields if values.get(name) in (None, "")]
        if missing:
            raise RequestValidationFailed(f"{self.label} is missing {', '.join(missing)}")
        for name in self.decimal_fields:
            if name in self.positive_fields and values[name] <= 0:
                raise RequestValidationFailed(f"{self.label} {name} must be greater than 0")
            if values[name] < 0:
                raise RequestValidationFailed(f"{self.label} {name} must not be negative")


VEHICLE_PRICES = PricingTable(
    collection=PricingCollection.VEHICLE_PRICES,
    label="Vehicle base price",
    model=VehicleBasePrice,
    change_type=PricingChangeType.BASE_PRICE,
    fields=("vehicle_type", "base_price_per_km"),
    decimal_fields=("base_price_per_km",),
    empty_shape={"vehicle_type": "", "base_price_per_km": 0},
    created_note="New vehicle base price added",
    updated_note="Vehicle base price updated",
)

ZONE_MULTIPLIERS = PricingTable(
    collection=PricingCollection.ZONE_MULTIPLIERS,
    label="Zone multiplier",
    model=ZoneMultiplier,
    change_type=PricingChangeType.ZONE_MULTIPLIER,
    fields=("zone_id", "multiplier"),
    decimal_fields=("multiplier",),
    empty_shape={"zone_id": None, "multiplier": 1.0},
    created_note="New zone multiplier added",
    updated_note="Zone multiplier updated",
    positive_fields=("multiplier",),
)

FIXED_ROUTES = PricingTable(
    collection=PricingCollection.FIXED_ROUTES,
    label="Fixed route",
    model=FixedRoute,
    change_type=PricingChangeType.FIXED_ROUTE,
    fields=("origin_name", "destination_name", "vehicle_type", "fixed_price"),
    decimal_fields=("fixed_price",),
    empty_shape={"origin_name": "", "destination_name": "", "vehicle_type": "", "fixed_price": 0},
    created_note="New fixed route added",
    updated_note="Fixed route updated",
)


class PricingUpdater:

    def __init__(self, db: AsyncSession, actor_id: str, cache_refresher: Optional[CacheRefresher] = None):
        self.db = db
        self.actor_id = str(actor_id)
        self.cache_refresher = cache_refresher

    async def apply(self, request: PricingUpdateRequest) -> PricingUpdateResults:
        results = PricingUpdateResults(
            vehicle_prices=await self._apply_collection(VEHICLE_PRICES, request.vehicle_prices),
            zone_multipliers=await self._apply_collection(ZONE_MULTIPLIERS, request.zone_multipliers),
            fixed_routes=await self._apply_collection(FIXED_ROUTES, request.fixed_routes),
        )
        await self._signal_cache_refresh()
        return results

    async def _apply_collection(self, table: PricingTable, items: Iterable[Optional[PricingRowIn]]) -> CollectionResult:
        result = CollectionResult()

        for item in items:
            if item is None:
                continue
            try:
                await self._apply_row(table, item)
            except BookingAdminError as e:
                await self._rollback(table)
                result.error += 1
                pricing_rows_processed.labels(collection=str(table.collection), outcome="error").inc()
                logger.warning(f"Error processing {table.collection} row {item.id}: {e.message}")
                continue

            result.success += 1
            pricing_rows_processed.labels(collection=str(table.collection), outcome="success").inc()

        return result

    async def _rollback(self, table: PricingTable) -> None:
        try:
            await store.bounded(self.db.rollback(), f"rollback_{table.table_name}")
        except Exception as e:
            logger.error(f"Rollback after failed {table.collection} row did not complete: {e}", exc_info=True)

    async def _apply_row(self, table: PricingTable, item: PricingRowIn) -> None:
        ref = item.ref
        values = item.values()
        if isinstance(ref, PendingRow):
            await self._insert(table, values)
        else:
            await self._update(table, ref.id, values)

    async def _insert(self, table: PricingTable, values: dict) -> None:
        table.validate(values)
        await self._check_zone(table, values)

        row = table.model(**{name: values[name] for name in table.fields})
        self.db.add(row)
        await store.commit(self.db, f"insert_{table.table_name}")

        await log_pricing_change(
            self.db,
            self.actor_id,
            table.change_type,
            row.id,
            dict(table.empty_shape),
            table.snapshot(values),
            table.created_note,
        )

    async def _update(self, table: PricingTable, row_id: str, values: dict) -> None:
        res = await store.execute(
            self.db,
            select(table.model).where(table.model.id == row_id),
            f"select_{table.table_name}",
        )
        row = res.scalars().first()
        check_not_found(row, table.label, row_id)

        current = {name: getattr(row, name) for name in table.fields}
        target = {**current, **values}
        table.validate(target)
        if target.get("zone_id") != current.get("zone_id"):
            await self._check_zone(table, target)

        for name, value in values.items():
            setattr(row, name, value)
        await store.commit(self.db, f"update_{table.table_name}")

        if table.comparable(current) == table.comparable(target):
            logger.debug(f"{table.label} {row_id} unchanged, no change log written")
            return

        await log_pricing_change(
            self.db,
            self.actor_id,
            table.change_type,
            row_id,
            table.snapshot(current),
            table.snapshot(target),
            table.updated_note,
        )

    async def _check_zone(self, table: PricingTable, values: dict) -> None:
        if "zone_id" not in table.fields:
            return
        res = await store.execute(self.db, select(Zone.id).where(Zone.id == values["zone_id"]), "select_zone")
        check_not_found(res.scalars().first(), "Zone", values["zone_id"])

    async def _signal_cache_refresh(self) -> None:
        if self.cache_refresher is None:
            return
        try:
            if not await self.cache_refresher.refresh():
                logger.warning("Pricing cache refresh signal failed, changes were still applied")
        except Exception as e:
            logger.warning(f"Error refreshing pricing cache: {e}", exc_info=True)
