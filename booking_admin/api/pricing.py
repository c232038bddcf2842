"""Pricing endpoints: quotes, bulk updates, tables and change logs"""
import json
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from booking_admin.db import store
from booking_admin.db.session import get_db
from booking_admin.models.audit import PricingChangeLog
from booking_admin.schemas.quote import QuoteRequest, PriceQuote
from booking_admin.schemas.pricing import (
    PricingUpdateRequest,
    PricingUpdateResponse,
    PricingTablesOut,
    PricingChangeLogOut,
)
from booking_admin.services.pricing import PriceResolver, load_pricing_tables
from booking_admin.services.pricing_update import PricingUpdater
from booking_admin.services.estimators import DistanceEstimator, ZoneLookup, get_distance_estimator, get_zone_lookup
from booking_admin.services.cache_refresh import CacheRefresher, get_cache_refresher, PRICING_TABLES_CACHE_KEY
from booking_admin.core.security import require_admin, require_roles
from booking_admin.core.enums import UserRole, PricingChangeType
from booking_admin.core.errors import RequestValidationFailed
from booking_admin.core.redis import get_redis
from booking_admin.core.metrics import cache_hits, cache_misses
from booking_admin.core.response_builders import build_pricing_change_log_response_list
from booking_admin.core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get("", response_model=PricingTablesOut)
async def get_pricing_tables(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_roles(UserRole.ADMIN, UserRole.PARTNER))
):
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(PRICING_TABLES_CACHE_KEY)
            if cached:
                cache_hits.labels(cache_key=PRICING_TABLES_CACHE_KEY).inc()
                return PricingTablesOut.model_validate(json.loads(cached))
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")

    cache_misses.labels(cache_key=PRICING_TABLES_CACHE_KEY).inc()
    tables = await load_pricing_tables(db)

    if redis is not None:
        try:
            await redis.set(
                PRICING_TABLES_CACHE_KEY,
                tables.model_dump_json(by_alias=True),
                ex=settings.PRICING_CACHE_TTL
            )
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return tables


@router.post("/quote", response_model=PriceQuote)
async def quote_price(
    req: QuoteRequest,
    db: AsyncSession = Depends(get_db),
    distance_estimator: DistanceEstimator = Depends(get_distance_estimator),
    zone_lookup: ZoneLookup = Depends(get_zone_lookup),
    current_user=Depends(require_admin)
):
    resolver = PriceResolver(db, distance_estimator, zone_lookup)
    return await resolver.quote(req.origin, req.destination, req.vehicle_type)


@router.post("/update", response_model=PricingUpdateResponse)
async def update_pricing(
    payload: PricingUpdateRequest,
    db: AsyncSession = Depends(get_db),
    cache_refresher: CacheRefresher = Depends(get_cache_refresher),
    current_user=Depends(require_admin)
):
    if payload.is_empty():
        raise RequestValidationFailed("Missing required pricing data")

    updater = PricingUpdater(db, current_user.id, cache_refresher)
    results = await updater.apply(payload)
    logger.info(
        f"Pricing update by {current_user.id}: "
        f"{results.model_dump_json(by_alias=True)}"
    )
    return PricingUpdateResponse(results=results)


@router.get("/logs", response_model=List[PricingChangeLogOut])
async def list_pricing_change_logs(
    change_type: Optional[PricingChangeType] = Query(None),
    record_id: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    q = select(PricingChangeLog)

    if change_type:
        q = q.where(PricingChangeLog.change_type == change_type)
    if record_id:
        q = q.where(PricingChangeLog.record_id == record_id)

    q = q.order_by(PricingChangeLog.created_at.desc()).limit(limit).offset(offset)
    res = await store.execute(db, q, "select_pricing_change_logs")

    return build_pricing_change_log_response_list(res.scalars().all())
