from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from booking_admin.db import store
from booking_admin.db.session import get_db
from booking_admin.models.audit import BookingActivityLog, DriverActivityLog
from booking_admin.schemas.activity import ActivityCreate, ActivityCreateResponse, ActivityLogOut
from booking_admin.core.audit_log import write_activity
from booking_admin.core.security import require_admin, require_roles
from booking_admin.core.enums import ActivityKind, UserRole
from booking_admin.core.errors import RequestValidationFailed
from booking_admin.core.response_builders import build_activity_response, build_activity_response_list

router = APIRouter(prefix="/activity", tags=["activity"])

require_staff = require_roles(UserRole.ADMIN, UserRole.SUPPORT)


@router.post("", response_model=ActivityCreateResponse)
async def log_activity(
    payload: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    if not payload.action or not (payload.booking_id or payload.driver_id):
        raise RequestValidationFailed("Missing required parameters")

    if payload.booking_id:
        kind, subject_id = ActivityKind.BOOKING, payload.booking_id
    else:
        kind, subject_id = ActivityKind.DRIVER, payload.driver_id

    entry = await write_activity(db, kind, subject_id, current_user.id, payload.action, payload.details)
    return ActivityCreateResponse(data=build_activity_response(entry))


@router.get("/bookings/{booking_id}", response_model=List[ActivityLogOut])
async def list_booking_activity(
    booking_id: str,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_staff)
):
    q = (
        select(BookingActivityLog)
        .where(BookingActivityLog.booking_id == booking_id)
        .order_by(BookingActivityLog.created_at)
        .limit(limit)
        .offset(offset)
    )
    res = await store.execute(db, q, "select_booking_activity")
    return build_activity_response_list(res.scalars().all())


@router.get("/drivers/{driver_id}", response_model=List[ActivityLogOut])
async def list_driver_activity(
    driver_id: str,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_staff)
):
    q = (
        select(DriverActivityLog)
        .where(DriverActivityLog.driver_id == driver_id)
        .order_by(DriverActivityLog.created_at)
        .limit(limit)
        .offset(offset)
    )
    res = await store.execute(db, q, "select_driver_activity")
    return build_activity_response_list(res.scalars().all())
