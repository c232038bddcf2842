"""Append-only audit trails: booking/driver activity and pricing changes.

The ``record_*``/``log_*`` helpers are best-effort: a failure is logged, the
session is rolled back and the caller carries on. They commit on their own,
so callers must commit their primary change first.
"""
import logging
from typing import Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession
from booking_admin.db import store
from booking_admin.models.audit import BookingActivityLog, DriverActivityLog, PricingChangeLog
from booking_admin.core.enums import ActivityKind, PricingChangeType
from booking_admin.core.metrics import activity_logs_created, pricing_changes_logged

logger = logging.getLogger(__name__)

ActivityLog = Union[BookingActivityLog, DriverActivityLog]


async def write_activity(
    db: AsyncSession,
    kind: ActivityKind,
    subject_id: str,
    actor_id: str,
    action: str,
    details: Optional[dict] = None
) -> ActivityLog:
    """Append an activity record and commit it. Raises on failure."""
    if kind == ActivityKind.BOOKING:
        entry = BookingActivityLog(
            booking_id=str(subject_id),
            user_id=str(actor_id),
            action=action,
            details=details or {},
        )
    else:
        entry = DriverActivityLog(
            driver_id=str(subject_id),
            admin_id=str(actor_id),
            action=action,
            details=details or {},
        )

    db.add(entry)
    await store.commit(db, f"insert_{kind}_activity")
    activity_logs_created.labels(kind=str(kind)).inc()
    return entry


async def record_activity(
    db: AsyncSession,
    kind: ActivityKind,
    subject_id: str,
    actor_id: str,
    action: str,
    details: Optional[dict] = None
) -> Optional[ActivityLog]:

    try:
        return await write_activity(db, kind, subject_id, actor_id, action, details)
    except Exception as e:
        logger.error(f"Activity logging failed for {kind} {subject_id} ({action}): {e}", exc_info=True)
        await db.rollback()
        return None


async def log_pricing_change(
    db: AsyncSession,
    changed_by: str,
    change_type: PricingChangeType,
    record_id: Optional[str],
    previous_value: dict,
    new_value: dict,
    notes: Optional[str] = None
) -> Optional[PricingChangeLog]:

    try:
        entry = PricingChangeLog(
            changed_by=str(changed_by),
            change_type=change_type,
            record_id=record_id,
            previous_value=previous_value,
            new_value=new_value,
            notes=notes,
        )
        db.add(entry)
        await store.commit(db, "insert_pricing_change_log")
        pricing_changes_logged.labels(change_type=str(change_type)).inc()
        return entry
    except Exception as e:
        logger.error(f"Pricing change logging failed for {change_type} {record_id}: {e}", exc_info=True)
        await db.rollback()
        return None
