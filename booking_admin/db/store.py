"""Bounded store calls.

Every statement the services send goes through here so that a slow or broken
database surfaces as ``StoreTimeoutError``/``StoreFailure`` instead of hanging
the request or leaking driver errors to the client.
"""
import asyncio
import logging
import time
from typing import Awaitable, TypeVar
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from booking_admin.core.config import settings
from booking_admin.core.errors import StoreFailure, StoreTimeoutError
from booking_admin.core.metrics import db_operations, db_query_duration

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], operation: str) -> T:
    start_time = time.time()
    try:
        result = await asyncio.wait_for(awaitable, timeout=settings.STORE_TIMEOUT)
        db_operations.labels(operation=operation, status="success").inc()
        return result
    except asyncio.TimeoutError as exc:
        db_operations.labels(operation=operation, status="timeout").inc()
        logger.error(f"Store call '{operation}' exceeded {settings.STORE_TIMEOUT}s")
        raise StoreTimeoutError(operation) from exc
    except SQLAlchemyError as exc:
        db_operations.labels(operation=operation, status="error").inc()
        logger.warning(f"Store call '{operation}' failed: {exc}")
        raise StoreFailure() from exc
    finally:
        db_query_duration.labels(operation=operation).observe(time.time() - start_time)


async def execute(db: AsyncSession, statement, operation: str):
    return await bounded(db.execute(statement), operation)


async def commit(db: AsyncSession, operation: str) -> None:
    await bounded(db.commit(), operation)
