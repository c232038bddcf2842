import httpx
import asyncio
import logging
from typing import Optional, Protocol
from fastapi import Depends
from booking_admin.core.config import settings
from booking_admin.core.metrics import cache_refresh_signals
from booking_admin.core.redis import get_redis
from booking_admin.core.security import oauth2_scheme

logger = logging.getLogger(__name__)

PRICING_TABLES_CACHE_KEY = "pricing:tables"


class CacheRefresher(Protocol):
    async def refresh(self) -> bool:
        ...


class PricingCacheRefresher:
    """Drops the local pricing snapshot and signals the downstream refresh endpoint.

    Never raises; returns False when any part of the signal failed.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = 5.0,
        retries: int = 1,
        auth_token: Optional[str] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.retries = max(retries, 1)
        self.auth_token = auth_token

    async def refresh(self) -> bool:
        local_ok = await self._drop_local_snapshot()
        remote_ok = await self._notify_downstream() if self.url else True
        ok = local_ok and remote_ok
        cache_refresh_signals.labels(status="success" if ok else "failure").inc()
        return ok

    async def _drop_local_snapshot(self) -> bool:
        redis = get_redis()
        if redis is None:
            return True
        try:
            await redis.delete(PRICING_TABLES_CACHE_KEY)
            return True
        except Exception as e:
            logger.warning(f"Pricing cache invalidation failed: {e}")
            return False

    async def _notify_downstream(self) -> bool:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"

        backoff = 0.5

        for attempt in range(1, self.retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json={"source": "pricing_update"}, headers=headers)

                    if 200 <= response.status_code < 300:
                        logger.info("Pricing cache refresh signalled")
                        return True
                    logger.warning(
                        f"Pricing cache refresh failed (attempt {attempt}/{self.retries}): "
                        f"Status {response.status_code}"
                    )
            except httpx.TimeoutException:
                logger.warning(f"Pricing cache refresh timeout (attempt {attempt}/{self.retries})")
            except Exception as e:
                logger.warning(f"Pricing cache refresh error (attempt {attempt}/{self.retries}): {e}")

            if attempt < self.retries:
                await asyncio.sleep(backoff)
                backoff *= 2.0

        logger.error(f"Pricing cache refresh failed after {self.retries} attempts")
        return False


def get_cache_refresher(token: Optional[str] = Depends(oauth2_scheme)) -> CacheRefresher:
    return PricingCacheRefresher(
        url=settings.CACHE_REFRESH_URL,
        timeout=settings.CACHE_REFRESH_TIMEOUT,
        retries=settings.CACHE_REFRESH_RETRIES,
        auth_token=token,
    )
