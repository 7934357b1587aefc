import asyncio
import logging
from typing import Awaitable, Callable

from core.cache import KeyValueStore

logger = logging.getLogger(__name__)

class RateLimiter:
    """Paces outbound requests to a provider to avoid throttling.

    The request counter lives in an injected store under ``key`` and expires
    after ``window`` seconds, so a quiet minute resets the count.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        requests_per_minute: int = 120,
        batch_size: int = 30,
        batch_pause: int = 15,
        window: int = 60,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """Initialize rate limiter with configurable parameters.

        Args:
            store: Store holding the request counter
            key: Counter key, one per provider
            requests_per_minute: Maximum requests per minute
            batch_size: Number of requests before pausing
            batch_pause: Seconds to pause after a batch
            window: Seconds before an idle counter resets
            sleep: Awaitable used for delays
        """
        self.store = store
        self.key = key
        self.request_interval = 60 / requests_per_minute  # Time between requests in seconds
        self.batch_size = batch_size
        self.batch_pause = batch_pause
        self.window = window
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def limit(self):
        """Apply rate limiting logic before making a request."""
        async with self._lock:
            count = await self.store.get(self.key) or 0

            if count > 0 and count % self.batch_size == 0:
                logger.info(f"⏸️ Pausing for {self.batch_pause}s after batch of {self.batch_size} requests...")
                await self._sleep(self.batch_pause)
                count = 0
            elif count > 0:
                await self._sleep(self.request_interval)

            await self.store.set(self.key, count + 1, ttl=self.window)
