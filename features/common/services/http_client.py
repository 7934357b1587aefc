import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.config import settings
from features.common.exceptions.forecast_exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


class HttpClient:
    """Base for upstream API clients.

    Every request carries a bounded timeout. Transport errors, timeouts and
    non-2xx responses all surface as SourceUnavailableError so callers can
    fall back the same way regardless of cause.
    """

    source_name = "http"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None
    ):
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.request_timeout)

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self):
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        as_json: bool = True
    ) -> Any:
        session = await self._init_session()
        try:
            async with session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout
            ) as response:
                response.raise_for_status()
                if not as_json:
                    return await response.text()
                if response.status == 202 or response.content_length == 0:
                    return {}
                return await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise SourceUnavailableError(self.source_name, f"timed out after {self.timeout.total}s")
        except aiohttp.ClientResponseError as e:
            raise SourceUnavailableError(self.source_name, f"HTTP {e.status} {e.message}")
        except (aiohttp.ClientError, ValueError) as e:
            raise SourceUnavailableError(self.source_name, str(e))

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                       headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._request("GET", url, params=params, headers=headers)

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        return await self._request("GET", url, params=params, as_json=False)

    async def post_json(self, url: str, payload: Dict[str, Any],
                        headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._request("POST", url, json=payload, headers=headers)
