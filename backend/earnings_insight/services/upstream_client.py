"""
Upstream Client for Earnings Insight

Thin async wrapper around the market/economic data provider REST API.
Every call sends the shared API key in the X-Api-Key header and is bounded
by a per-call timeout.

Outcomes:
- OK: HTTP 200 with a parseable JSON body
- NOT_FOUND: HTTP 404 (callers usually read this as "feature unavailable")
- PROVIDER_ERROR: any other HTTP status
- TIMEOUT: the call exceeded the configured timeout
- NETWORK_ERROR: connection/transport failure
- PARSE_ERROR: HTTP 200 but the body is not valid JSON

The client never retries. Callers decide the fallback policy.
"""

import aiohttp
import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import ParseError, UpstreamUnavailable

logger = logging.getLogger(__name__)

class FetchStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    PARSE_ERROR = "parse_error"

@dataclass(frozen=True)
class UpstreamResult:
    status: FetchStatus
    data: Any = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK

    def unwrap(self) -> Any:
        """Return the payload or raise the matching pipeline error"""
        if self.ok:
            return self.data
        if self.status is FetchStatus.PARSE_ERROR:
            raise ParseError(self.error or "Malformed upstream payload")
        raise UpstreamUnavailable(self.error or f"Upstream {self.status.value}")

class UpstreamClient:
    """
    Provider API client - one GET per call, classified outcome, no retries
    """

    def __init__(self, api_key: Optional[str], base_url: str = "https://api.api-ninjas.com", timeout: float = 10):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> UpstreamResult:
        """
        GET a provider endpoint

        Args:
            path: Endpoint path, e.g. '/v1/stockprice'
            params: Query parameters (URL-encoded by aiohttp)

        Returns:
            UpstreamResult describing the outcome
        """
        url = f"{self.base_url}{path}"
        headers = {"X-Api-Key": self.api_key or ""}
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params, headers=headers) as response:
                    if response.status == 200:
                        try:
                            data = await response.json(content_type=None)
                        except ValueError as e:
                            logger.error(f"Failed to parse JSON from {path}: {str(e)}")
                            return UpstreamResult(FetchStatus.PARSE_ERROR, status_code=200,
                                                  error=f"Failed to parse JSON from {path}")
                        return UpstreamResult(FetchStatus.OK, data=data, status_code=200)

                    if response.status == 404:
                        logger.info(f"Upstream {path} returned 404")
                        return UpstreamResult(FetchStatus.NOT_FOUND, status_code=404,
                                              error=f"Not found: {path}")

                    logger.warning(f"Upstream error {response.status} for {path}")
                    return UpstreamResult(FetchStatus.PROVIDER_ERROR, status_code=response.status,
                                          error=f"API error: {response.status}")

        except asyncio.TimeoutError:
            logger.error(f"Timeout fetching {path}")
            return UpstreamResult(FetchStatus.TIMEOUT, error=f"Timeout fetching {path}")
        except aiohttp.ClientError as e:
            logger.error(f"Network error fetching {path}: {str(e)}")
            return UpstreamResult(FetchStatus.NETWORK_ERROR, error=f"Network error fetching {path}: {str(e)}")
