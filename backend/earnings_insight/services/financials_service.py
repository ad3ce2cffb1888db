"""
Financials Service for Earnings Insight

Raw quarterly earnings financials (income statement, balance sheet, cash
flow) for a ticker. Asks for the most recently filed quarter and, if the
provider has nothing for it yet, tries the quarter before once.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from ..errors import DataNotFound
from ..utils.fiscal_calendar import FiscalCalendar, fiscal_calendar
from ..utils.ttl_cache import TTLCache
from .upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

EARNINGS_PATH = "/v1/earnings"


class FinancialsService:
    def __init__(self, client: UpstreamClient, cache: TTLCache, calendar: FiscalCalendar = fiscal_calendar):
        self.client = client
        self.cache = cache
        self.calendar = calendar

    async def _fetch_quarter(self, ticker: str, quarter: int, year: int) -> Optional[Dict[str, Any]]:
        result = await self.client.fetch(EARNINGS_PATH, {"ticker": ticker, "year": year, "quarter": quarter})
        if not result.ok or not result.data:
            logger.info(f"Earnings API failed for {ticker} Q{quarter} {year}: {result.status.value}")
            return None
        return result.data

    async def get_financials(self, ticker: str) -> Tuple[Dict[str, Any], bool]:
        """
        Get raw earnings financials

        Returns:
            (financials, cached)

        Raises:
            DataNotFound: neither the latest nor the previous quarter is available
        """
        ticker = ticker.upper()
        cached = self.cache.get(ticker)
        if cached is not None:
            logger.info(f"Returning cached earnings data for {ticker}")
            return cached.data, True

        quarter, year = self.calendar.most_recent_reported_quarter()
        logger.info(f"Fetching earnings data for {ticker} - Q{quarter} {year}")
        data = await self._fetch_quarter(ticker, quarter, year)

        if data is None:
            quarter, year = self.calendar.previous_quarter(quarter, year)
            logger.info(f"Trying previous quarter for {ticker}: Q{quarter} {year}")
            data = await self._fetch_quarter(ticker, quarter, year)

        if data is None:
            raise DataNotFound("Earnings data not available for this ticker")

        self.cache.set(ticker, data)
        return data, False
