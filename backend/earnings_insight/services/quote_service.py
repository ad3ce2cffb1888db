"""
Quote Service for Earnings Insight

Current prices for the companies tracked on the dashboard. Each company is
fetched independently; one failing doesn't affect the rest.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import AllSourcesFailed, ParseError, UpstreamUnavailable
from ..models.market import StockQuote
from .upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

STOCK_PRICE_PATH = "/v1/stockprice"

COMPANIES = [
    {"ticker": "AAPL", "name": "Apple Inc."},
    {"ticker": "MSFT", "name": "Microsoft Corporation"},
    {"ticker": "GOOGL", "name": "Alphabet Inc. (Google)"},
    {"ticker": "META", "name": "Meta Platforms Inc."},
    {"ticker": "AMZN", "name": "Amazon.com Inc."},
]


def parse_quote(payload: Any, ticker: str) -> Optional[StockQuote]:
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if not isinstance(payload, dict) or not payload:
        return None
    price = payload.get("price")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        price = None
    return StockQuote(ticker=payload.get("ticker") or ticker, price=price)


class QuoteService:
    def __init__(self, client: UpstreamClient):
        self.client = client

    async def get_quote(self, ticker: str) -> StockQuote:
        """
        Current price for one ticker

        Raises:
            UpstreamUnavailable: provider call failed
            ParseError: provider answered with an empty or odd payload
        """
        result = await self.client.fetch(STOCK_PRICE_PATH, {"ticker": ticker})
        quote = parse_quote(result.unwrap(), ticker)
        if quote is None:
            raise ParseError(f"Empty stock price payload for {ticker}")
        return quote

    async def _dashboard_entry(self, company: Dict[str, str]) -> Dict[str, Any]:
        entry = {
            "ticker": company["ticker"],
            "companyName": company["name"],
            "price": None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "success": True,
        }
        try:
            quote = await self.get_quote(company["ticker"])
            entry["price"] = quote.price
        except UpstreamUnavailable as e:
            logger.error(f"Error fetching {company['ticker']}: {e.message}")
            entry["success"] = False
            entry["error"] = e.message
        return entry

    async def get_dashboard_quotes(self) -> List[Dict[str, Any]]:
        """
        Prices for every dashboard company

        Raises:
            AllSourcesFailed: no company price could be fetched
        """
        entries = await asyncio.gather(*(self._dashboard_entry(company) for company in COMPANIES))
        entries = list(entries)

        if all(not entry["success"] for entry in entries):
            raise AllSourcesFailed("Unable to fetch stock data from API provider", data=entries)

        return entries
