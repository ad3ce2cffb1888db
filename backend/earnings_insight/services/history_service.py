"""
History Service for Earnings Insight

Pulls 30 days of daily closes for a ticker from Yahoo Finance and computes the
trend statistics the dashboard charts and the recommendation engine use.

Statistics:
- high / low / average close
- trendPercent: (last close - first close) / first close * 100
- trendDirection: 'up' when trendPercent >= 0, else 'down'

Results are cached per ticker for a few minutes, and the cache is capped so a
burst of different tickers can't grow it without bound.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import yfinance as yf

from ..errors import ParseError, UpstreamUnavailable
from ..models.market import HistoricalTrend, PricePoint, TrendStatistics
from ..utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


def download_price_history(ticker: str) -> pd.DataFrame:
    """Daily bars for the last month (blocking yfinance call)"""
    return yf.Ticker(ticker).history(period="1mo", interval="1d")


def compute_trend_statistics(prices: Sequence[float]) -> TrendStatistics:
    """
    Summarize a price series (oldest first)

    Raises:
        ValueError: if prices is empty
    """
    if len(prices) == 0:
        raise ValueError("Cannot compute statistics for an empty price series")

    series = np.asarray(prices, dtype=float)
    first, last = series[0], series[-1]
    trend_percent = ((last - first) / first) * 100 if first else 0.0

    return TrendStatistics(
        high=round(float(np.max(series)), 2),
        low=round(float(np.min(series)), 2),
        average=round(float(np.mean(series)), 2),
        trend_percent=round(float(trend_percent), 2),
        trend_direction="up" if trend_percent >= 0 else "down",
    )


def frame_to_points(hist: pd.DataFrame) -> List[PricePoint]:
    """Convert a yfinance history frame into date/close points, skipping null closes"""
    if hist is None or hist.empty or 'Close' not in hist:
        return []

    points = []
    for date, row in hist.iterrows():
        close = row['Close']
        if pd.isna(close):
            continue
        points.append(PricePoint(date=date.strftime('%Y-%m-%d'), price=float(close)))
    return points


def _point_date(item: dict) -> Optional[str]:
    raw = item.get('date') or item.get('time') or item.get('datetime')
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc).strftime('%Y-%m-%d')
        except (ValueError, OverflowError, OSError):
            return None
    if isinstance(raw, str) and raw:
        return raw[:10]
    return None


def parse_price_series(payload: Any) -> List[PricePoint]:
    """
    Read a provider price series: a list of bars carrying a date/time and a
    close (or price). Unusable bars are skipped; result is oldest first.
    """
    if isinstance(payload, dict):
        payload = payload.get('data', payload.get('prices'))
    if not isinstance(payload, list):
        return []

    points = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        close = item.get('close', item.get('price'))
        date = _point_date(item)
        try:
            price = float(close)
        except (TypeError, ValueError):
            continue
        if date is None or np.isnan(price):
            continue
        points.append(PricePoint(date=date, price=price))

    points.sort(key=lambda point: point.date)
    return points


def build_trend(ticker: str, points: List[PricePoint]) -> HistoricalTrend:
    return HistoricalTrend(
        ticker=ticker,
        data_points=points,
        statistics=compute_trend_statistics([point.price for point in points]),
    )


class HistoryService:
    """
    30-day price history with cached trend statistics
    """

    def __init__(self, cache: TTLCache, downloader: Callable[[str], pd.DataFrame] = download_price_history):
        self.cache = cache
        self.downloader = downloader

    async def get_history(self, ticker: str) -> Tuple[HistoricalTrend, bool]:
        """
        Get historical data and statistics for a ticker

        Returns:
            (HistoricalTrend, cached)

        Raises:
            UpstreamUnavailable: download failed
            ParseError: no usable prices came back
        """
        ticker = ticker.upper()
        cached = self.cache.get(ticker)
        if cached is not None:
            return cached.data, True

        try:
            hist = await asyncio.to_thread(self.downloader, ticker)
        except Exception as e:
            logger.error(f"Error fetching historical data for {ticker}: {str(e)}")
            raise UpstreamUnavailable(f"Error fetching historical data for {ticker}: {str(e)}", status_code=500)

        points = frame_to_points(hist)
        if not points:
            raise ParseError(f"No valid price data for {ticker}", status_code=500)

        trend = build_trend(ticker, points)
        self.cache.set(ticker, trend)
        logger.info(f"Historical data for {ticker}: {len(points)} points, trend {trend.statistics.trend_percent}%")
        return trend, False
