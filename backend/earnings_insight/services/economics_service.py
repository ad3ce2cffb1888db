"""
Economics Service for Earnings Insight

Collects the key US macro indicators shown on the dashboard and used by the
recommendation engine.

Indicators (fetched concurrently, one provider call each):
- inflation:    /v1/inflation
- unemployment: /v1/unemployment
- gdp:          /v1/gdp
- interestRate: /v1/interestrate

A sub-indicator the provider can't serve (404, error, odd payload) is still
reported, as available=False with a null value, so the dashboard can show it
as N/A. Only when every indicator fails does the request fail.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from ..errors import AllSourcesFailed
from ..models.analysis import EconomicIndicator, IndicatorSnapshot, IndicatorStatus
from ..utils.ttl_cache import TTLCache
from .upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

CACHE_KEY = "economic_indicators"
ECONOMICS_PATH = "/v1/economics"
SOURCE = "API Ninjas"

UNAVAILABLE_STATUS = IndicatorStatus(level="info", color="blue", label="N/A")


def _status(level: str) -> IndicatorStatus:
    return {
        "good": IndicatorStatus(level="good", color="green", label="Low"),
        "moderate": IndicatorStatus(level="moderate", color="yellow", label="Moderate"),
        "concerning": IndicatorStatus(level="concerning", color="red", label="High"),
    }[level]


def inflation_status(rate: float) -> IndicatorStatus:
    if rate < 2:
        return _status("good")
    if rate < 4:
        return _status("moderate")
    return _status("concerning")


def unemployment_status(rate: float) -> IndicatorStatus:
    if rate < 4:
        return _status("good")
    if rate < 6:
        return _status("moderate")
    return _status("concerning")


def interest_rate_status(rate: float) -> IndicatorStatus:
    if rate < 3:
        return _status("good")
    if rate < 5:
        return _status("moderate")
    return _status("concerning")


def gdp_status(growth: float) -> IndicatorStatus:
    if growth > 2:
        return IndicatorStatus(level="good", color="green", label="Strong")
    if growth > 0:
        return IndicatorStatus(level="moderate", color="yellow", label="Moderate")
    return IndicatorStatus(level="concerning", color="red", label="Contracting")


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first_record(payload: Any) -> Optional[dict]:
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    return payload if isinstance(payload, dict) else None


def _read_value(payload: Any, keys: Iterable[str]) -> Tuple[Optional[float], Optional[str]]:
    """(value, period) from the first record carrying any of keys"""
    record = _first_record(payload)
    if record is None:
        return None, None
    for key in keys:
        value = _number(record.get(key))
        if value is not None:
            period = record.get("period") or record.get("date") or record.get("last_updated")
            return value, str(period) if period is not None else None
    return None, None


def parse_inflation(payload: Any):
    return _read_value(payload, ("yearly_rate_pct", "rate"))


def parse_unemployment(payload: Any):
    return _read_value(payload, ("unemployment_rate", "rate", "value"))


def parse_gdp(payload: Any):
    return _read_value(payload, ("gdp_growth", "growth_rate", "rate", "value"))


def parse_interest_rate(payload: Any):
    if isinstance(payload, dict) and isinstance(payload.get("central_bank_rates"), list):
        rates = payload["central_bank_rates"]
        us_rates = [r for r in rates if isinstance(r, dict) and r.get("country") == "United States"]
        payload = us_rates or rates
    return _read_value(payload, ("rate_pct", "rate", "value"))


@dataclass(frozen=True)
class IndicatorSource:
    name: str
    path: str
    parse: Callable[[Any], Tuple[Optional[float], Optional[str]]]
    status: Callable[[float], IndicatorStatus]


INDICATOR_SOURCES: Dict[str, IndicatorSource] = {
    "inflation": IndicatorSource("Inflation Rate", "/v1/inflation", parse_inflation, inflation_status),
    "gdp": IndicatorSource("GDP Growth Rate", "/v1/gdp", parse_gdp, gdp_status),
    "unemployment": IndicatorSource("Unemployment Rate", "/v1/unemployment", parse_unemployment, unemployment_status),
    "interestRate": IndicatorSource("Fed Interest Rate", "/v1/interestrate", parse_interest_rate, interest_rate_status),
}


def unavailable_indicator(name: str, note: str) -> EconomicIndicator:
    return EconomicIndicator(name=name, value=None, status=UNAVAILABLE_STATUS, available=False, note=note)


def build_snapshot(indicators: Dict[str, EconomicIndicator], source: str = SOURCE) -> IndicatorSnapshot:
    return IndicatorSnapshot(
        indicators=indicators,
        last_updated=datetime.now(timezone.utc).isoformat(),
        source=source,
        available_count=sum(1 for indicator in indicators.values() if indicator.available),
        total_indicators=len(indicators),
    )


def parse_indicator_snapshot(payload: Any) -> Optional[IndicatorSnapshot]:
    """
    Interpret a combined economics payload: either {'indicators': {...}} or a
    flat mapping of indicator key -> number. Returns None if nothing usable.
    """
    if not isinstance(payload, dict):
        return None
    raw = payload.get("indicators", payload)
    if not isinstance(raw, dict):
        return None

    indicators: Dict[str, EconomicIndicator] = {}
    for key, source in INDICATOR_SOURCES.items():
        entry = raw.get(key)
        if isinstance(entry, dict):
            value = _number(entry.get("value"))
            available = value is not None and entry.get("available", True) is not False
            period = entry.get("period")
        else:
            value = _number(entry)
            available = value is not None
            period = None
        if available:
            indicators[key] = EconomicIndicator(
                name=source.name, value=value, period=str(period) if period is not None else None,
                status=source.status(value), available=True,
            )
        else:
            indicators[key] = unavailable_indicator(source.name, "Not included in economics payload")

    if not any(indicator.available for indicator in indicators.values()):
        return None
    return build_snapshot(indicators)


class EconomicsService:
    """
    Macro indicator aggregation with a 1-hour cache
    """

    def __init__(self, client: UpstreamClient, cache: TTLCache):
        self.client = client
        self.cache = cache

    async def _fetch_indicator(self, key: str, source: IndicatorSource) -> Tuple[EconomicIndicator, Dict[str, Any]]:
        result = await self.client.fetch(source.path)
        diagnostics = {"indicator": key, "status": result.status.value, "statusCode": result.status_code}

        if not result.ok:
            logger.warning(f"Indicator {key} unavailable: {result.error}")
            return unavailable_indicator(source.name, f"Not available from provider ({result.status.value})"), diagnostics

        value, period = source.parse(result.data)
        if value is None:
            logger.warning(f"Indicator {key} payload had no usable value")
            diagnostics["status"] = "parse_error"
            return unavailable_indicator(source.name, "Provider returned no usable value"), diagnostics

        indicator = EconomicIndicator(
            name=source.name, value=value, period=period, status=source.status(value), available=True,
        )
        return indicator, diagnostics

    async def get_indicators(self) -> Tuple[IndicatorSnapshot, bool, str]:
        """
        Get all indicators

        Returns:
            (snapshot, cached, timestamp) where timestamp is when the data was fetched

        Raises:
            AllSourcesFailed: no indicator could be fetched
        """
        cached = self.cache.get(CACHE_KEY)
        if cached is not None:
            timestamp = datetime.fromtimestamp(cached.timestamp, tz=timezone.utc).isoformat()
            return cached.data, True, timestamp

        keys = list(INDICATOR_SOURCES)
        results = await asyncio.gather(*(self._fetch_indicator(key, INDICATOR_SOURCES[key]) for key in keys))

        indicators = {key: indicator for key, (indicator, _) in zip(keys, results)}
        if not any(indicator.available for indicator in indicators.values()):
            raise AllSourcesFailed(
                "Unable to fetch economic indicators from API provider",
                data=[diagnostics for _, diagnostics in results],
            )

        snapshot = build_snapshot(indicators)
        entry = self.cache.set(CACHE_KEY, snapshot)
        logger.info(f"Economic indicators refreshed: {snapshot.available_count}/{snapshot.total_indicators} available")
        return snapshot, False, datetime.fromtimestamp(entry.timestamp, tz=timezone.utc).isoformat()
