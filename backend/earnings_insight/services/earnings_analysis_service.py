"""
Earnings Analysis Service for Earnings Insight

Produces a BUY/HOLD/SELL recommendation for a ticker by combining:
1. Earnings call transcript sentiment
2. Current stock price and 30-day trend
3. Macroeconomic indicators

Pipeline:
- transcript, price, trend and indicators are fetched concurrently; any of
  them failing just leaves that signal absent
- trend falls back to our own history computation, indicators to our own
  indicator aggregation, when the direct provider call fails
- executive statements are pulled from the transcript and scored sentence
  by sentence (skipped when there is nothing to score)
- the recommendation engine blends whatever signals survived

The assembled report is cached per ticker for 24 hours.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, Optional, Tuple

from ..models.analysis import IndicatorSnapshot, SentimentAggregate
from ..models.market import StockQuote, TranscriptRecord, TrendStatistics
from ..utils.ttl_cache import TTLCache
from .economics_service import ECONOMICS_PATH, EconomicsService, parse_indicator_snapshot
from .history_service import HistoryService, compute_trend_statistics, parse_price_series
from .quote_service import QuoteService
from .recommendation_service import generate_recommendation
from .sentiment_service import SentimentService
from .transcript_service import TranscriptService, extract_key_statements
from .upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

HISTORICAL_DATA_PATH = "/v1/historicaldata"


def earnings_data_payload(record: Optional[TranscriptRecord]) -> Dict[str, Any]:
    if record is None:
        return {"hasTranscript": False}
    return {
        "date": record.date,
        "quarter": record.quarter,
        "year": record.year,
        "hasTranscript": True,
        "transcript": record.transcript,
        "transcriptSplit": record.transcript_split,
        "participants": record.participants,
    }


class EarningsAnalysisService:
    """
    Orchestrates the earnings-analysis pipeline for one ticker at a time
    """

    def __init__(self, client: UpstreamClient, transcripts: TranscriptService, quotes: QuoteService,
                 sentiment: SentimentService, history: HistoryService, economics: EconomicsService,
                 cache: TTLCache):
        self.client = client
        self.transcripts = transcripts
        self.quotes = quotes
        self.sentiment = sentiment
        self.history = history
        self.economics = economics
        self.cache = cache

    async def _fetch_trend(self, ticker: str) -> TrendStatistics:
        result = await self.client.fetch(HISTORICAL_DATA_PATH, {"ticker": ticker})
        if result.ok:
            try:
                points = parse_price_series(result.data)
                if points:
                    return compute_trend_statistics([point.price for point in points])
            except (ValueError, TypeError, OverflowError) as e:
                logger.warning(f"Unreadable historical data for {ticker}: {str(e)}")

        logger.info(f"Direct historical data unavailable for {ticker} ({result.status.value}), using history service")
        trend, _ = await self.history.get_history(ticker)
        return trend.statistics

    async def _fetch_indicators(self) -> IndicatorSnapshot:
        result = await self.client.fetch(ECONOMICS_PATH)
        snapshot = parse_indicator_snapshot(result.data) if result.ok else None
        if snapshot is not None:
            return snapshot

        logger.info(f"Direct economics data unavailable ({result.status.value}), using economics service")
        snapshot, _, _ = await self.economics.get_indicators()
        return snapshot

    @staticmethod
    def _absent_on_error(name: str, ticker: str, outcome: Any) -> Any:
        if isinstance(outcome, Exception):
            logger.warning(f"{name} unavailable for {ticker}: {outcome}")
            return None
        return outcome

    async def _analyze_sentiment(self, ticker: str, record: Optional[TranscriptRecord]) -> Optional[SentimentAggregate]:
        if record is None:
            logger.info(f"No earnings transcript available for {ticker}")
            return None

        key_statements = extract_key_statements(record)
        if not key_statements:
            logger.info(f"No key statements extracted for {ticker}, skipping sentiment analysis")
            return None

        return await self.sentiment.analyze(key_statements)

    async def analyze(self, ticker: str) -> Tuple[Dict[str, Any], bool]:
        """
        Run (or replay from cache) the full analysis for a ticker

        Returns:
            (report, cached)
        """
        ticker = ticker.upper()
        cache_key = f"earnings_{ticker}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached.data, True

        fetches: Tuple[Awaitable[Any], ...] = (
            self.transcripts.fetch(ticker),
            self.quotes.get_quote(ticker),
            self._fetch_trend(ticker),
            self._fetch_indicators(),
        )
        outcomes = await asyncio.gather(*fetches, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome

        record: Optional[TranscriptRecord] = self._absent_on_error("Transcript", ticker, outcomes[0])
        quote: Optional[StockQuote] = self._absent_on_error("Stock price", ticker, outcomes[1])
        trend: Optional[TrendStatistics] = self._absent_on_error("Historical trend", ticker, outcomes[2])
        indicators: Optional[IndicatorSnapshot] = self._absent_on_error("Economic indicators", ticker, outcomes[3])

        sentiment = await self._analyze_sentiment(ticker, record)
        recommendation = generate_recommendation(sentiment, trend, indicators)

        report = {
            "ticker": ticker,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "stockData": quote.model_dump(by_alias=True) if quote else None,
            "earningsData": earnings_data_payload(record),
            "sentimentAnalysis": sentiment.model_dump(by_alias=True, mode="json") if sentiment else None,
            "historicalTrend": trend.model_dump(by_alias=True) if trend else None,
            "recommendation": recommendation.model_dump(by_alias=True),
        }

        self.cache.set(cache_key, report)
        logger.info(f"Earnings analysis for {ticker}: {recommendation.recommendation} (score {recommendation.score})")
        return report, False
