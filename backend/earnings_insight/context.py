"""
Application context: the client, caches and services a process needs,
built once at startup and handed to the request handlers.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .config import Config
from .errors import ConfigurationError
from .services.earnings_analysis_service import EarningsAnalysisService
from .services.economics_service import EconomicsService
from .services.financials_service import FinancialsService
from .services.history_service import HistoryService, download_price_history
from .services.quote_service import QuoteService
from .services.sentiment_service import SentimentService
from .services.transcript_service import TranscriptService
from .services.upstream_client import UpstreamClient
from .utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

@dataclass
class AppContext:
    config: Config
    client: UpstreamClient
    indicator_cache: TTLCache
    analysis_cache: TTLCache
    history_cache: TTLCache
    financials_cache: TTLCache
    economics: EconomicsService
    history: HistoryService
    financials: FinancialsService
    quotes: QuoteService
    analysis: EarningsAnalysisService

    @classmethod
    def from_config(cls, config: Config, client: Optional[UpstreamClient] = None,
                    history_downloader: Callable = download_price_history,
                    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> "AppContext":
        if client is None:
            client = UpstreamClient(config.API_KEY, config.UPSTREAM_BASE_URL, config.UPSTREAM_TIMEOUT)

        indicator_cache = TTLCache(config.INDICATOR_CACHE_TTL)
        analysis_cache = TTLCache(config.EARNINGS_CACHE_TTL)
        history_cache = TTLCache(config.HISTORY_CACHE_TTL, max_size=config.HISTORY_CACHE_MAX_SIZE)
        financials_cache = TTLCache(config.EARNINGS_CACHE_TTL)

        economics = EconomicsService(client, indicator_cache)
        history = HistoryService(history_cache, downloader=history_downloader)
        quotes = QuoteService(client)
        sentiment = SentimentService(client, pacing_delay=config.SENTIMENT_PACING_DELAY,
                                     max_sentences=config.MAX_SENTIMENT_SENTENCES, sleep=sleep)
        analysis = EarningsAnalysisService(
            client=client,
            transcripts=TranscriptService(client),
            quotes=quotes,
            sentiment=sentiment,
            history=history,
            economics=economics,
            cache=analysis_cache,
        )

        logger.info("Application context initialized")
        return cls(
            config=config,
            client=client,
            indicator_cache=indicator_cache,
            analysis_cache=analysis_cache,
            history_cache=history_cache,
            financials_cache=financials_cache,
            economics=economics,
            history=history,
            financials=FinancialsService(client, financials_cache),
            quotes=quotes,
            analysis=analysis,
        )

    def require_api_key(self) -> str:
        if not self.config.API_KEY:
            raise ConfigurationError("API_KEY environment variable is not configured")
        return self.config.API_KEY

    def cache_stats(self):
        return {
            "indicators": self.indicator_cache.get_stats(),
            "earnings_analysis": self.analysis_cache.get_stats(),
            "history": self.history_cache.get_stats(),
            "financials": self.financials_cache.get_stats(),
        }
