"""
This is the Sentiment Service for Earnings Insight. It figures out how management sounded on an
earnings call by scoring the call sentence by sentence.

What this service does:
- Splits executive statements into sentences
- Sends each sentence to the provider's sentiment endpoint, one at a time with a short pause
  between calls so we stay under the provider's rate limit
- Rolls the per-sentence scores up into an overall verdict, counts and highlights

The verdict is deliberately conservative: a call only reads POSITIVE (or NEGATIVE) when both the
label counts and the average score agree. Anything in between is NEUTRAL.

Example Usage:
    sentiment_service = SentimentService(client)
    aggregate = await sentiment_service.analyze(text)
"""

import asyncio
import logging
import math
import re
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional, TypeVar

from ..models.analysis import (
    SentimentAggregate,
    SentimentBreakdown,
    SentimentHighlights,
    SentimentLabel,
    SentimentOverall,
    SentimentRatio,
    SentimentSample,
)
from .upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

SENTIMENT_PATH = "/v1/sentiment"

MIN_SENTENCE_LENGTH = 20
MAX_SENTENCE_CHARS = 500
DEFAULT_MAX_SENTENCES = 20
DEFAULT_PACING_DELAY = 0.1

# Asymmetric on purpose: near-ties fall back to NEUTRAL
POSITIVE_MEAN_THRESHOLD = 0.55
NEGATIVE_MEAN_THRESHOLD = 0.45

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_into_sentences(text: Optional[str]) -> List[str]:
    """Split on ., ! or ? followed by whitespace and drop short fragments"""
    if not text:
        return []
    sentences = (part.strip() for part in _SENTENCE_BOUNDARY.split(text))
    return [sentence for sentence in sentences if len(sentence) > MIN_SENTENCE_LENGTH]


async def paced(items: Iterable[T], delay: float,
                sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> AsyncIterator[T]:
    """Yield items one at a time, pausing `delay` seconds between consecutive items"""
    for index, item in enumerate(items):
        if index and delay > 0:
            await sleep(delay)
        yield item


def normalize_label(label: str) -> SentimentLabel:
    label = label.upper()
    if "POSITIVE" in label:
        return SentimentLabel.POSITIVE
    if "NEGATIVE" in label:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def _percent(count: int, total: int) -> int:
    # half-up rounding, not banker's rounding
    return int(math.floor(count / total * 100 + 0.5))


def aggregate_samples(samples: List[SentimentSample]) -> Optional[SentimentAggregate]:
    """
    Roll per-sentence samples up into a single verdict

    Returns:
        SentimentAggregate, or None when there are no samples
    """
    if not samples:
        return None

    positive = [s for s in samples if s.sentiment is SentimentLabel.POSITIVE]
    negative = [s for s in samples if s.sentiment is SentimentLabel.NEGATIVE]
    neutral = [s for s in samples if s.sentiment is SentimentLabel.NEUTRAL]
    total = len(samples)

    average = sum(s.score for s in samples) / total

    overall = SentimentLabel.NEUTRAL
    if len(positive) > len(negative) and average > POSITIVE_MEAN_THRESHOLD:
        overall = SentimentLabel.POSITIVE
    elif len(negative) > len(positive) and average < NEGATIVE_MEAN_THRESHOLD:
        overall = SentimentLabel.NEGATIVE

    return SentimentAggregate(
        overall=SentimentOverall(sentiment=overall, score=average),
        breakdown=SentimentBreakdown(
            positive=len(positive),
            negative=len(negative),
            neutral=len(neutral),
            total=total,
        ),
        highlights=SentimentHighlights(
            most_positive=max(positive, key=lambda s: s.score) if positive else None,
            most_negative=min(negative, key=lambda s: s.score) if negative else None,
        ),
        sentiment_ratio=SentimentRatio(
            positive_percent=_percent(len(positive), total),
            negative_percent=_percent(len(negative), total),
            neutral_percent=_percent(len(neutral), total),
        ),
    )


class SentimentService:
    """
    Scores transcript text through the provider's sentiment endpoint
    """

    def __init__(self, client: UpstreamClient, pacing_delay: float = DEFAULT_PACING_DELAY,
                 max_sentences: int = DEFAULT_MAX_SENTENCES,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.client = client
        self.pacing_delay = pacing_delay
        self.max_sentences = max_sentences
        self._sleep = sleep

    async def score_sentence(self, sentence: str) -> Optional[SentimentSample]:
        """Score one sentence; None when the call fails or the payload is unusable"""
        text = sentence[:MAX_SENTENCE_CHARS]
        result = await self.client.fetch(SENTIMENT_PATH, {"text": text})
        if not result.ok:
            return None

        data = result.data if isinstance(result.data, dict) else {}
        label = data.get("sentiment")
        score = data.get("score")
        if not isinstance(label, str) or isinstance(score, bool) or not isinstance(score, (int, float)):
            logger.warning(f"Unexpected sentiment payload: {data}")
            return None

        return SentimentSample(sentence=text, sentiment=normalize_label(label), score=float(score))

    async def score_sentences(self, sentences: Iterable[str]) -> AsyncIterator[SentimentSample]:
        """Score sentences strictly one after another, yielding each usable sample"""
        async for sentence in paced(sentences, self.pacing_delay, self._sleep):
            sample = await self.score_sentence(sentence)
            if sample is not None:
                yield sample

    async def analyze(self, text: str) -> Optional[SentimentAggregate]:
        """Analyze text sentence by sentence; None means sentiment is unknown"""
        sentences = split_into_sentences(text)
        logger.info(f"Split into {len(sentences)} sentences")
        if not sentences:
            return None

        sampled = sentences[:self.max_sentences]
        samples = [sample async for sample in self.score_sentences(sampled)]
        logger.info(f"Successfully analyzed {len(samples)}/{len(sampled)} sentences")

        aggregate = aggregate_samples(samples)
        if aggregate is not None:
            logger.info(f"Sentiment analysis complete: {aggregate.breakdown.model_dump()}")
        return aggregate
