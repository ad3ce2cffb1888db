"""
Recommendation engine for Earnings Insight.

Blends three signals into a BUY/HOLD/SELL call:

1. Earnings-call sentiment (40% weight)
2. 30-day price trend (30% weight)
3. Macroeconomic conditions - inflation and unemployment only (30% weight)

Each signal is reduced to a factor in {-1, 0, 1}. A missing signal keeps its
factor at 0 and adds no reasoning line. The result is a pure function of the
inputs.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Union

from ..models.analysis import (
    EconomicIndicator,
    IndicatorSnapshot,
    RecommendationFactors,
    RecommendationResult,
    SentimentAggregate,
    SentimentLabel,
)
from ..models.market import TrendStatistics

DISCLAIMER = (
    "This analysis is for educational purposes only and not financial advice. "
    "Always conduct thorough research and consult with financial professionals "
    "before making investment decisions."
)

@dataclass(frozen=True)
class ScoringConstants:
    sentiment_weight: float = 0.4
    price_trend_weight: float = 0.3
    economic_weight: float = 0.3

    positive_sentiment_score: float = 0.5
    negative_sentiment_score: float = 0.3

    uptrend_percent: float = 5.0
    downtrend_percent: float = -5.0

    low_inflation: float = 3.0
    high_inflation: float = 5.0
    low_unemployment: float = 5.0
    high_unemployment: float = 6.0
    economic_step: float = 0.5

    strong_buy_score: float = 0.4
    buy_score: float = 0.0
    hold_score: float = -0.4

DEFAULT_CONSTANTS = ScoringConstants()

IndicatorInput = Union[IndicatorSnapshot, Mapping[str, EconomicIndicator]]


def _sentiment_factor(sentiment: SentimentAggregate, c: ScoringConstants):
    score = sentiment.overall.score
    label = sentiment.overall.sentiment
    breakdown = sentiment.breakdown
    ratio = sentiment.sentiment_ratio

    if label is SentimentLabel.POSITIVE and score > c.positive_sentiment_score:
        return 1, (f"Positive earnings sentiment: {ratio.positive_percent}% positive statements "
                   f"({breakdown.positive}/{breakdown.total} analyzed)")
    if label is SentimentLabel.NEGATIVE or score < c.negative_sentiment_score:
        return -1, (f"Negative earnings sentiment: {ratio.negative_percent}% negative statements "
                    f"suggests challenges")
    return 0, (f"Mixed earnings sentiment: {ratio.positive_percent}% positive, "
               f"{ratio.negative_percent}% negative")


def _price_trend_factor(trend: TrendStatistics, c: ScoringConstants):
    percent = trend.trend_percent
    if percent > c.uptrend_percent:
        return 1, f"Strong 30-day uptrend (+{percent:.1f}%) shows positive momentum"
    if percent < c.downtrend_percent:
        return -1, f"30-day downtrend ({percent:.1f}%) indicates selling pressure"
    sign = "+" if percent > 0 else ""
    return 0, f"Price relatively stable over past 30 days ({sign}{percent:.1f}%)"


def _available_value(indicators: Mapping[str, EconomicIndicator], key: str) -> Optional[float]:
    indicator = indicators.get(key)
    if indicator is None or not indicator.available or indicator.value is None:
        return None
    return indicator.value


def _economic_factor(indicators: Mapping[str, EconomicIndicator], c: ScoringConstants):
    economic_score = 0.0
    reasons: List[str] = []

    inflation = _available_value(indicators, "inflation")
    if inflation is not None:
        if inflation < c.low_inflation:
            economic_score += c.economic_step
            reasons.append("low inflation")
        elif inflation > c.high_inflation:
            economic_score -= c.economic_step
            reasons.append("high inflation")

    unemployment = _available_value(indicators, "unemployment")
    if unemployment is not None:
        if unemployment < c.low_unemployment:
            economic_score += c.economic_step
            reasons.append("strong employment")
        elif unemployment > c.high_unemployment:
            economic_score -= c.economic_step
            reasons.append("weak employment")

    if economic_score > 0:
        return 1, f"Favorable economic conditions ({', '.join(reasons)})"
    if economic_score < 0:
        return -1, f"Challenging economic environment ({', '.join(reasons)})"
    return 0, "Mixed economic signals"


def generate_recommendation(
    sentiment: Optional[SentimentAggregate],
    trend: Optional[TrendStatistics],
    indicators: Optional[IndicatorInput],
    constants: ScoringConstants = DEFAULT_CONSTANTS,
) -> RecommendationResult:
    """
    Generate an investment recommendation from the available signals

    Args:
        sentiment: Aggregated transcript sentiment, or None if unknown
        trend: 30-day trend statistics, or None if unknown
        indicators: Indicator snapshot (or name -> indicator mapping), or None

    Returns:
        RecommendationResult
    """
    factors: Dict[str, int] = {"sentiment": 0, "price_trend": 0, "economic": 0}
    reasoning: List[str] = []

    if sentiment is not None:
        factors["sentiment"], line = _sentiment_factor(sentiment, constants)
        reasoning.append(line)

    if trend is not None:
        factors["price_trend"], line = _price_trend_factor(trend, constants)
        reasoning.append(line)

    if indicators is not None:
        if isinstance(indicators, IndicatorSnapshot):
            indicators = indicators.indicators
        factors["economic"], line = _economic_factor(indicators, constants)
        reasoning.append(line)

    weighted = (
        factors["sentiment"] * constants.sentiment_weight
        + factors["price_trend"] * constants.price_trend_weight
        + factors["economic"] * constants.economic_weight
    )
    score = max(-1.0, min(1.0, round(weighted, 4)))

    if score > constants.strong_buy_score:
        recommendation, confidence, risk_level = "BUY", "High", "Moderate"
        summary = ("Strong indicators suggest potential for appreciation. Positive sentiment combined "
                   "with favorable conditions support a buying opportunity.")
    elif score > constants.buy_score:
        recommendation, confidence, risk_level = "BUY", "Moderate", "Moderate"
        summary = "Generally positive indicators with some caution. Consider gradual position building."
    elif score > constants.hold_score:
        recommendation, confidence, risk_level = "HOLD", "Moderate", "Moderate"
        summary = ("Mixed signals suggest maintaining current position. Monitor for clearer trends "
                   "before making changes.")
    else:
        recommendation, confidence, risk_level = "SELL", "Moderate", "Elevated"
        summary = "Negative indicators suggest risk mitigation. Consider reducing exposure or taking profits."

    return RecommendationResult(
        recommendation=recommendation,
        confidence=confidence,
        risk_level=risk_level,
        score=score,
        summary=summary,
        reasoning=reasoning,
        factors=RecommendationFactors(**factors),
        disclaimer=DISCLAIMER,
    )
