import itertools

import pytest

from earnings_insight.models.analysis import (
    EconomicIndicator,
    IndicatorStatus,
    SentimentAggregate,
    SentimentBreakdown,
    SentimentHighlights,
    SentimentLabel,
    SentimentOverall,
    SentimentRatio,
)
from earnings_insight.models.market import TrendStatistics
from earnings_insight.services.recommendation_service import (
    DISCLAIMER,
    ScoringConstants,
    generate_recommendation,
)

STATUS = IndicatorStatus(level="info", color="blue", label="N/A")


def sentiment(label, score, positive=3, negative=1, neutral=1):
    total = positive + negative + neutral
    return SentimentAggregate(
        overall=SentimentOverall(sentiment=label, score=score),
        breakdown=SentimentBreakdown(positive=positive, negative=negative, neutral=neutral, total=total),
        highlights=SentimentHighlights(),
        sentiment_ratio=SentimentRatio(
            positive_percent=round(positive / total * 100),
            negative_percent=round(negative / total * 100),
            neutral_percent=round(neutral / total * 100),
        ),
    )


def trend(percent):
    return TrendStatistics(high=110, low=90, average=100, trend_percent=percent,
                           trend_direction="up" if percent >= 0 else "down")


def indicator(value, available=True):
    return EconomicIndicator(name="x", value=value if available else None, status=STATUS, available=available)


def factor_inputs(sentiment_factor, trend_factor, economic_factor):
    """Inputs that produce exactly the requested factor triple"""
    sentiments = {1: sentiment(SentimentLabel.POSITIVE, 0.8), 0: sentiment(SentimentLabel.NEUTRAL, 0.5),
                  -1: sentiment(SentimentLabel.NEGATIVE, 0.2)}
    trends = {1: trend(8.0), 0: trend(1.0), -1: trend(-8.0)}
    economics = {1: {"inflation": indicator(2), "unemployment": indicator(4)},
                 0: {"inflation": indicator(4), "unemployment": indicator(5.5)},
                 -1: {"inflation": indicator(6), "unemployment": indicator(7)}}
    return sentiments[sentiment_factor], trends[trend_factor], economics[economic_factor]


class TestScenarios:
    def test_all_positive_is_high_confidence_buy(self):
        result = generate_recommendation(
            sentiment(SentimentLabel.POSITIVE, 0.8),
            trend(8.0),
            {"inflation": indicator(2), "unemployment": indicator(4)},
        )

        assert result.factors.model_dump() == {"sentiment": 1, "price_trend": 1, "economic": 1}
        assert result.score == 1.0
        assert result.recommendation == "BUY"
        assert result.confidence == "High"
        assert result.risk_level == "Moderate"
        assert len(result.reasoning) == 3

    def test_no_inputs_is_hold(self):
        result = generate_recommendation(None, None, None)

        assert result.factors.model_dump() == {"sentiment": 0, "price_trend": 0, "economic": 0}
        assert result.score == 0
        assert result.recommendation == "HOLD"
        assert result.reasoning == []
        assert result.disclaimer == DISCLAIMER

    def test_all_negative_is_sell_with_elevated_risk(self):
        result = generate_recommendation(
            sentiment(SentimentLabel.NEGATIVE, 0.2),
            trend(-8.0),
            {"inflation": indicator(6), "unemployment": indicator(None, available=False)},
        )

        assert result.factors.model_dump() == {"sentiment": -1, "price_trend": -1, "economic": -1}
        assert result.score == -1.0
        assert result.recommendation == "SELL"
        assert result.risk_level == "Elevated"


class TestFactors:
    def test_low_score_is_negative_even_when_neutral(self):
        result = generate_recommendation(sentiment(SentimentLabel.NEUTRAL, 0.25), None, None)
        assert result.factors.sentiment == -1

    def test_positive_label_with_low_score_is_mixed(self):
        result = generate_recommendation(sentiment(SentimentLabel.POSITIVE, 0.5), None, None)
        assert result.factors.sentiment == 0
        assert result.reasoning[0].startswith("Mixed earnings sentiment")

    @pytest.mark.parametrize("percent,expected", [(5.0, 0), (5.01, 1), (-5.0, 0), (-5.01, -1), (0.0, 0)])
    def test_price_trend_boundaries(self, percent, expected):
        assert generate_recommendation(None, trend(percent), None).factors.price_trend == expected

    def test_unavailable_indicators_do_not_score(self):
        result = generate_recommendation(None, None, {
            "inflation": indicator(None, available=False),
            "unemployment": indicator(None, available=False),
        })

        assert result.factors.economic == 0
        assert result.reasoning == ["Mixed economic signals"]

    def test_other_indicators_are_ignored(self):
        result = generate_recommendation(None, None, {"gdp": indicator(-3), "interestRate": indicator(9)})
        assert result.factors.economic == 0

    def test_offsetting_indicators_cancel(self):
        result = generate_recommendation(None, None, {"inflation": indicator(2), "unemployment": indicator(7)})
        assert result.factors.economic == 0

    def test_single_favorable_indicator_is_enough(self):
        result = generate_recommendation(None, None, {"inflation": indicator(2.5)})
        assert result.factors.economic == 1
        assert "low inflation" in result.reasoning[0]


class TestDecisionMapping:
    @pytest.mark.parametrize("triple", list(itertools.product([-1, 0, 1], repeat=3)))
    def test_score_is_bounded_and_deterministic(self, triple):
        first = generate_recommendation(*factor_inputs(*triple))
        second = generate_recommendation(*factor_inputs(*triple))

        assert (first.factors.sentiment, first.factors.price_trend, first.factors.economic) == triple
        assert -1.0 <= first.score <= 1.0
        assert first.recommendation == second.recommendation
        assert first.disclaimer == DISCLAIMER

    @pytest.mark.parametrize("triple,label,confidence", [
        ((1, 0, 0), "BUY", "Moderate"),      # exactly 0.4 is not a strong buy
        ((0, 1, 1), "BUY", "High"),
        ((1, -1, 0), "BUY", "Moderate"),
        ((0, 0, -1), "HOLD", "Moderate"),
        ((-1, 0, 0), "SELL", "Moderate"),    # exactly -0.4 sells
        ((-1, -1, 1), "SELL", "Moderate"),   # -0.4 + -0.3 + 0.3 rounds to exactly -0.4
        ((-1, 1, 0), "HOLD", "Moderate"),
    ])
    def test_thresholds(self, triple, label, confidence):
        result = generate_recommendation(*factor_inputs(*triple))

        assert result.recommendation == label
        assert result.confidence == confidence

    def test_constants_are_configurable(self):
        strict = ScoringConstants(uptrend_percent=10.0)
        result = generate_recommendation(None, trend(8.0), None, constants=strict)

        assert result.factors.price_trend == 0
