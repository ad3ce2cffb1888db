from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Literal, Optional
from enum import Enum

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class SentimentLabel(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"

class SentimentSample(CamelModel):
    sentence: str
    sentiment: SentimentLabel
    score: float

class SentimentOverall(CamelModel):
    sentiment: SentimentLabel
    score: float

class SentimentBreakdown(CamelModel):
    positive: int
    negative: int
    neutral: int
    total: int

class SentimentHighlights(CamelModel):
    most_positive: Optional[SentimentSample] = None
    most_negative: Optional[SentimentSample] = None

class SentimentRatio(CamelModel):
    positive_percent: int
    negative_percent: int
    neutral_percent: int

class SentimentAggregate(CamelModel):
    overall: SentimentOverall
    breakdown: SentimentBreakdown
    highlights: SentimentHighlights
    sentiment_ratio: SentimentRatio

class IndicatorStatus(CamelModel):
    level: str
    color: str
    label: str

class EconomicIndicator(CamelModel):
    name: str
    value: Optional[float] = None
    unit: str = "%"
    period: Optional[str] = None
    status: IndicatorStatus
    available: bool
    note: Optional[str] = None

class IndicatorSnapshot(CamelModel):
    indicators: Dict[str, EconomicIndicator]
    last_updated: str
    source: str
    available_count: int
    total_indicators: int

class RecommendationFactors(CamelModel):
    sentiment: int = 0
    price_trend: int = 0
    economic: int = 0

class RecommendationResult(CamelModel):
    recommendation: Literal["BUY", "HOLD", "SELL"]
    confidence: Literal["High", "Moderate"]
    risk_level: Literal["Moderate", "Elevated"]
    score: float = Field(ge=-1.0, le=1.0)
    summary: str
    reasoning: List[str]
    factors: RecommendationFactors
    disclaimer: str
