from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, List, Literal, Optional

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

class SpeakerTurn(CamelModel):
    speaker: Optional[str] = None
    role: str = ""
    text: Optional[str] = None

class TranscriptRecord(CamelModel):
    ticker: Optional[str] = None
    quarter: Optional[int] = None
    year: Optional[int] = None
    date: Optional[str] = None
    transcript: Optional[str] = None
    transcript_split: Optional[List[Any]] = None
    turns: List[SpeakerTurn] = []
    participants: Optional[Any] = None

class PricePoint(CamelModel):
    date: str
    price: float

class TrendStatistics(CamelModel):
    high: float
    low: float
    average: float
    trend_percent: float
    trend_direction: Literal["up", "down"]

class HistoricalTrend(CamelModel):
    ticker: str
    data_points: List[PricePoint]
    statistics: TrendStatistics

class StockQuote(CamelModel):
    ticker: str
    price: Optional[float] = None
