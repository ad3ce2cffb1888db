"""
Fiscal Calendar Utility for Earnings Insight

Works out which fiscal quarter a company has most recently filed, so the
financials endpoint can ask the provider for the right period.

Companies typically file quarterly results ~45 days after quarter end, so
the estimate lags the calendar quarter:
- Jan - Apr: Q4 of the previous year
- May - Jul: Q1
- Aug - Oct: Q2
- Nov - Dec: Q3

Dates are evaluated in US/Eastern time (where US filings are dated).
"""

from datetime import datetime
import pytz
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

class FiscalCalendar:
    """
    Utility class for reported-quarter estimation
    """

    def __init__(self):
        self.eastern_tz = pytz.timezone('US/Eastern')

    def get_eastern_time(self) -> datetime:
        """Get current time in Eastern timezone"""
        return datetime.now(self.eastern_tz)

    def most_recent_reported_quarter(self, dt: Optional[datetime] = None) -> Tuple[int, int]:
        """
        Estimate the most recent quarter with filed earnings

        Args:
            dt: Reference datetime (defaults to now, Eastern)

        Returns:
            (quarter, year)
        """
        if dt is None:
            dt = self.get_eastern_time()
        elif dt.tzinfo is not None:
            dt = dt.astimezone(self.eastern_tz)

        if dt.month >= 11:
            return 3, dt.year
        if dt.month >= 8:
            return 2, dt.year
        if dt.month >= 5:
            return 1, dt.year
        return 4, dt.year - 1

    @staticmethod
    def previous_quarter(quarter: int, year: int) -> Tuple[int, int]:
        """Quarter immediately before (quarter, year)"""
        if quarter == 1:
            return 4, year - 1
        return quarter - 1, year

# Global fiscal calendar instance
fiscal_calendar = FiscalCalendar()
