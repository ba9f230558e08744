"""Date manipulation utilities"""

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class ReportPeriods:
    """Calendar months a daily report compares"""

    current_year: int
    current_month: int
    last_month_year: int
    last_month: int


def today_in(timezone: str) -> date:
    """Current date in the given IANA timezone"""
    return datetime.now(ZoneInfo(timezone)).date()


def report_periods(today: date) -> ReportPeriods:
    """Current month and the month before it (January wraps to last December)"""
    if today.month == 1:
        return ReportPeriods(today.year, 1, today.year - 1, 12)
    return ReportPeriods(today.year, today.month, today.year, today.month - 1)
