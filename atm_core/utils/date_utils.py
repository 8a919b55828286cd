"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Callable

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Wall-clock time of the ATM site; calendar days roll over at local midnight"""
    return datetime.now()


def business_date(moment: datetime) -> date:
    """Calendar day the daily withdrawal limit is tracked against"""
    return moment.date()
