"""Clock abstraction used for month bucketing and cache expiry."""

import time
from datetime import date, datetime, timedelta


class SystemClock:
    """Clock backed by the wall clock."""

    def today(self) -> date:
        return date.today()

    def now(self) -> datetime:
        return datetime.now()

    def timestamp(self) -> float:
        return time.time()


class FixedClock:
    """Clock frozen at a given moment, advanced explicitly."""

    def __init__(self, moment: datetime):
        self._moment = moment

    def today(self) -> date:
        return self._moment.date()

    def now(self) -> datetime:
        return self._moment

    def timestamp(self) -> float:
        return self._moment.timestamp()

    def advance(self, **kwargs) -> None:
        """Move the clock forward by a timedelta built from kwargs."""
        self._moment = self._moment + timedelta(**kwargs)
