"""Reply rate limiting: hourly cap, daily cap and minimum gap between replies."""

import time


HOUR = 3600
DAY = 24 * HOUR


class ResponseRateLimiter:
    """Tracks when the bot replied and refuses replies over the ceilings.

    Sliding windows: a reply counts against the hourly cap for one hour and
    against the daily cap for 24 hours after it was recorded.
    """

    def __init__(self, max_per_hour=30, max_per_day=200, min_gap=3.0, clock=time.time):
        self.max_per_hour = max_per_hour
        self.max_per_day = max_per_day
        self.min_gap = min_gap
        self._clock = clock
        self._timestamps = []

    def _prune(self, now):
        cutoff = now - DAY
        self._timestamps = [t for t in self._timestamps if t > cutoff]

    def responses_in(self, window, now=None):
        now = self._clock() if now is None else now
        return sum(1 for t in self._timestamps if t > now - window)

    def check(self, now=None):
        """Return None if a reply is allowed, otherwise the refusal reason."""
        now = self._clock() if now is None else now
        self._prune(now)

        if self._timestamps and now - self._timestamps[-1] < self.min_gap:
            return "min_gap"
        if self.responses_in(HOUR, now) >= self.max_per_hour:
            return "hourly_cap"
        if len(self._timestamps) >= self.max_per_day:
            return "daily_cap"
        return None

    def record(self, now=None):
        now = self._clock() if now is None else now
        self._timestamps.append(now)

    def snapshot(self):
        now = self._clock()
        return {
            "responsesThisHour": self.responses_in(HOUR, now),
            "responsesToday": self.responses_in(DAY, now),
            "maxPerHour": self.max_per_hour,
            "maxPerDay": self.max_per_day,
            "minGapSeconds": self.min_gap,
        }
