"""Daily YouTube Data API quota bookkeeping."""

from datetime import datetime, timedelta

from log_utils import log


# Synthetic cost per call type, in quota units
QUOTA_COSTS = {
    "search": 100,
    "videos.list": 1,
    "liveChatMessages.list": 5,
    "liveChatMessages.insert": 50,
}

DEFAULT_DAILY_LIMIT = 10000


class QuotaExceededError(Exception):
    """Raised when a call was skipped because it would exceed the daily quota."""

    def __init__(self, action, cost, used, limit):
        super().__init__(
            f"Quota skip: {action} costs {cost}, {used}/{limit} units already used"
        )
        self.action = action
        self.cost = cost
        self.used = used
        self.limit = limit


def next_midnight(now):
    """Return the local midnight following ``now``."""
    return datetime.combine(now.date() + timedelta(days=1), datetime.min.time())


class QuotaGovernor:
    """Accumulates a cost score per day against a fixed daily ceiling.

    The counter resets once local wall-clock time crosses the next midnight.
    Calls that would exceed the ceiling are skipped, never charged.
    """

    def __init__(self, daily_limit=DEFAULT_DAILY_LIMIT, costs=None, now=datetime.now):
        self.daily_limit = daily_limit
        self.costs = dict(QUOTA_COSTS if costs is None else costs)
        self._now = now
        self.used = 0
        self.skipped = 0
        self.resets_at = next_midnight(self._now())

    def _maybe_reset(self):
        now = self._now()
        if now >= self.resets_at:
            if self.used:
                log(f"Quota reset at midnight ({self.used}/{self.daily_limit} units used)")
            self.used = 0
            self.skipped = 0
            self.resets_at = next_midnight(now)

    def cost_of(self, action):
        return self.costs[action]

    def remaining(self):
        self._maybe_reset()
        return max(self.daily_limit - self.used, 0)

    def can_spend(self, action):
        self._maybe_reset()
        return self.used + self.cost_of(action) <= self.daily_limit

    def spend(self, action):
        """Charge ``action`` against today's quota.

        Raises:
            QuotaExceededError if the call would exceed the ceiling; the
            counter is left unchanged.
        """
        cost = self.cost_of(action)
        if not self.can_spend(action):
            self.skipped += 1
            log(f"[QUOTA] Skipping {action} (cost {cost}, used {self.used}/{self.daily_limit})")
            raise QuotaExceededError(action, cost, self.used, self.daily_limit)
        self.used += cost
        return cost

    def snapshot(self):
        self._maybe_reset()
        return {
            "used": self.used,
            "limit": self.daily_limit,
            "remaining": self.daily_limit - self.used,
            "skipped": self.skipped,
            "resetsAt": self.resets_at.isoformat(),
        }
