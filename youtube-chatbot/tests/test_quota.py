import pytest
from datetime import datetime


class FakeNow:
    def __init__(self, value):
        self.value = value

    def __call__(self):
        return self.value


def test_spend_adds_fixed_cost():
    from quota import QuotaGovernor

    quota = QuotaGovernor(daily_limit=10000, now=FakeNow(datetime(2026, 10, 18, 12, 0)))
    quota.spend("search")
    quota.spend("liveChatMessages.list")
    assert quota.used == 105
    assert quota.remaining() == 9895


def test_spend_over_ceiling_is_skipped_and_counter_unchanged(capsys):
    """At 9950/10000 a 100-unit action is skipped, logged and not charged."""
    from quota import QuotaExceededError, QuotaGovernor

    quota = QuotaGovernor(daily_limit=10000, now=FakeNow(datetime(2026, 10, 18, 12, 0)))
    quota.used = 9950

    with pytest.raises(QuotaExceededError) as exc:
        quota.spend("search")

    assert quota.used == 9950
    assert quota.skipped == 1
    assert exc.value.cost == 100
    assert "[QUOTA] Skipping search" in capsys.readouterr().out


def test_spend_exactly_to_ceiling_is_allowed():
    from quota import QuotaGovernor

    quota = QuotaGovernor(daily_limit=10000, now=FakeNow(datetime(2026, 10, 18, 12, 0)))
    quota.used = 9950
    quota.spend("liveChatMessages.insert")
    assert quota.used == 10000
    assert quota.can_spend("videos.list") is False


def test_counter_resets_after_local_midnight():
    from quota import QuotaGovernor

    clock = FakeNow(datetime(2026, 10, 18, 23, 59))
    quota = QuotaGovernor(daily_limit=10000, now=clock)
    quota.used = 10000
    assert quota.can_spend("search") is False

    clock.value = datetime(2026, 10, 19, 0, 0, 1)
    assert quota.can_spend("search") is True
    assert quota.used == 0
    assert quota.resets_at == datetime(2026, 10, 20, 0, 0)


def test_next_midnight():
    from quota import next_midnight

    assert next_midnight(datetime(2026, 12, 31, 8, 30)) == datetime(2027, 1, 1)


def test_snapshot_fields():
    from quota import QuotaGovernor

    quota = QuotaGovernor(daily_limit=500, now=FakeNow(datetime(2026, 10, 18, 12, 0)))
    quota.spend("search")
    snap = quota.snapshot()
    assert snap["used"] == 100
    assert snap["limit"] == 500
    assert snap["remaining"] == 400
    assert snap["resetsAt"] == "2026-10-19T00:00:00"
