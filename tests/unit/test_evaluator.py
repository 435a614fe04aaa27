"""Behavioral tests for the expiration evaluator."""

from datetime import date, timedelta

import pytest

from token_notifier.core.evaluator import days_remaining, is_due

TODAY = date(2025, 1, 15)


@pytest.mark.unit
def test_due_when_expiring_tomorrow_and_never_notified() -> None:
    assert is_due(TODAY, TODAY + timedelta(days=1), None, 1) is True


@pytest.mark.unit
def test_not_due_when_outside_threshold() -> None:
    assert is_due(TODAY, TODAY + timedelta(days=2), None, 1) is False


@pytest.mark.unit
def test_expired_token_is_due_when_never_notified() -> None:
    expires_at = TODAY - timedelta(days=5)
    assert days_remaining(TODAY, expires_at) == -5
    assert is_due(TODAY, expires_at, None, 1) is True


@pytest.mark.unit
def test_not_due_when_already_notified_today() -> None:
    assert is_due(TODAY, TODAY + timedelta(days=1), TODAY, 1) is False


@pytest.mark.unit
@pytest.mark.parametrize("threshold", [0, 1, 7, 365])
def test_notified_today_suppresses_regardless_of_threshold(threshold: int) -> None:
    """Once-per-day guard wins over any threshold, including expired tokens."""
    assert is_due(TODAY, TODAY, TODAY, threshold) is False
    assert is_due(TODAY, TODAY - timedelta(days=30), TODAY, threshold) is False


@pytest.mark.unit
def test_due_again_the_day_after_notification() -> None:
    """The guard is per calendar day, not "never renotify"."""
    assert is_due(TODAY, TODAY + timedelta(days=1), TODAY - timedelta(days=1), 1) is True


@pytest.mark.unit
def test_expired_token_remains_due_every_day() -> None:
    expires_at = TODAY - timedelta(days=10)
    for offset in range(3):
        day = TODAY + timedelta(days=offset)
        assert is_due(day, expires_at, day - timedelta(days=1), 1) is True


@pytest.mark.unit
def test_threshold_zero_notifies_only_on_or_after_expiry() -> None:
    assert is_due(TODAY, TODAY + timedelta(days=1), None, 0) is False
    assert is_due(TODAY, TODAY, None, 0) is True
    assert is_due(TODAY, TODAY - timedelta(days=1), None, 0) is True


@pytest.mark.unit
def test_boundary_equal_to_threshold_is_due() -> None:
    assert is_due(TODAY, TODAY + timedelta(days=7), None, 7) is True
    assert is_due(TODAY, TODAY + timedelta(days=8), None, 7) is False
