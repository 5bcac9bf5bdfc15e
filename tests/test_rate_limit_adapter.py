"""Unit tests for the in-memory rate limiter adapter."""

import threading
from unittest.mock import Mock

import pytest

from brandplot.adapters.rate_limit.in_memory import InMemoryRateLimiter

DAY = 24 * 60 * 60


def test_defaults_allow_three_requests_per_day() -> None:
    limiter = InMemoryRateLimiter()

    assert limiter.max_requests == 3
    assert limiter.window_seconds == DAY


def test_allows_up_to_limit_with_decreasing_remaining() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryRateLimiter(max_requests=3, window_seconds=DAY, clock=clock)

    results = [limiter.consume("1.2.3.4") for _ in range(3)]

    assert [r.allowed for r in results] == [True, True, True]
    assert [r.remaining for r in results] == [2, 1, 0]
    assert all(r.reset_at == 1000.0 + DAY for r in results)
    assert all(r.retry_after_seconds is None for r in results)


def test_blocks_request_after_limit() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryRateLimiter(max_requests=3, window_seconds=DAY, clock=clock)
    for _ in range(3):
        limiter.consume("1.2.3.4")

    clock.return_value = 1500.0
    blocked = limiter.consume("1.2.3.4")

    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.reset_at == 1000.0 + DAY
    assert blocked.retry_after_seconds == DAY - 500


def test_blocked_requests_do_not_extend_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.consume("k")

    for t in (1010.0, 1030.0, 1050.0):
        clock.return_value = t
        assert limiter.consume("k").reset_at == 1060.0

    record = limiter.get_record("k")
    assert record is not None
    assert record.count == 1


def test_window_is_measured_from_first_request() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=10, clock=clock)

    assert limiter.consume("k").allowed is True

    # Still inside the window at exactly reset_at
    clock.return_value = 1010.0
    assert limiter.consume("k").allowed is False


def test_resets_after_window_with_later_reset_time() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryRateLimiter(max_requests=3, window_seconds=10, clock=clock)
    for _ in range(4):
        first_window = limiter.consume("k")
    assert first_window.allowed is False

    clock.return_value = 1010.5
    renewed = limiter.consume("k")

    assert renewed.allowed is True
    assert renewed.remaining == 2
    assert renewed.reset_at > first_window.reset_at
    assert renewed.reset_at == 1020.5


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=clock)

    assert limiter.consume("k1").allowed is True
    assert limiter.consume("k1").allowed is False

    assert limiter.consume("k2").allowed is True


def test_check_is_alias_of_consume() -> None:
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60)

    assert limiter.check("k").remaining == 1
    assert limiter.consume("k").remaining == 0


def test_sweep_removes_only_expired_records() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryRateLimiter(max_requests=3, window_seconds=100, clock=clock)
    limiter.consume("old")

    clock.return_value = 1080.0
    limiter.consume("recent")

    clock.return_value = 1150.0
    removed = limiter.sweep()

    assert removed == 1
    assert limiter.get_record("old") is None
    assert limiter.get_record("recent") is not None
    assert len(limiter) == 1


def test_sweep_with_nothing_expired_is_noop() -> None:
    limiter = InMemoryRateLimiter(max_requests=3, window_seconds=100)
    limiter.consume("k")

    assert limiter.sweep() == 0
    assert len(limiter) == 1


def test_reset_forgets_all_records() -> None:
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=100)
    limiter.consume("k")
    limiter.reset()

    assert limiter.consume("k").allowed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_requests": 0, "window_seconds": 60},
        {"max_requests": 1, "window_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryRateLimiter(**kwargs)


def test_empty_key_rejected() -> None:
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60)

    with pytest.raises(ValueError):
        limiter.consume("")


def test_concurrent_consumers_never_exceed_limit() -> None:
    limiter = InMemoryRateLimiter(max_requests=5, window_seconds=60)
    allowed: list[bool] = []
    lock = threading.Lock()

    def _worker() -> None:
        result = limiter.consume("shared")
        with lock:
            allowed.append(result.allowed)

    threads = [threading.Thread(target=_worker) for _ in range(40)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert allowed.count(True) == 5
    assert allowed.count(False) == 35
