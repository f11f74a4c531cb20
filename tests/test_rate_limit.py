# tests/test_rate_limit.py
import threading
import time

import pytest

from ukpolice.errors import Cancelled
from ukpolice.rate_limit import RATE_LIMITER, RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_burst_then_sustained_rate():
    clock = FakeClock()
    limiter = RateLimiter(1.0, burst=3, clock=clock)

    assert [limiter.try_acquire() for _ in range(3)] == [0.0, 0.0, 0.0]
    assert limiter.try_acquire() == pytest.approx(1.0)

    clock.now += 0.5
    assert limiter.try_acquire() == pytest.approx(0.5)

    clock.now += 0.5
    assert limiter.try_acquire() == 0.0


def test_refill_is_capped_at_capacity():
    clock = FakeClock()
    limiter = RateLimiter(10.0, burst=2, clock=clock)
    clock.now += 60
    assert limiter.try_acquire() == 0.0
    assert limiter.try_acquire() == 0.0
    assert limiter.try_acquire() > 0.0


def test_default_burst_is_twice_the_rate():
    assert RateLimiter(5.0).capacity == 10
    assert RateLimiter(0.1).capacity == 1


def test_shared_default_matches_upstream_limits():
    assert RATE_LIMITER.rate == 15.0
    assert RATE_LIMITER.capacity == 30


@pytest.mark.parametrize("rate, burst", [(0, 1), (-1, 1), (1, 0)])
def test_invalid_configuration(rate, burst):
    with pytest.raises(ValueError):
        RateLimiter(rate, burst=burst)


def test_cannot_ask_for_more_than_capacity():
    with pytest.raises(ValueError):
        RateLimiter(1, burst=2).acquire(3)


def test_already_cancelled_fails_even_with_tokens():
    limiter = RateLimiter(1, burst=1)
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(Cancelled):
        limiter.acquire(cancel=cancel)
    # nothing was taken
    assert limiter.try_acquire() == 0.0


def test_timeout_while_waiting():
    limiter = RateLimiter(0.5, burst=1)
    limiter.acquire()
    start = time.monotonic()
    with pytest.raises(Cancelled):
        limiter.acquire(timeout=0.05)
    assert time.monotonic() - start < 0.5


def test_cancel_unblocks_waiter_without_starving_others():
    limiter = RateLimiter(5.0, burst=1)
    limiter.acquire()

    cancel = threading.Event()
    outcome = {}

    def cancelled_waiter():
        try:
            limiter.acquire(cancel=cancel)
            outcome["a"] = "admitted"
        except Cancelled:
            outcome["a"] = "cancelled"

    def patient_waiter():
        outcome["b_wait"] = limiter.acquire(timeout=5)

    a = threading.Thread(target=cancelled_waiter)
    b = threading.Thread(target=patient_waiter)
    a.start()
    b.start()
    cancel.set()
    a.join(2)
    b.join(5)

    assert outcome["a"] == "cancelled"
    assert outcome["b_wait"] < 1.0
    assert limiter.tokens >= 0.0


@pytest.mark.slow
def test_many_threads_never_exceed_rate():
    rate, burst = 50.0, 5
    limiter = RateLimiter(rate, burst=burst)
    stamps = []
    lock = threading.Lock()

    def worker():
        for _ in range(3):
            limiter.acquire()
            with lock:
                stamps.append(time.monotonic())

    threads = [threading.Thread(target=worker) for _ in range(10)]
    start = time.monotonic()
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(stamps) == 30
    # 5 free, then 25 at 50/s
    assert time.monotonic() - start >= (30 - burst) / rate * 0.9
    stamps.sort()
    for i, t0 in enumerate(stamps):
        for j in range(i, len(stamps)):
            assert (j - i + 1) <= burst + rate * (stamps[j] - t0) + 1
