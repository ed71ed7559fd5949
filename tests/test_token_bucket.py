import threading

import pytest

from forwarding_sim.core.token_bucket import TokenBucket


def test_bucket_starts_full(clock):
    bucket = TokenBucket(10, 10, clock)
    assert bucket.available_tokens == 10


def test_consume_without_elapsed_time_leaves_remainder(clock):
    bucket = TokenBucket(10, 10, clock)
    assert bucket.try_consume(3)
    assert bucket.try_consume(1)
    assert bucket.available_tokens == 6


def test_consume_fails_when_empty(clock):
    bucket = TokenBucket(2, 1, clock)
    assert bucket.try_consume()
    assert bucket.try_consume()
    assert not bucket.try_consume()
    assert bucket.available_tokens == 0


def test_request_above_capacity_is_refused(clock):
    bucket = TokenBucket(5, 1, clock)
    assert not bucket.try_consume(6)
    assert bucket.available_tokens == 5


def test_refills_to_capacity_after_capacity_over_rate_seconds(clock):
    bucket = TokenBucket(10, 10, clock)
    assert bucket.try_consume(10)
    clock.advance(1.0)
    assert bucket.try_consume(0)
    assert bucket.available_tokens == 10


def test_refill_saturates_at_capacity(clock):
    bucket = TokenBucket(10, 10, clock)
    bucket.try_consume(4)
    clock.advance(60)
    bucket.try_consume(0)
    assert bucket.available_tokens == 10


def test_partial_tokens_are_carried_over(clock):
    bucket = TokenBucket(10, 2, clock)
    assert bucket.try_consume(10)

    clock.advance(0.75)  # 1.5 tokens earned, one credited
    assert bucket.try_consume(1)
    assert not bucket.try_consume(1)

    clock.advance(0.25)  # the remaining half token plus another half
    assert bucket.try_consume(1)


def test_zero_rate_never_refills(clock):
    bucket = TokenBucket(1, 0, clock)
    assert bucket.try_consume()
    clock.advance(1000)
    assert not bucket.try_consume()


@pytest.mark.parametrize("capacity, rate", [(0, 1), (-1, 1), (5, -1)])
def test_invalid_parameters(capacity, rate, clock):
    with pytest.raises(ValueError):
        TokenBucket(capacity, rate, clock)


def test_concurrent_consumers_never_overdraw(clock):
    bucket = TokenBucket(50, 0, clock)
    successes = []
    lock = threading.Lock()

    def worker():
        for _ in range(10):
            if bucket.try_consume():
                with lock:
                    successes.append(1)

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(successes) == 50
    assert bucket.available_tokens == 0
