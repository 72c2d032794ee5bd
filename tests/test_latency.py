import threading

import pytest

from peerlink.latency import InvalidSample, LatencyTracker


def test_empty_window_defaults(clock):
    tracker = LatencyTracker(clock=clock)
    assert tracker.latency() == 0
    assert tracker.jitter() == 0
    assert len(tracker) == 0


def test_mean_and_jitter(clock):
    tracker = LatencyTracker(clock=clock)
    for sample in (10, 20, 30):
        tracker.accept(sample)
    assert tracker.latency() == 20
    assert tracker.jitter() == 10


def test_accept_returns_current_latency(clock):
    tracker = LatencyTracker(clock=clock)
    assert tracker.accept(10) == 10
    assert tracker.accept(15) == 12
    assert tracker.accept(50) == 25


def test_mean_is_truncated():
    tracker = LatencyTracker()
    tracker.accept(1)
    tracker.accept(2)
    assert tracker.latency() == 1


def test_fifo_eviction_keeps_last_ten(clock):
    tracker = LatencyTracker(clock=clock)
    for sample in range(1, 12):
        tracker.accept(sample)
    assert tracker.samples() == list(range(2, 12))
    # média de 2..11 = 6.5, truncada
    assert tracker.latency() == 6
    assert tracker.jitter() == 5


def test_metrics_depend_only_on_last_ten(clock):
    noisy = LatencyTracker(clock=clock)
    clean = LatencyTracker(clock=clock)
    for sample in (900, 1, 500, 3):
        noisy.accept(sample)
    recent = [40, 42, 38, 41, 39, 45, 37, 40, 44, 36]
    for sample in recent:
        noisy.accept(sample)
        clean.accept(sample)
    assert noisy.samples() == recent
    assert noisy.latency() == clean.latency()
    assert noisy.jitter() == clean.jitter()


def test_single_sample_has_zero_jitter(clock):
    tracker = LatencyTracker(clock=clock)
    tracker.accept(120)
    assert tracker.latency() == 120
    assert tracker.jitter() == 0


def test_jitter_uses_larger_deviation(clock):
    tracker = LatencyTracker(clock=clock)
    for sample in (10, 10, 10, 70):
        tracker.accept(sample)
    # média 25: acima 45, abaixo 15
    assert tracker.jitter() == 45


def test_not_quiet_after_construction(clock):
    tracker = LatencyTracker(clock=clock)
    assert not tracker.is_quiet()
    clock.advance(4999)
    assert not tracker.is_quiet()


def test_quiet_after_threshold(clock):
    tracker = LatencyTracker(clock=clock)
    clock.advance(5000)
    assert not tracker.is_quiet()
    clock.advance(1)
    assert tracker.is_quiet()


def test_accept_resets_quiet(clock):
    tracker = LatencyTracker(clock=clock)
    clock.advance(6000)
    assert tracker.is_quiet()
    tracker.accept(25)
    assert not tracker.is_quiet()
    assert tracker.last_update == clock.now


def test_is_quiet_does_not_mutate(clock):
    tracker = LatencyTracker(clock=clock)
    before = tracker.last_update
    clock.advance(10000)
    tracker.is_quiet()
    tracker.latency()
    tracker.jitter()
    assert tracker.last_update == before


def test_custom_threshold(clock):
    tracker = LatencyTracker(quiet_threshold_ms=100, clock=clock)
    clock.advance(101)
    assert tracker.is_quiet()


@pytest.mark.parametrize("bad", [-1, 1.5, "10", None, True])
def test_invalid_samples_rejected(clock, bad):
    tracker = LatencyTracker(clock=clock)
    with pytest.raises(InvalidSample):
        tracker.accept(bad)
    assert len(tracker) == 0


def test_zero_sample_accepted(clock):
    tracker = LatencyTracker(clock=clock)
    assert tracker.accept(0) == 0


def test_snapshot(clock):
    tracker = LatencyTracker(clock=clock)
    tracker.accept(10)
    tracker.accept(30)
    clock.advance(250)
    snap = tracker.snapshot()
    assert snap == {
        "latency_ms": 20,
        "jitter_ms": 10,
        "samples": 2,
        "idle_ms": 250,
        "quiet": False,
    }


def test_concurrent_accept_keeps_window_bounded():
    tracker = LatencyTracker()
    sizes = []

    def feed():
        for i in range(500):
            tracker.accept(i % 50)
            sizes.append(len(tracker))
            tracker.jitter()

    threads = [threading.Thread(target=feed) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(tracker) == 10
    assert max(sizes) <= 10
