# tests/test_uploads/test_progress.py

import pytest

from subhub.services.drive.progress import ProgressThrottle


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


def test_first_update_always_emits(clock: FakeClock):
    throttle = ProgressThrottle(interval=0.5, clock=clock)
    snap = throttle.update(100, 1000)
    assert snap is not None
    assert snap.percent == 10
    assert snap.rate_bps == 0.0


def test_updates_inside_the_interval_are_coalesced(clock: FakeClock):
    throttle = ProgressThrottle(interval=0.5, clock=clock)
    throttle.update(0, 10_000)

    clock.advance(0.2)
    assert throttle.update(200, 10_000) is None
    clock.advance(0.2)
    assert throttle.update(400, 10_000) is None

    clock.advance(0.2)
    snap = throttle.update(600, 10_000)
    assert snap is not None
    assert snap.rate_bps == pytest.approx(1000.0)


def test_rate_is_smoothed_after_the_first_sample(clock: FakeClock):
    throttle = ProgressThrottle(interval=0.5, smoothing=0.3, clock=clock)
    throttle.update(0, 100_000)

    clock.advance(1.0)
    throttle.update(1000, 100_000)
    clock.advance(1.0)
    snap = throttle.update(4000, 100_000)

    # 0.3 * 3000 + 0.7 * 1000
    assert snap.rate_bps == pytest.approx(1600.0)


def test_percent_never_goes_backwards_and_caps_at_100(clock: FakeClock):
    throttle = ProgressThrottle(interval=0.5, clock=clock)
    assert throttle.update(500, 1000).percent == 50

    clock.advance(1)
    assert throttle.update(400, 1000).percent == 50

    clock.advance(1)
    assert throttle.update(5000, 1000).percent == 100


def test_final_emits_even_inside_the_interval(clock: FakeClock):
    throttle = ProgressThrottle(interval=0.5, clock=clock)
    throttle.update(10, 1000)
    clock.advance(0.1)
    assert throttle.update(999, 1000) is None

    snap = throttle.final(1000, 1000)
    assert snap.percent == 100
    assert snap.bytes_sent == 1000


def test_zero_total_reports_zero_percent(clock: FakeClock):
    snap = ProgressThrottle(clock=clock).update(0, 0)
    assert snap.percent == 0
