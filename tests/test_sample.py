import math
import random
import threading
from collections import Counter as Tally

import pytest
from hypothesis import given, strategies as st

from obsmetrics import ExpDecaySample, ManualClock, UniformSample
from obsmetrics.sample import RESCALE_THRESHOLD_MS


@given(
  st.lists(st.integers(min_value=-10_000, max_value=10_000), max_size=50),
  st.integers(min_value=50, max_value=100),
)
def test_uniform_keeps_everything_until_full(values, reservoir_size) -> None:
  sample = UniformSample(reservoir_size)
  for v in values:
    sample.update(v)

  assert sample.count() == len(values)
  assert sample.size() == len(values)
  assert sorted(sample.values()) == sorted(values)


@given(
  st.lists(st.integers(), min_size=11, max_size=200),
  st.integers(min_value=0, max_value=10),
)
def test_uniform_overflow_is_bounded_and_drawn_from_input(values, reservoir_size) -> None:
  sample = UniformSample(reservoir_size, rng=random.Random(7))
  for v in values:
    sample.update(v)

  assert sample.count() == len(values)
  assert sample.size() == reservoir_size
  kept, offered = Tally(sample.values()), Tally(values)
  assert all(offered[v] >= n for v, n in kept.items())


def test_uniform_replaces_only_when_the_draw_lands_inside(fixed_random) -> None:
  sample = UniformSample(2, rng=fixed_random(randranges=[0, 3]))
  for v in (1, 2, 3, 4):
    sample.update(v)

  # 3 replaced slot 0, the draw for 4 fell outside the reservoir
  assert sample.values() == [3, 2]
  assert sample.count() == 4


@pytest.mark.parametrize("size", [-1, 1.5, "10", None, True])
def test_bad_reservoir_size(size) -> None:
  with pytest.raises(ValueError):
    UniformSample(size)
  with pytest.raises(ValueError):
    ExpDecaySample(0.015, size)


def test_zero_sized_reservoir_still_counts(clock) -> None:
  for sample in (UniformSample(0), ExpDecaySample(0.015, 0, clock=clock)):
    for v in range(5):
      sample.update(v)
    assert sample.count() == 5
    assert sample.size() == 0
    assert sample.values() == []
    assert sample.percentile(0.99) == 0


def test_values_is_a_copy() -> None:
  sample = UniformSample(10)
  sample.update(1)
  sample.values().append(99)
  assert sample.values() == [1]


def test_clear(clock) -> None:
  for sample in (UniformSample(10), ExpDecaySample(0.015, 10, clock=clock)):
    for v in range(20):
      sample.update(v)
    sample.clear()

    assert sample.count() == 0
    assert sample.size() == 0
    assert sample.max() == 0
    assert sample.mean() == 0
    assert sample.percentile(0.5) == 0
    assert sample.snapshot() == {"count": 0, "values": []}


def test_statistics_read_through_the_reservoir() -> None:
  sample = UniformSample(10)
  for v in (10, 20, 30, 40, 50):
    sample.update(v)

  assert sample.min() == 10
  assert sample.max() == 50
  assert sample.mean() == 30
  assert sample.sum() == 150
  assert sample.variance() == 200
  assert sample.percentile(0.75) == 45
  assert sample.percentiles([0.5, 0.99]) == [30, 50]


def test_bad_alpha() -> None:
  with pytest.raises(ValueError):
    ExpDecaySample(0, 10)
  with pytest.raises(ValueError):
    ExpDecaySample(-0.5, 10)


@given(st.lists(st.floats(allow_nan=False, allow_infinity=False), max_size=300))
def test_exp_decay_is_bounded(values) -> None:
  clock = ManualClock()
  sample = ExpDecaySample(0.015, 100, clock=clock)
  for v in values:
    clock.advance(10)
    sample.update(v)

  assert sample.count() == len(values)
  assert sample.size() == min(len(values), 100)


def test_exp_decay_evicts_lowest_priority(clock, fixed_random) -> None:
  # with a fixed draw, priority falls as count rises at a fixed time
  sample = ExpDecaySample(0.015, 2, clock=clock, rng=fixed_random())
  for v in ("a", "b", "c", "d"):
    sample.update(v)

  assert sorted(sample.values()) == ["a", "d"]


def test_exp_decay_favors_recent_values(clock, fixed_random) -> None:
  sample = ExpDecaySample(1.0, 2, clock=clock, rng=fixed_random())
  sample.update("old")
  clock.advance_s(10)
  sample.update("new")
  sample.update("newer")

  assert sorted(sample.values()) == ["new", "newer"]


def test_exp_decay_rescales_after_an_hour(clock) -> None:
  sample = ExpDecaySample(0.015, 10, clock=clock)
  sample.update(1)
  before = sample.priorities()[0]

  clock.advance(RESCALE_THRESHOLD_MS + 1)
  sample.update(2)

  assert sample.t0 == clock.now()
  assert sample.t1 == clock.now() + RESCALE_THRESHOLD_MS
  # the old key shrank, the new one starts from exp(0)
  assert sample.priorities()[0] < before
  assert sorted(sample.values()) == [1, 2]


def test_exp_decay_survives_long_gaps(clock) -> None:
  sample = ExpDecaySample(0.015, 10, clock=clock)
  sample.update(1)
  clock.advance_s(30 * 24 * 60 * 60)
  sample.update(2)

  assert all(math.isfinite(k) for k in sample.priorities())
  assert sample.count() == 2


def test_exp_decay_keys_stay_finite_over_days(clock) -> None:
  sample = ExpDecaySample(0.015, 50, clock=clock)
  for _ in range(24 * 7):
    clock.advance_s(60 * 60)
    for v in range(5):
      sample.update(v)

  assert sample.size() == 50
  assert all(math.isfinite(k) and k >= 0 for k in sample.priorities())


def test_fast_decay_rebases_before_exp_overflows(clock) -> None:
  sample = ExpDecaySample(1.0, 10, clock=clock)
  sample.update(1)
  # 720s at alpha 1.0 is past what exp() can represent, well inside an hour
  clock.advance_s(720)
  sample.update(2)

  assert sample.count() == 2
  assert sorted(sample.values()) == [1, 2]
  assert all(math.isfinite(k) for k in sample.priorities())


def test_fast_decay_window_is_shorter_than_an_hour(clock) -> None:
  sample = ExpDecaySample(2.0, 10, clock=clock)
  assert sample.t1 - sample.t0 < RESCALE_THRESHOLD_MS

  for _ in range(100):
    clock.advance_s(59)
    sample.update(0)

  assert sample.count() == 100
  assert all(math.isfinite(k) for k in sample.priorities())


def hammer(fn, threads=8, calls=10_000):
  def work():
    for i in range(calls):
      fn(i)

  workers = [threading.Thread(target=work) for _ in range(threads)]
  for w in workers:
    w.start()
  for w in workers:
    w.join()


@pytest.mark.parametrize("make", [
  lambda: UniformSample(50),
  lambda: ExpDecaySample(0.015, 50),
])
def test_concurrent_updates_are_all_counted(make) -> None:
  sample = make()
  hammer(sample.update)

  assert sample.count() == 80_000
  assert sample.size() <= 50
