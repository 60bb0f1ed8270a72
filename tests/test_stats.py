import math

import pytest

from obsmetrics.stats import (
  sample_max,
  sample_mean,
  sample_min,
  sample_percentile,
  sample_percentiles,
  sample_std_dev,
  sample_sum,
  sample_variance,
)


def test_empty_sequence_reads_as_zero() -> None:
  assert sample_min([]) == 0
  assert sample_max([]) == 0
  assert sample_mean([]) == 0
  assert sample_sum([]) == 0
  assert sample_variance([]) == 0
  assert sample_std_dev([]) == 0
  assert sample_percentile([], 0.5) == 0
  assert sample_percentiles([], [0.5, 0.99, 0.0]) == [0, 0, 0]


def test_basic_statistics() -> None:
  vals = [4, 1, 3, 2]
  assert sample_min(vals) == 1
  assert sample_max(vals) == 4
  assert sample_sum(vals) == 10
  assert sample_mean(vals) == 2.5
  assert sample_variance(vals) == pytest.approx(1.25)
  assert sample_std_dev(vals) == pytest.approx(math.sqrt(1.25))


def test_negative_values_keep_their_extremes() -> None:
  assert sample_max([-5, -2, -9]) == -2
  assert sample_min([-5, -2, -9]) == -9


@pytest.mark.parametrize(
  "p, expected",
  [
    (0.5, 30),     # pos 3.0 lands exactly on the third value
    (0.75, 45),    # pos 4.5 halfway between 40 and 50
    (0.25, 15),    # pos 1.5 halfway between 10 and 20
    (0.1, 10),     # pos < 1 clamps to the smallest
    (0.99, 50),    # pos >= n clamps to the largest
    (0.0, 10),
    (1.0, 50),
  ],
)
def test_percentile_interpolation(p, expected) -> None:
  assert sample_percentile([10, 20, 30, 40, 50], p) == pytest.approx(expected)


def test_percentiles_match_single_lookups_and_leave_input_alone() -> None:
  vals = [50, 10, 40, 20, 30, 35, 5]
  before = list(vals)
  ps = [0.5, 0.75, 0.95, 0.99, 0.999, 0.1]

  assert sample_percentiles(vals, ps) == [sample_percentile(vals, p) for p in ps]
  assert vals == before


def test_percentile_sorts_numerically() -> None:
  # a lexicographic sort would put 100 before 9
  assert sample_percentile([100, 9, 20], 0.5) == 20


def test_single_value_is_every_percentile() -> None:
  assert sample_percentiles([7], [0.0, 0.5, 0.999]) == [7, 7, 7]
