from . import stats
from .data import MetricKind
from .metric import Metric, NullMetric
from .sample import UniformSample


# (snapshot key, percentile) pairs reported by every histogram
SNAPSHOT_PERCENTILES = (
  ("median", 0.5),
  ("_75", 0.75),
  ("_95", 0.95),
  ("_99", 0.99),
  ("_99_9", 0.999),
)


def zero_histogram_snapshot():
  return {
    "count": 0,
    "max": 0,
    "mean": 0,
    "min": 0,
    "stdDev": 0,
    "sum": 0,
    "variance": 0,
    "percentile": {k: 0 for k, _ in SNAPSHOT_PERCENTILES},
  }


class Histogram(Metric):
  """ Distribution of a stream of values, as seen through `sample` """

  kind = MetricKind.HISTOGRAM

  def _init_metric_(self, sample=None, **kwargs):
    if sample is None:
      raise ValueError("Histogram needs a sample")
    self._sample = sample

  def sample(self):
    return self._sample

  def update(self, value):
    self._sample.update(value)

  def clear(self):
    self._sample.clear()

  def count(self):
    return self._sample.count()

  def max(self):
    return self._sample.max()

  def mean(self):
    return self._sample.mean()

  def min(self):
    return self._sample.min()

  def sum(self):
    return self._sample.sum()

  def variance(self):
    return self._sample.variance()

  def std_dev(self):
    return self._sample.std_dev()

  def percentile(self, p):
    return self._sample.percentile(p)

  def percentiles(self, ps):
    return self._sample.percentiles(ps)

  def snapshot(self):
    # one consistent view of the reservoir for every statistic
    with self._sample.lock:
      count = self._sample.count()
      vals = self._sample.values()

    ps = stats.sample_percentiles(vals, [p for _, p in SNAPSHOT_PERCENTILES])
    return {
      **super().snapshot(),
      "count": count,
      "max": stats.sample_max(vals),
      "mean": stats.sample_mean(vals),
      "min": stats.sample_min(vals),
      "stdDev": stats.sample_std_dev(vals),
      "sum": stats.sample_sum(vals),
      "variance": stats.sample_variance(vals),
      "percentile": {k: v for (k, _), v in zip(SNAPSHOT_PERCENTILES, ps)},
    }

  def peek(self):
    return f"count={self.count()} mean={self.mean()}"


class NullHistogram(NullMetric):
  kind = MetricKind.HISTOGRAM

  def _init_metric_(self, sample=None, **kwargs):
    pass

  def sample(self):
    return UniformSample(0)

  def update(self, value):
    pass

  def clear(self):
    pass

  def count(self):
    return 0

  def max(self):
    return 0

  def mean(self):
    return 0

  def min(self):
    return 0

  def sum(self):
    return 0

  def variance(self):
    return 0

  def std_dev(self):
    return 0

  def percentile(self, p):
    return 0

  def percentiles(self, ps):
    return [0 for _ in ps]

  def snapshot(self):
    return {**super().snapshot(), **zero_histogram_snapshot()}
