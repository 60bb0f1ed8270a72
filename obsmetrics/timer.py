from .clock import STD_CLOCK
from .data import MetricKind
from .histogram import Histogram, NullHistogram, zero_histogram_snapshot
from .meter import Meter, NullMeter, zero_meter_snapshot
from .metric import Metric, NullMetric
from .sample import ExpDecaySample


DEFAULT_ALPHA = 0.015
DEFAULT_RESERVOIR_SIZE = 1028


class Timer(Metric):
  """ Latency distribution (a histogram of durations, in ms) and throughput
  (a meter of occurrences) of some operation.
  """

  kind = MetricKind.TIMER

  def _init_metric_(self, clock=None, alpha=DEFAULT_ALPHA,
      reservoir_size=DEFAULT_RESERVOIR_SIZE, **kwargs):
    self.clock = clock or STD_CLOCK
    self._hist = Histogram(
      name=self.name,
      sample=ExpDecaySample(alpha, reservoir_size, clock=self.clock)
    )
    self._meter = Meter(name=self.name, clock=self.clock)

  def histogram(self):
    return self._hist

  def meter(self):
    return self._meter

  def update(self, duration_ms):
    self._hist.update(duration_ms)
    self._meter.mark(1)

  def update_since(self, start_ms):
    self.update(self.clock.now() - start_ms)

  def time(self, fn, *args, **kwargs):
    """ Call `fn` and record how long it took. If it raises, nothing is
    recorded and the exception goes to the caller.
    """
    started = self.clock.now()
    result = fn(*args, **kwargs)
    self.update_since(started)
    return result

  def count(self):
    return self._hist.count()

  def max(self):
    return self._hist.max()

  def mean(self):
    return self._hist.mean()

  def min(self):
    return self._hist.min()

  def sum(self):
    return self._hist.sum()

  def variance(self):
    return self._hist.variance()

  def std_dev(self):
    return self._hist.std_dev()

  def percentile(self, p):
    return self._hist.percentile(p)

  def percentiles(self, ps):
    return self._hist.percentiles(ps)

  def rate1(self):
    return self._meter.rate1()

  def rate5(self):
    return self._meter.rate5()

  def rate15(self):
    return self._meter.rate15()

  def rate_mean(self):
    return self._meter.rate_mean()

  def snapshot(self):
    return {
      **self._hist.snapshot(),
      **self._meter.snapshot(),
      **super().snapshot(),
    }

  def peek(self):
    return f"count={self.count()} mean={self.mean()}"


class NullTimer(NullMetric):
  kind = MetricKind.TIMER

  def _init_metric_(self, **kwargs):
    self._hist = NullHistogram(name=self.name)
    self._meter = NullMeter(name=self.name)

  def histogram(self):
    return self._hist

  def meter(self):
    return self._meter

  def update(self, duration_ms):
    pass

  def update_since(self, start_ms):
    pass

  def time(self, fn, *args, **kwargs):
    return fn(*args, **kwargs)

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

  def rate1(self):
    return 0

  def rate5(self):
    return 0

  def rate15(self):
    return 0

  def rate_mean(self):
    return 0

  def snapshot(self):
    return {
      **zero_histogram_snapshot(),
      **zero_meter_snapshot(),
      **super().snapshot(),
    }
