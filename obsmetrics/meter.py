from .clock import STD_CLOCK
from .data import MetricKind
from .ewma import ewma1, ewma5, ewma15
from .metric import Metric, NullMetric


class Meter(Metric):
  """ Rate of events: 1, 5 and 15 minute moving averages plus the mean rate
  since creation.
  """

  kind = MetricKind.METER

  def _init_metric_(self, clock=None, **kwargs):
    self.clock = clock or STD_CLOCK
    self._count = 0
    self.a1 = ewma1(self.clock)
    self.a5 = ewma5(self.clock)
    self.a15 = ewma15(self.clock)
    self.started_at = self.clock.now()

  def mark(self, n=1):
    with self.lock:
      self._count += n
      self.a1.update(n)
      self.a5.update(n)
      self.a15.update(n)

  def count(self):
    with self.lock:
      return self._count

  def rate1(self):
    return self.a1.rate()

  def rate5(self):
    return self.a5.rate()

  def rate15(self):
    return self.a15.rate()

  def rate_mean(self):
    # the extra second keeps a brand new meter finite
    elapsed_s = (self.clock.now() - self.started_at) / 1000.0
    return self.count() / (1 + elapsed_s)

  def snapshot(self):
    return {
      **super().snapshot(),
      "count": self.count(),
      "rate1": self.rate1(),
      "rate5": self.rate5(),
      "rate15": self.rate15(),
      "rateMean": self.rate_mean(),
    }

  def peek(self):
    return f"count={self.count()} rate1={self.rate1()}"


def zero_meter_snapshot():
  return {"count": 0, "rate1": 0, "rate5": 0, "rate15": 0, "rateMean": 0}


class NullMeter(NullMetric):
  kind = MetricKind.METER

  def _init_metric_(self, clock=None, **kwargs):
    pass

  def mark(self, n=1):
    pass

  def count(self):
    return 0

  def rate1(self):
    return 0

  def rate5(self):
    return 0

  def rate15(self):
    return 0

  def rate_mean(self):
    return 0

  def snapshot(self):
    return {**super().snapshot(), **zero_meter_snapshot()}
