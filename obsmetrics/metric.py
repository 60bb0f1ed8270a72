import itertools
import threading

from .data import MetricKind


_ids = itertools.count()


class Metric:
  """ Base of every instrument. `kind` tags what the instrument is, and is
  shared by the standard and null flavors of the same instrument.
  """

  kind: MetricKind = None

  __slots__ = (
    'id',
    'name',
    'desc',
    'lock',
    '__dict__'
  )

  def __init__(self, name="", desc="", **kwargs):
    self.id = next(_ids)
    self.name = name or ""
    self.desc = desc or ""
    self.lock = threading.RLock()
    self._init_metric_(**kwargs)

  def _init_metric_(self, **kwargs):
    pass

  def is_null(self):
    return False

  def snapshot(self):
    return {"id": self.id, "name": self.name, "description": self.desc}

  def peek(self):
    """ Peek at the value of this metric. Sometimes this is not one number,
    like in histograms, etc.
    """
    return None

  def __repr__(self):
    return f"{self.__class__.__name__}({self.name}, value={self.peek()})"

  def __str__(self):
    return self.__repr__()


class NullMetric(Metric):
  """ Does nothing successfully """

  def is_null(self):
    return True


class Counter(Metric):
  kind = MetricKind.COUNTER

  def _init_metric_(self, value=0, **kwargs):
    self._count = value

  def inc(self, amt=1):
    with self.lock:
      self._count += amt

  def dec(self, amt=1):
    self.inc(-amt)

  def clear(self):
    with self.lock:
      self._count = 0

  def count(self):
    with self.lock:
      return self._count

  def snapshot(self):
    return {**super().snapshot(), "count": self.count()}

  def peek(self):
    return self.count()


class NullCounter(NullMetric):
  kind = MetricKind.COUNTER

  def inc(self, amt=1):
    pass

  def dec(self, amt=1):
    pass

  def clear(self):
    pass

  def count(self):
    return 0

  def snapshot(self):
    return {**super().snapshot(), "count": 0}


class Gauge(Metric):
  kind = MetricKind.GAUGE

  def _init_metric_(self, value=0, **kwargs):
    self._value = value

  def update(self, value):
    with self.lock:
      self._value = value

  def value(self):
    with self.lock:
      return self._value

  def snapshot(self):
    return {**super().snapshot(), "gauge": self.value()}

  def peek(self):
    return self.value()


class FunctionalGauge(Gauge):
  """ A gauge whose value is whatever `fn()` says at read time """

  def _init_metric_(self, fn=None, **kwargs):
    if not callable(fn):
      raise ValueError("FunctionalGauge needs a callable")
    self.fn = fn

  def update(self, value):
    pass

  def value(self):
    return self.fn()


class NullGauge(NullMetric):
  kind = MetricKind.GAUGE

  def update(self, value):
    pass

  def value(self):
    return 0

  def snapshot(self):
    return {**super().snapshot(), "gauge": 0}


class Healthcheck(Metric):
  """ Runs `fn(self)` on `check()`; fn reports back through `healthy()` or
  `unhealthy(err)`. Never checked means healthy.
  """

  kind = MetricKind.HEALTHCHECK

  def _init_metric_(self, fn=None, **kwargs):
    if not callable(fn):
      raise ValueError("Healthcheck needs a callable")
    self.fn = fn
    self._err = None

  def check(self):
    self.fn(self)

  def healthy(self):
    with self.lock:
      self._err = None

  def unhealthy(self, err):
    with self.lock:
      self._err = err

  def error(self):
    with self.lock:
      return self._err

  def is_healthy(self):
    return self.error() is None

  def snapshot(self):
    err = self.error()
    return {
      **super().snapshot(),
      "healthy": err is None,
      "error": None if err is None else repr(err),
    }

  def peek(self):
    return "healthy" if self.is_healthy() else "unhealthy"


class NullHealthcheck(NullMetric):
  kind = MetricKind.HEALTHCHECK

  def _init_metric_(self, fn=None, **kwargs):
    pass

  def check(self):
    pass

  def healthy(self):
    pass

  def unhealthy(self, err):
    pass

  def error(self):
    return None

  def is_healthy(self):
    return True

  def snapshot(self):
    return {**super().snapshot(), "healthy": True, "error": None}
