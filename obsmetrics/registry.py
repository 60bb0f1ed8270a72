from threading import RLock
import time

from .clock import STD_CLOCK
from .data import MetricKind, ObsLevel, Reading
from .histogram import Histogram, NullHistogram
from .logger import TextLogger
from .meter import Meter, NullMeter
from .metric import (
  Counter, NullCounter,
  Gauge, FunctionalGauge, NullGauge,
  Healthcheck, NullHealthcheck
)
from .timer import Timer, NullTimer


# kind -> (standard class, null class)
FLAVORS = {
  MetricKind.COUNTER: (Counter, NullCounter),
  MetricKind.GAUGE: (Gauge, NullGauge),
  MetricKind.HEALTHCHECK: (Healthcheck, NullHealthcheck),
  MetricKind.HISTOGRAM: (Histogram, NullHistogram),
  MetricKind.METER: (Meter, NullMeter),
  MetricKind.TIMER: (Timer, NullTimer),
}


class Registry:
  """ Named instruments, one per name.

  `null_metrics` decides, at creation time, whether new instruments are the
  real thing or no-op stand-ins with the same interface. Instruments that
  already exist are never swapped.
  """

  def __init__(self, null_metrics=False, clock=None, logger=TextLogger, level=ObsLevel.INF):
    # name -> Metric, in registration order
    self.metrics_by_name = dict()
    self.logs = dict()
    self.logger = logger
    self.level = level
    self.null_metrics = null_metrics
    self.clock = clock or STD_CLOCK
    self.lock = RLock()

  def use_null_metrics(self, flag=True):
    self.null_metrics = flag
    return self.null_metrics

  def log(self, key):
    """ The logger for `key`, made on first use """
    with self.lock:
      if key not in self.logs:
        self.logs[key] = self.logger(key=key, level=self.level)
      return self.logs[key]

  def set_level(self, new_level):
    with self.lock:
      self.level = new_level
      for log in self.logs.values():
        log.set_level(new_level)

  def register(self, metric):
    """ Add an already built metric. Noop if the name is taken """
    with self.lock:
      if metric.name not in self.metrics_by_name:
        self.metrics_by_name[metric.name] = metric
    return self

  def get(self, name):
    with self.lock:
      return self.metrics_by_name.get(name)

  def remove(self, name):
    with self.lock:
      self.metrics_by_name.pop(name, None)
    return self

  def find_or_create(self, kind, name, desc="", klass=None, **kwargs):
    with self.lock:
      metric = self.metrics_by_name.get(name)
      if metric is not None:
        if metric.kind != kind:
          raise TypeError(f"Metric {name} is a {metric.kind.name}, not a {kind.name}")
        return metric

      standard, null = FLAVORS[kind]
      if self.null_metrics:
        klass = null
      else:
        klass = klass or standard

      metric = klass(name=name, desc=desc, **kwargs)
      self.metrics_by_name[name] = metric
      return metric

  def _require_(self, name, what, value):
    with self.lock:
      if value is None and name not in self.metrics_by_name:
        raise ValueError(f"{what} is required to register {name}")

  def get_or_register_counter(self, name, desc=""):
    return self.find_or_create(MetricKind.COUNTER, name, desc)

  def get_or_register_gauge(self, name, desc=""):
    return self.find_or_create(MetricKind.GAUGE, name, desc)

  def get_or_register_functional_gauge(self, name, fn=None, desc=""):
    self._require_(name, "fn", fn)
    metric = self.find_or_create(MetricKind.GAUGE, name, desc, klass=FunctionalGauge, fn=fn)
    if fn is not None and not metric.is_null() and not isinstance(metric, FunctionalGauge):
      raise TypeError(f"Metric {name} is a plain gauge, it cannot take a fn")
    return metric

  def get_or_register_healthcheck(self, name, fn=None, desc=""):
    self._require_(name, "fn", fn)
    return self.find_or_create(MetricKind.HEALTHCHECK, name, desc, fn=fn)

  def get_or_register_histogram(self, name, sample=None, desc=""):
    self._require_(name, "sample", sample)
    return self.find_or_create(MetricKind.HISTOGRAM, name, desc, sample=sample)

  def get_or_register_meter(self, name, desc=""):
    return self.find_or_create(MetricKind.METER, name, desc, clock=self.clock)

  def get_or_register_timer(self, name, desc=""):
    return self.find_or_create(MetricKind.TIMER, name, desc, clock=self.clock)

  def metrics(self):
    with self.lock:
      return dict(self.metrics_by_name)

  def metric_list(self):
    with self.lock:
      return list(self.metrics_by_name.values())

  def of_kind(self, kind):
    return [m for m in self.metric_list() if m.kind == kind]

  def counters(self):
    return self.of_kind(MetricKind.COUNTER)

  def gauges(self):
    return self.of_kind(MetricKind.GAUGE)

  def healthchecks(self):
    return self.of_kind(MetricKind.HEALTHCHECK)

  def histograms(self):
    return self.of_kind(MetricKind.HISTOGRAM)

  def meters(self):
    return self.of_kind(MetricKind.METER)

  def timers(self):
    return self.of_kind(MetricKind.TIMER)

  def run_all_healthchecks(self):
    for hc in self.healthchecks():
      hc.check()

  def snapshot(self):
    return {m.name: m.snapshot() for m in self.metric_list()}

  def readings(self, prefix=""):
    """ Gather a reading of every metric, optionally only under `prefix` """
    at = time.time()
    for metric in self.metric_list():
      if prefix and not (metric.name == prefix or metric.name.startswith(prefix + ".")):
        continue
      yield Reading(
        kind=metric.kind,
        name=metric.name,
        value=metric.snapshot(),
        desc=metric.desc,
        at=at
      )

  def __len__(self):
    with self.lock:
      return len(self.metrics_by_name)

  def __contains__(self, name):
    with self.lock:
      return name in self.metrics_by_name
