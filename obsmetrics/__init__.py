from .clock import Clock, StdClock, ManualClock
from .data import MetricKind, ObsLevel, Reading
from .ewma import EWMA, NullEWMA, ewma1, ewma5, ewma15
from .histogram import Histogram, NullHistogram
from .meter import Meter, NullMeter
from .metric import (
  Metric,
  Counter, NullCounter,
  Gauge, FunctionalGauge, NullGauge,
  Healthcheck, NullHealthcheck
)
from .observer import Observer, NullObserver
from .registry import Registry
from .sample import Sample, UniformSample, ExpDecaySample
from .timer import Timer, NullTimer

REGISTRY = Registry()
OBSERVER = Observer(REGISTRY)


def default_registry():
  return REGISTRY


def observer():
  return OBSERVER


def use_null_metrics(flag=True):
  """ Make the default registry hand out null instruments from now on """
  return REGISTRY.use_null_metrics(flag)


def get_or_register_counter(name, desc=""):
  return REGISTRY.get_or_register_counter(name, desc)


def get_or_register_gauge(name, desc=""):
  return REGISTRY.get_or_register_gauge(name, desc)


def get_or_register_functional_gauge(name, fn=None, desc=""):
  return REGISTRY.get_or_register_functional_gauge(name, fn, desc)


def get_or_register_healthcheck(name, fn=None, desc=""):
  return REGISTRY.get_or_register_healthcheck(name, fn, desc)


def get_or_register_histogram(name, sample=None, desc=""):
  return REGISTRY.get_or_register_histogram(name, sample, desc)


def get_or_register_meter(name, desc=""):
  return REGISTRY.get_or_register_meter(name, desc)


def get_or_register_timer(name, desc=""):
  return REGISTRY.get_or_register_timer(name, desc)


def remove_metrics(name):
  return REGISTRY.remove(name)


def run_all_healthchecks():
  REGISTRY.run_all_healthchecks()
