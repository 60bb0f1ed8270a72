from .data import scope_name, to_scope
from .histogram import NullHistogram
from .meter import NullMeter
from .metric import NullCounter, NullGauge, NullHealthcheck
from .logger import BaseLogger
from .sample import ExpDecaySample, UniformSample
from .timer import NullTimer


class Observer:
  """ Hands out instruments from `registry`, named under a dotted scope.

      obs = Observer(registry).scoped("db")
      obs.timer("query")       # registered as "db.query"
  """

  def __init__(self, registry, scope=()):
    self.scope = to_scope(scope)
    self.registry = registry

  def _name_(self, name):
    return scope_name(self.scope, name)

  def scoped(self, *scope):
    new_scope = self.scope + to_scope(scope)
    if new_scope == self.scope:
      return self
    return Observer(self.registry, new_scope)

  def counter(self, name, desc=""):
    return self.registry.get_or_register_counter(self._name_(name), desc)

  def gauge(self, name, desc=""):
    return self.registry.get_or_register_gauge(self._name_(name), desc)

  def functional_gauge(self, name, fn, desc=""):
    return self.registry.get_or_register_functional_gauge(self._name_(name), fn, desc)

  def healthcheck(self, name, fn=None, desc=""):
    return self.registry.get_or_register_healthcheck(self._name_(name), fn, desc)

  def hist(self, name, desc="", reservoir_size=1028, alpha=None, **kwargs):
    """ A histogram over a uniform sample, or an exponentially decaying one
    when `alpha` is given.
    """
    if alpha is None:
      sample = UniformSample(reservoir_size, **kwargs)
    else:
      sample = ExpDecaySample(alpha, reservoir_size, clock=self.registry.clock, **kwargs)
    return self.registry.get_or_register_histogram(self._name_(name), sample, desc)

  def meter(self, name, desc=""):
    return self.registry.get_or_register_meter(self._name_(name), desc)

  def timer(self, name, desc=""):
    return self.registry.get_or_register_timer(self._name_(name), desc)

  def log(self, name=""):
    return self.registry.log(self._name_(name))


class NullObserver(Observer):
  """ Same interface, nothing registered, nothing recorded """

  def __init__(self, scope=()):
    super().__init__(registry=None, scope=scope)

  def scoped(self, *scope):
    return NullObserver(self.scope + to_scope(scope))

  def counter(self, name, desc=""):
    return NullCounter(self._name_(name), desc)

  def gauge(self, name, desc=""):
    return NullGauge(self._name_(name), desc)

  def functional_gauge(self, name, fn, desc=""):
    return NullGauge(self._name_(name), desc)

  def healthcheck(self, name, fn=None, desc=""):
    return NullHealthcheck(self._name_(name), desc)

  def hist(self, name, desc="", **kwargs):
    return NullHistogram(self._name_(name), desc)

  def meter(self, name, desc=""):
    return NullMeter(self._name_(name), desc)

  def timer(self, name, desc=""):
    return NullTimer(self._name_(name), desc)

  def log(self, name=""):
    return BaseLogger(self._name_(name))
