import json
import re
from enum import Enum

import aiomqtt
import prometheus_client as pm
import prometheus_client.core as pmc
import prometheus_client.registry as pmr

from .data import MetricKind, scope_name
from .reporter import Reporter


def adjust_value(val, ndigits=3):
  match val:
    case bool():
      return val
    case float():
      return round(val, ndigits)
    case Enum():
      return val.name
    case dict():
      return {k: adjust_value(v, ndigits) for k, v in val.items()}
    case _:
      return val


def prom_name(name):
  """ Prometheus only allows [a-zA-Z_:][a-zA-Z0-9_:]* """
  cleaned = re.sub(r"[^a-zA-Z0-9_:]", "_", name)
  return "_" + cleaned if cleaned[:1].isdigit() else cleaned


class PrometheusExporter(pmr.Collector):
  """ Exposes the registry to Prometheus scrapes.

  Counters stay counters. Everything else becomes gauges: one per statistic,
  plus a `quantile` labeled gauge for percentiles.
  """

  QUANTILES = (
    ("0.5", "median"),
    ("0.75", "_75"),
    ("0.95", "_95"),
    ("0.99", "_99"),
    ("0.999", "_99_9"),
  )

  STATS = ("count", "min", "max", "mean", "sum", "stdDev", "variance")

  RATES = ("rate1", "rate5", "rate15", "rateMean")

  def __init__(self, registry, port=8088, prefix=""):
    self.port = port
    self.prefix = prefix
    self.registry = registry
    self.collector_registry = None
    self.server = None

  def start(self, loop=None, collector_registry=pmc.REGISTRY):
    """ Register with `collector_registry` and serve it over HTTP """
    self.collector_registry = collector_registry
    collector_registry.register(self)
    served = pm.start_http_server(self.port, registry=collector_registry)
    # newer prometheus_client hands back (server, thread)
    self.server = served[0] if served else None

  async def stop(self):
    if self.server is not None:
      self.server.shutdown()
      self.server = None
    if self.collector_registry is not None:
      self.collector_registry.unregister(self)
      self.collector_registry = None

  def _gauge_(self, name, desc, value):
    return pmc.GaugeMetricFamily(name, desc, value=value)

  def _distribution_(self, name, desc, snap):
    for stat in self.STATS:
      yield self._gauge_(f"{name}_{prom_name(stat.lower())}", desc, snap[stat])

    quantiles = pmc.GaugeMetricFamily(name, desc, labels=["quantile"])
    for q, key in self.QUANTILES:
      quantiles.add_metric([q], snap["percentile"][key])
    yield quantiles

  def _rates_(self, name, desc, snap):
    for rate in self.RATES:
      yield self._gauge_(f"{name}_{prom_name(rate.lower())}", desc, snap[rate])

  def collect(self):
    for r in self.registry.readings():
      name = prom_name(scope_name(self.prefix, r.name))
      snap = r.value
      match r.kind:
        case MetricKind.COUNTER:
          yield pmc.CounterMetricFamily(name, r.desc, value=snap["count"])
        case MetricKind.GAUGE:
          yield self._gauge_(name, r.desc, snap["gauge"])
        case MetricKind.HEALTHCHECK:
          yield self._gauge_(f"{name}_healthy", r.desc, 1 if snap["healthy"] else 0)
        case MetricKind.HISTOGRAM:
          yield from self._distribution_(name, r.desc, snap)
        case MetricKind.METER:
          yield self._gauge_(f"{name}_count", r.desc, snap["count"])
          yield from self._rates_(name, r.desc, snap)
        case MetricKind.TIMER:
          yield from self._distribution_(name, r.desc, snap)
          yield from self._rates_(name, r.desc, snap)


class MqttPublisher(Reporter):
  """ Publishes each metric's snapshot as JSON on `<prefix>/<name>`, with
  dots in names turned into topic levels.
  """

  name = "mqtt"

  io_errors = (OSError, aiomqtt.MqttError)

  def __init__(self, registry, broker, username=None, password=None, prefix="",
      flush_interval_s=30, port=1883, ndigits=3):
    super().__init__(registry, flush_interval_s, prefix)
    self.broker = broker
    self.port = port
    self.username = username
    self.password = password
    self.ndigits = ndigits

  def client(self):
    return aiomqtt.Client(
      hostname=self.broker,
      port=self.port,
      username=self.username,
      password=self.password,
    )

  def rendered(self, metrics):
    ret = []
    for m in metrics:
      snap = adjust_value(m.snapshot(), self.ndigits)
      topic = self.metric_name(m).replace(".", "/")
      ret.append((topic, json.dumps(snap)))
    return ret

  async def flush(self, metrics):
    rendered = self.rendered(metrics)
    if not rendered:
      return

    async with self.client() as mqtt:
      for topic, payload in rendered:
        await mqtt.publish(topic, payload=payload)
