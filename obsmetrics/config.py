from .data import ObsLevel
from .exporters import MqttPublisher, PrometheusExporter
from .graphite import Graphite
from .influx import InfluxDBv2
from .registry import Registry
from .reporter import LinesReporter


SampleConfig = {
  # Dotted prefix put in front of every exported metric name
  "prefix": "myapp",

  # Hand out no-op instruments instead of real ones
  "null_metrics": False,

  # Flush interval for every reporter that does not set its own
  "flush_interval_s": 10,

  # One of ERR, INF, DBG
  "log_level": "INF",

  # Graphite plaintext over TCP
  "graphite": {
    "addr": "graphite.example.com",
    "port": 2003,
  },

  # InfluxDB v2 write API
  "influx": {
    "addr": "http://influx.example.com:8086",
    "token": "hunter2",
    "org": "my-org",
    "bucket": "my-bucket",
  },

  # MQTT Broker, username and password can be None
  "mqtt": {
    "broker": "mqtt.broker.address.com",
    "username": "mosquitto",
    "password": "hunter2",
    "flush_interval_s": 30,
  },

  # Serve a Prometheus scrape endpoint on this port
  "prometheus": {
    "port": 8088,
  },

  # Log every metric through the registry logger. Noisy, off unless present
  # "lines": {},
}

CurrentConfig = SampleConfig


def log_level(config_map):
  name = config_map.get("log_level", "INF")
  try:
    return ObsLevel[name.upper()]
  except KeyError:
    raise ValueError(f"Unknown log_level {name}, expected one of {[l.name for l in ObsLevel]}") from None


def registry_from_config(config_map):
  return Registry(
    null_metrics=config_map.get("null_metrics", False),
    level=log_level(config_map)
  )


def reporters_from_config(config_map, registry):
  """ Build every reporter that has a section in `config_map` """
  prefix = config_map.get("prefix", "")
  interval = config_map.get("flush_interval_s", 10)

  def section(name):
    sec = dict(config_map[name])
    sec.setdefault("flush_interval_s", interval)
    sec.setdefault("prefix", prefix)
    return sec

  reporters = []

  if "graphite" in config_map:
    reporters.append(Graphite(registry, **section("graphite")))

  if "influx" in config_map:
    reporters.append(InfluxDBv2(registry, **section("influx")))

  if "mqtt" in config_map:
    reporters.append(MqttPublisher(registry, **section("mqtt")))

  if "lines" in config_map:
    reporters.append(LinesReporter(registry, **section("lines")))

  if "prometheus" in config_map:
    sec = dict(config_map["prometheus"])
    sec.setdefault("prefix", prefix)
    reporters.append(PrometheusExporter(registry, **sec))

  return reporters
