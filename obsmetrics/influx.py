import asyncio
import time
from urllib.parse import quote

import aiohttp

from .data import MetricKind
from .reporter import Reporter


HISTOGRAM_FIELDS = (
  ("count", "count"),
  ("min", "min"),
  ("max", "max"),
  ("mean", "mean"),
  ("sum", "sum"),
  ("stddev", "stdDev"),
  ("variance", "variance"),
)

PERCENTILE_FIELDS = (
  ("median", "median"),
  ("percentile_75", "_75"),
  ("percentile_95", "_95"),
  ("percentile_99", "_99"),
  ("percentile_99_9", "_99_9"),
)

RATE_FIELDS = (
  ("rate_1min", "rate1"),
  ("rate_5min", "rate5"),
  ("rate_15min", "rate15"),
  ("rate_mean", "rateMean"),
)


def escape_measurement(name):
  return name.replace(",", r"\,").replace(" ", r"\ ")


def _distribution_fields(snap):
  fields = [(f, snap[k]) for f, k in HISTOGRAM_FIELDS]
  fields += [(f, snap["percentile"][k]) for f, k in PERCENTILE_FIELDS]
  return fields


def _rate_fields(snap):
  return [(f, snap[k]) for f, k in RATE_FIELDS]


def line_protocol(name, metric, ts_ms):
  """ One InfluxDB line (with trailing newline) for `metric`, or "" """
  snap = metric.snapshot()
  match metric.kind:
    case MetricKind.COUNTER:
      fields = [("counter", snap["count"])]
    case MetricKind.GAUGE:
      fields = [("gauge", snap["gauge"])]
    case MetricKind.HEALTHCHECK:
      fields = [("healthy", "true" if snap["healthy"] else "false")]
    case MetricKind.HISTOGRAM:
      fields = _distribution_fields(snap)
    case MetricKind.METER:
      fields = [("count", snap["count"])] + _rate_fields(snap)
    case MetricKind.TIMER:
      fields = _distribution_fields(snap) + _rate_fields(snap)
    case _:
      return ""

  field_part = ",".join(f"{k}={v}" for k, v in fields)
  return f"{escape_measurement(name)} {field_part} {ts_ms}\n"


class InfluxDBv2(Reporter):
  """ POSTs the registry as line protocol to an InfluxDB v2 write endpoint """

  name = "influx"

  io_errors = (OSError, asyncio.TimeoutError, aiohttp.ClientError)

  def __init__(self, registry, addr, token, org, bucket, flush_interval_s=10, prefix="", timeout_s=1.0):
    super().__init__(registry, flush_interval_s, prefix)
    self.url = (
      f"{addr.rstrip('/')}/api/v2/write"
      f"?org={quote(org)}&bucket={quote(bucket)}&precision=ms"
    )
    self.headers = {
      "Authorization": f"Token {token}",
      "Content-Type": "text/plain",
      "Accept": "application/json",
    }
    self.timeout = aiohttp.ClientTimeout(total=timeout_s)
    self.session = None
    self.response_cb = self.default_response_cb

  def default_response_cb(self, status, body):
    self.log.dbg("wrote metrics, status {}", status)

  def on_response(self, fn):
    self.response_cb = fn

  def body(self, metrics, ts_ms=None):
    ts_ms = int(time.time() * 1000) if ts_ms is None else ts_ms
    return "".join(line_protocol(self.metric_name(m), m, ts_ms) for m in metrics)

  def _session_(self):
    if self.session is None or self.session.closed:
      self.session = aiohttp.ClientSession(timeout=self.timeout)
    return self.session

  async def flush(self, metrics):
    body = self.body(metrics)
    session = self._session_()
    async with session.post(self.url, data=body.encode(), headers=self.headers) as resp:
      text = await resp.text()
      resp.raise_for_status()
      self.response_cb(resp.status, text)

  async def close(self):
    if self.session is not None:
      await self.session.close()
      self.session = None
