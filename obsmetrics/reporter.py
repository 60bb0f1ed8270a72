import asyncio
import time

from .data import MetricKind, scope_name


HISTOGRAM_FIELDS = (
  ("count", "count"),
  ("max", "max"),
  ("mean", "mean"),
  ("min", "min"),
  ("stdDev", "stdDev"),
  ("sum", "sum"),
  ("variance", "variance"),
)

PERCENTILE_FIELDS = (
  ("percentile.median", "median"),
  ("percentile.75", "_75"),
  ("percentile.95", "_95"),
  ("percentile.99", "_99"),
  ("percentile.99_9", "_99_9"),
)

RATE_FIELDS = (
  ("rate.1min", "rate1"),
  ("rate.5min", "rate5"),
  ("rate.15min", "rate15"),
  ("rate.mean", "rateMean"),
)


def _histogram_lines(name, snap, ts):
  for suffix, key in HISTOGRAM_FIELDS:
    yield f"{name}.{suffix} {snap[key]} {ts}"
  for suffix, key in PERCENTILE_FIELDS:
    yield f"{name}.{suffix} {snap['percentile'][key]} {ts}"


def _rate_lines(name, snap, ts):
  for suffix, key in RATE_FIELDS:
    yield f"{name}.{suffix} {snap[key]} {ts}"


def plaintext_lines(name, metric, ts):
  """ `path value timestamp` lines for one metric, without newlines """
  match metric.kind:
    case MetricKind.COUNTER:
      yield f"{name} {metric.count()} {ts}"
    case MetricKind.GAUGE:
      yield f"{name} {metric.value()} {ts}"
    case MetricKind.HEALTHCHECK:
      yield f"{name}.healthy {1 if metric.is_healthy() else 0} {ts}"
    case MetricKind.HISTOGRAM:
      yield from _histogram_lines(name, metric.snapshot(), ts)
    case MetricKind.METER:
      snap = metric.snapshot()
      yield f"{name}.count {snap['count']} {ts}"
      yield from _rate_lines(name, snap, ts)
    case MetricKind.TIMER:
      snap = metric.snapshot()
      yield from _histogram_lines(name, snap, ts)
      yield from _rate_lines(name, snap, ts)
    case _:
      pass


class Reporter:
  """ Periodically ships every metric in a registry somewhere.

  Subclasses implement `flush(metrics)`. Failures listed in `io_errors` are
  handed to the error callback and the loop carries on; anything else is a
  bug and propagates.
  """

  name = "reporter"

  io_errors = (OSError, asyncio.TimeoutError)

  def __init__(self, registry, flush_interval_s, prefix=""):
    if not flush_interval_s > 0:
      raise ValueError(f"flush_interval_s must be > 0, got {flush_interval_s!r}")

    self.registry = registry
    self.flush_interval_s = flush_interval_s
    self.prefix = prefix
    self.task = None
    self.log = registry.log(scope_name(("reporter",), self.name))
    self.error_cb = self.default_error_cb

  def default_error_cb(self, err):
    self.log.err("flush failed: {}: {}", err.__class__.__name__, err)

  def on_error(self, fn):
    self.error_cb = fn

  def metric_name(self, metric):
    return scope_name(self.prefix, metric.name)

  async def flush(self, metrics):
    raise NotImplementedError

  async def once(self):
    """ Ship one snapshot of everything registered right now """
    try:
      await self.flush(self.registry.metric_list())
    except self.io_errors as err:
      self.error_cb(err)

  async def _run_(self):
    while True:
      await asyncio.sleep(self.flush_interval_s)
      await self.once()

  def start(self, loop=None):
    """ Schedule the flush loop on `loop`, or on the running loop """
    if self.task:
      self.task.cancel()
    loop = loop or asyncio.get_running_loop()
    self.task = loop.create_task(self._run_())
    self.log.dbg("started, every {}s", self.flush_interval_s)
    return self.task

  async def stop(self):
    if self.task:
      self.task.cancel()
      try:
        await self.task
      except asyncio.CancelledError:
        pass
      self.task = None
    await self.close()

  async def close(self):
    """ Release whatever I/O resources the reporter holds """
    pass


class LinesReporter(Reporter):
  """ Writes plaintext lines to the registry log instead of a socket """

  name = "lines"

  async def flush(self, metrics):
    ts = int(time.time())
    for m in metrics:
      for line in plaintext_lines(self.metric_name(m), m, ts):
        self.log.inf("[METRIC] {}", line)
