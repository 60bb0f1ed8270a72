import pytest

from obsmetrics import (
  Counter, NullCounter,
  FunctionalGauge, Gauge, NullGauge,
  Healthcheck, NullHealthcheck,
  Histogram, NullHistogram,
  Meter, NullMeter,
  MetricKind,
  Timer, NullTimer,
  UniformSample,
)


PAIRS = [
  (Counter, NullCounter, {}),
  (Gauge, NullGauge, {}),
  (Healthcheck, NullHealthcheck, {"fn": lambda h: h.healthy()}),
  (Histogram, NullHistogram, {"sample": UniformSample(10)}),
  (Meter, NullMeter, {}),
  (Timer, NullTimer, {}),
]


def public_methods(cls):
  return {n for n in dir(cls) if not n.startswith("_") and callable(getattr(cls, n))}


@pytest.mark.parametrize("standard, null, kwargs", PAIRS)
def test_null_flavor_has_the_same_surface(standard, null, kwargs) -> None:
  assert public_methods(standard) <= public_methods(null)
  assert standard.kind == null.kind


@pytest.mark.parametrize("standard, null, kwargs", PAIRS)
def test_null_flavor_snapshots_the_same_keys(standard, null, kwargs) -> None:
  real = standard(name="x", **kwargs)
  fake = null(name="x", **kwargs)

  assert real.snapshot().keys() == fake.snapshot().keys()
  assert not real.is_null()
  assert fake.is_null()


def test_ids_are_unique() -> None:
  assert Counter().id != Counter().id


def test_counter() -> None:
  c = Counter(name="requests", desc="Requests served")
  c.inc()
  c.inc(5)
  c.dec(2)

  assert c.count() == 4
  assert c.snapshot()["count"] == 4
  assert c.snapshot()["description"] == "Requests served"
  c.clear()
  assert c.count() == 0


def test_null_counter_ignores_everything() -> None:
  c = NullCounter(name="requests")
  c.inc(10)
  assert c.count() == 0
  assert c.snapshot()["count"] == 0


def test_gauge() -> None:
  g = Gauge(name="temp")
  assert g.value() == 0
  g.update(21.5)
  assert g.value() == 21.5
  assert g.snapshot()["gauge"] == 21.5


def test_functional_gauge_reads_at_call_time() -> None:
  box = [1]
  g = FunctionalGauge(name="box", fn=lambda: box[0])
  g.update(100)
  box[0] = 7

  assert g.value() == 7
  assert g.snapshot()["gauge"] == 7
  assert g.kind == MetricKind.GAUGE


def test_functional_gauge_needs_a_callable() -> None:
  with pytest.raises(ValueError):
    FunctionalGauge(name="box", fn=None)


def test_healthcheck_reports_through_fn() -> None:
  state = {"err": None}

  def probe(h):
    if state["err"]:
      h.unhealthy(state["err"])
    else:
      h.healthy()

  hc = Healthcheck(name="db", fn=probe)
  assert hc.is_healthy()

  state["err"] = ConnectionError("down")
  hc.check()
  assert not hc.is_healthy()
  assert isinstance(hc.error(), ConnectionError)
  assert hc.snapshot()["healthy"] is False
  assert "down" in hc.snapshot()["error"]

  state["err"] = None
  hc.check()
  assert hc.is_healthy()
  assert hc.snapshot()["error"] is None


def test_null_healthcheck_is_always_healthy() -> None:
  hc = NullHealthcheck(name="db")
  hc.unhealthy(RuntimeError("nope"))
  assert hc.is_healthy()
  assert hc.error() is None


def test_histogram_needs_a_sample() -> None:
  with pytest.raises(ValueError):
    Histogram(name="h")


def test_histogram_snapshot() -> None:
  h = Histogram(name="h", sample=UniformSample(100))
  for v in (10, 20, 30, 40, 50):
    h.update(v)

  snap = h.snapshot()
  assert snap["count"] == 5
  assert snap["min"] == 10
  assert snap["max"] == 50
  assert snap["mean"] == 30
  assert snap["sum"] == 150
  assert snap["variance"] == 200
  assert snap["percentile"]["median"] == 30
  assert snap["percentile"]["_75"] == 45
  assert snap["percentile"]["_99_9"] == 50
  assert h.percentiles([0.5, 0.75]) == [30, 45]


def test_null_histogram_reads_as_zero() -> None:
  h = NullHistogram(name="h")
  h.update(10)
  assert h.count() == 0
  assert h.percentiles([0.5, 0.99]) == [0, 0]
  assert h.sample().size() == 0
  assert h.snapshot()["percentile"]["median"] == 0
