from dataclasses import dataclass
from enum import Enum


class MetricKind(Enum):
  COUNTER = 1
  GAUGE = 2
  HEALTHCHECK = 3
  HISTOGRAM = 4
  METER = 5
  TIMER = 6


class ObsLevel(Enum):
  ERR = 1
  INF = 2
  DBG = 3


def to_scope(x):
  if x:
    match x:
      case tuple() | list() if all(isinstance(i, str) for i in x):
        return tuple(p for p in x if p)
      case str():
        return (x,)

    raise ValueError(f"Cannot make a scope path from {x}")
  else:
    return ()


def scope_name(scope, name="", joiner="."):
  """ Flatten a scope and a name into a single metric name """
  return joiner.join(to_scope(scope) + to_scope(name))


@dataclass(frozen=True)
class Reading:
  """ A metric's snapshot at a point in time, ready to export """
  kind: MetricKind
  name: str
  value: dict
  desc: str
  at: float

  @property
  def scope(self):
    return tuple(self.name.split("."))
