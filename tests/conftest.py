import pytest

from obsmetrics import ManualClock, Registry
from obsmetrics.logger import EntryLogger


@pytest.fixture
def clock():
  return ManualClock(start_ms=1_000_000.0)


@pytest.fixture
def registry(clock):
  return Registry(clock=clock, logger=EntryLogger)


class FixedRandom:
  """ Stands in for random.Random with scripted answers """

  def __init__(self, randranges=(), randoms=()):
    self.randranges = list(randranges)
    self.randoms = list(randoms)

  def randrange(self, stop):
    value = self.randranges.pop(0)
    assert 0 <= value < stop
    return value

  def random(self):
    return self.randoms.pop(0) if self.randoms else 0.0


@pytest.fixture
def fixed_random():
  return FixedRandom
