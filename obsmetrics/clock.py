import time


class Clock:
  """ Something that knows what time it is, in milliseconds """

  def now(self):
    raise NotImplementedError


class StdClock(Clock):
  def now(self):
    return time.time() * 1000.0


class ManualClock(Clock):
  """ A clock that only moves when told to. Handy for tests. """

  def __init__(self, start_ms=0.0):
    self.ms = float(start_ms)

  def now(self):
    return self.ms

  def advance(self, ms):
    assert ms >= 0, "Clocks only go forward"
    self.ms += ms
    return self.ms

  def advance_s(self, seconds):
    return self.advance(seconds * 1000.0)


STD_CLOCK = StdClock()
