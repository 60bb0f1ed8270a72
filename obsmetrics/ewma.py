import math
import threading

from .clock import STD_CLOCK


PERIOD_MS = 5000

# UNIX load average decay for a 5s tick over 1, 5 and 15 minute windows
ALPHA_1MIN = 1 - math.exp(-5.0 / 60.0 / 1)
ALPHA_5MIN = 1 - math.exp(-5.0 / 60.0 / 5)
ALPHA_15MIN = 1 - math.exp(-5.0 / 60.0 / 15)


class EWMA:
  """ Exponentially weighted moving average of a per-second rate.

  Marks accumulate exactly within a `period_ms` bucket. The committed rate
  only moves when a bucket boundary is crossed, and boundaries are crossed
  lazily by whichever of `update` or `rate` next looks at the clock. The
  first full bucket sets the rate outright; later ones blend in with
  `alpha`, and buckets that passed with no marks decay it by (1 - alpha).
  """

  def __init__(self, alpha, period_ms=PERIOD_MS, clock=None):
    if not 0 < alpha <= 1:
      raise ValueError(f"alpha must be in (0, 1], got {alpha!r}")
    if period_ms <= 0:
      raise ValueError(f"period_ms must be positive, got {period_ms!r}")

    self.alpha = alpha
    self.period_ms = period_ms
    self.clock = clock or STD_CLOCK
    self.lock = threading.RLock()
    self.tick_at = self.clock.now()
    self.uncommitted = 0
    self.initialized = False
    self._rate = 0.0

  def _tick_(self, now):
    periods = math.floor((now - self.tick_at) / self.period_ms)
    if periods < 1:
      return

    per_second = self.uncommitted / (self.period_ms / 1000.0)
    if self.initialized:
      self._rate = self.alpha * per_second + (1 - self.alpha) * self._rate
    else:
      self._rate = per_second
      self.initialized = True

    self.uncommitted = 0
    idle = periods - 1
    if idle:
      self._rate *= (1 - self.alpha) ** idle

    self.tick_at += periods * self.period_ms

  def update(self, n):
    with self.lock:
      self._tick_(self.clock.now())
      self.uncommitted += n

  def rate(self):
    """ Events per second """
    with self.lock:
      self._tick_(self.clock.now())
      return self._rate

  def __repr__(self):
    # committed rate only; printing must not advance periods
    with self.lock:
      return f"EWMA(alpha={self.alpha:.5f}, rate={self._rate})"


class NullEWMA:
  """ Does nothing successfully """

  def update(self, n):
    pass

  def rate(self):
    return 0.0


def ewma1(clock=None):
  return EWMA(ALPHA_1MIN, clock=clock)


def ewma5(clock=None):
  return EWMA(ALPHA_5MIN, clock=clock)


def ewma15(clock=None):
  return EWMA(ALPHA_15MIN, clock=clock)
