import heapq
import itertools
import math
import random
import threading

from . import stats
from .clock import STD_CLOCK


# Exponentially decaying samples re-base their priorities this often so the
# exp() term never overflows in a long running process.
RESCALE_THRESHOLD_MS = 60 * 60 * 1000

# Largest alpha * age_s allowed before a rescale; math.exp overflows past ~709
MAX_DECAY_EXPONENT = 700.0


def _reservoir_size(size):
  if isinstance(size, bool) or not isinstance(size, int) or size < 0:
    raise ValueError(f"Reservoir size must be a non-negative int, got {size!r}")
  return size


class Sample:
  """ A bounded, statistically representative selection of values from a
  stream. Subclasses decide which values to keep.

  `count()` is every value ever offered, `size()` is how many are retained.
  All reads and writes hold `lock`.
  """

  def __init__(self, reservoir_size, rng=None):
    self.reservoir_size = _reservoir_size(reservoir_size)
    self.rng = rng or random.Random()
    self.lock = threading.RLock()
    self._count = 0

  def _values_(self):
    """ The retained values. Only call with `lock` held """
    raise NotImplementedError

  def update(self, value):
    raise NotImplementedError

  def clear(self):
    raise NotImplementedError

  def count(self):
    with self.lock:
      return self._count

  def size(self):
    with self.lock:
      return len(self._values_())

  def values(self):
    """ A copy of the retained values, in no particular order """
    with self.lock:
      return list(self._values_())

  def min(self):
    return stats.sample_min(self.values())

  def max(self):
    return stats.sample_max(self.values())

  def mean(self):
    return stats.sample_mean(self.values())

  def sum(self):
    return stats.sample_sum(self.values())

  def variance(self):
    return stats.sample_variance(self.values())

  def std_dev(self):
    return stats.sample_std_dev(self.values())

  def percentile(self, p):
    return stats.sample_percentile(self.values(), p)

  def percentiles(self, ps):
    return stats.sample_percentiles(self.values(), ps)

  def snapshot(self):
    with self.lock:
      return {"count": self._count, "values": list(self._values_())}

  def __repr__(self):
    return f"{self.__class__.__name__}(size={self.size()}/{self.reservoir_size}, count={self.count()})"


class UniformSample(Sample):
  """ Vitter's Algorithm R: every value seen so far has the same
  reservoir_size / count chance of being retained.
  """

  def __init__(self, reservoir_size, rng=None):
    super().__init__(reservoir_size, rng)
    self._vals = []

  def _values_(self):
    return self._vals

  def clear(self):
    with self.lock:
      self._count = 0
      self._vals = []

  def update(self, value):
    with self.lock:
      self._count += 1
      if len(self._vals) < self.reservoir_size:
        self._vals.append(value)
        return

      r = self.rng.randrange(self._count)
      if r < len(self._vals):
        self._vals[r] = value


class ExpDecaySample(Sample):
  """ Forward-decaying priority reservoir, biased toward recent values.

  Each value gets the priority exp(alpha * age_s) / f, where age_s is the
  time since the current landmark `t0` and f is uniform in (0, count].
  When full, the lowest priority entry is evicted to make room. Every
  RESCALE_THRESHOLD_MS, or sooner when alpha is large enough that exp() would
  overflow first, the landmark moves up to the present and existing
  priorities are scaled down to match.
  """

  def __init__(self, alpha, reservoir_size, clock=None, rng=None):
    if not alpha > 0:
      raise ValueError(f"alpha must be positive, got {alpha!r}")

    super().__init__(reservoir_size, rng)
    self.alpha = alpha
    self.clock = clock or STD_CLOCK
    # min-heap of (priority, seq, value); seq breaks priority ties by age
    self._entries = []
    self._seq = itertools.count()
    self._landmark_(self.clock.now())

  def _landmark_(self, t0):
    self.t0 = t0
    # fast decays re-base sooner so exp() stays finite
    self.t1 = t0 + min(RESCALE_THRESHOLD_MS, MAX_DECAY_EXPONENT * 1000.0 / self.alpha)

  def _values_(self):
    return [e[2] for e in self._entries]

  def size(self):
    with self.lock:
      return len(self._entries)

  def clear(self):
    with self.lock:
      self._count = 0
      self._entries = []
      self._landmark_(self.clock.now())

  def update(self, value):
    with self.lock:
      t = self.clock.now()
      if t > self.t1:
        self._rescale_(t)

      if self.reservoir_size == 0:
        self._count += 1
        return

      f = (self._count + 1) * (1.0 - self.rng.random())
      priority = math.exp(self.alpha * (t - self.t0) / 1000.0) / f
      self._count += 1
      entry = (priority, next(self._seq), value)

      if len(self._entries) >= self.reservoir_size:
        heapq.heapreplace(self._entries, entry)
      else:
        heapq.heappush(self._entries, entry)

  def _rescale_(self, t):
    factor = math.exp(-self.alpha * (t - self.t0) / 1000.0)
    self._entries = [(k * factor, seq, v) for k, seq, v in self._entries]
    # scaling can underflow distinct keys to the same value
    heapq.heapify(self._entries)
    self._landmark_(t)

  def priorities(self):
    """ Current priority keys, lowest first. For inspection only """
    with self.lock:
      return sorted(e[0] for e in self._entries)
