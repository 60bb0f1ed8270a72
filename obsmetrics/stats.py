""" Plain statistics over a sequence of samples.

Every function here is defined on an empty sequence and returns 0 for it, so
an idle histogram reads as all zeros instead of blowing up a dashboard.
"""
import math


def sample_sum(vals):
  return sum(vals)


def sample_min(vals):
  return min(vals) if vals else 0


def sample_max(vals):
  return max(vals) if vals else 0


def sample_mean(vals):
  if not vals:
    return 0
  return sample_sum(vals) / len(vals)


def sample_variance(vals):
  """ Population variance """
  if not vals:
    return 0
  m = sample_mean(vals)
  return sum((v - m) * (v - m) for v in vals) / len(vals)


def sample_std_dev(vals):
  return math.sqrt(sample_variance(vals))


def sample_percentile(vals, p):
  return sample_percentiles(vals, (p,))[0]


def sample_percentiles(vals, ps):
  """ Interpolated percentiles, `ps` in [0, 1].

  Uses the 1-indexed position p * (n + 1), clamped to the smallest and
  largest value at either end. `vals` is never reordered; a sorted copy is
  taken once and shared by every p.
  """
  if not vals:
    return [0 for _ in ps]

  ordered = sorted(vals)
  n = len(ordered)
  scores = []
  for p in ps:
    pos = p * (n + 1)
    if pos < 1:
      scores.append(ordered[0])
    elif pos >= n:
      scores.append(ordered[n - 1])
    else:
      i = math.floor(pos)
      lower = ordered[i - 1]
      upper = ordered[i]
      scores.append(lower + (pos - i) * (upper - lower))

  return scores
