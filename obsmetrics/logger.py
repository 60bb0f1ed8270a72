from collections import namedtuple
import sys
import time

from .data import ObsLevel


LogEntry = namedtuple('LogEntry', ('level', 'at', 'key', 'text', 'values'))


def entry_text(entry):
  return entry.text.format(*entry.values)


class BaseLogger:
  """ Leveled logger for one key. Messages are str.format templates and
  only get formatted once a handler decides to keep them.
  """

  def __init__(self, key="", level=ObsLevel.INF):
    self.key = key
    self.level = level

  def set_level(self, new_level):
    self.level = new_level

  def enabled(self, level):
    return level.value <= self.level.value

  def handle(self, entry):
    pass

  def log(self, level, msg, *vals):
    if self.enabled(level):
      self.handle(LogEntry(level, time.time(), self.key, msg, vals))

  def __call__(self, msg, *vals):
    self.log(ObsLevel.INF, msg, *vals)

  def dbg(self, msg, *vals):
    self.log(ObsLevel.DBG, msg, *vals)

  def inf(self, msg, *vals):
    self.log(ObsLevel.INF, msg, *vals)

  def err(self, msg, *vals):
    self.log(ObsLevel.ERR, msg, *vals)


class EntryLogger(BaseLogger):
  """ Keeps every entry in memory """

  def __init__(self, key="", level=ObsLevel.INF):
    super().__init__(key=key, level=level)
    self.entries = []

  def handle(self, entry):
    self.entries.append(entry)

  def texts(self):
    return [entry_text(e) for e in self.entries]


class TextLogger(BaseLogger):

  FORMAT = "{level} {hh:02d}:{mm:02d}:{ss:02d}{tag} {text}\n"

  def __init__(self, key="", level=ObsLevel.INF, writeable=None):
    super().__init__(key=key, level=level)
    self.writeable = writeable
    self.tag = f" [{key}]" if key else ""

  def handle(self, entry):
    # resolved late so redirected/captured stderr is honored
    out = self.writeable or sys.stderr
    ts = time.localtime(entry.at)
    out.write(self.FORMAT.format(
      level=entry.level.name,
      hh=ts.tm_hour, mm=ts.tm_min, ss=ts.tm_sec,
      tag=self.tag,
      text=entry_text(entry)
    ))
