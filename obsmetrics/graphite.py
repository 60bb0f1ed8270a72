import asyncio
import time

from .reporter import Reporter, plaintext_lines


class Graphite(Reporter):
  """ Graphite plaintext protocol over a long lived TCP connection.

  Connects on the first flush and again after any failure; a failed write
  drops the connection so the next flush starts fresh.
  """

  name = "graphite"

  def __init__(self, registry, addr, port=2003, flush_interval_s=10, prefix="", timeout_s=5.0):
    super().__init__(registry, flush_interval_s, prefix)
    self.addr = addr
    self.port = port
    self.timeout_s = timeout_s
    self.reader = None
    self.writer = None

  def connect(self, addr, port):
    """ Point at a different server. Takes effect on the next flush """
    self.addr = addr
    self.port = port
    self._drop_()

  def _drop_(self):
    if self.writer is not None:
      self.writer.close()
    self.reader = None
    self.writer = None

  async def _connection_(self):
    if self.writer is None or self.writer.is_closing():
      self.reader, self.writer = await asyncio.wait_for(
        asyncio.open_connection(self.addr, self.port),
        self.timeout_s
      )
      self.log.dbg("connected to {}:{}", self.addr, self.port)
    return self.writer

  def payload(self, metrics, ts=None):
    ts = int(time.time()) if ts is None else ts
    return "".join(
      line + "\n"
      for m in metrics
      for line in plaintext_lines(self.metric_name(m), m, ts)
    )

  async def flush(self, metrics):
    payload = self.payload(metrics)
    if not payload:
      return

    writer = await self._connection_()
    try:
      writer.write(payload.encode())
      await writer.drain()
    except self.io_errors:
      self._drop_()
      raise

  async def close(self):
    writer = self.writer
    self._drop_()
    if writer is not None:
      try:
        await writer.wait_closed()
      except OSError as err:
        self.log.dbg("close: {}", err)
