#!/usr/bin/env python3
import asyncio
import time

from obsmetrics import Observer
from obsmetrics.config import registry_from_config, reporters_from_config


class MetricsAgent:
  """
      Runs the reporters defined in config.py against a registry, and keeps
      a few metrics about itself while it's at it
  """

  HEARTBEAT_S = 1

  def __init__(self, config_map):
    self.registry = registry_from_config(config_map)
    self.reporters = reporters_from_config(config_map, self.registry)

    self.obs = Observer(self.registry).scoped("obsmetrics")
    self.log = self.obs.log()

    self.obs.gauge(
      "started_s", desc="Unix epoch timestamp of agent start"
    ).update(round(time.time()))
    self.obs.functional_gauge(
      "reporters", lambda: len(self.reporters), desc="Configured reporters"
    )
    self.obs.healthcheck("loop", lambda h: h.healthy(), desc="Event loop is turning")

    self.heartbeat = self.obs.meter("heartbeat", "Agent loop iterations")
    self.lag = self.obs.timer("lag", "How late each heartbeat woke up, ms")

  def prepare(self, loop):
    async def beat():
      while True:
        started = time.monotonic()
        await asyncio.sleep(self.HEARTBEAT_S)
        self.lag.update((time.monotonic() - started - self.HEARTBEAT_S) * 1000)
        self.heartbeat.mark()
        self.registry.run_all_healthchecks()

    for r in self.reporters:
      r.start(loop)
      self.log.inf("started {}", r.__class__.__name__)

    loop.create_task(beat())

  async def stop(self):
    for r in self.reporters:
      await r.stop()


if __name__ == "__main__":
  from obsmetrics.config import CurrentConfig
  import signal

  loop = asyncio.new_event_loop()
  asyncio.set_event_loop(loop)

  agent = MetricsAgent(CurrentConfig)

  async def shutdown():
    await agent.stop()
    loop.stop()

  loop.add_signal_handler(signal.SIGINT, lambda: loop.create_task(shutdown()))

  agent.prepare(loop)
  try:
    loop.run_forever()
  finally:
    print("\nBye!")
    loop.close()
