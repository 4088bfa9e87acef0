"""Entry point for the shipping agent.

Reads one JSON event per line from stdin, e.g.
{"severity": "error", "message": "upload failed", "extra": {"code": 503}}
"""

import asyncio
import json
import logging
import signal
import sys
import threading

from logferry.agent import ShippingAgent
from logferry.config import load_config

logger = logging.getLogger(__name__)


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue):
    """Feed stdin lines into *lines* from a daemon thread; None marks EOF."""
    def _read():
        for line in sys.stdin:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        loop.call_soon_threadsafe(lines.put_nowait, None)

    threading.Thread(target=_read, daemon=True).start()


def parse_event(line: str) -> dict | None:
    """Parse one input line; returns None (after logging) if it is unusable."""
    line = line.strip()
    if not line:
        return None
    try:
        event = json.loads(line)
    except json.JSONDecodeError as exc:
        logger.warning("Skipping invalid event line: %s", exc)
        return None
    if not isinstance(event, dict):
        logger.warning("Skipping event that is not a JSON object")
        return None
    return event


async def _dispatch_events(agent: ShippingAgent, lines: asyncio.Queue):
    while True:
        line = await lines.get()
        if line is None:
            return
        event = parse_event(line)
        if event is None:
            continue
        outcome = await agent.dispatch(
            event.get("severity"), event.get("message"), event.get("extra"),
        )
        logger.debug("Event outcome: %s", outcome.value)


async def main():
    config = load_config()
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    agent = ShippingAgent.from_config(config)
    shutdown = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown.set)

    lines: asyncio.Queue = asyncio.Queue()
    _start_stdin_reader(loop, lines)

    agent.start()
    consumer = asyncio.create_task(_dispatch_events(agent, lines))
    stopper = asyncio.create_task(shutdown.wait())
    await asyncio.wait({consumer, stopper}, return_when=asyncio.FIRST_COMPLETED)
    stopper.cancel()
    consumer.cancel()
    await agent.stop()


if __name__ == "__main__":
    asyncio.run(main())
