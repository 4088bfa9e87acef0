"""Network status source: one-shot probe and a polling change watcher."""

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from logferry.errors import ConnectivityProbeError
from logferry.models import (
    CellularGeneration,
    ConnectivitySnapshot,
    Medium,
    parse_generation,
    parse_medium,
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[
    [ConnectivitySnapshot | None, ConnectivitySnapshot], Awaitable[None]
]


class NetworkStatusSource(Protocol):
    async def probe(self) -> ConnectivitySnapshot: ...


def read_medium_file(path: str) -> tuple[Medium, CellularGeneration | None]:
    """Parse a medium file holding '<medium> [generation]', e.g. 'cellular 3g'.

    Raises:
        ConnectivityProbeError: If the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as exc:
        raise ConnectivityProbeError(f"Could not read medium file {path}: {exc}") from exc

    parts = content.split()
    if not parts:
        return Medium.UNKNOWN, None
    medium = parse_medium(parts[0])
    generation = parse_generation(parts[1]) if len(parts) > 1 else None
    return medium, generation


class ReachabilityStatusSource:
    """Reports connectivity by opening a TCP connection to the sink host.

    The medium (and cellular generation) is what the deployment declares,
    either fixed in configuration or read from *medium_file* on every probe
    so the host can report link changes. An unreachable host reports
    medium ``none``.
    """

    def __init__(
        self,
        host: str,
        port: int,
        medium: Medium = Medium.UNKNOWN,
        cellular_generation: CellularGeneration | None = None,
        medium_file: str | None = None,
        timeout: float = 2.0,
    ):
        self._host = host
        self._port = port
        self._medium = medium
        self._generation = cellular_generation
        self._medium_file = medium_file
        self._timeout = timeout

    async def probe(self) -> ConnectivitySnapshot:
        if self._medium_file:
            medium, generation = await asyncio.to_thread(read_medium_file, self._medium_file)
        else:
            medium, generation = self._medium, self._generation

        if medium is Medium.NONE or not await self._reachable():
            return ConnectivitySnapshot(is_connected=False, medium=Medium.NONE)
        return ConnectivitySnapshot(
            is_connected=True, medium=medium, cellular_generation=generation,
        )

    async def _reachable(self) -> bool:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port), timeout=self._timeout,
            )
        except (OSError, asyncio.TimeoutError):
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True


class ConnectivityWatcher:
    """Polls a status source and reports (previous, current) on every change.

    The first successful probe is reported with previous = None. Probe
    failures are logged and skipped; they never count as a change.
    """

    def __init__(
        self,
        source: NetworkStatusSource,
        callback: ChangeCallback,
        interval: float = 5.0,
    ):
        self._source = source
        self._callback = callback
        self._interval = interval
        self._last: ConnectivitySnapshot | None = None
        self._stop = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def last(self) -> ConnectivitySnapshot | None:
        return self._last

    def start(self):
        """Start the polling task on the running loop."""
        self._stop.clear()
        self._task = asyncio.create_task(self._watch_loop())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    async def poll_once(self) -> bool:
        """Probe once; returns True if a change was reported."""
        try:
            current = await self._source.probe()
        except ConnectivityProbeError as exc:
            logger.warning("Connectivity probe failed: %s", exc)
            return False

        previous = self._last
        if previous == current:
            return False

        self._last = current
        logger.info(
            "Connectivity changed: %s -> %s",
            previous.describe() if previous else "startup", current.describe(),
        )
        await self._callback(previous, current)
        return True

    async def _watch_loop(self):
        while not self._stop.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue
