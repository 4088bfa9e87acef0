"""Shipping agent: wires probe, sink, buffer store, dispatcher and flush coordinator."""

import asyncio
import logging

from logferry.classifier import is_upgrade
from logferry.config import Config
from logferry.dispatch import Dispatcher
from logferry.flush import FlushCoordinator
from logferry.metrics import Metrics
from logferry.models import ConnectivitySnapshot, DispatchOutcome, parse_generation, parse_medium
from logferry.network import ConnectivityWatcher, NetworkStatusSource, ReachabilityStatusSource
from logferry.sink import HttpLogSink, LogSink
from logferry.store import BufferStore, FileKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


class ShippingAgent:
    """Store-and-forward logger for links that come and go.

    Log calls are routed per event by the dispatcher. Connectivity changes,
    reported by the watcher or by the host through
    ``on_connectivity_change``, trigger a flush when they are an upgrade.
    """

    def __init__(
        self,
        config: Config,
        source: NetworkStatusSource,
        sink: LogSink,
        backend: KeyValueStore,
    ):
        self._config = config
        self._source = source
        self._sink = sink
        self.metrics = Metrics()
        self.store = BufferStore(backend, config.buffer_key)

        buffer_lock = asyncio.Lock()
        self.dispatcher = Dispatcher(
            source, sink, self.store, buffer_lock,
            max_buffer_bytes=config.max_buffer_bytes,
            debug=config.debug,
            metrics=self.metrics,
        )
        self.flusher = FlushCoordinator(self.store, sink, buffer_lock, self.metrics)
        self._watcher = ConnectivityWatcher(
            source, self.on_connectivity_change, interval=config.watch_interval,
        )
        self._pending: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: Config) -> "ShippingAgent":
        """Build an agent with the HTTP sink, reachability probe and file store."""
        source = ReachabilityStatusSource(
            config.probe_host,
            config.probe_port,
            medium=parse_medium(config.medium),
            cellular_generation=parse_generation(config.cellular_generation),
            medium_file=config.medium_file or None,
            timeout=config.probe_timeout,
        )
        sink = HttpLogSink(config.sink_url, timeout=config.request_timeout)
        return cls(config, source, sink, FileKeyValueStore(config.buffer_dir))

    async def dispatch(self, severity, message, extra=None) -> DispatchOutcome:
        return await self.dispatcher.dispatch(severity, message, extra)

    def info(self, message, extra=None) -> asyncio.Task:
        return self._schedule("info", message, extra)

    def warning(self, message, extra=None) -> asyncio.Task:
        return self._schedule("warning", message, extra)

    def error(self, message, extra=None) -> asyncio.Task:
        return self._schedule("error", message, extra)

    def _schedule(self, severity, message, extra) -> asyncio.Task:
        """Fire-and-forget dispatch; the task is kept until it completes."""
        task = asyncio.create_task(self.dispatcher.dispatch(severity, message, extra))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def on_connectivity_change(self, previous: ConnectivitySnapshot | None,
                                     current: ConnectivitySnapshot) -> bool:
        """Flush the buffer if the change is an upgrade. Returns True if a flush ran."""
        if not is_upgrade(previous, current):
            return False
        logger.info("Connection upgraded to %s, flushing local buffer", current.describe())
        await self.flusher.attempt_flush()
        return True

    async def drain(self):
        """Wait for every scheduled dispatch to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def start(self):
        self._watcher.start()
        logger.info(
            "Shipping agent started: sink=%s buffer=%s/%s debug=%s",
            self._config.sink_url, self._config.buffer_dir,
            self._config.buffer_key, self._config.debug,
        )

    async def stop(self):
        await self._watcher.stop()
        await self.drain()
        close = getattr(self._sink, "close", None)
        if close is not None:
            await close()
        logger.info("Shipping agent stopped. Stats: %s", self.metrics.snapshot_and_reset())
