"""Dispatch decision engine: send now, buffer locally, or drop."""

import asyncio
import logging

from logferry.classifier import is_strong
from logferry.errors import ConnectivityProbeError, StorageError, ValidationError
from logferry.formatter import append_entry, validate_arguments
from logferry.metrics import Metrics
from logferry.models import BUFFERED_SEVERITIES, DispatchOutcome, LogEntry
from logferry.network import NetworkStatusSource
from logferry.sink import LogSink
from logferry.store import BufferStore
from logferry.trim import needs_trim, trim

logger = logging.getLogger(__name__)
diagnostic = logging.getLogger("logferry.diagnostic")


class Dispatcher:
    """Routes each log call according to the live connectivity."""

    def __init__(
        self,
        source: NetworkStatusSource,
        sink: LogSink,
        store: BufferStore,
        buffer_lock: asyncio.Lock,
        max_buffer_bytes: int,
        debug: bool = False,
        metrics: Metrics | None = None,
    ):
        self._source = source
        self._sink = sink
        self._store = store
        self._buffer_lock = buffer_lock
        self._max_buffer_bytes = max_buffer_bytes
        self._debug = debug
        self._metrics = metrics or Metrics()

    async def dispatch(self, severity, message, extra=None) -> DispatchOutcome:
        """Handle one log call. Never raises for the error kinds it handles."""
        outcome = await self._dispatch(severity, message, extra)
        self._metrics.record_outcome(outcome)
        return outcome

    async def _dispatch(self, severity, message, extra) -> DispatchOutcome:
        if self._debug:
            try:
                validate_arguments(severity, message, extra)
            except ValidationError as exc:
                diagnostic.warning("Invalid log arguments: %s", exc)
            diagnostic.info("%s %s %s", severity, message, extra)
            return DispatchOutcome.ECHOED

        try:
            entry = validate_arguments(severity, message, extra)
        except ValidationError:
            return DispatchOutcome.REJECTED

        try:
            snapshot = await self._source.probe()
        except ConnectivityProbeError as exc:
            diagnostic.error("Error fetching connection state: %s", exc)
            return DispatchOutcome.DROPPED

        if is_strong(snapshot):
            result = await self._sink.send_one(entry)
            if result.ok:
                return DispatchOutcome.SENT
            diagnostic.warning("Immediate send failed, event lost: %s", result.error)
            return DispatchOutcome.SEND_FAILED

        if entry.severity not in BUFFERED_SEVERITIES:
            logger.debug("Dropping %s event on %s link", entry.severity.value, snapshot.describe())
            return DispatchOutcome.DROPPED

        try:
            await self.buffer_locally(entry)
        except StorageError as exc:
            diagnostic.error("Couldn't log locally: %s", exc)
            return DispatchOutcome.DROPPED
        return DispatchOutcome.BUFFERED

    async def buffer_locally(self, entry: LogEntry):
        """Append *entry* to the persisted buffer, trimming first if oversized.

        Raises:
            StorageError: If the buffer cannot be read or written. The
                previously persisted buffer is left as it was.
        """
        async with self._buffer_lock:
            raw = await self._store.load_raw()
            prior = None
            if raw is not None:
                prior = self._store.parse(raw)
                if needs_trim(raw, self._max_buffer_bytes):
                    prior = trim(prior)
            await self._store.save(append_entry(entry, prior))
