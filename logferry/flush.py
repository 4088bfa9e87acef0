"""Flush coordinator: bulk-send the buffer and clear it only on confirmed delivery."""

import asyncio
import logging

from logferry.errors import StorageError
from logferry.metrics import Metrics
from logferry.sink import LogSink
from logferry.store import BufferStore

logger = logging.getLogger(__name__)
diagnostic = logging.getLogger("logferry.diagnostic")


class FlushCoordinator:
    """Delivers the persisted buffer in a single batch call.

    ``buffer_lock`` is shared with the dispatcher so the load-modify-store
    sequences of both never interleave. The batch send runs outside that
    lock; afterwards only the delivered keys are removed, so entries
    buffered during the send stay queued.
    """

    def __init__(self, store: BufferStore, sink: LogSink,
                 buffer_lock: asyncio.Lock, metrics: Metrics | None = None):
        self._store = store
        self._sink = sink
        self._buffer_lock = buffer_lock
        self._flush_lock = asyncio.Lock()
        self._metrics = metrics or Metrics()

    async def attempt_flush(self) -> bool:
        """Send everything buffered. Returns True on delivery or when nothing was buffered."""
        async with self._flush_lock:
            return await self._flush()

    async def _flush(self) -> bool:
        try:
            async with self._buffer_lock:
                buffer = await self._store.load()
        except StorageError as exc:
            diagnostic.error("Couldn't access the local buffer: %s", exc)
            return False

        if buffer is None or len(buffer) == 0:
            logger.debug("Nothing buffered, skipping flush")
            return True

        logger.info("Flushing %d buffered entries", len(buffer))
        result = await self._sink.send_batch(buffer)
        if not result.ok:
            self._metrics.record_flush_failed()
            diagnostic.error("Couldn't send logs in bulk: %s", result.error)
            return False

        delivered = set(buffer.keys())
        try:
            async with self._buffer_lock:
                current = await self._store.load()
                remaining = current.without(delivered) if current is not None else None
                if remaining is None or len(remaining) == 0:
                    await self._store.clear()
                else:
                    await self._store.save(remaining)
        except StorageError as exc:
            # Delivered entries stay on disk and go out again on the next upgrade.
            self._metrics.record_flush_failed()
            diagnostic.error("Couldn't clear logs from local storage: %s", exc)
            return False

        self._metrics.record_flushed(len(buffer))
        if remaining:
            logger.info(
                "Flushed %d entries, %d buffered during send remain",
                len(buffer), len(remaining),
            )
        else:
            logger.info("Flushed %d entries, local buffer cleared", len(buffer))
        return True
