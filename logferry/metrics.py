"""Counters for what the agent did with each event and each flush."""

import threading

from logferry.models import DispatchOutcome


class Metrics:
    """Thread-safe counters for dispatch outcomes and flushes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._outcomes: dict[DispatchOutcome, int] = {o: 0 for o in DispatchOutcome}
        self._flushes = 0
        self._flushed_entries = 0
        self._flush_failures = 0

    def record_outcome(self, outcome: DispatchOutcome):
        with self._lock:
            self._outcomes[outcome] += 1

    def record_flushed(self, entries: int):
        """Record a batch the sink confirmed and the store released."""
        with self._lock:
            self._flushes += 1
            self._flushed_entries += entries

    def record_flush_failed(self):
        with self._lock:
            self._flush_failures += 1

    def snapshot(self) -> dict:
        """Return a point-in-time copy of all counters."""
        with self._lock:
            return self._snapshot_locked()

    def snapshot_and_reset(self) -> dict:
        """Atomically read all counters and reset them to zero."""
        with self._lock:
            snap = self._snapshot_locked()
            self._outcomes = {o: 0 for o in DispatchOutcome}
            self._flushes = 0
            self._flushed_entries = 0
            self._flush_failures = 0
            return snap

    def _snapshot_locked(self) -> dict:
        snap = {o.value: count for o, count in self._outcomes.items()}
        snap["flushes"] = self._flushes
        snap["flushed_entries"] = self._flushed_entries
        snap["flush_failures"] = self._flush_failures
        return snap
