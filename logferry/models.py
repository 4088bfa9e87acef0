"""Data model: severities, connectivity snapshots, log entries and the buffered log."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# Short names older call sites still use.
SEVERITY_ALIASES = {
    "log": Severity.INFO,
    "warn": Severity.WARNING,
}

BUFFERED_SEVERITIES = frozenset({Severity.WARNING, Severity.ERROR})


def parse_severity(value: str | Severity) -> Severity | None:
    """Map a severity name (or alias) to a Severity, or None if unknown."""
    if isinstance(value, Severity):
        return value
    if not isinstance(value, str):
        return None
    name = value.strip().lower()
    if name in SEVERITY_ALIASES:
        return SEVERITY_ALIASES[name]
    try:
        return Severity(name)
    except ValueError:
        return None


class Medium(Enum):
    WIFI = "wifi"
    CELLULAR = "cellular"
    OTHER = "other"
    UNKNOWN = "unknown"
    NONE = "none"


class CellularGeneration(Enum):
    G2 = "2g"
    G3 = "3g"
    G4 = "4g"
    G5 = "5g"


TOP_TIER_GENERATIONS = frozenset({CellularGeneration.G4, CellularGeneration.G5})


def parse_medium(value: str | None) -> Medium:
    """Map a medium name to a Medium; anything unrecognised is UNKNOWN."""
    if not value:
        return Medium.UNKNOWN
    try:
        return Medium(value.strip().lower())
    except ValueError:
        return Medium.UNKNOWN


def parse_generation(value: str | None) -> CellularGeneration | None:
    if not value:
        return None
    try:
        return CellularGeneration(value.strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class ConnectivitySnapshot:
    is_connected: bool
    medium: Medium = Medium.UNKNOWN
    cellular_generation: CellularGeneration | None = None

    def __post_init__(self):
        # A generation only means something on a cellular link.
        if self.medium is not Medium.CELLULAR and self.cellular_generation is not None:
            object.__setattr__(self, "cellular_generation", None)

    def describe(self) -> str:
        state = "up" if self.is_connected else "down"
        if self.cellular_generation is not None:
            return f"{self.medium.value}/{self.cellular_generation.value} ({state})"
        return f"{self.medium.value} ({state})"


@dataclass(frozen=True)
class LogEntry:
    severity: Severity
    message: str
    extra: dict | list | None = None

    def to_payload(self) -> dict:
        """Body for a single-event send to the remote sink.

        ``extra`` goes through the same ``default=str`` encoding as the
        buffered text, so values like datetimes are sent as strings.
        """
        extra = None
        if self.extra is not None:
            extra = json.loads(json.dumps(self.extra, default=str))
        return {
            "type": self.severity.value,
            "message": self.message,
            "extra": extra,
        }


@dataclass(frozen=True)
class BufferedLog:
    """Ordered, immutable sequence of (timestamp key, formatted text) pairs.

    Updates never modify an instance in place: ``append`` and ``newest``
    return a new BufferedLog and leave the existing one untouched.
    """

    entries: tuple[tuple[str, str], ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]

    def append(self, key: str, text: str) -> BufferedLog:
        """Return a new log with one entry added, suffixing the key if taken."""
        return BufferedLog(self.entries + ((_unique_key(key, set(self.keys())), text),))

    def newest(self, count: int) -> BufferedLog:
        """Return a new log holding only the newest *count* entries."""
        if count <= 0:
            return BufferedLog()
        return BufferedLog(self.entries[-count:])

    def without(self, keys: set[str]) -> BufferedLog:
        return BufferedLog(tuple((k, v) for k, v in self.entries if k not in keys))

    def to_json(self) -> str:
        """Serialize as a JSON object whose member order is the entry order."""
        return json.dumps(dict(self.entries))

    def to_payload(self) -> dict:
        """Body for a batch send to the remote sink."""
        return {"logs": [{"timestamp": key, "entry": text} for key, text in self.entries]}

    @classmethod
    def from_json(cls, raw: str) -> BufferedLog:
        """Parse the serialized form. Raises ValueError on malformed content.

        A key repeated in the file gets the same ``#<n>`` suffix ``append``
        uses, so every entry survives the next save.
        """
        pairs = json.loads(raw, object_pairs_hook=_Pairs)
        if not isinstance(pairs, _Pairs):
            raise ValueError(f"Expected a JSON object, got {type(pairs).__name__}")
        entries = []
        taken: set[str] = set()
        for key, text in pairs:
            if not isinstance(text, str):
                raise ValueError(f"Entry {key!r} is not a string")
            key = _unique_key(key, taken)
            taken.add(key)
            entries.append((key, text))
        return cls(tuple(entries))


def _unique_key(key: str, taken: set[str]) -> str:
    unique = key
    n = 0
    while unique in taken:
        n += 1
        unique = f"{key}#{n}"
    return unique


class _Pairs(list):
    """Object hook result: member order kept, duplicate keys kept."""

    def __init__(self, items: list[tuple[str, Any]]):
        super().__init__(items)


@dataclass(frozen=True)
class SendResult:
    ok: bool
    status_code: int | None = None
    error: str | None = None


class DispatchOutcome(Enum):
    ECHOED = "echoed"
    REJECTED = "rejected"
    SENT = "sent"
    SEND_FAILED = "send_failed"
    BUFFERED = "buffered"
    DROPPED = "dropped"
