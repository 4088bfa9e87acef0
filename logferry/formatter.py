"""Log entry formatter: validates call arguments and appends entries to a buffer."""

import json
from datetime import datetime, timezone

from logferry.errors import ValidationError
from logferry.models import BufferedLog, LogEntry, Severity, parse_severity


def validate_arguments(severity, message, extra=None) -> LogEntry:
    """Check the arguments of a log call and build the LogEntry.

    Severity and message must be text (severity one of info, warning,
    error or their aliases); extra must be absent or structured, i.e. a
    dict or a list.

    Raises:
        ValidationError: If any check fails.
    """
    if not isinstance(severity, (str, Severity)):
        raise ValidationError(
            f"severity must be a string, got {type(severity).__name__}"
        )
    level = parse_severity(severity)
    if level is None:
        raise ValidationError(f"unknown severity '{severity}'")
    if not isinstance(message, str):
        raise ValidationError(
            f"message must be a string, got {type(message).__name__}"
        )
    if extra is not None and not isinstance(extra, (dict, list)):
        raise ValidationError(
            f"extra must be a dict or list, got {type(extra).__name__}"
        )
    if extra is not None:
        try:
            json.dumps(extra, default=str)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"extra cannot be encoded as JSON: {exc}") from exc
    return LogEntry(severity=level, message=message, extra=extra)


def format_entry_text(entry: LogEntry) -> str:
    """Render the buffered text form: '<severity> - <message> - extra data : <json>'."""
    extra = json.dumps(entry.extra, separators=(",", ":"), default=str)
    return f"{entry.severity.value} - {entry.message} - extra data : {extra}"


def timestamp_key(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def append_entry(entry: LogEntry, prior: BufferedLog | None,
                 now: datetime | None = None) -> BufferedLog:
    """Return *prior* plus one entry keyed by the current timestamp.

    *prior* is never modified; a missing buffer starts a new one.
    """
    base = prior if prior is not None else BufferedLog()
    return base.append(timestamp_key(now), format_entry_text(entry))
