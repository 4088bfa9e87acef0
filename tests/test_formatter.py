"""Tests for argument validation and entry formatting."""

from datetime import datetime, timezone

import pytest

from logferry.errors import ValidationError
from logferry.formatter import append_entry, format_entry_text, timestamp_key, validate_arguments
from logferry.models import BufferedLog, LogEntry, Severity


class TestValidateArguments:
    def test_valid_without_extra(self):
        entry = validate_arguments("error", "disk full")
        assert entry == LogEntry(Severity.ERROR, "disk full", None)

    def test_valid_with_dict_extra(self):
        entry = validate_arguments("warn", "slow", {"ms": 900})
        assert entry.severity is Severity.WARNING
        assert entry.extra == {"ms": 900}

    def test_list_extra_allowed(self):
        assert validate_arguments("info", "ids", [1, 2]).extra == [1, 2]

    @pytest.mark.parametrize("extra", ["text", 5, 1.5, True])
    def test_primitive_extra_rejected(self, extra):
        with pytest.raises(ValidationError):
            validate_arguments("error", "msg", extra)

    def test_non_string_message_rejected(self):
        with pytest.raises(ValidationError):
            validate_arguments("error", 42)

    def test_non_string_severity_rejected(self):
        with pytest.raises(ValidationError):
            validate_arguments(None, "msg")

    def test_unknown_severity_rejected(self):
        with pytest.raises(ValidationError):
            validate_arguments("critical", "msg")

    def test_circular_extra_rejected(self):
        extra = {}
        extra["self"] = extra
        with pytest.raises(ValidationError, match="cannot be encoded"):
            validate_arguments("error", "msg", extra)


class TestFormatEntryText:
    def test_null_extra(self):
        text = format_entry_text(LogEntry(Severity.WARNING, "A"))
        assert text == "warning - A - extra data : null"

    def test_compact_json_extra(self):
        text = format_entry_text(LogEntry(Severity.ERROR, "B", {"x": 1}))
        assert text == 'error - B - extra data : {"x":1}'


class TestTimestampKey:
    def test_format(self):
        now = datetime(2024, 1, 15, 8, 23, 45, 123456, tzinfo=timezone.utc)
        assert timestamp_key(now) == "2024-01-15T08:23:45.123456Z"


class TestAppendEntry:
    def test_starts_new_buffer(self):
        now = datetime(2024, 1, 15, 8, 0, 0, tzinfo=timezone.utc)
        log = append_entry(LogEntry(Severity.ERROR, "first"), None, now=now)
        assert log.entries == (("2024-01-15T08:00:00.000000Z", "error - first - extra data : null"),)

    def test_prior_not_mutated(self, two_entry_buffer):
        before = two_entry_buffer.entries
        updated = append_entry(LogEntry(Severity.ERROR, "C"), two_entry_buffer)
        assert two_entry_buffer.entries == before
        assert len(updated) == 3
        assert updated.entries[:2] == before

    def test_same_tick_entries_both_kept(self):
        now = datetime(2024, 1, 15, 8, 0, 0, tzinfo=timezone.utc)
        log = append_entry(LogEntry(Severity.ERROR, "one"), BufferedLog(), now=now)
        log = append_entry(LogEntry(Severity.ERROR, "two"), log, now=now)
        assert len(log) == 2
        assert log.keys()[1].endswith("#1")
