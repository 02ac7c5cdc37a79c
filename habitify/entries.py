"""
Completion entry codec.

Storage holds completion history in two shapes: a bare "YYYY-MM-DD" string for
binary habits and a {"date", "value"} object for quantity habits. SQLite keeps
the whole list as one JSON string, and older rows sometimes hold individually
JSON-encoded entries. Everything is decoded into CompletionEntry here so the
rest of the package never sees the raw shapes.
"""
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from habitify.errors import MalformedEntry
from habitify.utils import is_valid_day


@dataclass(frozen=True)
class CompletionEntry:
    date: str
    value: Optional[float] = None

    @property
    def has_value(self):
        return self.value is not None


def _decode_value(value, raw):
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedEntry(f"Non-numeric value in entry: {raw!r}")
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedEntry(f"Non-numeric value in entry: {raw!r}") from e


def decode_entry(raw):
    """Decode one stored entry into a CompletionEntry."""
    if isinstance(raw, CompletionEntry):
        return raw

    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith(("{", '"')):
            try:
                loaded = json.loads(text)
            except json.JSONDecodeError as e:
                raise MalformedEntry(f"Unparseable entry: {raw!r}") from e
            return decode_entry(loaded)
        if not is_valid_day(text):
            raise MalformedEntry(f"Entry has no valid date: {raw!r}")
        return CompletionEntry(text)

    if isinstance(raw, Mapping):
        date = raw.get("date")
        if not isinstance(date, str) or not is_valid_day(date.strip()):
            raise MalformedEntry(f"Entry has no valid date: {raw!r}")
        return CompletionEntry(date.strip(), _decode_value(raw.get("value"), raw))

    raise MalformedEntry(f"Unsupported entry type {type(raw).__name__}: {raw!r}")


def encode_entry(entry):
    """Canonical storage form: bare date for binary entries, dict otherwise."""
    if entry.value is None:
        return entry.date
    return {"date": entry.date, "value": entry.value}


def decode_entries(raw):
    """Decode a whole completed_dates column (list, JSON string or None)."""
    if raw is None:
        return []
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedEntry(f"Completion history is not valid JSON: {raw[:80]!r}") from e
    if not isinstance(raw, list):
        raise MalformedEntry(f"Completion history must be a list, got {type(raw).__name__}")
    return [decode_entry(item) for item in raw]


def encode_entries(entries):
    """JSON string form used by the SQLite store."""
    return json.dumps([encode_entry(e) for e in entries])
