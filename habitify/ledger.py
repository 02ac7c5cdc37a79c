"""
Completion ledger.

Every function here is a pure transformation over a list of CompletionEntry:
the input list is never mutated and callers persist the returned list.
"""
import math
import logging

from habitify.entries import CompletionEntry
from habitify.errors import InvalidValue

logger = logging.getLogger(__name__)


def find_entry(entries, date):
    """Return the entry recorded for date, or None."""
    for entry in entries:
        if entry.date == date:
            return entry
    return None


def is_completed(habit, entry):
    """
    Decide whether one day counts as done for a habit.
    Quantity habits without a positive goal can never be completed.
    """
    if entry is None:
        return False
    if not habit.is_quantity:
        return True

    goal = habit.goal_value
    if goal is None or goal <= 0 or entry.value is None:
        return False
    return entry.value >= goal


def toggle(entries, date):
    """Remove the entry for date if there is one, otherwise add a bare one."""
    if find_entry(entries, date) is not None:
        logger.debug("toggle %s: removing entry", date)
        return remove(entries, date)
    logger.debug("toggle %s: adding entry", date)
    return list(entries) + [CompletionEntry(date)]


def set_value(entries, date, value):
    """
    Record cumulative progress for date, replacing any previous value.
    A value of 0 is still recorded so a visited day stays distinguishable
    from one that was never touched.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidValue(f"Progress value must be a number, got {value!r}")
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise InvalidValue(f"Progress value must be >= 0, got {value!r}")

    updated = []
    replaced = False
    for entry in entries:
        if entry.date != date:
            updated.append(entry)
        elif not replaced:
            updated.append(CompletionEntry(date, value))
            replaced = True
    if not replaced:
        updated.append(CompletionEntry(date, value))
    return updated


def remove(entries, date):
    """Drop the entry for date; no-op when absent."""
    return [entry for entry in entries if entry.date != date]
