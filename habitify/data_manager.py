"""
Entry points used by the UI.

Completion updates are read-modify-write cycles (fetch habit, compute the new
history, save it, then maybe grant XP). They run under a per-habit lock, and the
XP write under a per-user lock, so concurrent clicks in one process cannot lose
an update.
"""
import logging
import threading
from contextlib import contextmanager
from typing import NamedTuple, Optional

import pandas as pd

from habitify import ledger
from habitify.analytics import platform_stats
from habitify.config import DB_BACKEND
from habitify.errors import AuthError, InvalidValue, NotFound, ValidationError
from habitify.gamification import grant_if_newly_completed
from habitify.models import Habit, User, validate_habit_data
from habitify.utils import is_valid_day

logger = logging.getLogger(__name__)

_STORE = None
_locks = {}
_locks_guard = threading.Lock()


class CompletionResult(NamedTuple):
    habit: Habit
    user: Optional[User]


def get_store():
    """Return the process wide store for the configured backend."""
    global _STORE
    if _STORE is None:
        if DB_BACKEND == "mongo":
            # Imported here so the sqlite backend never needs a Mongo connection
            from habitify.db_mongo import MongoStore
            _STORE = MongoStore()
        else:
            from habitify.db_sqlite import SQLiteStore
            _STORE = SQLiteStore()
        logger.info("Using %s store", DB_BACKEND)
    return _STORE


@contextmanager
def _locked(kind, key):
    with _locks_guard:
        lock = _locks.setdefault((kind, key), threading.Lock())
    with lock:
        yield


def _drop_locks(keys):
    with _locks_guard:
        for key in keys:
            _locks.pop(key, None)


def _owned_habit(store, habit_id, user_id):
    habit = store.get_habit(habit_id)
    if habit.user_id != user_id:
        # Someone else's habit looks exactly like a missing one
        raise NotFound(f"Habit not found: {habit_id}")
    return habit


def _check_date(date):
    if not is_valid_day(date):
        raise InvalidValue(f"Date must be YYYY-MM-DD, got {date!r}")


def _grant_xp(store, habit, before, after, date, user_id):
    with _locked("user", user_id):
        user = store.get_user(user_id)
        updated = grant_if_newly_completed(habit, before, after, date, user)
        if updated is None:
            return None
        return store.save_user(user_id, updated.xp, updated.level)


def toggle_completion(habit_id, date, user_id, store=None):
    """Flip presence of the entry for date and grant XP on a fresh completion."""
    store = store or get_store()
    _check_date(date)

    with _locked("habit", habit_id):
        habit = _owned_habit(store, habit_id, user_id)
        before = habit.completed_dates
        after = ledger.toggle(before, date)
        saved = store.save_habit(habit_id, after)
        user = _grant_xp(store, habit, before, after, date, user_id)

    return CompletionResult(saved, user)


def set_progress(habit_id, date, value, user_id, store=None):
    """Record the cumulative value for date and grant XP when the goal is first met."""
    store = store or get_store()
    _check_date(date)

    with _locked("habit", habit_id):
        habit = _owned_habit(store, habit_id, user_id)
        before = habit.completed_dates
        after = ledger.set_value(before, date, value)
        saved = store.save_habit(habit_id, after)
        user = _grant_xp(store, habit, before, after, date, user_id)

    return CompletionResult(saved, user)


# --- HABITS ---

def load_habits(user_id, store=None):
    store = store or get_store()
    return store.list_habits(user_id)


def get_user(user_id, store=None):
    store = store or get_store()
    return store.get_user(user_id)


def add_habit(user_id, habit_data, store=None):
    """Validate form input and create a habit with an empty history."""
    store = store or get_store()
    store.get_user(user_id)
    habit = store.create_habit(user_id, validate_habit_data(habit_data))
    logger.info("User %s created habit %s", user_id, habit.id)
    return habit


def edit_habit(habit_id, user_id, updated_data, store=None):
    """Update descriptive fields. The completion history is left untouched."""
    store = store or get_store()
    with _locked("habit", habit_id):
        habit = _owned_habit(store, habit_id, user_id)
        merged = {
            "title": habit.title,
            "category": habit.category,
            "frequency": habit.frequency,
            "start_time": habit.start_time,
            "end_time": habit.end_time,
            "is_quantity": habit.is_quantity,
            "goal_value": habit.goal_value,
            "unit": habit.unit,
        }
        merged.update(updated_data)
        return store.update_habit(habit_id, validate_habit_data(merged))


def delete_habit(habit_id, user_id, store=None):
    """Delete a habit together with its completion history."""
    store = store or get_store()
    with _locked("habit", habit_id):
        _owned_habit(store, habit_id, user_id)
        deleted = store.delete_habit(habit_id)
    _drop_locks([("habit", habit_id)])
    logger.info("User %s deleted habit %s", user_id, habit_id)
    return deleted


# --- ADMIN ---

def _require_admin(store, admin_id):
    admin = store.get_user(admin_id)
    if not admin.is_admin:
        logger.warning("User %s attempted an admin action", admin_id)
        raise AuthError("Admin access required")
    return admin


def admin_stats(admin_id, today=None, store=None):
    store = store or get_store()
    _require_admin(store, admin_id)
    return platform_stats(store.list_users(), store.list_all_habits(), today)


def list_users_with_counts(admin_id, store=None):
    """All users, newest first, with the number of habits each one owns."""
    store = store or get_store()
    _require_admin(store, admin_id)

    counts = {}
    for habit in store.list_all_habits():
        counts[habit.user_id] = counts.get(habit.user_id, 0) + 1

    rows = [
        {
            "id": u.id,
            "email": u.email,
            "name": u.name,
            "is_admin": u.is_admin,
            "level": u.level,
            "xp": u.xp,
            "created_at": u.created_at,
            "habit_count": counts.get(u.id, 0),
        }
        for u in store.list_users()
    ]
    if not rows:
        return pd.DataFrame(columns=['id', 'email', 'name', 'is_admin', 'level', 'xp', 'created_at', 'habit_count'])
    return pd.DataFrame(rows)


def get_user_detail(admin_id, user_id, store=None):
    store = store or get_store()
    _require_admin(store, admin_id)
    return store.get_user(user_id), store.list_habits(user_id)


def remove_user(admin_id, user_id, store=None):
    """Delete a user and all of their habits. Admins cannot delete themselves."""
    store = store or get_store()
    _require_admin(store, admin_id)
    if admin_id == user_id:
        raise ValidationError("You cannot delete your own account")
    store.get_user(user_id)
    habit_ids = [h.id for h in store.list_habits(user_id)]
    store.delete_user(user_id)
    _drop_locks([("user", user_id)] + [("habit", h) for h in habit_ids])
    logger.info("Admin %s deleted user %s", admin_id, user_id)
    return True
