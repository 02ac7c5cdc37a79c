import uuid
import sqlite3
from datetime import datetime

from habitify.config import DB_PATH
from habitify.database import init_db, run_query
from habitify.entries import decode_entries, encode_entries
from habitify.errors import EmailTaken, NotFound
from habitify.models import Habit, User

HABIT_FIELDS = ["title", "category", "frequency", "start_time", "end_time", "is_quantity", "goal_value", "unit"]


def _parse_timestamp(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _row_to_user(row):
    return User(
        id=row['id'],
        email=row['email'],
        name=row['name'] or "",
        password_hash=row['password_hash'],
        is_admin=bool(row['is_admin']),
        xp=row['xp'] or 0,
        level=row['level'] or 1,
        created_at=_parse_timestamp(row['created_at']),
    )


def _row_to_habit(row):
    return Habit(
        id=row['id'],
        user_id=row['user_id'],
        title=row['title'],
        category=row['category'] or "General",
        frequency=row['frequency'] or "daily",
        start_time=row['start_time'],
        end_time=row['end_time'],
        is_quantity=bool(row['is_quantity']),
        goal_value=row['goal_value'],
        unit=row['unit'],
        completed_dates=decode_entries(row['completed_dates']),
        created_at=_parse_timestamp(row['created_at']),
    )


class SQLiteStore:
    """HabitStore backed by a local SQLite file."""

    def __init__(self, db_path=DB_PATH):
        self.db_path = db_path
        init_db(db_path)

    def _query(self, query, params=()):
        return run_query(query, params, db_path=self.db_path)

    # --- USERS ---

    def create_user(self, email, name, password_hash, is_admin=False):
        user_id = uuid.uuid4().hex
        try:
            self._query(
                "INSERT INTO users (id, email, name, password_hash, is_admin, xp, level, created_at) "
                "VALUES (?, ?, ?, ?, ?, 0, 1, ?)",
                (user_id, email, name, password_hash, int(is_admin), datetime.now().isoformat()),
            )
        except sqlite3.IntegrityError as e:
            raise EmailTaken(f"Email already in use: {email}") from e
        return self.get_user(user_id)

    def get_user(self, user_id):
        res = self._query("SELECT * FROM users WHERE id = ?", (user_id,))
        if not res:
            raise NotFound(f"User not found: {user_id}")
        return _row_to_user(res[0])

    def get_user_by_email(self, email):
        res = self._query("SELECT * FROM users WHERE lower(email) = lower(?)", (email,))
        return _row_to_user(res[0]) if res else None

    def list_users(self):
        return [_row_to_user(r) for r in self._query("SELECT * FROM users ORDER BY created_at DESC")]

    def save_user(self, user_id, xp, level):
        if not self._query("UPDATE users SET xp = ?, level = ? WHERE id = ?", (xp, level, user_id)):
            raise NotFound(f"User not found: {user_id}")
        return self.get_user(user_id)

    def delete_user(self, user_id):
        self._query("DELETE FROM habits WHERE user_id = ?", (user_id,))
        return self._query("DELETE FROM users WHERE id = ?", (user_id,)) > 0

    # --- HABITS ---

    def create_habit(self, user_id, habit_data):
        habit_id = uuid.uuid4().hex
        self._query(
            "INSERT INTO habits (id, user_id, title, category, frequency, start_time, end_time, "
            "is_quantity, goal_value, unit, completed_dates, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, '[]', ?)",
            (
                habit_id,
                user_id,
                habit_data['title'],
                habit_data.get('category', 'General'),
                habit_data.get('frequency', 'daily'),
                habit_data.get('start_time'),
                habit_data.get('end_time'),
                int(bool(habit_data.get('is_quantity'))),
                habit_data.get('goal_value'),
                habit_data.get('unit'),
                datetime.now().isoformat(),
            ),
        )
        return self.get_habit(habit_id)

    def get_habit(self, habit_id):
        res = self._query("SELECT * FROM habits WHERE id = ?", (habit_id,))
        if not res:
            raise NotFound(f"Habit not found: {habit_id}")
        return _row_to_habit(res[0])

    def list_habits(self, user_id):
        res = self._query("SELECT * FROM habits WHERE user_id = ? ORDER BY created_at DESC", (user_id,))
        return [_row_to_habit(r) for r in res]

    def list_all_habits(self):
        return [_row_to_habit(r) for r in self._query("SELECT * FROM habits ORDER BY created_at DESC")]

    def update_habit(self, habit_id, habit_data):
        fields = [f for f in HABIT_FIELDS if f in habit_data]
        if fields:
            assignments = ", ".join(f"{f} = ?" for f in fields)
            params = [habit_data[f] for f in fields]
            params = [int(v) if isinstance(v, bool) else v for v in params]
            if not self._query(f"UPDATE habits SET {assignments} WHERE id = ?", (*params, habit_id)):
                raise NotFound(f"Habit not found: {habit_id}")
        return self.get_habit(habit_id)

    def save_habit(self, habit_id, entries):
        if not self._query("UPDATE habits SET completed_dates = ? WHERE id = ?", (encode_entries(entries), habit_id)):
            raise NotFound(f"Habit not found: {habit_id}")
        return self.get_habit(habit_id)

    def delete_habit(self, habit_id):
        return self._query("DELETE FROM habits WHERE id = ?", (habit_id,)) > 0
