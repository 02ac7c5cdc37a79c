import os
import sqlite3
import logging
from typing import List, Optional, Protocol

from habitify.config import DB_PATH
from habitify.models import Habit, User

logger = logging.getLogger(__name__)


class HabitStore(Protocol):
    """Persistence contract shared by the SQLite and MongoDB backends."""

    def get_habit(self, habit_id: str) -> Habit:
        """Raises NotFound when the habit does not exist."""
        ...

    def save_habit(self, habit_id: str, entries) -> Habit:
        """Persist a new completion history for the habit."""
        ...

    def get_user(self, user_id: str) -> User:
        """Raises NotFound when the user does not exist."""
        ...

    def save_user(self, user_id: str, xp: int, level: int) -> User:
        ...

    def create_user(self, email: str, name: str, password_hash: str, is_admin: bool = False) -> User:
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def list_users(self) -> List[User]:
        ...

    def delete_user(self, user_id: str) -> bool:
        """Delete the user and every habit they own."""
        ...

    def create_habit(self, user_id: str, habit_data: dict) -> Habit:
        ...

    def list_habits(self, user_id: str) -> List[Habit]:
        ...

    def list_all_habits(self) -> List[Habit]:
        ...

    def update_habit(self, habit_id: str, habit_data: dict) -> Habit:
        ...

    def delete_habit(self, habit_id: str) -> bool:
        ...


def get_db_connection(db_path=DB_PATH):
    """Create a database connection to the SQLite database."""
    # Ensure data directory exists
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row  # Return rows as dictionaries
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path=DB_PATH):
    """Initialize the database with necessary tables."""
    conn = get_db_connection(db_path)
    try:
        c = conn.cursor()

        c.execute('''
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                name TEXT DEFAULT '',
                password_hash TEXT NOT NULL,
                is_admin BOOLEAN DEFAULT 0,
                xp INTEGER DEFAULT 0,
                level INTEGER DEFAULT 1,
                created_at TIMESTAMP
            )
        ''')

        # completed_dates holds the JSON encoded completion history
        c.execute('''
            CREATE TABLE IF NOT EXISTS habits (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                title TEXT NOT NULL,
                category TEXT DEFAULT 'General',
                frequency TEXT DEFAULT 'daily',
                start_time TEXT,
                end_time TEXT,
                is_quantity BOOLEAN DEFAULT 0,
                goal_value REAL,
                unit TEXT,
                completed_dates TEXT DEFAULT '[]',
                created_at TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
            )
        ''')

        c.execute('CREATE INDEX IF NOT EXISTS idx_habits_user ON habits (user_id)')
        conn.commit()
    finally:
        conn.close()
    return True


def run_query(query, params=(), db_path=DB_PATH):
    """
    Execute a query and return results.
    Writes return the number of affected rows, reads return the fetched rows.
    """
    conn = get_db_connection(db_path)
    try:
        c = conn.cursor()
        c.execute(query, params)
        if query.strip().upper().startswith(("INSERT", "UPDATE", "DELETE")):
            conn.commit()
            return c.rowcount
        return c.fetchall()
    except sqlite3.Error:
        logger.exception("Database error running %s", query.strip().split()[0])
        raise
    finally:
        conn.close()
