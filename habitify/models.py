import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from habitify.entries import CompletionEntry
from habitify.errors import ValidationError

FREQUENCIES = ["daily", "weekly", "monthly"]
CATEGORIES = ["General", "Health", "Education", "Work", "Hobby"]


@dataclass
class Habit:
    id: str
    user_id: str
    title: str
    category: str = "General"
    frequency: str = "daily"
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_quantity: bool = False
    goal_value: Optional[float] = None
    unit: Optional[str] = None
    completed_dates: List[CompletionEntry] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass
class User:
    id: str
    email: str
    name: str = ""
    password_hash: str = ""
    is_admin: bool = False
    xp: int = 0
    level: int = 1
    created_at: Optional[datetime] = None


def _clean_time(value, label):
    if not value:
        return None
    try:
        datetime.strptime(value, "%H:%M")
    except (TypeError, ValueError):
        raise ValidationError(f"{label} time must be HH:MM, got {value!r}")
    return value


def validate_habit_data(habit_data):
    """
    Clean up habit form input before it reaches a store.
    Returns a new dict with normalized keys; raises ValidationError on bad input.
    """
    title = (habit_data.get("title") or "").strip()
    if not title:
        raise ValidationError("Habit title is required")

    frequency = habit_data.get("frequency") or "daily"
    if frequency not in FREQUENCIES:
        raise ValidationError(f"Unknown frequency: {frequency}")

    is_quantity = bool(habit_data.get("is_quantity"))
    goal_value = habit_data.get("goal_value")
    if goal_value in ("", None):
        goal_value = None
    else:
        try:
            goal_value = float(goal_value)
        except (TypeError, ValueError):
            raise ValidationError(f"Goal must be a number: {goal_value!r}")
        if not math.isfinite(goal_value):
            raise ValidationError(f"Goal must be a finite number: {goal_value!r}")

    if is_quantity and (goal_value is None or goal_value <= 0):
        raise ValidationError("Quantity habits need a positive goal")

    return {
        "title": title,
        "category": habit_data.get("category") or "General",
        "frequency": frequency,
        "start_time": _clean_time(habit_data.get("start_time"), "Start"),
        "end_time": _clean_time(habit_data.get("end_time"), "End"),
        "is_quantity": is_quantity,
        "goal_value": goal_value,
        "unit": (habit_data.get("unit") or None) if is_quantity else None,
    }
