from habitify.entries import CompletionEntry
from habitify.models import Habit


def make_habit(is_quantity=False, goal_value=None, habit_id="h1", user_id="u1", title="Read", **kwargs):
    return Habit(id=habit_id, user_id=user_id, title=title, is_quantity=is_quantity, goal_value=goal_value, **kwargs)


def entries(*dates):
    return [CompletionEntry(d) for d in dates]
