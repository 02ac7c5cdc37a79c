import logging
from dataclasses import replace

from habitify.ledger import find_entry, is_completed

logger = logging.getLogger(__name__)

# --- CONFIGURATION ---
XP_PER_COMPLETION = 10
XP_PER_LEVEL = 100

# (first level that no longer has this title, title)
LEVEL_TITLES = [
    (5, "🌱 Habit Traveler"),
    (10, "🧭 Consistency Envoy"),
    (None, "👑 Habit Master"),
]

# --- PURE LOGIC ---

def level_for_xp(total_xp):
    """Level is derived from XP, never stored on its own."""
    return max(0, total_xp) // XP_PER_LEVEL + 1


def level_title(level):
    for upper, title in LEVEL_TITLES:
        if upper is None or level < upper:
            return title
    return LEVEL_TITLES[-1][1]


def get_level_info(total_xp):
    """Return display info for the level bar."""
    level = level_for_xp(total_xp)
    xp_in_level = max(0, total_xp) % XP_PER_LEVEL
    return {
        "level": level,
        "title": level_title(level),
        "xp_in_level": xp_in_level,
        "xp_to_next": XP_PER_LEVEL - xp_in_level,
        "next_level": level + 1,
        "progress": xp_in_level / XP_PER_LEVEL,
    }


def grant_if_newly_completed(habit, entries_before, entries_after, date, user):
    """
    Award XP when date moves from not-completed to completed.
    Returns the updated User, or None when the user is unchanged.
    Re-completing, un-completing, or raising an already met goal grants nothing.
    """
    was_completed = is_completed(habit, find_entry(entries_before, date))
    is_now_completed = is_completed(habit, find_entry(entries_after, date))

    if not is_now_completed or was_completed:
        return None

    new_xp = user.xp + XP_PER_COMPLETION
    new_level = level_for_xp(new_xp)
    if new_level > user.level:
        logger.info("User %s reached level %s", user.id, new_level)
    logger.info("Granted %s XP to user %s for habit %s on %s", XP_PER_COMPLETION, user.id, habit.id, date)
    return replace(user, xp=new_xp, level=new_level)
