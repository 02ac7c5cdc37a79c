import datetime

import streamlit as st

from habitify.gamification import XP_PER_LEVEL, get_level_info
from habitify.ledger import find_entry, is_completed
from habitify.models import CATEGORIES, FREQUENCIES

FREQUENCY_LABELS = {
    "daily": "Every Day",
    "weekly": "Weekly",
    "monthly": "Monthly",
}

CATEGORY_EMOJI = {
    "General": "✨", "Health": "💪", "Education": "📚", "Work": "⚡", "Hobby": "🎨",
}


def _time_value(raw):
    if not raw:
        return None
    try:
        return datetime.datetime.strptime(raw, "%H:%M").time()
    except ValueError:
        return None


def render_habit_form(key_prefix, current=None, submit_label="Create Habit 🚀"):
    """
    Render the add/edit habit form (interactive, no st.form so the
    quantity fields can appear as soon as the checkbox is ticked).
    Returns the raw form data when submitted, otherwise None.
    """
    current = current or {}

    title = st.text_input(
        "What habit do you want to build?",
        value=current.get("title", ""),
        placeholder="e.g., Fitness",
        key=f"{key_prefix}_title",
    ).strip()

    col1, col2 = st.columns(2)
    with col1:
        category = current.get("category", "General")
        category = st.selectbox(
            "Category", CATEGORIES,
            index=CATEGORIES.index(category) if category in CATEGORIES else 0,
            key=f"{key_prefix}_cat",
        )
        start_time = st.time_input("Start", value=_time_value(current.get("start_time")), key=f"{key_prefix}_start")
    with col2:
        frequency = current.get("frequency", "daily")
        frequency = st.selectbox(
            "Frequency", FREQUENCIES,
            index=FREQUENCIES.index(frequency) if frequency in FREQUENCIES else 0,
            format_func=lambda x: FREQUENCY_LABELS[x],
            key=f"{key_prefix}_freq",
        )
        end_time = st.time_input("End", value=_time_value(current.get("end_time")), key=f"{key_prefix}_end")

    is_quantity = st.checkbox("Measured by quantity", value=current.get("is_quantity", False), key=f"{key_prefix}_qty")
    goal_value = None
    unit = None
    if is_quantity:
        q1, q2 = st.columns(2)
        with q1:
            goal_value = st.number_input(
                "Daily Goal", min_value=0.0, value=float(current.get("goal_value") or 1.0),
                key=f"{key_prefix}_goal",
            )
        with q2:
            unit = st.text_input("Unit", value=current.get("unit") or "", placeholder="e.g., pages", key=f"{key_prefix}_unit")

    if st.button(submit_label, type="primary", key=f"{key_prefix}_submit"):
        return {
            "title": title,
            "category": category,
            "frequency": frequency,
            "start_time": start_time.strftime("%H:%M") if start_time else None,
            "end_time": end_time.strftime("%H:%M") if end_time else None,
            "is_quantity": is_quantity,
            "goal_value": goal_value,
            "unit": unit,
        }
    return None


def render_profile_bar(user):
    """Level badge and XP progress toward the next level."""
    info = get_level_info(user.xp)
    with st.container(border=True):
        c1, c2 = st.columns([1, 4])
        with c1:
            st.metric("Level", info["level"], info["title"], delta_color="off")
        with c2:
            st.write(f"**XP Progress** ({info['xp_in_level']} / {XP_PER_LEVEL} XP → Level {info['next_level']})")
            st.progress(info["progress"])


def render_habit_card(habit, today, streak, on_toggle, on_progress):
    """
    Card for a single habit: a toggle button for binary habits,
    a number input for quantity habits.
    """
    entry = find_entry(habit.completed_dates, today)
    is_done = is_completed(habit, entry)

    with st.container(border=True):
        c1, c2 = st.columns([4, 2])

        with c1:
            st.markdown(f"#### {habit.title}")
            cat_emoji = CATEGORY_EMOJI.get(habit.category, "✨")
            details = [f"{cat_emoji} {habit.category}", f"📅 {FREQUENCY_LABELS.get(habit.frequency, habit.frequency)}"]
            if habit.start_time:
                details.append(f"🕒 {habit.start_time} - {habit.end_time or '?'}")
            if habit.is_quantity:
                details.append(f"🎯 {habit.goal_value or 0:g} {habit.unit or ''}".rstrip())
            st.caption("  •  ".join(details))
            if streak > 0:
                st.markdown(f"🔥 **{streak} day streak**")

        with c2:
            if habit.is_quantity:
                current = float(entry.value) if entry is not None and entry.value is not None else 0.0
                value = st.number_input(
                    "Progress", min_value=0.0, value=current,
                    key=f"progress_{habit.id}", label_visibility="collapsed",
                )
                if st.button("✅ Save" if is_done else "Save", key=f"save_progress_{habit.id}"):
                    on_progress(habit.id, today, value)
            else:
                label = "✅" if is_done else "Done"
                if st.button(label, key=f"toggle_{habit.id}", help="Toggle completion"):
                    on_toggle(habit.id, today)
