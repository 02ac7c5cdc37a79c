import pandas as pd
import streamlit as st
import plotly.express as px
from habitify.ledger import find_entry, is_completed
from habitify.utils import day_gap, today_and_yesterday, hours_between

WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


def _walk_streak(dates_desc, today, is_done):
    """
    Count consecutive days walking back from the most recent date.
    The run must end today or yesterday, otherwise it is already broken.
    """
    if not dates_desc:
        return 0

    today_str, yesterday_str = today_and_yesterday(today)
    anchor = dates_desc[0]
    if anchor != today_str and anchor != yesterday_str:
        return 0

    streak = 0
    expected = anchor
    for d in dates_desc:
        if day_gap(expected, d) > 1:
            break
        if not is_done(d):
            break
        streak += 1
        expected = d
    return streak


def calculate_streak(entries, habit, today=None):
    """
    Current streak for one habit.
    For quantity habits a day only continues the streak if its value met the goal;
    a quantity habit with no positive goal never has a streak.
    """
    if not entries:
        return 0

    by_date = {}
    for entry in entries:
        by_date.setdefault(entry.date, entry)
    dates = sorted(by_date, reverse=True)

    if not habit.is_quantity:
        return _walk_streak(dates, today, lambda d: True)

    if habit.goal_value is None or habit.goal_value <= 0:
        return 0
    return _walk_streak(dates, today, lambda d: is_completed(habit, by_date[d]))


def habit_streaks(habits, today=None):
    """Map of habit id -> current streak."""
    return {h.id: calculate_streak(h.completed_dates, h, today) for h in habits}


def completed_today(habits, today=None):
    """Number of habits whose entry for today counts as done."""
    today_str, _ = today_and_yesterday(today)
    return sum(1 for h in habits if is_completed(h, find_entry(h.completed_dates, today_str)))


def daily_progress(habits, today=None):
    """Fraction (0..1) of habits done today."""
    if not habits:
        return 0.0
    return completed_today(habits, today) / len(habits)


def overall_streak(habits, today=None):
    """Streak over the union of every day on which any habit was done."""
    done_days = set()
    for h in habits:
        for entry in h.completed_dates:
            if is_completed(h, entry):
                done_days.add(entry.date)
    return _walk_streak(sorted(done_days, reverse=True), today, lambda d: True)


def strong_habits(habits, today=None, threshold=7):
    """Habits whose current streak is at least threshold days."""
    streaks = habit_streaks(habits, today)
    return [h for h in habits if streaks[h.id] >= threshold]


def best_streak(habits, today=None):
    return max(habit_streaks(habits, today).values(), default=0)


def entries_frame(habits):
    """
    Flatten completion histories into one DataFrame.
    Columns: habit_id, user_id, category, date, value, completed.
    """
    rows = []
    for h in habits:
        for entry in h.completed_dates:
            rows.append({
                "habit_id": h.id,
                "user_id": h.user_id,
                "category": h.category,
                "date": entry.date,
                "value": entry.value,
                "completed": is_completed(h, entry),
            })
    if not rows:
        return pd.DataFrame(columns=['habit_id', 'user_id', 'category', 'date', 'value', 'completed'])
    return pd.DataFrame(rows)


def weekday_completions(habits):
    """
    Return completed days by day of week, Monday first.
    """
    df = entries_frame(habits)
    df = df[df['completed'].astype(bool)]
    if df.empty:
        return pd.DataFrame({'Day': WEEKDAYS, 'Completions': [0] * len(WEEKDAYS)})

    day_names = pd.to_datetime(df['date'], format="%Y-%m-%d").dt.day_name()
    stats = day_names.value_counts().reindex(WEEKDAYS, fill_value=0).reset_index()
    stats.columns = ['Day', 'Completions']
    return stats


def time_distribution(habits):
    """
    Hours planned per category from each habit's start/end time.
    Habits without a time window count as one hour.
    """
    if not habits:
        return pd.DataFrame(columns=['Category', 'Hours', 'Percent'])

    df = pd.DataFrame([
        {"Category": h.category or "General", "Hours": hours_between(h.start_time, h.end_time) or 1.0}
        for h in habits
    ])
    dist = df.groupby('Category', sort=False, as_index=False)['Hours'].sum()
    total = dist['Hours'].sum()
    dist['Percent'] = (dist['Hours'] / total * 100).round().astype(int)
    return dist


def platform_stats(users, habits, today=None):
    """
    Admin overview numbers.
    users_with_habits counts owners of at least one habit; active_users counts
    users with a completion dated today or yesterday.
    """
    today_str, yesterday_str = today_and_yesterday(today)
    df = entries_frame(habits)
    recent = df[df['date'].isin([today_str, yesterday_str])]

    return {
        "total_users": len(users),
        "total_habits": len(habits),
        "completed_today": completed_today(habits, today),
        "users_with_habits": len({h.user_id for h in habits}),
        "active_users": int(recent['user_id'].nunique()),
    }


def render_analytics(habits, today=None):
    if not habits:
        st.info("No data yet. Start tracking habits!")
        return

    st.subheader("📊 Analytics")

    m1, m2, m3 = st.columns(3)
    m1.metric("Plans", len(habits))
    m2.metric("Best Streak", best_streak(habits, today))
    m3.metric("Done Today", f"{completed_today(habits, today)} / {len(habits)}")

    st.divider()

    c1, c2 = st.columns([1, 1])

    with c1:
        st.markdown("### ⏱️ Time Distribution")
        dist = time_distribution(habits)
        fig = px.pie(dist, names='Category', values='Hours', hole=0.6)
        fig.update_layout(showlegend=True, height=300)
        st.plotly_chart(fig, width="stretch")

    with c2:
        st.markdown("### 📅 Weekly Rhythm")
        st.caption("Which days are you most consistent?")
        day_stats = weekday_completions(habits)
        fig = px.bar(day_stats, x='Day', y='Completions',
                     color='Completions', color_continuous_scale='Viridis')
        fig.update_layout(xaxis_title=None, yaxis_title=None, showlegend=False, height=300)
        st.plotly_chart(fig, width="stretch")

    st.divider()

    st.markdown("### 🏆 Habit Leaderboard")
    streaks = habit_streaks(habits, today)
    board = pd.DataFrame([
        {"Name": h.title, "Category": h.category, "Streak": streaks[h.id]}
        for h in habits
    ])
    st.dataframe(board.sort_values("Streak", ascending=False), width="stretch", hide_index=True)
