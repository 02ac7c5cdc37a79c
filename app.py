import streamlit as st

from habitify.config import setup_logging
from habitify.auth import render_login, logout
from habitify.data_manager import (
    get_store, get_user, load_habits, add_habit, edit_habit, delete_habit,
    toggle_completion, set_progress, admin_stats, list_users_with_counts, get_user_detail, remove_user,
)
from habitify.analytics import (
    render_analytics, calculate_streak, completed_today, daily_progress, overall_streak, strong_habits,
)
from habitify.errors import HabitifyError, NotFound
from habitify.gamification import XP_PER_COMPLETION, get_level_info
from habitify.ui_components import render_habit_form, render_habit_card, render_profile_bar
from habitify.utils import today_and_yesterday

setup_logging()

st.set_page_config(
    page_title="Habitify",
    page_icon="✨",
    layout="wide",
    initial_sidebar_state="expanded"
)

store = get_store()

user_id = render_login(store)
if not user_id:
    st.stop()

try:
    user = get_user(user_id)
except NotFound:
    # Account was deleted while logged in
    logout()
    st.rerun()

st.title("✨ Habitify")

with st.sidebar:
    st.write(f"Signed in as **{user.name or user.email}**")
    if st.button("Logout"):
        logout()
        st.rerun()

tabs = ["🔥 Dashboard", "➕ Add Habit", "📊 Analytics", "⚙️ Settings"]
if user.is_admin:
    tabs.append("🛡️ Admin")

selected_tab = st.radio("Navigation", tabs, horizontal=True, label_visibility="collapsed")


def show_reward(result):
    """Remember an XP grant so it survives the rerun."""
    if result.user is not None:
        st.session_state.latest_reward = {
            "level_up": result.user.level > user.level,
            "level_info": get_level_info(result.user.xp),
        }


def on_toggle(habit_id, day):
    try:
        show_reward(toggle_completion(habit_id, day, user.id))
    except HabitifyError as e:
        st.error(str(e))
        return
    st.rerun()


def on_progress(habit_id, day, value):
    try:
        show_reward(set_progress(habit_id, day, value, user.id))
    except HabitifyError as e:
        st.error(str(e))
        return
    st.rerun()


if selected_tab == "🔥 Dashboard":
    render_profile_bar(user)

    # --- REWARD POPUP SYSTEM ---
    if "latest_reward" in st.session_state:
        reward = st.session_state.latest_reward
        st.toast(f"Heroic! +{XP_PER_COMPLETION} XP 🌟")
        if reward.get('level_up'):
            st.balloons()
            lvl = reward['level_info']
            st.success(f"🎉 **LEVEL UP!** You are now a **{lvl['title']}** (Level {lvl['level']})!")
        del st.session_state['latest_reward']

    habits = load_habits(user.id)
    today, _ = today_and_yesterday()

    if not habits:
        st.info("No habits found. Go to 'Add Habit' to start!")
    else:
        m1, m2, m3 = st.columns(3)
        m1.metric("Overall Streak", f"{overall_streak(habits)} days")
        m2.metric("Strong Habits (7+ days)", len(strong_habits(habits)))
        m3.metric("Done Today", f"{completed_today(habits)} / {len(habits)}")
        st.progress(daily_progress(habits))

        st.markdown("### Today's Focus")
        for habit in habits:
            streak = calculate_streak(habit.completed_dates, habit)
            render_habit_card(habit, today, streak, on_toggle, on_progress)

elif selected_tab == "➕ Add Habit":
    st.write("### Create New Habit")

    if "habit_success" in st.session_state:
        st.success(st.session_state.habit_success)
        del st.session_state["habit_success"]

    habit_data = render_habit_form("new")
    if habit_data:
        try:
            habit = add_habit(user.id, habit_data)
        except HabitifyError as e:
            st.error(str(e))
        else:
            st.session_state.habit_success = f"Habit '{habit.title}' created successfully!"
            st.rerun()

elif selected_tab == "📊 Analytics":
    render_analytics(load_habits(user.id))

elif selected_tab == "⚙️ Settings":
    st.header("⚙️ Habit Management Center")
    habits = load_habits(user.id)
    if "edit_mode_id" not in st.session_state:
        st.session_state.edit_mode_id = None

    if not habits:
        st.info("No habits to manage yet.")
    elif st.session_state.edit_mode_id:
        habit_to_edit = next((h for h in habits if h.id == st.session_state.edit_mode_id), None)
        if habit_to_edit is None or st.button("← Back to List", key="back_edit"):
            st.session_state.edit_mode_id = None
            st.rerun()

        st.subheader(f"Edit Habit: {habit_to_edit.title}")
        updated = render_habit_form(f"edit_{habit_to_edit.id}", vars(habit_to_edit), "Save Changes 💾")
        if updated:
            try:
                edit_habit(habit_to_edit.id, user.id, updated)
            except HabitifyError as e:
                st.error(str(e))
            else:
                st.session_state.edit_mode_id = None
                st.rerun()
    else:
        for habit in habits:
            with st.container(border=True):
                c1, c2 = st.columns([4, 1])
                with c1:
                    st.markdown(f"**{habit.title}**")
                    st.caption(f"{habit.category} • {habit.frequency}")
                with c2:
                    b1, b2 = st.columns(2)
                    with b1:
                        if st.button("✏️", key=f"edit_{habit.id}", help="Edit Habit"):
                            st.session_state.edit_mode_id = habit.id
                            st.rerun()
                    with b2:
                        if st.button("🗑️", key=f"del_{habit.id}", help="Delete Habit"):
                            try:
                                delete_habit(habit.id, user.id)
                            except HabitifyError as e:
                                st.error(str(e))
                            else:
                                st.rerun()

elif selected_tab == "🛡️ Admin":
    st.header("🛡️ Admin Panel")
    stats = admin_stats(user.id)

    m1, m2, m3, m4, m5 = st.columns(5)
    m1.metric("Users", stats["total_users"])
    m2.metric("Habits", stats["total_habits"])
    m3.metric("Completed Today", stats["completed_today"])
    m4.metric("Users With Habits", stats["users_with_habits"])
    m5.metric("Active (today/yesterday)", stats["active_users"])

    st.divider()
    users_df = list_users_with_counts(user.id)
    for _, row in users_df.iterrows():
        with st.container(border=True):
            c1, c2 = st.columns([5, 1])
            with c1:
                badge = " 🛡️" if row['is_admin'] else ""
                st.markdown(f"**{row['name'] or row['email']}**{badge}")
                st.caption(f"{row['email']} • Level {row['level']} • {row['habit_count']} habits")
                if row['habit_count']:
                    with st.expander("Habits"):
                        _, user_habits = get_user_detail(user.id, row['id'])
                        for h in user_habits:
                            st.write(f"{h.title} • {h.category} • 🔥 {calculate_streak(h.completed_dates, h)}")
            with c2:
                if row['id'] != user.id and st.button("🗑️", key=f"del_user_{row['id']}", help="Delete User"):
                    try:
                        remove_user(user.id, row['id'])
                    except HabitifyError as e:
                        st.error(str(e))
                    else:
                        st.rerun()
