from datetime import date

from habitify.analytics import calculate_streak, overall_streak, best_streak, strong_habits
from habitify.entries import CompletionEntry

from helpers import entries, make_habit

TODAY = date(2024, 1, 3)


class TestCalculateStreak:
    def test_empty_history(self):
        assert calculate_streak([], make_habit(), TODAY) == 0

    def test_three_consecutive_days(self):
        history = entries("2024-01-03", "2024-01-02", "2024-01-01")
        assert calculate_streak(history, make_habit(), TODAY) == 3

    def test_gap_breaks_streak(self):
        history = entries("2024-01-03", "2024-01-01")
        assert calculate_streak(history, make_habit(), TODAY) == 1

    def test_streak_may_end_yesterday(self):
        history = entries("2024-01-02", "2024-01-01", "2023-12-31")
        assert calculate_streak(history, make_habit(), TODAY) == 3

    def test_stale_anchor_is_zero(self):
        history = entries(*[f"2023-12-{d:02d}" for d in range(1, 31)])
        assert calculate_streak(history, make_habit(), TODAY) == 0

    def test_future_anchor_is_zero(self):
        assert calculate_streak(entries("2024-01-04", "2024-01-03"), make_habit(), TODAY) == 0

    def test_order_and_duplicates_do_not_matter(self):
        history = entries("2024-01-01", "2024-01-03", "2024-01-02", "2024-01-03")
        assert calculate_streak(history, make_habit(), TODAY) == 3

    def test_crosses_month_and_year_boundaries(self):
        history = entries("2024-01-01", "2023-12-31", "2023-12-30")
        assert calculate_streak(history, make_habit(), date(2024, 1, 1)) == 3

    def test_crosses_leap_day(self):
        history = entries("2024-03-01", "2024-02-29", "2024-02-28")
        assert calculate_streak(history, make_habit(), date(2024, 3, 1)) == 3

    def test_accepts_string_today(self):
        assert calculate_streak(entries("2024-01-03"), make_habit(), "2024-01-03") == 1


class TestQuantityStreak:
    habit = make_habit(is_quantity=True, goal_value=10)

    def test_goal_met_days_count(self):
        history = [CompletionEntry("2024-01-03", 10), CompletionEntry("2024-01-02", 12)]
        assert calculate_streak(history, self.habit, TODAY) == 2

    def test_below_goal_day_breaks_streak(self):
        history = [
            CompletionEntry("2024-01-03", 10),
            CompletionEntry("2024-01-02", 4),
            CompletionEntry("2024-01-01", 10),
        ]
        assert calculate_streak(history, self.habit, TODAY) == 1

    def test_zero_value_entry_acts_as_break(self):
        history = [CompletionEntry("2024-01-03", 0), CompletionEntry("2024-01-02", 10)]
        assert calculate_streak(history, self.habit, TODAY) == 0

    def test_missing_goal_means_no_streak(self):
        habit = make_habit(is_quantity=True, goal_value=None)
        history = [CompletionEntry("2024-01-03", 50), CompletionEntry("2024-01-02", 50)]
        assert calculate_streak(history, habit, TODAY) == 0


class TestAcrossHabits:
    def test_overall_streak_uses_union_of_days(self):
        read = make_habit(habit_id="a", completed_dates=entries("2024-01-03", "2024-01-01"))
        run = make_habit(habit_id="b", completed_dates=entries("2024-01-02"))
        assert overall_streak([read, run], TODAY) == 3

    def test_overall_streak_ignores_unmet_goals(self):
        read = make_habit(habit_id="a", completed_dates=entries("2024-01-03"))
        pushups = make_habit(habit_id="b", is_quantity=True, goal_value=10,
                             completed_dates=[CompletionEntry("2024-01-02", 3)])
        assert overall_streak([read, pushups], TODAY) == 1

    def test_best_and_strong_habits(self):
        week = [f"2023-12-{d:02d}" for d in range(28, 32)] + ["2024-01-01", "2024-01-02", "2024-01-03"]
        strong = make_habit(habit_id="a", completed_dates=entries(*week))
        weak = make_habit(habit_id="b", completed_dates=entries("2024-01-03"))
        assert best_streak([strong, weak], TODAY) == 7
        assert strong_habits([strong, weak], TODAY) == [strong]

    def test_best_streak_without_habits(self):
        assert best_streak([], TODAY) == 0
