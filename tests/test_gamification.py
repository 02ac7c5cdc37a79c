import pytest

from habitify.entries import CompletionEntry
from habitify.gamification import (
    XP_PER_COMPLETION, get_level_info, grant_if_newly_completed, level_for_xp, level_title,
)
from habitify.models import User

from helpers import make_habit

D = "2024-01-03"


@pytest.mark.parametrize("xp,level", [(0, 1), (99, 1), (100, 2), (250, 3), (1000, 11)])
def test_level_formula(xp, level):
    assert level_for_xp(xp) == level


def test_level_titles():
    assert "Traveler" in level_title(1)
    assert "Traveler" in level_title(4)
    assert "Envoy" in level_title(5)
    assert "Master" in level_title(10)


def test_level_info():
    info = get_level_info(250)
    assert info["level"] == 3
    assert info["xp_in_level"] == 50
    assert info["xp_to_next"] == 50
    assert info["next_level"] == 4
    assert info["progress"] == pytest.approx(0.5)


class TestGrant:
    user = User(id="u1", email="ada@example.com", xp=95, level=1)

    def test_binary_completion_grants_and_levels_up(self):
        updated = grant_if_newly_completed(make_habit(), [], [CompletionEntry(D)], D, self.user)
        assert updated.xp == 95 + XP_PER_COMPLETION
        assert updated.level == 2
        # Input user is left alone
        assert self.user.xp == 95

    def test_uncompleting_grants_nothing(self):
        assert grant_if_newly_completed(make_habit(), [CompletionEntry(D)], [], D, self.user) is None

    def test_crossing_goal_grants(self):
        habit = make_habit(is_quantity=True, goal_value=10)
        before = [CompletionEntry(D, 4)]
        after = [CompletionEntry(D, 10)]
        assert grant_if_newly_completed(habit, before, after, D, self.user).xp == 105

    def test_raising_met_goal_grants_nothing(self):
        habit = make_habit(is_quantity=True, goal_value=10)
        before = [CompletionEntry(D, 10)]
        after = [CompletionEntry(D, 15)]
        assert grant_if_newly_completed(habit, before, after, D, self.user) is None

    def test_progress_below_goal_grants_nothing(self):
        habit = make_habit(is_quantity=True, goal_value=10)
        assert grant_if_newly_completed(habit, [], [CompletionEntry(D, 9)], D, self.user) is None

    def test_other_dates_are_irrelevant(self):
        before = [CompletionEntry("2024-01-02")]
        after = [CompletionEntry("2024-01-02"), CompletionEntry(D)]
        assert grant_if_newly_completed(make_habit(), before, after, "2024-01-02", self.user) is None
