"""Tests for badge and streak milestone rules (pure functions, no DB)."""
import pytest

from ecoplay.services.badge_service import earned_badges, streak_milestones


class TestEarnedBadges:

    def test_new_user_has_first_steps_only(self):
        assert earned_badges(0, 0, 0) == ["First Steps"]

    def test_first_steps_survives_negative_balance(self):
        assert earned_badges(-40, 0, 0) == ["First Steps"]

    def test_missing_values_count_as_zero(self):
        assert earned_badges(None, None, None) == ["First Steps"]

    @pytest.mark.parametrize("points, earned", [(99, False), (100, True)])
    def test_point_collector_at_100(self, points, earned):
        assert ("Point Collector" in earned_badges(points, 0, 0)) is earned

    @pytest.mark.parametrize("points, earned", [(499, False), (500, True)])
    def test_eco_warrior_at_500(self, points, earned):
        assert ("Eco Warrior" in earned_badges(points, 0, 0)) is earned

    @pytest.mark.parametrize("streak, earned", [(6, False), (7, True)])
    def test_green_thumb_at_7_days(self, streak, earned):
        assert ("Green Thumb" in earned_badges(0, streak, 0)) is earned

    @pytest.mark.parametrize("streak, earned", [(29, False), (30, True)])
    def test_plant_master_at_30_days(self, streak, earned):
        assert ("Plant Master" in earned_badges(0, streak, 0)) is earned

    @pytest.mark.parametrize("attempts, earned", [(2, False), (3, True)])
    def test_quiz_master_at_3_attempts(self, attempts, earned):
        assert ("Quiz Master" in earned_badges(0, 0, attempts)) is earned

    def test_everything_earned_in_display_order(self):
        assert earned_badges(500, 30, 3) == [
            "First Steps", "Quiz Master", "Green Thumb",
            "Point Collector", "Eco Warrior", "Plant Master",
        ]


class TestStreakMilestones:

    def test_no_streak(self):
        milestones = streak_milestones(0)
        assert [(m["name"], m["days"]) for m in milestones] == [
            ("Seedling Caretaker", 3), ("Green Thumb", 7), ("Plant Master", 30),
        ]
        assert [m["days_to_go"] for m in milestones] == [3, 7, 30]
        assert not any(m["unlocked"] for m in milestones)

    def test_boundary_unlocks_on_the_day(self):
        at_two, at_three = streak_milestones(2)[0], streak_milestones(3)[0]
        assert (at_two["unlocked"], at_two["days_to_go"]) == (False, 1)
        assert (at_three["unlocked"], at_three["days_to_go"]) == (True, 0)

    def test_long_streak_never_goes_negative(self):
        milestones = streak_milestones(45)
        assert all(m["unlocked"] for m in milestones)
        assert all(m["days_to_go"] == 0 for m in milestones)
