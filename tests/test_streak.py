"""Tests for watering streak calculation (pure functions, no DB)."""
from datetime import date, datetime, timedelta

from ecoplay.services.streak_service import compute_streak, next_stored_streak

TODAY = date(2024, 5, 10)


def days_ago(*offsets):
    return [TODAY - timedelta(days=n) for n in offsets]


class TestComputeStreak:

    def test_no_records(self):
        assert compute_streak([], today=TODAY) == 0

    def test_three_consecutive_days_ending_today(self):
        assert compute_streak(days_ago(0, 1, 2), today=TODAY) == 3

    def test_order_of_records_does_not_matter(self):
        assert compute_streak(days_ago(2, 0, 1), today=TODAY) == 3

    def test_gap_ends_streak(self):
        """Today and two days ago: the missing day breaks the run."""
        assert compute_streak(days_ago(0, 2), today=TODAY) == 1

    def test_only_yesterday_is_zero(self):
        """A streak has to include today."""
        assert compute_streak(days_ago(1, 2, 3), today=TODAY) == 0

    def test_duplicate_days_are_skipped(self):
        assert compute_streak(days_ago(0, 0, 1, 1, 2), today=TODAY) == 3

    def test_future_record_is_skipped(self):
        records = [TODAY + timedelta(days=1)] + days_ago(0, 1)
        assert compute_streak(records, today=TODAY) == 2

    def test_accepts_dicts_and_datetimes(self):
        records = [
            {"date": TODAY},
            datetime(2024, 5, 9, 18, 30),
        ]
        assert compute_streak(records, today=TODAY) == 2

    def test_accepts_row_objects(self):
        class Row:
            def __init__(self, d):
                self.date = d

        assert compute_streak([Row(d) for d in days_ago(0, 1)], today=TODAY) == 2

    def test_long_history_stops_at_first_gap(self):
        records = days_ago(0, 1, 2, 3, 5, 6, 7, 8, 9)
        assert compute_streak(records, today=TODAY) == 4


class TestNextStoredStreak:

    def test_first_watering(self):
        assert next_stored_streak(None, 0, TODAY) == 1

    def test_consecutive_day_increments(self):
        assert next_stored_streak(TODAY - timedelta(days=1), 4, TODAY) == 5

    def test_missed_day_resets(self):
        assert next_stored_streak(TODAY - timedelta(days=2), 4, TODAY) == 1

    def test_none_streak_treated_as_zero(self):
        assert next_stored_streak(TODAY - timedelta(days=1), None, TODAY) == 1
