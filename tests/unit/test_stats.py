"""Stats aggregation tests — points weighting, streaks and empty input."""

from datetime import date, datetime, timezone

from betabreaker.gamification.scoring import is_qualifying, points_for
from betabreaker.gamification.stats import ClimbRecord, UserStats, aggregate, day_key, longest_day_streak


def _record(
    grade: int = 3,
    climb_type: str = "boulder",
    attempt_type: str = "sent",
    when: datetime | date | str = "2024-01-01T10:00:00Z",
    gym_id: int = 1,
    log_id: int = 1,
) -> ClimbRecord:
    return ClimbRecord(
        log_id=log_id,
        user_id=7,
        climb_id=log_id,
        attempt_type=attempt_type,
        logged_at=when,
        grade=grade,
        climb_type=climb_type,
        gym_id=gym_id,
    )


class TestPointsFor:
    """Per-climb weighting by climb type."""

    def test_boulder(self):
        assert points_for(5, "boulder") == 50

    def test_top_rope(self):
        assert points_for(4, "top_rope") == 20

    def test_lead(self):
        assert points_for(3, "lead") == 45

    def test_unknown_type_scores_like_boulder(self):
        assert points_for(6, "speed") == 60
        assert points_for(6, None) == 60

    def test_missing_grade_scores_zero(self):
        assert points_for(None, "lead") == 0


class TestIsQualifying:
    def test_sends_and_flashes_qualify(self):
        assert is_qualifying("sent")
        assert is_qualifying("flashed")

    def test_projects_do_not_qualify(self):
        assert not is_qualifying("projected")
        assert not is_qualifying(None)


class TestAggregate:
    """aggregate() folds records into a UserStats summary."""

    def test_empty_input_is_all_zero(self):
        stats = aggregate([])
        assert stats == UserStats()
        assert stats.as_dict() == {
            "climb_count": 0,
            "highest_grade": 0,
            "flash_count": 0,
            "unique_gyms": 0,
            "consecutive_days": 0,
            "total_points": 0,
        }

    def test_points_mix_of_types(self):
        stats = aggregate([
            _record(grade=5, climb_type="boulder", log_id=1),
            _record(grade=3, climb_type="lead", log_id=2),
        ])
        assert stats.total_points == 95

    def test_counts_and_highest_grade(self):
        stats = aggregate([
            _record(grade=2, attempt_type="flashed", gym_id=1, log_id=1),
            _record(grade=7, attempt_type="sent", gym_id=2, log_id=2),
            _record(grade=4, attempt_type="flashed", gym_id=1, log_id=3),
        ])
        assert stats.climb_count == 3
        assert stats.highest_grade == 7
        assert stats.flash_count == 2
        assert stats.unique_gyms == 2

    def test_projects_are_filtered_out(self):
        stats = aggregate([
            _record(grade=3, attempt_type="sent", log_id=1),
            _record(grade=9, attempt_type="projected", gym_id=5, log_id=2),
        ])
        assert stats.climb_count == 1
        assert stats.highest_grade == 3
        assert stats.unique_gyms == 1
        assert stats.total_points == 30

    def test_only_projects_is_all_zero(self):
        assert aggregate([_record(attempt_type="projected")]) == UserStats()

    def test_streak_with_gap(self):
        stats = aggregate([
            _record(when="2024-01-01T08:00:00Z", log_id=1),
            _record(when="2024-01-02T08:00:00Z", log_id=2),
            _record(when="2024-01-04T08:00:00Z", log_id=3),
        ])
        assert stats.consecutive_days == 2


class TestLongestDayStreak:
    """Longest run of calendar-adjacent days."""

    def test_empty(self):
        assert longest_day_streak([]) == 0

    def test_single_day(self):
        assert longest_day_streak([date(2024, 1, 1)]) == 1

    def test_same_day_counts_once(self):
        days = [date(2024, 1, 1), date(2024, 1, 1), date(2024, 1, 1)]
        assert longest_day_streak(days) == 1

    def test_unordered_input(self):
        days = [date(2024, 1, 3), date(2024, 1, 1), date(2024, 1, 2)]
        assert longest_day_streak(days) == 3

    def test_longest_run_wins_over_latest(self):
        days = [
            date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3),
            date(2024, 1, 10), date(2024, 1, 11),
        ]
        assert longest_day_streak(days) == 3

    def test_month_boundary(self):
        assert longest_day_streak([date(2024, 1, 31), date(2024, 2, 1)]) == 2

    def test_leap_day(self):
        days = [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
        assert longest_day_streak(days) == 3


class TestDayKey:
    def test_datetime_truncates_to_date(self):
        assert day_key(datetime(2024, 1, 5, 23, 59, tzinfo=timezone.utc)) == date(2024, 1, 5)

    def test_date_passthrough(self):
        assert day_key(date(2024, 1, 5)) == date(2024, 1, 5)

    def test_iso_string(self):
        assert day_key("2024-01-05T23:59:00.000Z") == date(2024, 1, 5)
