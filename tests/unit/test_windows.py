"""Calendar window boundary tests (canonical zone is UTC by default)."""

from datetime import date, datetime, timedelta, timezone

from pfg.activity.windows import day_start, local_day, month_start, next_day_start, week_start

# Wednesday
NOW = datetime(2025, 3, 12, 23, 59, 59, tzinfo=timezone.utc)


class TestWindows:
    def test_local_day(self):
        assert local_day(NOW) == date(2025, 3, 12)

    def test_day_start(self):
        assert day_start(NOW) == datetime(2025, 3, 12, tzinfo=timezone.utc)

    def test_next_day_start_crosses_month(self):
        end_of_month = datetime(2025, 3, 31, 12, tzinfo=timezone.utc)
        assert next_day_start(end_of_month) == datetime(2025, 4, 1, tzinfo=timezone.utc)

    def test_week_starts_monday(self):
        start = week_start(NOW)
        assert start == datetime(2025, 3, 10, tzinfo=timezone.utc)
        assert start.weekday() == 0

    def test_week_start_on_monday_is_same_day(self):
        monday = datetime(2025, 3, 10, 0, 0, 1, tzinfo=timezone.utc)
        assert week_start(monday) == datetime(2025, 3, 10, tzinfo=timezone.utc)

    def test_month_start(self):
        assert month_start(NOW) == datetime(2025, 3, 1, tzinfo=timezone.utc)

    def test_ordering(self):
        assert month_start(NOW) <= week_start(NOW) <= day_start(NOW) <= NOW < next_day_start(NOW)

    def test_non_utc_input_is_converted(self):
        tz = timezone(timedelta(hours=-5))
        late_evening = datetime(2025, 3, 12, 21, 0, tzinfo=tz)  # 02:00 UTC on the 13th
        assert local_day(late_evening) == date(2025, 3, 13)
