from datetime import date, datetime, timedelta

import pytest

from crewconnect.core.workdays import count_weekdays


def _brute_force(start: date, end: date) -> int:
    days = 0
    day = start
    while day <= end:
        if day.weekday() < 5:
            days += 1
        day += timedelta(days=1)
    return days


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2024, 1, 1), date(2024, 1, 5), 5),  # Mon..Fri
        (date(2024, 1, 6), date(2024, 1, 7), 0),  # Sat..Sun
        (date(2024, 1, 1), date(2024, 1, 14), 10),  # two weekends
        (date(2024, 1, 3), date(2024, 1, 3), 1),
        (date(2024, 1, 6), date(2024, 1, 6), 0),
        (date(2023, 12, 29), date(2024, 1, 2), 3),  # year boundary: Fri, Mon, Tue
        (date(2024, 2, 26), date(2024, 3, 4), 6),  # leap day 2024-02-29 is a Thursday
        (date(2023, 2, 27), date(2023, 3, 3), 5),  # non-leap February
    ],
)
def test_count_weekdays_fixed_ranges(start, end, expected):
    assert count_weekdays(start, end) == expected


def test_reversed_range_counts_nothing():
    assert count_weekdays(date(2024, 1, 10), date(2024, 1, 1)) == 0


def test_time_of_day_is_ignored():
    assert count_weekdays(datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 5, 0, 1)) == 5


def test_matches_day_by_day_count_for_every_start_weekday():
    base = date(2024, 2, 19)
    for offset in range(7):
        start = base + timedelta(days=offset)
        for length in (0, 1, 6, 7, 8, 30, 366):
            end = start + timedelta(days=length)
            assert count_weekdays(start, end) == _brute_force(start, end)
