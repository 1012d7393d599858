from datetime import date, datetime, timedelta

import pytest

from wsp.core.calendar import (
    TOTAL_WEEKS,
    calendar_context,
    clamp_week,
    fiscal_year_details,
    fiscal_year_start,
    fiscal_year_weeks,
    normalize_start_month,
    normalize_week_range,
    week_number,
)
from wsp.models.domain.planner_domain import CalendarStartMonth

MONDAY = 0


def test_april_2024_starts_on_the_first():
    assert fiscal_year_start(2024, "April") == date(2024, 4, 1)


def test_april_2023_rolls_forward_to_monday():
    # April 1st 2023 was a Saturday
    assert fiscal_year_start(2023, CalendarStartMonth.APRIL) == date(2023, 4, 3)


def test_january_2024_starts_on_new_years_day():
    assert fiscal_year_start(2024, "January") == date(2024, 1, 1)


@pytest.mark.parametrize("year", range(2015, 2036))
@pytest.mark.parametrize("month", list(CalendarStartMonth))
def test_start_is_first_monday_of_month(year, month):
    start = fiscal_year_start(year, month)
    first = date(year, 4 if month is CalendarStartMonth.APRIL else 1, 1)

    assert start.weekday() == MONDAY
    assert first <= start < first + timedelta(days=7)


def test_week_numbers_april_2024():
    assert week_number(date(2024, 4, 1), "April") == 1
    assert week_number(date(2024, 4, 7), "April") == 1
    assert week_number(date(2024, 4, 8), "April") == 2


def test_day_before_rollover_is_last_week_of_previous_year():
    assert week_number(date(2024, 3, 31), "April") == 52


def test_labels():
    assert fiscal_year_details(date(2024, 6, 15), "January").label == "Jan 2024 - Dec 2024"
    assert fiscal_year_details(date(2024, 6, 15), "April").label == "April 2024 - March 2025"


def test_dates_before_start_belong_to_previous_year():
    details = fiscal_year_details(date(2024, 2, 10), "April")

    assert details.start == date(2023, 4, 3)
    assert details.start_year == 2023
    assert details.label == "April 2023 - March 2024"


def test_january_before_first_monday_uses_previous_year():
    # 2023-01-01 was a Sunday, so the 2023 year starts on the 2nd
    details = fiscal_year_details(date(2023, 1, 1), "January")

    assert details.start == fiscal_year_start(2022, "January")
    assert details.label == "Jan 2022 - Dec 2022"


@pytest.mark.parametrize("month", list(CalendarStartMonth))
def test_week_one_on_fiscal_start(month):
    for year in range(2018, 2032):
        assert week_number(fiscal_year_start(year, month), month) == 1


@pytest.mark.parametrize("month", list(CalendarStartMonth))
def test_week_number_monotonic_within_year(month):
    start = fiscal_year_start(2024, month)
    next_start = fiscal_year_start(2025, month)

    previous = 0
    day = start
    while day < next_start:
        current = week_number(day, month)
        assert current >= previous
        if (day - start).days % 7 == 0:
            assert current == (day - start).days // 7 + 1
        previous = current
        day += timedelta(days=1)


def test_week_resets_at_next_year_start():
    next_start = fiscal_year_start(2025, "April")

    assert week_number(next_start - timedelta(days=1), "April") >= TOTAL_WEEKS
    assert week_number(next_start, "April") == 1


def test_week_number_is_always_positive():
    day = date(2020, 1, 1)
    while day < date(2022, 1, 1):
        assert week_number(day, "January") >= 1
        assert week_number(day, "April") >= 1
        day += timedelta(days=1)


def test_datetime_input_uses_calendar_date():
    assert week_number(datetime(2024, 4, 7, 23, 59), "April") == 1
    assert week_number(datetime(2024, 4, 8, 0, 1), "April") == 2


def test_unknown_start_month_falls_back_to_april():
    assert normalize_start_month("July") is CalendarStartMonth.APRIL
    assert normalize_start_month(None) is CalendarStartMonth.APRIL
    assert normalize_start_month("January") is CalendarStartMonth.JANUARY


def test_calendar_context_bundle():
    context = calendar_context(date(2024, 4, 10), "April")

    assert context.week_number == 2
    assert context.fiscal_year_start == date(2024, 4, 1)
    assert context.fiscal_year_label == "April 2024 - March 2025"
    assert context.start_month is CalendarStartMonth.APRIL


def test_fiscal_year_weeks_grid():
    weeks = fiscal_year_weeks(date(2024, 4, 1))

    assert len(weeks) == TOTAL_WEEKS
    assert weeks[0].week == 1
    assert weeks[0].start == date(2024, 4, 1)
    assert weeks[0].end == date(2024, 4, 7)
    assert weeks[-1].week == 52
    assert all(w.start.weekday() == MONDAY for w in weeks)
    assert all(b.start - a.start == timedelta(days=7) for a, b in zip(weeks, weeks[1:]))


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, 1), (-4, 1), (1, 1), (30, 30), (52, 52), (60, 52)],
)
def test_clamp_week(value, expected):
    assert clamp_week(value) == expected


def test_normalize_week_range_follows_edited_end():
    assert normalize_week_range(10, 12) == (10, 12)
    assert normalize_week_range(15, 12, changed="start") == (15, 15)
    assert normalize_week_range(15, 12, changed="end") == (12, 12)
    assert normalize_week_range(0, 99) == (1, 52)


@pytest.mark.parametrize("start_month", list(CalendarStartMonth))
@pytest.mark.parametrize("today", [date(2025, 4, 1), date(2025, 6, 2), date(2026, 1, 4)])
def test_repeated_calls_agree(today, start_month):
    assert calendar_context(today, start_month) == calendar_context(today, start_month)
    assert fiscal_year_details(today, start_month) == fiscal_year_details(today, start_month)
    assert week_number(today, start_month) == week_number(today, start_month)

    start = fiscal_year_start(today.year, start_month)
    assert fiscal_year_weeks(start) == fiscal_year_weeks(start)
    assert normalize_week_range(40, 12, changed="end") == normalize_week_range(40, 12, changed="end")
