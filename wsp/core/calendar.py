"""
Fiscal-year and week-number calculator.

A company's fiscal year starts on the first Monday on or after the 1st of its
configured start month (January or April) and is split into 52 seven-day
weeks. Week numbers on the task board are 1-based indexes into that grid.

Everything here operates on calendar dates (`datetime.date`), never on
instants, so daylight-saving transitions cannot shift day counts.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from wsp.models.domain.planner_domain import CalendarStartMonth

TOTAL_WEEKS = 52
DEFAULT_START_MONTH = CalendarStartMonth.APRIL

_MONTH_NUMBER = {
    CalendarStartMonth.JANUARY: 1,
    CalendarStartMonth.APRIL: 4,
}


@dataclass(frozen=True)
class FiscalYear:
    start: date
    label: str
    start_year: int


@dataclass(frozen=True)
class WeekSpan:
    week: int
    start: date
    end: date


@dataclass(frozen=True)
class CalendarContext:
    week_number: int
    fiscal_year_start: date
    fiscal_year_label: str
    start_month: CalendarStartMonth


def normalize_start_month(value: CalendarStartMonth | str | None) -> CalendarStartMonth:
    """Coerce a stored start month to the enum, falling back to April."""
    if isinstance(value, CalendarStartMonth):
        return value
    try:
        return CalendarStartMonth(value)
    except ValueError:
        return DEFAULT_START_MONTH


def _as_date(value: date) -> date:
    # datetime is a date subclass but does not compare with plain dates
    if isinstance(value, datetime):
        return value.date()
    return value


def fiscal_year_start(year: int, start_month: CalendarStartMonth | str) -> date:
    """
    Return the first Monday on or after the 1st of `start_month` in `year`.

    Args:
        year: Calendar year
        start_month: January or April

    Returns:
        The fiscal-year start date (always a Monday, always day 1..7)
    """
    month = _MONTH_NUMBER[normalize_start_month(start_month)]
    first = date(year, month, 1)
    weekday = first.isoweekday() % 7  # 0=Sunday .. 6=Saturday
    offset = (1 - weekday + 7) % 7
    return first + timedelta(days=offset)


def _label(start_year: int, start_month: CalendarStartMonth) -> str:
    if start_month is CalendarStartMonth.JANUARY:
        return f"Jan {start_year} - Dec {start_year}"
    return f"April {start_year} - March {start_year + 1}"


def fiscal_year_details(today: date, start_month: CalendarStartMonth | str) -> FiscalYear:
    """
    Resolve the fiscal year containing `today`.

    Dates before this calendar year's start belong to the previous fiscal year.
    """
    today = _as_date(today)
    month = normalize_start_month(start_month)

    candidate = fiscal_year_start(today.year, month)
    if today < candidate:
        start_year = today.year - 1
        start = fiscal_year_start(start_year, month)
    else:
        start_year = today.year
        start = candidate

    return FiscalYear(start=start, label=_label(start_year, month), start_year=start_year)


def week_number(today: date, start_month: CalendarStartMonth | str) -> int:
    """1-based week of `today` within its fiscal year, never below 1."""
    today = _as_date(today)
    start = fiscal_year_details(today, start_month).start
    diff_days = (today - start).days
    week = diff_days // 7 + 1
    return week if week > 0 else 1


def fiscal_year_weeks(start: date, total_weeks: int = TOTAL_WEEKS) -> list[WeekSpan]:
    """Week grid (Monday to Sunday) for the year calendar view."""
    start = _as_date(start)
    weeks = []
    for index in range(total_weeks):
        week_start = start + timedelta(days=index * 7)
        weeks.append(WeekSpan(week=index + 1, start=week_start, end=week_start + timedelta(days=6)))
    return weeks


def calendar_context(today: date, start_month: CalendarStartMonth | str | None) -> CalendarContext:
    """Week number plus fiscal-year start and label, as consumed by the board."""
    month = normalize_start_month(start_month)
    details = fiscal_year_details(today, month)
    return CalendarContext(
        week_number=week_number(today, month),
        fiscal_year_start=details.start,
        fiscal_year_label=details.label,
        start_month=month,
    )


def clamp_week(value: int, total_weeks: int = TOTAL_WEEKS) -> int:
    return max(1, min(total_weeks, int(value)))


def normalize_week_range(
    start: int, end: int, changed: str = "start", total_weeks: int = TOTAL_WEEKS
) -> tuple[int, int]:
    """
    Clamp a week range and keep start <= end.

    The end that was not edited follows the edited one when they cross,
    matching the range selector on the dashboard.
    """
    start = clamp_week(start, total_weeks)
    end = clamp_week(end, total_weeks)
    if start > end:
        if changed == "end":
            start = end
        else:
            end = start
    return start, end
