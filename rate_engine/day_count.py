"""
Day Count Module

Calendar arithmetic used by every rate strategy: year day counts, month
differences, day spans, month-start normalization and month labels.
"""

from datetime import date
import calendar


class DayCountHelper:
    """Pure date arithmetic for interest calculations"""

    def year_day_count(self, day: date) -> int:
        """Days in the calendar year of `day` (365 or 366)"""
        return 366 if calendar.isleap(day.year) else 365

    def months_between(self, begin: date, end: date) -> int:
        """
        Year-month difference between two dates

        Only the year and month parts count, so 2024-01-31 -> 2024-02-01 is one
        month and two dates in the same month are zero months apart. The result
        is negative when `end` falls in an earlier month than `begin`.
        """
        return (end.year * 12 + end.month) - (begin.year * 12 + begin.month)

    def days_between(self, start: date, end: date) -> int:
        """Days from `start` (inclusive) to `end` (exclusive)"""
        return (end - start).days

    def to_month_start(self, day: date) -> date:
        return day.replace(day=1)

    def to_month_end(self, day: date) -> date:
        return day.replace(day=calendar.monthrange(day.year, day.month)[1])

    def with_day(self, day: date, day_of_month: int) -> date:
        """Move to `day_of_month` within the same month, clamped to the month length"""
        last_day = calendar.monthrange(day.year, day.month)[1]
        return day.replace(day=min(day_of_month, last_day))

    def add_months(self, day: date, months: int) -> date:
        """Shift by whole months, clamping the day to the target month length"""
        month_index = day.year * 12 + (day.month - 1) + months
        year, month = divmod(month_index, 12)
        month += 1
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, min(day.day, last_day))

    def format_month(self, day: date) -> str:
        """Month label in YYYY/MM form"""
        return f"{day.year:04d}/{day.month:02d}"
