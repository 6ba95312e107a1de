"""Date bucketing helpers shared by the analytics reports."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from django.utils import timezone


MONTH_ABBREVIATIONS = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")


def iso_week_key(day: date) -> str:
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}W{iso_week:02d}"


def iso_week_bounds(year: int, week: int) -> tuple[date, date]:
    start = date.fromisocalendar(year, week, 1)
    return start, start + timedelta(days=6)


def parse_week_key(key: str) -> tuple[int, int]:
    year, week = key.split("W", 1)
    return int(year), int(week)


def month_bounds(day: date) -> tuple[date, date]:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def shift_month(day: date, months: int) -> date:
    """Return the first day of the month ``months`` away from ``day``."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_label(day: date) -> str:
    return MONTH_ABBREVIATIONS[day.month - 1]


def short_date_label(day: date) -> str:
    return f"{day.day} {month_label(day)} {day.year % 100:02d}"


def br_date(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def day_start(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def day_end(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.max))


def local_midnight_ms(day: date) -> int:
    return int(day_start(day).timestamp() * 1000)
