"""Time formatting utilities for routine and reminder displays.

Converts the gap between two datetimes into text like "45 minutes ago",
"In 1 month 2 days" or "3 hours overdue", and splits a remaining duration
into countdown tiles. Months are 30 days and years 365 days everywhere.

Every function takes ``now`` explicitly and never raises; negative gaps are
formatted from their absolute value.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List

from config import (
    DAYS_PER_MONTH,
    DAYS_PER_YEAR,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
    CountdownUnitLabel,
)


@dataclass(frozen=True)
class CountdownUnit:
    value: int
    unit: CountdownUnitLabel


@dataclass(frozen=True)
class Countdown:
    """Countdown tiles plus the polarity of the underlying duration."""
    units: List[CountdownUnit]
    is_overdue: bool


def _plural(value: int, singular: str, plural: str) -> str:
    return f"{value} {singular if value == 1 else plural}"


def _split_days(total_days: int):
    """Split whole days into (years, months, days) with 365/30-day units."""
    years, rest = divmod(total_days, DAYS_PER_YEAR)
    months, days = divmod(rest, DAYS_PER_MONTH)
    return years, months, days


def _describe_gap(seconds: int) -> str:
    """Core of the relative formatters, without tense. Seconds must be >= 60."""
    minutes = seconds // SECONDS_PER_MINUTE
    hours = seconds // SECONDS_PER_HOUR
    days = seconds // SECONDS_PER_DAY

    if hours < 1:
        return _plural(minutes, "minute", "minutes")
    if days < 1:
        return _plural(hours, "hour", "hours")
    if days < DAYS_PER_MONTH:
        return _plural(days, "day", "days")

    if days < DAYS_PER_YEAR:
        months, rest_days = divmod(days, DAYS_PER_MONTH)
        text = _plural(months, "month", "months")
        if rest_days:
            text += " " + _plural(rest_days, "day", "days")
        return text

    years, months, _ = _split_days(days)
    text = _plural(years, "year", "years")
    if months:
        text += " " + _plural(months, "month", "months")
    return text


def _abs_seconds(delta: timedelta) -> int:
    return int(abs(delta.total_seconds()))


def format_relative_past(when: datetime, now: datetime) -> str:
    """Format how long ago ``when`` was, e.g. "1 hour ago" or "2 years 3 months ago"."""
    seconds = _abs_seconds(now - when)
    if seconds < SECONDS_PER_MINUTE:
        return "Just now"
    return f"{_describe_gap(seconds)} ago"


def format_relative_future(when: datetime, now: datetime) -> str:
    """Format how far ahead ``when`` is, e.g. "In 1 day".

    Past dates reuse the past wording with "overdue" in place of "ago".
    """
    if when < now:
        past = format_relative_past(when, now)
        if past.endswith(" ago"):
            return past[: -len("ago")] + "overdue"
        return past

    seconds = _abs_seconds(when - now)
    if seconds < SECONDS_PER_MINUTE:
        return "Now"
    return f"In {_describe_gap(seconds)}"


def format_countdown_units(remaining: timedelta) -> List[CountdownUnit]:
    """Split a duration into countdown tiles, largest unit first.

    Leading zero years, months and days are dropped; hours, minutes and
    seconds are always present, so the result has 3 to 6 entries.
    """
    total = _abs_seconds(remaining)
    total_days, rest = divmod(total, SECONDS_PER_DAY)
    hours, rest = divmod(rest, SECONDS_PER_HOUR)
    minutes, seconds = divmod(rest, SECONDS_PER_MINUTE)
    years, months, days = _split_days(total_days)

    units = []
    if years:
        units.append(CountdownUnit(years, CountdownUnitLabel.YEARS))
    if years or months:
        units.append(CountdownUnit(months, CountdownUnitLabel.MONTHS))
    if years or months or days:
        units.append(CountdownUnit(days, CountdownUnitLabel.DAYS))
    units.append(CountdownUnit(hours, CountdownUnitLabel.HOURS))
    units.append(CountdownUnit(minutes, CountdownUnitLabel.MINUTES))
    units.append(CountdownUnit(seconds, CountdownUnitLabel.SECONDS))
    return units


def countdown(target: datetime, now: datetime) -> Countdown:
    """Countdown tiles towards ``target``, flagged overdue once it has passed."""
    remaining = target - now
    return Countdown(
        units=format_countdown_units(remaining),
        is_overdue=remaining < timedelta(0),
    )


def format_interval(days: float) -> str:
    """Format an average interval in days, e.g. "2 weeks" or "< 1 day"."""
    if days <= 0:
        return "-"
    if days < 1:
        return "< 1 day"
    if days < 7:
        return _plural(round(days), "day", "days")
    if days < DAYS_PER_MONTH:
        return _plural(round(days / 7), "week", "weeks")
    if days < DAYS_PER_YEAR:
        return _plural(round(days / DAYS_PER_MONTH), "month", "months")
    return _plural(round(days / DAYS_PER_YEAR), "year", "years")


def format_compact(delta: timedelta) -> str:
    """Format a duration compactly: '3d', '2h 5m', '2h', '7m', '40s' or 'now'."""
    seconds = _abs_seconds(delta)
    days = seconds // SECONDS_PER_DAY
    hours = seconds // SECONDS_PER_HOUR
    minutes = seconds // SECONDS_PER_MINUTE
    if days > 0:
        return f"{days}d"
    if hours > 0:
        mins = minutes % 60
        return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"
    if minutes > 0:
        return f"{minutes}m"
    if seconds > 0:
        return f"{seconds}s"
    return "now"
