import calendar
from datetime import date, timedelta
from typing import Dict, List, Optional

from config import PLAN_AHEAD_DAYS, QUICK_PLAN_OPTIONS


def add_months(base: date, months: int) -> date:
    """Add months to a date, handling month-end edge cases.
    """
    total_months = base.year * 12 + base.month - 1 + months
    new_year = total_months // 12
    new_month = total_months % 12 + 1
    last_day_of_month = calendar.monthrange(new_year, new_month)[1]
    clamped_day = min(base.day, last_day_of_month)
    return date(new_year, new_month, clamped_day)


def suggest_next_due_date(
    last_due: Optional[date],
    average_interval_days: float,
    today: date,
) -> date:
    """Suggest a due date when planning a routine's next instance.

    Uses the routine's average completion interval from its last due date.
    Without history (or an interval under one day) the default plan-ahead
    window from today is used. The suggestion is never in the past.
    """
    interval = round(average_interval_days)
    if last_due is None or interval < 1:
        return today + timedelta(days=PLAN_AHEAD_DAYS)

    suggested = last_due + timedelta(days=interval)
    if suggested < today:
        return today + timedelta(days=interval)
    return suggested


def plan_quick_dates(today: date) -> List[Dict[str, object]]:
    """Quick-pick options for the plan-next sheet, e.g. "2 weeks" -> date."""
    options = []
    for option in QUICK_PLAN_OPTIONS:
        target = add_months(today, option["months"]) if option["months"] else today
        target += timedelta(days=option["days"])
        options.append({"label": option["label"], "date": target})
    return options
