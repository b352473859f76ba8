"""Tests for plan-forward date suggestions."""
from datetime import date

import pytest

from config import PLAN_AHEAD_DAYS
from services.recurrence import add_months, plan_quick_dates, suggest_next_due_date

TODAY = date(2026, 3, 10)


class TestAddMonths:
    @pytest.mark.parametrize("base, months, expected", [
        (date(2026, 1, 15), 1, date(2026, 2, 15)),
        (date(2026, 1, 31), 1, date(2026, 2, 28)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2026, 11, 30), 3, date(2027, 2, 28)),
        (date(2026, 3, 31), -1, date(2026, 2, 28)),
    ])
    def test_clamps_to_month_end(self, base, months, expected):
        assert add_months(base, months) == expected


class TestSuggestNextDueDate:
    def test_uses_average_interval(self):
        assert suggest_next_due_date(date(2026, 3, 5), 21.4, TODAY) == date(2026, 3, 26)

    def test_without_history_uses_default_window(self):
        assert suggest_next_due_date(None, 0, TODAY) == date.fromordinal(TODAY.toordinal() + PLAN_AHEAD_DAYS)

    def test_sub_day_interval_uses_default_window(self):
        expected = date.fromordinal(TODAY.toordinal() + PLAN_AHEAD_DAYS)
        assert suggest_next_due_date(date(2026, 3, 5), 0.3, TODAY) == expected

    def test_never_suggests_the_past(self):
        assert suggest_next_due_date(date(2025, 6, 1), 10, TODAY) == date(2026, 3, 20)


def test_plan_quick_dates():
    options = {o["label"]: o["date"] for o in plan_quick_dates(date(2026, 1, 31))}
    assert options["1 week"] == date(2026, 2, 7)
    assert options["2 weeks"] == date(2026, 2, 14)
    assert options["1 month"] == date(2026, 2, 28)
    assert options["3 months"] == date(2026, 4, 30)
    assert options["6 months"] == date(2026, 7, 31)
