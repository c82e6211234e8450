"""Tests for recurring expense due-date arithmetic."""

from datetime import date

import pytest

from aymur.expenses import advance_schedule, next_due_date
from aymur.expenses.schemas import CreateRecurringExpenseRequest, Frequency


class TestNextDueDate:

    @pytest.mark.parametrize(
        "frequency, expected",
        [
            (Frequency.DAILY, date(2025, 3, 11)),
            (Frequency.WEEKLY, date(2025, 3, 17)),
            (Frequency.MONTHLY, date(2025, 4, 10)),
            (Frequency.YEARLY, date(2026, 3, 10)),
        ],
    )
    def test_each_frequency(self, frequency, expected):
        assert next_due_date(date(2025, 3, 10), frequency) == expected

    def test_accepts_plain_strings(self):
        assert next_due_date(date(2025, 3, 10), "weekly") == date(2025, 3, 17)

    @pytest.mark.parametrize(
        "day_of_week, expected",
        [(5, date(2025, 3, 14)), (0, date(2025, 3, 16)), (1, date(2025, 3, 17))],
    )
    def test_weekly_lands_on_day_of_week(self, day_of_week, expected):
        # 2025-03-10 is a Monday; 0 is Sunday
        assert next_due_date(date(2025, 3, 10), "weekly", day_of_week=day_of_week) == expected

    def test_day_of_week_only_affects_weekly(self):
        assert next_due_date(date(2025, 3, 10), "monthly", day_of_week=5) == date(2025, 4, 10)

    def test_unknown_frequency_steps_monthly(self):
        assert next_due_date(date(2025, 3, 10), "fortnightly") == date(2025, 4, 10)

    def test_month_end_clamps(self):
        assert next_due_date(date(2025, 1, 31), Frequency.MONTHLY) == date(2025, 2, 28)
        assert next_due_date(date(2024, 1, 31), Frequency.MONTHLY) == date(2024, 2, 29)

    def test_day_of_month_returns_after_short_month(self):
        feb = next_due_date(date(2025, 1, 31), Frequency.MONTHLY, day_of_month=31)
        assert feb == date(2025, 2, 28)
        assert next_due_date(feb, Frequency.MONTHLY, day_of_month=31) == date(2025, 3, 31)

    def test_december_rolls_into_next_year(self):
        assert next_due_date(date(2025, 12, 15), Frequency.MONTHLY) == date(2026, 1, 15)

    def test_leap_day_yearly(self):
        assert next_due_date(date(2024, 2, 29), Frequency.YEARLY) == date(2025, 2, 28)


class TestAdvanceSchedule:

    def test_open_ended_stays_active(self):
        assert advance_schedule(date(2025, 3, 10), "monthly") == (date(2025, 4, 10), True)

    def test_next_date_on_end_date_stays_active(self):
        upcoming, active = advance_schedule(
            date(2025, 3, 10), "monthly", end_date=date(2025, 4, 10)
        )
        assert upcoming == date(2025, 4, 10)
        assert active is True

    def test_next_date_past_end_date_ends_schedule(self):
        upcoming, active = advance_schedule(
            date(2025, 3, 10), "monthly", end_date=date(2025, 4, 9)
        )
        assert upcoming == date(2025, 4, 10)
        assert active is False


class TestCreateRequest:

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValueError):
            CreateRecurringExpenseRequest(
                expense_category_id="cat-1",
                description="Shop rent",
                amount=1000,
                frequency="monthly",
                start_date=date(2025, 3, 1),
                end_date=date(2025, 2, 1),
            )

    def test_day_of_month_range(self):
        with pytest.raises(ValueError):
            CreateRecurringExpenseRequest(
                expense_category_id="cat-1",
                description="Shop rent",
                amount=1000,
                frequency="monthly",
                start_date=date(2025, 3, 1),
                day_of_month=32,
            )
