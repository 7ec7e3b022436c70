"""Unit tests for reminder scheduling arithmetic."""

from datetime import datetime, timezone

import pytest

from app.components.assignments.reminders import (
    ReminderFrequency,
    add_months,
    advance_reminder,
    compute_initial_reminder,
)

NOW = datetime(2026, 1, 31, 9, 30, tzinfo=timezone.utc)


def test_no_reminder_when_disabled():
    assert compute_initial_reminder(False, NOW, "+1 week", now=NOW) is None


def test_explicit_first_date_wins():
    first = datetime(2026, 2, 14, 8, 0, tzinfo=timezone.utc)
    assert compute_initial_reminder(True, first, "+1 day", now=NOW) == first


def test_reminder_without_frequency_or_date():
    assert compute_initial_reminder(True, None, None, now=NOW) is None


@pytest.mark.parametrize(
    "frequency, expected",
    [
        ("+1 day", datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)),
        ("+6 days", datetime(2026, 2, 6, 9, 30, tzinfo=timezone.utc)),
        ("+1 week", datetime(2026, 2, 7, 9, 30, tzinfo=timezone.utc)),
        ("+3 weeks", datetime(2026, 2, 21, 9, 30, tzinfo=timezone.utc)),
        ("+1 month", datetime(2026, 2, 28, 9, 30, tzinfo=timezone.utc)),
        ("+3 months", datetime(2026, 4, 30, 9, 30, tzinfo=timezone.utc)),
    ],
)
def test_frequency_offsets(frequency, expected):
    assert compute_initial_reminder(True, None, frequency, now=NOW) == expected


def test_unknown_frequency_schedules_nothing(caplog):
    assert compute_initial_reminder(True, None, "+5 years", now=NOW) is None
    assert "Unrecognised reminder_frequency" in caplog.text


def test_add_months_crosses_year_and_clamps_leap_day():
    assert add_months(datetime(2027, 12, 31, tzinfo=timezone.utc), 2) == datetime(2028, 2, 29, tzinfo=timezone.utc)
    assert add_months(datetime(2026, 11, 15, tzinfo=timezone.utc), 3) == datetime(2027, 2, 15, tzinfo=timezone.utc)


def test_advance_reminder_uses_frequency():
    assert advance_reminder(NOW, "+2 weeks") == datetime(2026, 2, 14, 9, 30, tzinfo=timezone.utc)


def test_advance_reminder_defaults_to_one_week():
    assert advance_reminder(NOW, "fortnightly") == datetime(2026, 2, 7, 9, 30, tzinfo=timezone.utc)
    assert advance_reminder(NOW, None) == datetime(2026, 2, 7, 9, 30, tzinfo=timezone.utc)


def test_frequency_parse():
    assert ReminderFrequency.parse(" +2 months ") is ReminderFrequency.TWO_MONTHS
    assert ReminderFrequency.parse("") is None
    assert ReminderFrequency.parse("+1 fortnight") is None
