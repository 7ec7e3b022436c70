"""Reminder schedule for assignments: frequencies, first reminder, due sweep."""

from __future__ import annotations

import calendar
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from ...models.assignment import Assignment
from .repository import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class ReminderFrequency(str, enum.Enum):
    ONE_DAY = "+1 day"
    TWO_DAYS = "+2 days"
    THREE_DAYS = "+3 days"
    FOUR_DAYS = "+4 days"
    FIVE_DAYS = "+5 days"
    SIX_DAYS = "+6 days"
    ONE_WEEK = "+1 week"
    TWO_WEEKS = "+2 weeks"
    THREE_WEEKS = "+3 weeks"
    ONE_MONTH = "+1 month"
    TWO_MONTHS = "+2 months"
    THREE_MONTHS = "+3 months"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ReminderFrequency"]:
        if not value:
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None


_DAY_OFFSETS = {
    ReminderFrequency.ONE_DAY: 1,
    ReminderFrequency.TWO_DAYS: 2,
    ReminderFrequency.THREE_DAYS: 3,
    ReminderFrequency.FOUR_DAYS: 4,
    ReminderFrequency.FIVE_DAYS: 5,
    ReminderFrequency.SIX_DAYS: 6,
    ReminderFrequency.ONE_WEEK: 7,
    ReminderFrequency.TWO_WEEKS: 14,
    ReminderFrequency.THREE_WEEKS: 21,
}

_MONTH_OFFSETS = {
    ReminderFrequency.ONE_MONTH: 1,
    ReminderFrequency.TWO_MONTHS: 2,
    ReminderFrequency.THREE_MONTHS: 3,
}


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar-month addition, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def apply_frequency(moment: datetime, frequency: ReminderFrequency) -> datetime:
    if frequency in _MONTH_OFFSETS:
        return add_months(moment, _MONTH_OFFSETS[frequency])
    return moment + timedelta(days=_DAY_OFFSETS[frequency])


def compute_initial_reminder(
    reminder: bool,
    first_reminder_date: Optional[datetime],
    reminder_frequency: Optional[str],
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """First ``next_reminder`` for a new batch, or None when no reminder applies.

    An explicit first date wins; otherwise ``now`` is advanced by the
    frequency. Unrecognised frequency strings yield no reminder.
    """
    if not reminder:
        return None
    if first_reminder_date is not None:
        return first_reminder_date
    if not reminder_frequency:
        return None
    frequency = ReminderFrequency.parse(reminder_frequency)
    if frequency is None:
        logger.warning("Unrecognised reminder_frequency %r; no reminder scheduled", reminder_frequency)
        return None
    return apply_frequency(now or utcnow(), frequency)


def advance_reminder(now: datetime, reminder_frequency: Optional[str]) -> datetime:
    """Next reminder after one was sent. Unknown frequencies fall back to one week."""
    frequency = ReminderFrequency.parse(reminder_frequency)
    if frequency is None:
        logger.warning("Unknown reminder frequency %r, defaulting to one week", reminder_frequency)
        frequency = ReminderFrequency.ONE_WEEK
    return apply_frequency(now, frequency)


# ---------------------------------------------------------------------------
# Due-reminder sweep
# ---------------------------------------------------------------------------

@dataclass
class ReminderSweepResult:
    sent: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"sent": self.sent, "failed": self.failed, "errors": list(self.errors)}


def _next_utc_midnight(now: datetime) -> datetime:
    tomorrow = (now + timedelta(days=1)).date()
    return datetime.combine(tomorrow, time.min, tzinfo=timezone.utc)


def due_reminders(db: Session, now: datetime) -> List[Assignment]:
    """Incomplete, unexpired assignments whose next reminder falls before the next UTC midnight."""
    cutoff = _next_utc_midnight(now)
    return (
        db.query(Assignment)
        .options(joinedload(Assignment.user), joinedload(Assignment.assessment))
        .filter(
            Assignment.reminder.is_(True),
            Assignment.completed.is_(False),
            Assignment.next_reminder.isnot(None),
            Assignment.next_reminder < cutoff,
            Assignment.expires > now,
        )
        .order_by(Assignment.next_reminder.asc())
        .all()
    )


def send_due_reminders(db: Session, email_adapter, now: Optional[datetime] = None, base_url: str = "") -> ReminderSweepResult:
    """Email every due reminder and push ``next_reminder`` forward.

    Each assignment is handled independently: a failed send or update is
    recorded and the sweep moves on.
    """
    now = ensure_utc(now) or utcnow()
    result = ReminderSweepResult()
    assignments = due_reminders(db, now)
    logger.info("Reminder sweep found %d due assignment(s)", len(assignments))

    for assignment in assignments:
        profile = assignment.user
        try:
            assignment_url = assignment.url or f"{base_url}/assignment/{assignment.id}"
            send_result = email_adapter.send_assignment_reminder(
                to_email=profile.email,
                to_name=profile.name or profile.username or profile.email,
                assessment_title=assignment.assessment.title if assignment.assessment else "your assessment",
                assignment_url=assignment_url,
                expires=ensure_utc(assignment.expires),
            )
            if not send_result.get("success"):
                raise RuntimeError(send_result.get("error") or "Email send failed")
            assignment.next_reminder = advance_reminder(now, assignment.reminder_frequency)
            db.commit()
            result.sent += 1
        except Exception as exc:
            db.rollback()
            result.failed += 1
            result.errors.append(f"Assignment {assignment.id}: {exc}")
            logger.exception(
                "Failed to send reminder for assignment %s",
                assignment.id,
                extra={"assignment_id": assignment.id, "user_id": assignment.user_id},
            )

    return result
