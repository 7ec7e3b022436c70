"""Assignment DB helpers, serialization, and query utilities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Query, Session, joinedload

from ...models.assessment import Assessment, Field
from ...models.assignment import Assignment, AssignmentField
from ...models.profile import Profile


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return datetime as timezone-aware UTC (naive values are taken as UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware UTC datetime."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------

def profiles_by_ids(db: Session, user_ids: Iterable[str]) -> Dict[str, Profile]:
    ids = list(user_ids)
    if not ids:
        return {}
    rows = db.query(Profile).filter(Profile.id.in_(ids)).all()
    return {row.id: row for row in rows}


def assessments_by_ids(db: Session, assessment_ids: Iterable[str]) -> Dict[str, Assessment]:
    ids = list(assessment_ids)
    if not ids:
        return {}
    rows = db.query(Assessment).filter(Assessment.id.in_(ids)).all()
    return {row.id: row for row in rows}


def assessment_fields(db: Session, assessment_id: str) -> List[Field]:
    """All fields of an assessment in authored order."""
    return (
        db.query(Field)
        .filter(Field.assessment_id == assessment_id)
        .order_by(Field.order.asc())
        .all()
    )


def question_fields(db: Session, assessment_id: str) -> List[Field]:
    """Fields eligible for per-user selection (instructions and page breaks removed)."""
    return [f for f in assessment_fields(db, assessment_id) if f.is_question]


def get_assignment(db: Session, assignment_id: str) -> Optional[Assignment]:
    return (
        db.query(Assignment)
        .options(joinedload(Assignment.user), joinedload(Assignment.assessment))
        .filter(Assignment.id == assignment_id)
        .first()
    )


def scoped_assignments_query(db: Session, actor: Profile) -> Query:
    """Assignments visible to ``actor``: own only for members, own client for client admins."""
    query = db.query(Assignment).options(
        joinedload(Assignment.user),
        joinedload(Assignment.assessment),
    )
    if actor.is_super_admin:
        return query
    if actor.is_client_admin and actor.client_id:
        return query.join(Profile, Profile.id == Assignment.user_id).filter(
            Profile.client_id == actor.client_id
        )
    return query.filter(Assignment.user_id == actor.id)


def insert_assignment(db: Session, values: Dict[str, Any]) -> Assignment:
    """Insert and commit one assignment row."""
    assignment = Assignment(**values)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def insert_assignment_fields(db: Session, assignment_id: str, fields: List[Field]) -> List[AssignmentField]:
    """Persist a question selection with 1-based sequential order."""
    rows = [
        AssignmentField(assignment_id=assignment_id, field_id=f.id, order=index)
        for index, f in enumerate(fields, start=1)
    ]
    db.add_all(rows)
    db.commit()
    return rows


def selected_field_count(db: Session, assignment_id: str) -> int:
    return db.query(AssignmentField).filter(AssignmentField.assignment_id == assignment_id).count()


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def assignment_to_response(assignment: Assignment, question_count: int | None = None) -> Dict[str, Any]:
    profile = assignment.user
    assessment = assignment.assessment
    return {
        "id": assignment.id,
        "user_id": assignment.user_id,
        "assessment_id": assignment.assessment_id,
        "target_id": assignment.target_id,
        "survey_id": assignment.survey_id,
        "expires": ensure_utc(assignment.expires),
        "whitelabel": bool(assignment.whitelabel),
        "completed": bool(assignment.completed),
        "custom_fields": assignment.custom_fields,
        "job_id": assignment.job_id,
        "url": assignment.url,
        "reminder": bool(assignment.reminder),
        "reminder_frequency": assignment.reminder_frequency,
        "next_reminder": ensure_utc(assignment.next_reminder),
        "started_at": ensure_utc(assignment.started_at),
        "completed_at": ensure_utc(assignment.completed_at),
        "created_at": ensure_utc(assignment.created_at),
        "user_name": (profile.name or profile.username) if profile else None,
        "user_email": profile.email if profile else None,
        "assessment_title": assessment.title if assessment else None,
        "question_count": question_count,
    }
