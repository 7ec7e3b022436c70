"""Assignment batch creation: provisioning, survey grouping, fan-out, selection, links."""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ...models.assessment import Assessment, Field
from ...models.assignment import Assignment
from ...models.profile import Profile
from .errors import (
    AssignmentNotFoundError,
    AssignmentPermissionError,
    BatchExhaustedError,
    PerPairWriteError,
)
from .identity import IdentityProvider, provision_identities
from .reminders import compute_initial_reminder
from .repository import (
    assessments_by_ids,
    insert_assignment,
    insert_assignment_fields,
    profiles_by_ids,
    question_fields,
    utcnow,
)
from .selection import NoSelection, SelectionPolicy, resolve_selection_policy, select_fields
from .url_signing import generate_assignment_url
from .validation import ValidatedBatchRequest

logger = logging.getLogger(__name__)


@dataclass
class PairOutcome:
    """Result of materializing one (user, assessment) pair."""

    user_id: str
    assessment_id: str
    assignment: Optional[Assignment] = None
    error: Optional[PerPairWriteError] = None
    question_count: Optional[int] = None
    # Steps that failed after the assignment row was written
    degraded: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.assignment is not None


@dataclass
class BatchOutcome:
    survey_id: str
    outcomes: List[PairOutcome]
    user_passwords: Dict[str, str]

    @property
    def created(self) -> List[PairOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> List[PerPairWriteError]:
        return [o.error for o in self.outcomes if o.error is not None]


@dataclass
class BatchTargets:
    profiles: Dict[str, Profile]
    assessments: Dict[str, Assessment]


def resolve_survey_id(survey_id: Optional[str]) -> str:
    """Reuse a caller-supplied survey id verbatim, otherwise mint a new one."""
    return survey_id or str(uuid.uuid4())


def load_batch_targets(db: Session, request: ValidatedBatchRequest, actor: Profile) -> BatchTargets:
    """Resolve every referenced profile and assessment before any write happens."""
    profiles = profiles_by_ids(db, request.user_ids)
    if len(profiles) != len(request.user_ids):
        raise AssignmentNotFoundError("One or more users not found")

    if actor.is_client_admin:
        outside = [p.id for p in profiles.values() if not actor.client_id or p.client_id != actor.client_id]
        if outside:
            raise AssignmentPermissionError("Cannot assign to users outside your client")

    if request.target_id and not profiles_by_ids(db, [request.target_id]):
        raise AssignmentNotFoundError("Target user not found")

    assessments = assessments_by_ids(db, request.assessment_ids)
    if len(assessments) != len(request.assessment_ids):
        raise AssignmentNotFoundError("One or more assessments not found")

    return BatchTargets(profiles=profiles, assessments=assessments)


def issue_assignment_url(
    db: Session,
    assignment: Assignment,
    username: str,
    expires: datetime,
    *,
    base_url: str,
    secret: str,
) -> str:
    url = generate_assignment_url(assignment.id, username, expires, base_url=base_url, secret=secret)
    assignment.url = url
    db.commit()
    return url


class _QuestionPool:
    """Question fields per assessment, loaded once per batch."""

    def __init__(self, db: Session):
        self.db = db
        self._fields: Dict[str, List[Field]] = {}

    def get(self, assessment_id: str) -> List[Field]:
        if assessment_id not in self._fields:
            self._fields[assessment_id] = question_fields(self.db, assessment_id)
        return self._fields[assessment_id]


def _materialize_pair(
    db: Session,
    request: ValidatedBatchRequest,
    profile: Profile,
    assessment_id: str,
    *,
    survey_id: str,
    next_reminder: Optional[datetime],
    policy: SelectionPolicy,
    pool: _QuestionPool,
    rng: random.Random,
    base_url: str,
    secret: str,
) -> PairOutcome:
    user_id = profile.id
    context = {"user_id": user_id, "assessment_id": assessment_id, "survey_id": survey_id}
    outcome = PairOutcome(user_id=user_id, assessment_id=assessment_id)
    username = profile.login_name

    values = {
        "user_id": user_id,
        "assessment_id": assessment_id,
        "expires": request.expires,
        "whitelabel": request.whitelabel,
        "completed": False,
        "custom_fields": request.custom_fields,
        "target_id": request.target_id,
        "job_id": request.job_id,
        "survey_id": survey_id,
        "reminder": request.reminder,
        "reminder_frequency": request.reminder_frequency if request.reminder else None,
        "next_reminder": next_reminder,
    }
    try:
        assignment = insert_assignment(db, values)
    except Exception:
        db.rollback()
        logger.exception("Error creating assignment for user %s / assessment %s", user_id, assessment_id, extra=context)
        outcome.error = PerPairWriteError(user_id, assessment_id, "insert", "Failed to create assignment")
        return outcome
    outcome.assignment = assignment
    context["assignment_id"] = assignment.id

    if not isinstance(policy, NoSelection):
        try:
            selected = select_fields(pool.get(assessment_id), policy, rng)
            if selected:
                insert_assignment_fields(db, assignment.id, selected)
            outcome.question_count = len(selected)
        except Exception:
            db.rollback()
            outcome.degraded.append("question_selection")
            logger.exception("Error creating assignment_fields for assignment %s", assignment.id, extra=context)

    try:
        issue_assignment_url(db, assignment, username, request.expires, base_url=base_url, secret=secret)
    except Exception:
        db.rollback()
        outcome.degraded.append("url")
        logger.exception("Error issuing URL for assignment %s", assignment.id, extra=context)

    return outcome


def create_assignment_batch(
    db: Session,
    request: ValidatedBatchRequest,
    targets: BatchTargets,
    *,
    identity_provider: IdentityProvider,
    base_url: str,
    secret: str,
    password_length: int = 12,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> BatchOutcome:
    """Create one assignment per (user, assessment) pair, best effort.

    Pairs are independent: a failed pair is logged and reported in the
    outcome, the rest of the batch carries on. Raises BatchExhaustedError
    only when no assignment at all could be written.
    """
    rng = rng or random.Random()
    ordered_profiles = [targets.profiles[user_id] for user_id in request.user_ids]
    # Capture ids up front; provisioning may roll back and expire these instances
    pairs = [(profile, assessment_id) for profile in ordered_profiles for assessment_id in request.assessment_ids]

    user_passwords = provision_identities(ordered_profiles, identity_provider, password_length)

    survey_id = resolve_survey_id(request.survey_id)
    if request.survey_id:
        logger.info("Appending assignments to existing survey %s", survey_id, extra={"survey_id": survey_id})

    next_reminder = compute_initial_reminder(
        request.reminder,
        request.first_reminder_date,
        request.reminder_frequency,
        now=now or utcnow(),
    )
    policies = {aid: resolve_selection_policy(a) for aid, a in targets.assessments.items()}
    pool = _QuestionPool(db)

    outcomes = [
        _materialize_pair(
            db,
            request,
            profile,
            assessment_id,
            survey_id=survey_id,
            next_reminder=next_reminder,
            policy=policies[assessment_id],
            pool=pool,
            rng=rng,
            base_url=base_url,
            secret=secret,
        )
        for profile, assessment_id in pairs
    ]
    outcome = BatchOutcome(survey_id=survey_id, outcomes=outcomes, user_passwords=user_passwords)
    logger.info(
        "Assignment batch finished: %d created, %d failed",
        len(outcome.created),
        len(outcome.failures),
        extra={"survey_id": survey_id},
    )
    if not outcome.created:
        raise BatchExhaustedError(failures=outcome.failures)
    return outcome
