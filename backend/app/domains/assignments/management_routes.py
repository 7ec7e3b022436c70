from __future__ import annotations

import logging
from typing import Any, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...components.assignments.errors import AssignmentError, BatchExhaustedError
from ...components.assignments.identity import IdentityProvider
from ...components.assignments.repository import (
    assignment_to_response,
    ensure_utc,
    get_assignment,
    scoped_assignments_query,
    selected_field_count,
)
from ...components.assignments.service import (
    create_assignment_batch,
    issue_assignment_url,
    load_batch_targets,
)
from ...components.assignments.validation import validate_batch_request
from ...deps import get_current_profile, get_identity_provider, require_admin
from ...models.assignment import Assignment
from ...models.profile import Profile
from ...platform.config import settings
from ...platform.database import get_db
from ...schemas.assignment import (
    AssignmentBatchResponse,
    AssignmentListResponse,
    AssignmentResponse,
    AssignmentUpdate,
    AssignmentUpdateResponse,
    PairFailureResponse,
    SuccessResponse,
)

router = APIRouter(prefix="/assignments")
logger = logging.getLogger("talentlens.assignments")

ADMIN_ONLY_FIELDS = ("expires", "whitelabel", "job_id")


def _raise_http(exc: AssignmentError) -> NoReturn:
    raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


def _admin_in_scope(actor: Profile, assignment: Assignment) -> bool:
    if actor.is_super_admin:
        return True
    if actor.is_client_admin and actor.client_id:
        return assignment.user is not None and assignment.user.client_id == actor.client_id
    return False


def _load_visible_assignment(db: Session, assignment_id: str, actor: Profile) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if assignment.user_id != actor.id and not _admin_in_scope(actor, assignment):
        raise HTTPException(status_code=403, detail="Forbidden")
    return assignment


@router.post("", response_model=AssignmentBatchResponse, status_code=status.HTTP_201_CREATED)
def create_assignments(
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
    actor: Profile = Depends(require_admin),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """Assign every listed assessment to every listed user.

    Pairs are created independently; the response reports how many were
    created and which failed. Temporary passwords are returned for users
    that received a login in this batch.
    """
    try:
        request = validate_batch_request(payload)
        targets = load_batch_targets(db, request, actor)
        outcome = create_assignment_batch(
            db,
            request,
            targets,
            identity_provider=identity_provider,
            base_url=settings.assignment_base_url,
            secret=settings.ASSIGNMENT_SECRET_KEY,
            password_length=settings.TEMP_PASSWORD_LENGTH,
        )
    except BatchExhaustedError as exc:
        logger.error("No assignments created for batch (%d failures)", len(exc.failures))
        _raise_http(exc)
    except AssignmentError as exc:
        _raise_http(exc)

    return AssignmentBatchResponse(
        assignments=[
            AssignmentResponse(**assignment_to_response(o.assignment, o.question_count))
            for o in outcome.created
        ],
        count=len(outcome.created),
        survey_id=outcome.survey_id,
        user_passwords=outcome.user_passwords,
        failures=[
            PairFailureResponse(user_id=f.user_id, assessment_id=f.assessment_id, stage=f.stage, error=f.message)
            for f in outcome.failures
        ],
    )


@router.get("", response_model=AssignmentListResponse)
def list_assignments(
    user_id: Optional[str] = Query(default=None),
    assessment_id: Optional[str] = Query(default=None),
    survey_id: Optional[str] = Query(default=None),
    completed: Optional[bool] = Query(default=None),
    db: Session = Depends(get_db),
    actor: Profile = Depends(get_current_profile),
):
    query = scoped_assignments_query(db, actor)
    if user_id:
        query = query.filter(Assignment.user_id == user_id)
    if assessment_id:
        query = query.filter(Assignment.assessment_id == assessment_id)
    if survey_id:
        query = query.filter(Assignment.survey_id == survey_id)
    if completed is not None:
        query = query.filter(Assignment.completed.is_(completed))
    rows = query.order_by(Assignment.created_at.desc()).all()
    return {"assignments": [assignment_to_response(a) for a in rows]}


@router.get("/{assignment_id}", response_model=AssignmentResponse)
def get_assignment_detail(
    assignment_id: str,
    db: Session = Depends(get_db),
    actor: Profile = Depends(get_current_profile),
):
    assignment = _load_visible_assignment(db, assignment_id, actor)
    return assignment_to_response(assignment, selected_field_count(db, assignment.id) or None)


@router.patch("/{assignment_id}", response_model=AssignmentUpdateResponse)
def update_assignment(
    assignment_id: str,
    data: AssignmentUpdate,
    db: Session = Depends(get_db),
    actor: Profile = Depends(get_current_profile),
):
    assignment = _load_visible_assignment(db, assignment_id, actor)
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    if any(key in changes for key in ADMIN_ONLY_FIELDS) and not _admin_in_scope(actor, assignment):
        raise HTTPException(status_code=403, detail="Only administrators can update these fields")

    if "expires" in changes:
        if changes["expires"] is None:
            raise HTTPException(status_code=400, detail="expires must be a valid date")
        assignment.expires = ensure_utc(changes["expires"])
    if "whitelabel" in changes:
        assignment.whitelabel = bool(changes["whitelabel"])
    if "job_id" in changes:
        assignment.job_id = changes["job_id"]
    if "started_at" in changes:
        assignment.started_at = ensure_utc(changes["started_at"])
    db.commit()

    if "expires" in changes:
        # Signed links carry the expiry, so a new deadline needs a new link
        issue_assignment_url(
            db,
            assignment,
            assignment.user.login_name,
            assignment.expires,
            base_url=settings.assignment_base_url,
            secret=settings.ASSIGNMENT_SECRET_KEY,
        )
    db.refresh(assignment)
    logger.info("Assignment %s updated (%s)", assignment.id, ", ".join(sorted(changes)), extra={"assignment_id": assignment.id})
    return {"success": True, "assignment": assignment_to_response(assignment)}


@router.delete("/{assignment_id}", response_model=SuccessResponse)
def delete_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    actor: Profile = Depends(require_admin),
):
    assignment = get_assignment(db, assignment_id)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if not _admin_in_scope(actor, assignment):
        raise HTTPException(status_code=403, detail="Forbidden: Cannot delete assignments outside your client")
    db.delete(assignment)
    db.commit()
    logger.info("Assignment %s deleted", assignment_id, extra={"assignment_id": assignment_id})
    return {"success": True}
