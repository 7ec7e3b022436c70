"""Passwordless access to an assignment through its signed link."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...components.assignments.custom_fields import replace_custom_fields
from ...components.assignments.errors import AssignmentURLError
from ...components.assignments.repository import assessment_fields, assignment_to_response, get_assignment
from ...components.assignments.url_signing import validate_assignment_url
from ...platform.config import settings
from ...platform.database import get_db
from ...schemas.assignment import AssignmentAccessResponse

router = APIRouter(prefix="/assignments")
logger = logging.getLogger("talentlens.assignments")


@router.get("/{assignment_id}/access", response_model=AssignmentAccessResponse)
def access_assignment(
    assignment_id: str,
    u: Optional[str] = Query(default=None),
    e: Optional[str] = Query(default=None),
    t: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Return the questions the link holder should answer.

    The per-user selection is used when one exists; otherwise the full
    instrument is returned. Custom-field placeholders are filled in.
    """
    try:
        link = validate_assignment_url(assignment_id, u=u, e=e, t=t, secret=settings.ASSIGNMENT_SECRET_KEY)
    except AssignmentURLError as exc:
        logger.warning("Rejected assignment link for %s: %s", assignment_id, exc.message, extra={"assignment_id": assignment_id})
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    assignment = get_assignment(db, assignment_id)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if assignment.user is None or assignment.user.login_name != link.username:
        raise HTTPException(status_code=403, detail="Assignment link does not belong to this user")

    custom_fields = assignment.custom_fields
    if assignment.selected_fields:
        questions = [
            {
                "id": row.field.id,
                "order": row.order,
                "type": row.field.type,
                "content": replace_custom_fields(row.field.content, custom_fields),
                "dimension_id": row.field.dimension_id,
            }
            for row in assignment.selected_fields
        ]
    else:
        questions = [
            {
                "id": f.id,
                "order": f.order or 0,
                "type": f.type,
                "content": replace_custom_fields(f.content, custom_fields),
                "dimension_id": f.dimension_id,
            }
            for f in assessment_fields(db, assignment.assessment_id)
        ]

    return {
        "assignment": assignment_to_response(assignment, len(assignment.selected_fields) or None),
        "assessment_title": assignment.assessment.title,
        "username": link.username,
        "selected": bool(assignment.selected_fields),
        "questions": questions,
    }
