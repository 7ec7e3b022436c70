from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...deps import require_admin
from ...models.assignment import Assignment
from ...models.profile import Profile
from ...platform.database import get_db
from ...schemas.assignment import SurveyDeleteResponse

router = APIRouter(prefix="/clients/{client_id}/surveys")
logger = logging.getLogger("talentlens.assignments")


@router.delete("/{survey_id}", response_model=SurveyDeleteResponse)
def delete_survey(
    client_id: str,
    survey_id: str,
    db: Session = Depends(get_db),
    actor: Profile = Depends(require_admin),
):
    """Remove every assignment of a survey that belongs to the client's users."""
    if not actor.is_super_admin and actor.client_id != client_id:
        raise HTTPException(status_code=403, detail="Forbidden: Cannot manage surveys outside your client")

    assignments = (
        db.query(Assignment)
        .join(Profile, Profile.id == Assignment.user_id)
        .filter(Assignment.survey_id == survey_id, Profile.client_id == client_id)
        .all()
    )
    if not assignments:
        raise HTTPException(status_code=404, detail="Survey not found")

    for assignment in assignments:
        db.delete(assignment)
    db.commit()
    logger.info(
        "Survey %s deleted (%d assignments)",
        survey_id,
        len(assignments),
        extra={"survey_id": survey_id, "client_id": client_id},
    )
    return {"success": True, "survey_id": survey_id, "deleted": len(assignments)}
