from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...components.notifications.service import send_assignment_invite_sync
from ...deps import require_admin
from ...domains.integrations_notifications.adapters import build_email_adapter, email_configured
from ...models.profile import Profile
from ...platform.config import settings
from ...platform.request_context import get_request_id
from ...schemas.assignment import AssignmentEmailRequest, EmailSendResponse

router = APIRouter(prefix="/assignments")
logger = logging.getLogger("talentlens.assignments")


@router.post("/send-email", response_model=EmailSendResponse)
def send_assignment_email(
    data: AssignmentEmailRequest,
    actor: Profile = Depends(require_admin),
):
    """Send (or queue) the invite email for a freshly created batch."""
    if not email_configured():
        raise HTTPException(status_code=503, detail="Email service not configured")

    assignments = [(item.assessment_title, item.url) for item in data.assignments]
    context = {"assignment_id": data.assignment_id, "user_id": actor.id}

    if not settings.DISABLE_CELERY:
        from ...tasks.reminder_tasks import send_assignment_invite_email

        send_assignment_invite_email.delay(
            to_email=data.to,
            to_name=data.to_name,
            assignments=assignments,
            expires=data.expiration_date.isoformat(),
            username=data.username,
            password=data.password,
            subject=data.subject,
            body=data.body,
            request_id=get_request_id(),
        )
        logger.info("Assignment invite queued for %s", data.to, extra=context)
        return {"success": True, "email_id": ""}

    result = send_assignment_invite_sync(
        build_email_adapter(),
        to_email=data.to,
        to_name=data.to_name,
        assignments=assignments,
        expires=data.expiration_date,
        username=data.username,
        password=data.password,
        subject=data.subject,
        body=data.body,
    )
    if not result.get("success"):
        logger.error("Assignment invite to %s failed", data.to, extra=context)
        raise HTTPException(status_code=500, detail="Failed to send email")
    return {"success": True, "email_id": result.get("email_id", "")}
