import logging
from datetime import datetime

from .celery_app import celery_app
from ..platform.config import settings

logger = logging.getLogger(__name__)


def run_reminder_sweep(now: datetime | None = None) -> dict:
    """Send every due assignment reminder using a fresh session."""
    from ..components.assignments.reminders import send_due_reminders
    from ..domains.integrations_notifications.adapters import build_email_adapter, email_configured
    from ..platform.database import SessionLocal

    if not email_configured():
        logger.warning("RESEND_API_KEY not set; skipping reminder sweep")
        return {"sent": 0, "failed": 0, "errors": [], "skipped": True}

    db = SessionLocal()
    try:
        result = send_due_reminders(db, build_email_adapter(), now=now, base_url=settings.assignment_base_url)
        logger.info("Reminder sweep complete: %d sent, %d failed", result.sent, result.failed)
        return result.as_dict()
    finally:
        db.close()


@celery_app.task
def send_assignment_reminders():
    """Periodic task: email assignees whose next reminder is due."""
    return run_reminder_sweep()


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def send_assignment_invite_email(
    self,
    to_email: str,
    to_name: str,
    assignments: list,
    expires: str,
    username: str | None = None,
    password: str | None = None,
    subject: str | None = None,
    body: str | None = None,
    request_id: str | None = None,
):
    """Send an assignment invite outside the request cycle."""
    from ..components.notifications.service import send_assignment_invite_sync
    from ..domains.integrations_notifications.adapters import build_email_adapter

    try:
        result = send_assignment_invite_sync(
            build_email_adapter(),
            to_email=to_email,
            to_name=to_name,
            assignments=[tuple(item) for item in assignments],
            expires=datetime.fromisoformat(expires),
            username=username,
            password=password,
            subject=subject,
            body=body,
        )
        if not result["success"]:
            raise Exception(result.get("error", "Email send failed"))
        logger.info(f"Assignment invite sent to {to_email}", extra={"request_id": request_id or self.request.id})
        return result
    except Exception as exc:
        logger.error(f"Failed to send assignment invite to {to_email}: {exc}", extra={"request_id": request_id or self.request.id})
        raise self.retry(exc=exc)
