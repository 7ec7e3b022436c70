from .celery_app import celery_app
from .reminder_tasks import send_assignment_invite_email, send_assignment_reminders

__all__ = [
    "celery_app",
    "send_assignment_invite_email",
    "send_assignment_reminders",
]
