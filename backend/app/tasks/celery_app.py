from celery import Celery
from ..platform.config import settings

celery_app = Celery(
    "talentlens",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    beat_schedule={
        "assignment-reminders-daily": {
            "task": "app.tasks.reminder_tasks.send_assignment_reminders",
            "schedule": settings.REMINDER_SWEEP_INTERVAL_SECONDS,
        },
    },
)

# Auto-discover tasks
celery_app.autodiscover_tasks(["app.tasks"])
