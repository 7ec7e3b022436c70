"""Synchronous notification helpers (used when Celery is disabled)."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from ...platform.config import settings
from .email_client import EmailService

logger = logging.getLogger(__name__)


def send_assignment_invite_sync(
    email_svc: EmailService,
    *,
    to_email: str,
    to_name: str,
    assignments: List[Tuple[str, Optional[str]]],
    expires: datetime,
    username: Optional[str] = None,
    password: Optional[str] = None,
    subject: Optional[str] = None,
    body: Optional[str] = None,
) -> dict:
    return email_svc.send_assignment_invite(
        to_email=to_email,
        to_name=to_name,
        assignments=assignments,
        expires=expires,
        frontend_url=settings.FRONTEND_URL,
        username=username,
        password=password,
        subject=subject,
        body=body,
    )


def send_password_reset_sync(email_svc: EmailService, to_email: str, token: str) -> dict:
    reset_link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
    return email_svc.send_password_reset(to_email=to_email, reset_link=reset_link)
