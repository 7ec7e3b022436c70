from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Tuple

from ...components.notifications.email_client import EmailService
from ...platform.config import settings


class EmailAdapter(Protocol):
    def send_assignment_invite(
        self,
        to_email: str,
        to_name: str,
        assignments: Iterable[Tuple[str, Optional[str]]],
        expires: datetime,
        frontend_url: str,
        **kwargs,
    ) -> dict: ...

    def send_assignment_reminder(
        self,
        to_email: str,
        to_name: str,
        assessment_title: str,
        assignment_url: str,
        expires: datetime,
    ) -> dict: ...

    def send_password_reset(self, to_email: str, reset_link: str) -> dict: ...


def email_configured() -> bool:
    return bool((settings.RESEND_API_KEY or "").strip())


def build_email_adapter() -> EmailService:
    return EmailService(api_key=settings.RESEND_API_KEY, from_email=settings.EMAIL_FROM)
