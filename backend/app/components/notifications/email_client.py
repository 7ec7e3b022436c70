"""
Resend email service for assignment invitations, reminders and account mail.

Every send returns ``{"success": bool, "email_id": str}`` and never raises;
callers decide whether a failed send matters.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Tuple

import resend

from ...platform.brand import BRAND_NAME, brand_email_from
from .templates import (
    DEFAULT_INVITE_BODY,
    DEFAULT_INVITE_SUBJECT,
    assessments_html,
    assessments_text,
    assignment_invite_html,
    assignment_invite_text,
    assignment_reminder_html,
    format_expiration_date,
    password_reset_html,
    replace_shortcodes,
)

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending transactional emails through Resend."""

    def __init__(self, api_key: str, from_email: str = brand_email_from()):
        resend.api_key = api_key
        self.from_email = from_email
        logger.info("EmailService initialised (from=%s)", self.from_email)

    def _send(self, params: dict) -> str:
        email = resend.Emails.send(params)
        return email.get("id", "") if isinstance(email, dict) else str(email)

    def send_assignment_invite(
        self,
        to_email: str,
        to_name: str,
        assignments: Iterable[Tuple[str, Optional[str]]],
        expires: datetime,
        frontend_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        subject: Optional[str] = None,
        body: Optional[str] = None,
        year: Optional[int] = None,
    ) -> dict:
        """Send the assignment invite.

        ``body`` may use the shortcodes ``{name}``, ``{username}``, ``{email}``,
        ``{assessments}``, ``{expiration-date}``, ``{dashboard-link}``,
        ``{year}`` and ``{password}``. ``assignments`` is a list of
        ``(assessment_title, url)`` pairs.
        """
        try:
            items = list(assignments)
            dashboard_link = f"{frontend_url.rstrip('/')}/dashboard"
            values = {
                "name": to_name,
                "username": username or to_email.split("@")[0],
                "email": to_email,
                "expiration-date": format_expiration_date(expires),
                "dashboard-link": dashboard_link,
                "year": str(year or datetime.now().year),
                "password": password or "",
            }
            template = body or DEFAULT_INVITE_BODY
            body_html = replace_shortcodes(template, {**values, "assessments": assessments_html(items)})
            body_text = replace_shortcodes(template, {**values, "assessments": assessments_text(items)})
            fallback_links = "\n".join(f"{title}: {url}" for title, url in items if url)

            logger.info("Sending assignment invite to %s (%d assessment(s))", to_email, len(items))
            email_id = self._send({
                "from": self.from_email,
                "to": [to_email],
                "subject": subject or DEFAULT_INVITE_SUBJECT,
                "html": assignment_invite_html(body_html, fallback_links, dashboard_link),
                "text": assignment_invite_text(body_text, fallback_links, dashboard_link),
            })
            logger.info("Assignment invite sent (email_id=%s, to=%s)", email_id, to_email)
            return {"success": True, "email_id": email_id}
        except Exception as e:
            logger.error("Failed to send assignment invite to %s: %s", to_email, str(e))
            return {"success": False, "email_id": "", "error": str(e)}

    def send_assignment_reminder(
        self,
        to_email: str,
        to_name: str,
        assessment_title: str,
        assignment_url: str,
        expires: datetime,
    ) -> dict:
        try:
            logger.info("Sending assignment reminder to %s", to_email)
            email_id = self._send({
                "from": self.from_email,
                "to": [to_email],
                "subject": f"Reminder: {assessment_title} is waiting for you",
                "html": assignment_reminder_html(
                    to_name=to_name,
                    assessment_title=assessment_title,
                    assignment_url=assignment_url,
                    expiry_text=format_expiration_date(expires),
                ),
            })
            return {"success": True, "email_id": email_id}
        except Exception as exc:
            logger.error("Failed to send assignment reminder to %s: %s", to_email, str(exc))
            return {"success": False, "email_id": "", "error": str(exc)}

    def send_password_reset(self, to_email: str, reset_link: str) -> dict:
        try:
            logger.info("Sending password reset email to %s", to_email)
            email_id = self._send({
                "from": self.from_email,
                "to": [to_email],
                "subject": f"{BRAND_NAME} - Reset your password",
                "html": password_reset_html(reset_link=reset_link),
            })
            logger.info("Password reset email sent (email_id=%s, to=%s)", email_id, to_email)
            return {"success": True, "email_id": email_id}
        except Exception as e:
            logger.error("Failed to send password reset to %s: %s", to_email, str(e))
            return {"success": False, "email_id": ""}
