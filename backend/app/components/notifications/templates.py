"""HTML email templates for TalentLens notifications."""

from datetime import datetime
from html import escape
from typing import Dict, Iterable, Optional, Tuple

from ...platform.brand import BRAND_NAME, BRAND_PRODUCT_NAME

DEFAULT_INVITE_SUBJECT = f"You have new assessments on {BRAND_NAME}"
DEFAULT_INVITE_BODY = (
    "Hi {name},\n\n"
    "You have been assigned the following assessments:\n\n"
    "{assessments}\n\n"
    "Please complete them before {expiration-date}.\n\n"
    "Username: {username}\n"
    "Temporary password: {password}\n\n"
    "Thanks,\nThe " + BRAND_NAME + " team"
)
LINK_FALLBACK_INSTRUCTION = "If links don't work in your email client, copy and paste the link(s) below into your browser."


def _layout(inner_html: str) -> str:
    return f"""\
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="margin:0;padding:0;background-color:#f4f4f7;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background-color:#f4f4f7;padding:40px 20px;">
    <tr><td align="center">
      <table width="600" cellpadding="0" cellspacing="0" style="background-color:#ffffff;border-radius:8px;box-shadow:0 2px 8px rgba(0,0,0,0.08);">
        <tr><td style="background-color:#4f46e5;padding:32px;text-align:center;">
          <h1 style="margin:0;color:#ffffff;font-size:28px;">{BRAND_NAME}</h1>
          <p style="margin:4px 0 0;color:#c7d2fe;font-size:14px;">{BRAND_PRODUCT_NAME}</p>
        </td></tr>
        <tr><td style="padding:40px;color:#4b5563;font-size:16px;line-height:1.6;">
{inner_html}
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""


def _button(link: str, label: str) -> str:
    return (
        '<table role="presentation" cellpadding="0" cellspacing="0" border="0"><tr>'
        '<td style="background-color:#4f46e5;border-radius:4px;">'
        f'<a href="{escape(link, quote=True)}" target="_blank" style="display:inline-block;padding:10px 20px;'
        f'color:#ffffff;text-decoration:none;font-weight:bold;font-size:14px;">{escape(label)}</a>'
        "</td></tr></table>"
    )


def format_expiration_date(value: datetime) -> str:
    """e.g. ``Tuesday, December 1, 2026``."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def assessments_html(items: Iterable[Tuple[str, Optional[str]]]) -> str:
    rows = []
    for title, url in items:
        cell = _button(url, title) if url else escape(title)
        rows.append(f'<tr><td style="padding:8px 0;">{cell}</td></tr>')
    return '<table role="presentation" cellpadding="0" cellspacing="0" border="0">' + "".join(rows) + "</table>"


def assessments_text(items: Iterable[Tuple[str, Optional[str]]]) -> str:
    return "\n".join(f"- {title}: {url}" if url else f"- {title}" for title, url in items)


def replace_shortcodes(body: str, values: Dict[str, str]) -> str:
    """Fill ``{name}``-style shortcodes; unknown shortcodes are left untouched."""
    processed = body
    for key, value in values.items():
        processed = processed.replace("{" + key + "}", value)
    return processed


def _paragraphs(text: str) -> str:
    # Assessment buttons are already HTML; everything else is plain text with newlines
    return text.replace("\n", "<br>")


def assignment_invite_html(body_html: str, fallback_links: str, dashboard_link: str) -> str:
    inner = f'<p style="margin:0 0 16px;">{_paragraphs(body_html)}</p>'
    if fallback_links:
        inner += (
            '<hr style="border:none;border-top:1px solid #e5e7eb;margin:24px 0;">'
            f'<p style="margin:0 0 8px;color:#9ca3af;font-size:13px;">{LINK_FALLBACK_INSTRUCTION}</p>'
            f'<p style="margin:0 0 16px;color:#4f46e5;font-size:13px;word-break:break-all;">{_paragraphs(escape(fallback_links))}</p>'
        )
    inner += (
        '<hr style="border:none;border-top:1px solid #e5e7eb;margin:24px 0;">'
        '<p style="margin:0;color:#9ca3af;font-size:13px;">'
        f'You can also open your dashboard to see all your assignments: <a href="{escape(dashboard_link, quote=True)}">{escape(dashboard_link)}</a>'
        "</p>"
    )
    return _layout(inner)


def assignment_invite_text(body_text: str, fallback_links: str, dashboard_link: str) -> str:
    text = body_text
    if fallback_links:
        text += f"\n\n---\n\n{LINK_FALLBACK_INSTRUCTION}\n\n{fallback_links}"
    return text + f"\n\n---\n\nYou can also open your dashboard to see all your assignments: {dashboard_link}"


def assignment_reminder_html(to_name: str, assessment_title: str, assignment_url: str, expiry_text: str) -> str:
    inner = f"""\
          <h2 style="margin:0 0 16px;color:#1f2937;font-size:22px;">Hi {escape(to_name)},</h2>
          <p style="margin:0 0 16px;">
            This is a reminder that <strong>{escape(assessment_title)}</strong> is still waiting for you.
            It expires on <strong>{escape(expiry_text)}</strong>.
          </p>
          {_button(assignment_url, "Continue assessment")}
          <p style="margin:24px 0 8px;color:#9ca3af;font-size:13px;">Or copy this link into your browser:</p>
          <p style="margin:0;color:#4f46e5;font-size:13px;word-break:break-all;">{escape(assignment_url)}</p>"""
    return _layout(inner)


def password_reset_html(reset_link: str) -> str:
    inner = f"""\
          <h2 style="margin:0 0 16px;color:#1f2937;font-size:22px;">Reset your password</h2>
          <p style="margin:0 0 24px;">Click the button below to set a new password. This link expires in 1 hour.</p>
          {_button(reset_link, "Reset password")}
          <p style="margin:24px 0 0;color:#9ca3af;font-size:13px;">If you didn't request this, you can ignore this email.</p>"""
    return _layout(inner)
