"""Signed, time-bound assignment links.

Format: ``{base}/assignment/{id}?u={b64 username}&e={b64 expiry}&t={b64 signature}``
where the signature is HMAC-SHA256 over ``username + path + expiry``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

from .errors import AssignmentURLError
from .repository import ensure_utc, parse_timestamp, utcnow


def _b64encode(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")


def _b64decode(value: str) -> str:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")


def _assignment_path(assignment_id: str) -> str:
    return f"assignment/{assignment_id}"


def _signature(secret: str, username: str, path: str, expires_str: str) -> str:
    message = f"{username}{path}{expires_str}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def generate_assignment_url(
    assignment_id: str,
    username: str,
    expires: datetime,
    *,
    base_url: str,
    secret: str,
) -> str:
    path = _assignment_path(assignment_id)
    expires_str = ensure_utc(expires).isoformat()
    params = urlencode(
        {
            "u": _b64encode(username),
            "e": _b64encode(expires_str),
            "t": _b64encode(_signature(secret, username, path, expires_str)),
        }
    )
    return f"{base_url.rstrip('/')}/{path}?{params}"


@dataclass(frozen=True)
class SignedLink:
    username: str
    expires: datetime


def validate_assignment_url(
    assignment_id: str,
    *,
    u: Optional[str],
    e: Optional[str],
    t: Optional[str],
    secret: str,
    now: Optional[datetime] = None,
) -> SignedLink:
    """Verify a link's parameters; raises AssignmentURLError when invalid or expired."""
    if not u or not e or not t:
        raise AssignmentURLError("Missing required URL parameters")
    try:
        username = _b64decode(u)
        expires_str = _b64decode(e)
        token = _b64decode(t)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise AssignmentURLError("Invalid URL format")

    expires = parse_timestamp(expires_str)
    if expires is None:
        raise AssignmentURLError("Invalid URL format")

    expected = _signature(secret, username, _assignment_path(assignment_id), expires_str)
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise AssignmentURLError("Invalid assignment URL token")
    if expires < (ensure_utc(now) or utcnow()):
        raise AssignmentURLError("Assignment URL has expired")
    return SignedLink(username=username, expires=expires)
