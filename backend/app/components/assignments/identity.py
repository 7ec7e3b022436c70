"""Login identities for assigned profiles.

Profiles created by an administrator have no login until their first
assignment. ``provision_identities`` creates one per such profile with a
temporary password that is returned to the caller (for the invite email) and
never stored in clear text. Profiles that already have a login are left
alone so a second assignment cannot reset a password the user already knows.
"""

from __future__ import annotations

import logging
import secrets
from typing import Dict, Iterable, Optional, Protocol

from fastapi_users.password import PasswordHelper
from sqlalchemy.orm import Session

from ...models.profile import Profile
from ...models.user import User
from .errors import IdentityProvisioningError

logger = logging.getLogger(__name__)

# Look-alike characters (I, O, l, 0, 1) are left out so passwords survive being read aloud
UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnopqrstuvwxyz"
DIGITS = "23456789"
SYMBOLS = "!@#$%&*"
PASSWORD_ALPHABET = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS


def generate_temporary_password(length: int = 12) -> str:
    """Random password with at least one upper, lower, digit and symbol."""
    if length < 8:
        raise ValueError("Password length must be at least 8 characters")
    chars = [
        secrets.choice(UPPERCASE),
        secrets.choice(LOWERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(secrets.choice(PASSWORD_ALPHABET) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


class IdentityProvider(Protocol):
    def create_user(self, *, email: str, password: str, metadata: dict) -> int:
        """Create a pre-verified login and return its id."""
        ...

    def link_profile(self, profile: Profile, identity_id: int) -> None: ...

    def discard(self) -> None:
        """Drop any pending work after a failed create/link."""
        ...


class LocalIdentityProvider:
    """Creates FastAPI-Users ``User`` rows in the application database."""

    def __init__(self, db: Session, password_helper: Optional[PasswordHelper] = None):
        self.db = db
        self.password_helper = password_helper or PasswordHelper()

    def create_user(self, *, email: str, password: str, metadata: dict) -> int:
        existing = self.db.query(User).filter(User.email == email).first()
        if existing is not None:
            raise IdentityProvisioningError(f"An identity already exists for {email}")
        user = User(
            email=email,
            hashed_password=self.password_helper.hash(password),
            is_active=True,
            is_superuser=False,
            is_verified=True,
            full_name=metadata.get("full_name"),
            username=metadata.get("username"),
        )
        self.db.add(user)
        self.db.flush()
        return user.id

    def link_profile(self, profile: Profile, identity_id: int) -> None:
        profile.auth_user_id = identity_id
        self.db.commit()

    def discard(self) -> None:
        self.db.rollback()


def provision_identities(
    profiles: Iterable[Profile],
    provider: IdentityProvider,
    password_length: int = 12,
) -> Dict[str, str]:
    """Give every profile without a login a temporary one.

    Returns ``{profile_id: temporary_password}`` for the logins created.
    Never raises: a failure only means that profile keeps signing in through
    its signed assignment link until a later batch provisions it.
    """
    passwords: Dict[str, str] = {}
    for profile in profiles:
        if profile.auth_user_id:
            logger.info(
                "Profile %s already has a login; skipping password generation",
                profile.id,
                extra={"user_id": profile.id},
            )
            continue

        profile_id = profile.id
        temp_password = generate_temporary_password(password_length)
        metadata = {
            "full_name": profile.name or profile.username or profile.email,
            "username": profile.username or profile.email.split("@")[0],
        }
        try:
            identity_id = provider.create_user(email=profile.email, password=temp_password, metadata=metadata)
            provider.link_profile(profile, identity_id)
        except Exception:
            provider.discard()
            logger.exception(
                "Could not create a login for profile %s",
                profile_id,
                extra={"user_id": profile_id},
            )
            continue

        passwords[profile_id] = temp_password
    return passwords
