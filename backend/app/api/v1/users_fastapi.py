"""
FastAPI-Users configuration: user manager, auth backend, schemas, Resend hooks.

Logins are provisioned by the assignment workflow rather than self-service
registration, so no register router is exposed.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import BaseUserManager, FastAPIUsers, IntegerIDMixin, InvalidPasswordException
from fastapi_users import schemas
from fastapi_users.authentication import AuthenticationBackend, BearerTransport, JWTStrategy
from fastapi_users.db import SQLAlchemyUserDatabase
from sqlalchemy.ext.asyncio import AsyncSession

from ...components.notifications.service import send_password_reset_sync
from ...domains.integrations_notifications.adapters import build_email_adapter, email_configured
from ...models.user import User
from ...platform.config import settings
from ...platform.database import get_async_db

logger = logging.getLogger("talentlens.auth")


# ---- Schemas (extend FastAPI-Users base) ----
class UserRead(schemas.BaseUser[int]):
    full_name: Optional[str] = None
    username: Optional[str] = None
    created_at: Optional[datetime] = None


class UserUpdate(schemas.BaseUserUpdate):
    full_name: Optional[str] = None


# ---- User Manager ----
class UserManager(IntegerIDMixin, BaseUserManager[User, int]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY
    reset_password_token_lifetime_seconds = 3600

    async def validate_password(self, password: str, user) -> None:
        if len(password) < 8:
            raise InvalidPasswordException(reason="Password should be at least 8 characters")
        email = getattr(user, "email", None)
        if email and email.split("@")[0].lower() in password.lower():
            raise InvalidPasswordException(reason="Password should not contain your email")

    async def on_after_forgot_password(
        self, user: User, token: str, request: Optional[Request] = None
    ) -> None:
        if not email_configured():
            logger.warning("RESEND_API_KEY not set, not sending password reset email to %s", user.email)
            return
        try:
            result = send_password_reset_sync(build_email_adapter(), user.email, token)
            if not result.get("success"):
                logger.error("Resend rejected password reset email for %s", user.email)
        except Exception:
            logger.exception("Failed to send password reset email to %s", user.email)

    async def on_after_reset_password(self, user: User, request: Optional[Request] = None) -> None:
        logger.info("Password reset completed for user %s", user.id)


async def get_user_db(session: AsyncSession = Depends(get_async_db)):
    yield SQLAlchemyUserDatabase(session, User)


async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)


# ---- Auth Backend ----
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")


def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[User, int](get_user_manager, [auth_backend])

current_active_user = fastapi_users.current_user(active=True)
