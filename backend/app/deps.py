"""
Shared route dependencies: authenticated user, caller profile, admin gate,
identity provider.
"""

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from .api.v1.users_fastapi import current_active_user as get_current_user
from .components.assignments.identity import IdentityProvider, LocalIdentityProvider
from .models.profile import Profile
from .models.user import User
from .platform.database import get_db


def get_current_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Profile:
    profile = db.query(Profile).filter(Profile.auth_user_id == current_user.id).first()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")
    return profile


def require_admin(profile: Profile = Depends(get_current_profile)) -> Profile:
    if not profile.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Only admins can perform this action",
        )
    return profile


def get_identity_provider(db: Session = Depends(get_db)) -> IdentityProvider:
    return LocalIdentityProvider(db)


__all__ = ["get_current_user", "get_current_profile", "require_admin", "get_identity_provider"]
