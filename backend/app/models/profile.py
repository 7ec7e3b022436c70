import enum
import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..platform.database import Base


class AccessLevel(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    CLIENT_ADMIN = "client_admin"
    MEMBER = "member"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="SET NULL"), index=True, nullable=True)
    auth_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), unique=True, nullable=True)
    name = Column(String)
    username = Column(String, index=True)
    email = Column(String, nullable=False, index=True)
    access_level = Column(String, nullable=False, default=AccessLevel.MEMBER.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    client = relationship("Client", back_populates="profiles")
    auth_user = relationship("User", back_populates="profile")
    assignments = relationship(
        "Assignment",
        back_populates="user",
        foreign_keys="Assignment.user_id",
        cascade="all, delete-orphan",
    )

    @property
    def is_super_admin(self) -> bool:
        return self.access_level == AccessLevel.SUPER_ADMIN.value

    @property
    def is_client_admin(self) -> bool:
        return self.access_level == AccessLevel.CLIENT_ADMIN.value

    @property
    def is_admin(self) -> bool:
        return self.is_super_admin or self.is_client_admin

    @property
    def login_name(self) -> str:
        """Identifier used for signed links: username, falling back to email."""
        return self.username or self.email
