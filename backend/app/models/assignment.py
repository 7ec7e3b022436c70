import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..platform.database import Base


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        Index("ix_assignments_reminder_due", "reminder", "completed", "next_reminder"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False)
    assessment_id = Column(String(36), ForeignKey("assessments.id", ondelete="CASCADE"), index=True, nullable=False)
    target_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), index=True, nullable=True)
    # {"type": ["name", "role"], "value": ["Jane Doe", "Manager"]}
    custom_fields = Column(JSON, nullable=True)
    expires = Column(DateTime(timezone=True), nullable=False, index=True)
    whitelabel = Column(Boolean, default=False, nullable=False)
    job_id = Column(String, nullable=True)
    survey_id = Column(String(36), index=True, nullable=False)
    url = Column(String, nullable=True)
    completed = Column(Boolean, default=False, nullable=False, index=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    reminder = Column(Boolean, default=False, nullable=False)
    reminder_frequency = Column(String, nullable=True)
    next_reminder = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("Profile", back_populates="assignments", foreign_keys=[user_id])
    target = relationship("Profile", foreign_keys=[target_id])
    assessment = relationship("Assessment")
    selected_fields = relationship(
        "AssignmentField",
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="AssignmentField.order",
    )


class AssignmentField(Base):
    """One selected question for one assignment, at a 1-based position."""

    __tablename__ = "assignment_fields"
    __table_args__ = (
        UniqueConstraint("assignment_id", "field_id", name="uq_assignment_fields_assignment_field"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(String(36), ForeignKey("assignments.id", ondelete="CASCADE"), index=True, nullable=False)
    field_id = Column(String(36), ForeignKey("fields.id", ondelete="CASCADE"), nullable=False)
    order = Column(Integer, nullable=False)

    assignment = relationship("Assignment", back_populates="selected_fields")
    field = relationship("Field")
