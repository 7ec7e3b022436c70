import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Text, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..platform.database import Base

# Field types that structure the instrument but are not answerable questions.
# "10" is the legacy numeric code for instructions blocks.
NON_QUESTION_FIELD_TYPES = frozenset({"instructions", "10", "page_break"})


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(Text)
    is_360 = Column(Boolean, default=False, nullable=False)
    # Flat random subset size, used when no per-dimension counts are configured
    number_of_questions = Column(Integer, nullable=True)
    # {dimension_id: count}; the keys "null" / "" address fields without a dimension
    dimension_question_counts = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    dimensions = relationship("Dimension", back_populates="assessment", cascade="all, delete-orphan")
    fields = relationship(
        "Field",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="Field.order",
    )


class Dimension(Base):
    __tablename__ = "dimensions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assessment_id = Column(String(36), ForeignKey("assessments.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String, nullable=False)
    code = Column(String, nullable=True)
    order = Column(Integer, default=0)

    assessment = relationship("Assessment", back_populates="dimensions")


class Field(Base):
    __tablename__ = "fields"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assessment_id = Column(String(36), ForeignKey("assessments.id", ondelete="CASCADE"), index=True, nullable=False)
    dimension_id = Column(String(36), ForeignKey("dimensions.id", ondelete="SET NULL"), index=True, nullable=True)
    type = Column(String, nullable=False, default="rich_text")
    content = Column(Text)
    order = Column(Integer, default=0)

    assessment = relationship("Assessment", back_populates="fields")
    dimension = relationship("Dimension")

    @property
    def is_question(self) -> bool:
        return str(self.type) not in NON_QUESTION_FIELD_TYPES
