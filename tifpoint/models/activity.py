import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from tifpoint.core.database import Base


class ActivityStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    competency_id = Column(Integer, ForeignKey("competencies.id", ondelete="RESTRICT"), nullable=False, index=True)
    activity_type_id = Column(Integer, ForeignKey("activity_types.id", ondelete="RESTRICT"), nullable=False, index=True)
    recognized_course_id = Column(Integer, ForeignKey("recognized_courses.id", ondelete="SET NULL"), nullable=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True)

    # evidence file URL (uploaded elsewhere)
    document_url = Column(Text, nullable=False)

    # set by admin on verification
    point = Column(Integer, nullable=True)
    status = Column(
        SAEnum(ActivityStatus, name="activity_status_enum"),
        nullable=False,
        default=ActivityStatus.PENDING,
    )
    comment = Column(Text, nullable=True)
    verified_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="activities", foreign_keys=[user_id])
    verifier = relationship("User", foreign_keys=[verified_by_id])
    competency = relationship("Competency")
    activity_type = relationship("ActivityType")
    recognized_course = relationship("RecognizedCourse")
    event = relationship("Event")

    __table_args__ = (
        Index("ix_activities_user_status", "user_id", "status"),
    )
