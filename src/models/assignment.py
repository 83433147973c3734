from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class AssignmentModel(Base):
    __tablename__ = "assignments"

    assignment_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    course_id = Column(
        String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True, nullable=False
    )
    type = Column(String, nullable=False, default="individual")  # 'individual' or 'group'
    due_date = Column(DateTime(timezone=True), nullable=False)
    external_link = Column(String, nullable=True)
    max_marks = Column(Integer, nullable=False)
    created_by = Column(String, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    course = relationship("CourseModel", back_populates="assignments")
    creator = relationship("UserModel")
    submissions = relationship(
        "SubmissionModel",
        back_populates="assignment",
        cascade="all, delete-orphan",
    )
