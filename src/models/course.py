from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class CourseModel(Base):
    __tablename__ = "courses"

    course_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    professor_id = Column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    semester = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    professor = relationship("UserModel")
    enrollments = relationship(
        "EnrollmentModel",
        back_populates="course",
        cascade="all, delete-orphan",
    )
    groups = relationship(
        "GroupModel",
        back_populates="course",
        cascade="all, delete-orphan",
    )
    assignments = relationship(
        "AssignmentModel",
        back_populates="course",
        cascade="all, delete-orphan",
    )

    @property
    def student_ids(self) -> set:
        return {enrollment.student_id for enrollment in self.enrollments}
