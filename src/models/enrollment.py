from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class EnrollmentModel(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("course_id", "student_id", name="uq_enrollments_course_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True, nullable=False
    )
    student_id = Column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    course = relationship("CourseModel", back_populates="enrollments")
    student = relationship("UserModel")
