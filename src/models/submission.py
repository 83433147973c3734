from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class SubmissionModel(Base):
    __tablename__ = "submissions"
    # NULLs never collide, so each constraint only binds rows of its own kind
    __table_args__ = (
        UniqueConstraint(
            "assignment_id",
            "student_id",
            name="uq_submissions_assignment_student",
        ),
        UniqueConstraint(
            "assignment_id",
            "group_id",
            name="uq_submissions_assignment_group",
        ),
        CheckConstraint(
            "(student_id IS NULL) <> (group_id IS NULL)",
            name="ck_submissions_single_owner",
        ),
    )

    submission_id = Column(String, primary_key=True, index=True)
    assignment_id = Column(
        String,
        ForeignKey("assignments.assignment_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    student_id = Column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=True
    )
    group_id = Column(
        String, ForeignKey("groups.group_id", ondelete="CASCADE"), index=True, nullable=True
    )
    status = Column(String, nullable=False, default="pending")
    submission_link = Column(String, nullable=True)
    acknowledged_by = Column(String, ForeignKey("users.user_id"), nullable=True)
    acknowledged_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    marks = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_by = Column(String, ForeignKey("users.user_id"), nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    assignment = relationship("AssignmentModel", back_populates="submissions")
    group = relationship("GroupModel", back_populates="submissions")
    student = relationship("UserModel", foreign_keys=[student_id])
    acknowledger = relationship("UserModel", foreign_keys=[acknowledged_by])
    grader = relationship("UserModel", foreign_keys=[graded_by])
