from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class GroupModel(Base):
    __tablename__ = "groups"

    group_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    course_id = Column(
        String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True, nullable=False
    )
    leader_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    created_by = Column(String, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    course = relationship("CourseModel", back_populates="groups")
    leader = relationship("UserModel", foreign_keys=[leader_id])
    creator = relationship("UserModel", foreign_keys=[created_by])
    memberships = relationship(
        "GroupMembershipModel",
        back_populates="group",
        cascade="all, delete-orphan",
    )
    submissions = relationship(
        "SubmissionModel",
        back_populates="group",
        cascade="all, delete-orphan",
    )

    @property
    def member_ids(self) -> set:
        return {membership.user_id for membership in self.memberships}


class GroupMembershipModel(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(
        String, ForeignKey("groups.group_id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id = Column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    group = relationship("GroupModel", back_populates="memberships")
    user = relationship("UserModel")
