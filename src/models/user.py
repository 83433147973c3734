"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, DateTime, String

from .base import Base, utcnow


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)  # 'student' or 'admin'
    create_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
