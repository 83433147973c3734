"""User management utilities.

This module provides user management functionality including user storage,
password hashing, authentication and profile lookups.
"""

import logging
from typing import List, Optional, Tuple

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import BCRYPT_ROUNDS
from core.choices import UserRole
from core.exceptions import AuthenticationError, NotFoundError, UserAlreadyExistsError
from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.user import UserModel
from schemas.user import User
from utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

# bcrypt ignores everything past the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password) -> bytes:
    if isinstance(password, bytes):
        password_bytes = password
    else:
        password_bytes = str(password).encode("utf-8")
    return password_bytes[:BCRYPT_MAX_PASSWORD_BYTES]


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        try:
            return bcrypt.checkpw(
                _password_bytes(plain_password), hashed_password.encode("utf-8")
            )
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def create_user(self, email: str, password: str, name: str, role: UserRole) -> User:
        """Create a new user.

        Args:
            email: Login email, unique across users.
            password: Plain text password.
            name: Display name.
            role: User role, fixed for the lifetime of the account.

        Returns:
            Created User object.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
        """
        email = email.strip().lower()
        existing = self.db.query(UserModel).filter(UserModel.email == email).first()
        if existing:
            raise UserAlreadyExistsError(email)

        user = User(
            email=email,
            password_hash=self.hash_password(password),
            name=name.strip(),
            role=UserRole(role),
        )

        # Two concurrent registrations can both pass the check above; the
        # unique index on email decides the winner.
        try:
            model = user_to_model(user)
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(email) from e

        logger.info("Created user: %s (%s)", email, user.role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Check credentials and return the matching user.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong.
        """
        user = self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email.

        Args:
            email: Email to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )
        if model:
            return model_to_user(model)
        return None

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model:
            return model_to_user(model)
        return None

    def require_user(self, user_id: str) -> User:
        user = self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        """List users, optionally filtered by role, sorted by name."""
        query = self.db.query(UserModel)
        if role is not None:
            query = query.filter(UserModel.role == UserRole(role).value)
        return [model_to_user(m) for m in query.order_by(UserModel.name.asc()).all()]

    def update_profile(self, user_id: str, name: str) -> User:
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model is None:
            raise NotFoundError("User", user_id)
        model.name = name.strip()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated profile of user %s", user_id)
        return model_to_user(model)

    def get_course_lists(self, user_id: str) -> Tuple[List[CourseModel], List[CourseModel]]:
        """Return (enrolled courses, teaching courses) for a user."""
        enrolled = (
            self.db.query(CourseModel)
            .join(EnrollmentModel, EnrollmentModel.course_id == CourseModel.course_id)
            .filter(EnrollmentModel.student_id == user_id)
            .order_by(CourseModel.code.asc())
            .all()
        )
        teaching = (
            self.db.query(CourseModel)
            .filter(CourseModel.professor_id == user_id)
            .order_by(CourseModel.code.asc())
            .all()
        )
        return enrolled, teaching
