"""Course management utilities."""

import logging
import secrets
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core import access
from core.choices import UserRole
from core.exceptions import (
    AlreadyEnrolledError,
    DuplicateCourseCodeError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.user import UserModel

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "code", "description", "semester", "year")


class CourseManager:
    """Manages courses and their enrollments."""

    def __init__(self, db: Session):
        self.db = db

    def create_course(
        self,
        actor: Any,
        name: str,
        code: str,
        description: Optional[str] = None,
        semester: Optional[str] = None,
        year: Optional[int] = None,
    ) -> CourseModel:
        """Create a course owned by the acting professor.

        Raises:
            ForbiddenError: If the actor is not an admin.
            ValidationError: If name or code is blank.
            DuplicateCourseCodeError: If the code is already taken.
        """
        access.ensure_admin(actor, "Only professors can create courses")
        name = (name or "").strip()
        code = (code or "").strip().upper()
        if not name or not code:
            raise ValidationError("Name and code are required")

        if self._code_taken(code):
            raise DuplicateCourseCodeError(code)

        course = CourseModel(
            course_id=secrets.token_hex(8),
            name=name,
            code=code,
            description=description,
            semester=semester,
            year=year,
            professor_id=actor.user_id,
        )
        try:
            self.db.add(course)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateCourseCodeError(code) from e
        self.db.refresh(course)
        logger.info(
            "Course created: %s (%s) by professor %s", course.name, course.code, actor.user_id
        )
        return course

    def get_course(self, course_id: str) -> CourseModel:
        model = (
            self.db.query(CourseModel)
            .filter(CourseModel.course_id == course_id)
            .first()
        )
        if not model:
            raise NotFoundError("Course", course_id)
        return model

    def get_course_for_reader(self, actor: Any, course_id: str) -> CourseModel:
        course = self.get_course(course_id)
        access.ensure_can_read_course(actor, course)
        return course

    def list_courses(self, actor: Any) -> List[CourseModel]:
        """Courses the actor teaches (admin) or is enrolled in (student)."""
        query = self.db.query(CourseModel)
        role = access.role_of(actor)
        if role is UserRole.ADMIN:
            query = query.filter(CourseModel.professor_id == actor.user_id)
        elif role is UserRole.STUDENT:
            query = query.join(
                EnrollmentModel, EnrollmentModel.course_id == CourseModel.course_id
            ).filter(EnrollmentModel.student_id == actor.user_id)
        return query.order_by(CourseModel.created_at.desc()).all()

    def list_readable_course_ids(self, actor: Any) -> List[str]:
        return [course.course_id for course in self.list_courses(actor)]

    def update_course(self, actor: Any, course_id: str, **fields) -> CourseModel:
        """Update course metadata. Only the owning professor may do so.

        Fields left as None are not changed.
        """
        course = self.get_course(course_id)
        access.ensure_course_owner(actor, course, "Only the course professor can edit it")

        changes = {
            key: value
            for key, value in fields.items()
            if key in UPDATABLE_FIELDS and value is not None
        }
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationError("Course name cannot be empty")
        if "code" in changes:
            changes["code"] = changes["code"].strip().upper()
            if not changes["code"]:
                raise ValidationError("Course code cannot be empty")
            if changes["code"] != course.code and self._code_taken(changes["code"]):
                raise DuplicateCourseCodeError(changes["code"])

        for key, value in changes.items():
            setattr(course, key, value)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateCourseCodeError(changes.get("code", course.code)) from e
        self.db.refresh(course)
        logger.info("Updated course %s (%s)", course_id, ", ".join(sorted(changes)))
        return course

    def delete_course(self, actor: Any, course_id: str) -> None:
        """Delete a course with its enrollments, groups, assignments and submissions.

        Everything goes in one commit, so a failure leaves nothing half-deleted.
        """
        course = self.get_course(course_id)
        access.ensure_course_owner(actor, course, "Only the course professor can delete it")
        self.db.delete(course)
        self.db.commit()
        logger.info("Deleted course: %s", course_id)

    def enroll_student(self, actor: Any, course_id: str, student_email: str) -> CourseModel:
        """Enroll a student-role user in a course.

        The course owner may enroll any student; a student may enroll only
        themself.

        Raises:
            NotFoundError: If the course or the student does not exist.
            ForbiddenError: If the actor may not enroll this student.
            AlreadyEnrolledError: If the student is already enrolled.
        """
        course = self.get_course(course_id)
        student = (
            self.db.query(UserModel)
            .filter(
                UserModel.email == student_email.strip().lower(),
                UserModel.role == UserRole.STUDENT.value,
            )
            .first()
        )
        if student is None:
            raise NotFoundError("Student")

        if not access.is_course_owner(actor, course) and actor.user_id != student.user_id:
            raise ForbiddenError("Only the course professor can enroll other students")

        if student.user_id in course.student_ids:
            raise AlreadyEnrolledError()

        course.enrollments.append(EnrollmentModel(student_id=student.user_id))
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyEnrolledError() from e
        self.db.refresh(course)
        logger.info("Enrolled student %s in course %s", student.user_id, course_id)
        return course

    def list_students(self, actor: Any, course_id: str) -> List[UserModel]:
        course = self.get_course_for_reader(actor, course_id)
        return sorted(
            (enrollment.student for enrollment in course.enrollments),
            key=lambda student: student.name.lower(),
        )

    def _code_taken(self, code: str) -> bool:
        return (
            self.db.query(CourseModel).filter(CourseModel.code == code).first()
            is not None
        )
