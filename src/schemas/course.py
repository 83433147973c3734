"""Course schema definitions."""

from typing import List, Optional

from pydantic import Field, field_validator

from schemas.common import APIModel, UtcDatetime
from schemas.user import UserSummary


def _normalize_code(value: str) -> str:
    normalized = value.strip().upper()
    if not normalized:
        raise ValueError("Course code cannot be empty.")
    return normalized


class CourseSummary(APIModel):
    course_id: str
    name: str
    code: str


class CreateCourseRequest(APIModel):
    name: str
    code: str
    description: Optional[str] = None
    semester: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1900, le=3000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Course name cannot be empty.")
        return normalized

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str) -> str:
        return _normalize_code(value)


class UpdateCourseRequest(APIModel):
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    semester: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1900, le=3000)

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _normalize_code(value)


class EnrollRequest(APIModel):
    student_email: str

    @field_validator("student_email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("Student email is required.")
        return normalized


class CourseInfo(APIModel):
    course_id: str
    name: str
    code: str
    description: Optional[str] = None
    semester: Optional[str] = None
    year: Optional[int] = None
    professor: UserSummary
    students: List[UserSummary] = Field(default_factory=list)
    student_count: int = 0
    created_at: UtcDatetime
    updated_at: UtcDatetime


class CourseResult(APIModel):
    message: str
    course: CourseInfo
