"""Group schema definitions."""

from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from schemas.common import APIModel, UtcDatetime
from schemas.course import CourseSummary
from schemas.user import UserSummary


class CreateGroupRequest(APIModel):
    name: str
    course_id: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Group name cannot be empty.")
        return normalized


class AddMemberRequest(APIModel):
    user_id: Optional[str] = None
    user_email: Optional[str] = None

    @model_validator(mode="after")
    def require_target(self) -> "AddMemberRequest":
        if not self.user_id and not self.user_email:
            raise ValueError("User ID or email is required")
        return self


class ChangeLeaderRequest(APIModel):
    new_leader_id: str


class GroupInfo(APIModel):
    group_id: str
    name: str
    course: CourseSummary
    leader: UserSummary
    members: List[UserSummary] = Field(default_factory=list)
    member_count: int = 0
    created_by: str
    created_at: UtcDatetime


class GroupResult(APIModel):
    message: str
    group: GroupInfo
