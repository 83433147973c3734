"""Shared pydantic building blocks for request and response schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.base import as_utc


class APIModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class MessageResponse(APIModel):
    success: bool = True
    message: str
