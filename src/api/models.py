"""Pydantic models for API request/response."""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from domain.model.user import User


class CompletedLessonModel(BaseModel):
    """A completed lesson entry."""
    id: str = Field(..., description="Lesson ID")
    at: str = Field(..., description="Completion timestamp (ISO-8601)")


class CreateUserRequest(BaseModel):
    """Request model for creating a user.

    Required fields are checked by the use case so that missing values
    produce the same ValidationError body as any other rule violation.
    """
    model_config = ConfigDict(extra='ignore')

    userId: Optional[str] = Field(None, description="Opaque stable user ID")
    email: Optional[str] = Field(None, description="User email")
    name: Optional[str] = None
    picture: Optional[str] = Field(None, description="Profile picture URL")
    createdAt: Optional[str] = Field(None, description="Creation timestamp (ISO-8601)")
    lastLoginAt: Optional[str] = Field(None, description="Last login timestamp (ISO-8601)")


class UpdateUserRequest(BaseModel):
    """Request model for a partial user update. Absent fields are left untouched."""
    model_config = ConfigDict(extra='ignore')

    lastLoginAt: Optional[str] = Field(None, description="Last login timestamp (ISO-8601)")
    # Entries are validated by the use case so one bad entry rejects the whole patch
    completedLessons: Optional[list[Any]] = Field(
        None, description="Complete list of completed lessons; replaces the stored list"
    )


class UserResponse(BaseModel):
    """Response model for a user profile."""
    userId: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    createdAt: Optional[str] = None
    lastLoginAt: Optional[str] = None
    completedLessons: list[CompletedLessonModel] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, user: User) -> 'UserResponse':
        return cls(**user.to_dict())


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    error: str = Field(..., description="Stable machine-readable error code")
    message: str
