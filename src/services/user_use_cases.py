"""User profile use cases.

Each use case validates its input locally, then makes exactly one
repository call. Repository errors propagate unchanged; translating them
into transport responses is the route layer's job.
"""

from typing import Any

from domain.model.errors import ValidationError
from domain.model.user import CompletedLesson, User, UserPatch, utc_now_iso
from services.context import ServiceContext


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ''


def _require_user_id(user_id: Any) -> None:
    if not _is_non_empty_str(user_id):
        raise ValidationError("userId is required")


def parse_completed_lessons(items: Any) -> tuple[CompletedLesson, ...]:
    """Validate raw lesson entries; any malformed entry rejects the whole list."""
    if not isinstance(items, (list, tuple)):
        raise ValidationError("completedLessons must be an array")

    lessons = []
    for index, item in enumerate(items):
        if isinstance(item, CompletedLesson):
            lesson_id, at = item.id, item.at
        elif isinstance(item, dict):
            lesson_id, at = item.get('id'), item.get('at')
        else:
            raise ValidationError(f"completedLessons[{index}] must be an object with id and at")

        if not _is_non_empty_str(lesson_id) or not _is_non_empty_str(at):
            raise ValidationError(f"completedLessons[{index}] requires non-empty id and at")
        lessons.append(CompletedLesson(id=lesson_id, at=at))
    return tuple(lessons)


class CreateUserUseCase:
    """Create a user profile; fails if the userId is already taken."""

    def __init__(self, context: ServiceContext):
        self.repository = context.user_repository

    def execute(
        self,
        user_id: Any,
        email: Any,
        name: str | None = None,
        picture: str | None = None,
        created_at: str | None = None,
        last_login_at: str | None = None,
    ) -> User:
        if not _is_non_empty_str(user_id) or not _is_non_empty_str(email):
            raise ValidationError("Missing required fields: userId and email are required")

        user = User(
            user_id=user_id,
            email=email,
            name=name or None,
            picture=picture or None,
            created_at=created_at or utc_now_iso(),
            last_login_at=last_login_at or None,
        )
        return self.repository.create(user)


class GetUserUseCase:
    def __init__(self, context: ServiceContext):
        self.repository = context.user_repository

    def execute(self, user_id: Any) -> User:
        _require_user_id(user_id)
        return self.repository.get(user_id)


class UpdateUserUseCase:
    """Merge a partial update into an existing profile.

    Only supplied fields are written. ``completed_lessons`` replaces the
    stored list as a whole.
    """

    def __init__(self, context: ServiceContext):
        self.repository = context.user_repository

    def execute(
        self,
        user_id: Any,
        last_login_at: str | None = None,
        completed_lessons: Any = None,
    ) -> User:
        _require_user_id(user_id)
        if last_login_at is not None and not _is_non_empty_str(last_login_at):
            raise ValidationError("lastLoginAt must be a non-empty string")

        patch = UserPatch(
            last_login_at=last_login_at,
            completed_lessons=(
                parse_completed_lessons(completed_lessons)
                if completed_lessons is not None else None
            ),
        )
        return self.repository.update(user_id, patch)


class DeleteUserUseCase:
    def __init__(self, context: ServiceContext):
        self.repository = context.user_repository

    def execute(self, user_id: Any) -> None:
        _require_user_id(user_id)
        self.repository.delete(user_id)
