# domain/model/user.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


# ── Value Objects ────────────────────────────────────────


@dataclass(frozen=True)
class CompletedLesson:
    """A lesson the user finished, with the time it was completed."""
    id: str
    at: str

    def to_dict(self) -> dict:
        return {'id': self.id, 'at': self.at}

    @classmethod
    def from_dict(cls, data: dict) -> CompletedLesson:
        return cls(id=data['id'], at=data['at'])


@dataclass(frozen=True)
class UserPatch:
    """Partial update for a user. ``None`` means the field is left untouched.

    ``completed_lessons`` replaces the whole stored sequence; an empty
    tuple clears it.
    """
    last_login_at: str | None = None
    completed_lessons: tuple[CompletedLesson, ...] | None = None

    @property
    def is_empty(self) -> bool:
        return self.last_login_at is None and self.completed_lessons is None


# ── User Domain Model ────────────────────────────────────


@dataclass(frozen=True)
class User:
    """Domain model representing a user profile.

    Instances are immutable; updates produce a new value via ``apply``.
    """
    user_id: str
    email: str
    created_at: str
    name: str | None = None
    picture: str | None = None
    last_login_at: str | None = None
    completed_lessons: tuple[CompletedLesson, ...] = field(default_factory=tuple)

    def apply(self, patch: UserPatch) -> User:
        """Return a copy with the patch fields replaced."""
        changes = {}
        if patch.last_login_at is not None:
            changes['last_login_at'] = patch.last_login_at
        if patch.completed_lessons is not None:
            changes['completed_lessons'] = tuple(patch.completed_lessons)
        return replace(self, **changes) if changes else self

    def to_dict(self) -> dict:
        """Serialize to the camelCase shape used on the wire and in storage."""
        data = {
            'userId': self.user_id,
            'email': self.email,
        }
        if self.name:
            data['name'] = self.name
        if self.picture:
            data['picture'] = self.picture
        if self.created_at:
            data['createdAt'] = self.created_at
        if self.last_login_at:
            data['lastLoginAt'] = self.last_login_at
        data['completedLessons'] = [lesson.to_dict() for lesson in self.completed_lessons]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> User:
        return cls(
            user_id=data['userId'],
            email=data['email'],
            created_at=data.get('createdAt', ''),
            name=data.get('name'),
            picture=data.get('picture'),
            last_login_at=data.get('lastLoginAt'),
            completed_lessons=tuple(
                CompletedLesson.from_dict(item) for item in data.get('completedLessons') or []
            ),
        )
