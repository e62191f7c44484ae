"""In-memory implementation of UserRepository for testing and local runs."""

import threading

from domain.model.errors import AlreadyExistsError, NotFoundError
from domain.model.user import User, UserPatch


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        self._lock = threading.Lock()

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        with self._lock:
            if user.user_id in self.store:
                raise AlreadyExistsError()
            self.store[user.user_id] = user
            return user

    def update(self, user_id: str, patch: UserPatch) -> User:
        with self._lock:
            user = self.store.get(user_id)
            if user is None:
                raise NotFoundError()
            updated = user.apply(patch)
            self.store[user_id] = updated
            return updated

    def delete(self, user_id: str) -> None:
        with self._lock:
            if self.store.pop(user_id, None) is None:
                raise NotFoundError()

    # ── read operations ──────────────────────────────────────

    def get(self, user_id: str) -> User:
        user = self.store.get(user_id)
        if user is None:
            raise NotFoundError()
        return user

    def ping(self) -> bool:
        return True
