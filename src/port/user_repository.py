from typing import Protocol
from domain.model.user import User, UserPatch


class UserRepository(Protocol):
    """Protocol defining the interface for user profile persistence.

    Implementations must perform existence checks atomically with the
    write (conditional insert/update/delete), never as a read followed
    by a write. Store faults surface as ThrottledError or
    StoreUnavailableError.
    """
    def create(self, user: User) -> User:
        """Insert a new user. Raise AlreadyExistsError if userId is taken."""
        ...

    def get(self, user_id: str) -> User:
        """Return the user. Raise NotFoundError if absent."""
        ...

    def update(self, user_id: str, patch: UserPatch) -> User:
        """Apply patch and return the updated user. Raise NotFoundError if absent."""
        ...

    def delete(self, user_id: str) -> None:
        """Remove the user. Raise NotFoundError if absent."""
        ...

    def ping(self) -> bool:
        """Return True if the backing store is reachable."""
        ...
