"""MongoDB implementation of UserRepository.

Each user is one document keyed by ``_id = userId``. Existence checks ride
on the server's own atomic primitives: the unique ``_id`` index for
create, and the ``_id`` filter of ``find_one_and_update``/``delete_one``
for update and delete.
"""

from logging import getLogger
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import (
    DuplicateKeyError,
    OperationFailure,
    PyMongoError,
    WaitQueueTimeoutError,
)
from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.errors import (
    AlreadyExistsError,
    DomainError,
    NotFoundError,
    StoreUnavailableError,
    ThrottledError,
)
from domain.model.user import User, UserPatch

logger = getLogger(__name__)

# Server codes for request-rate limiting (IngressRequestRateLimitExceeded,
# Cosmos DB TooManyRequests).
THROTTLING_ERROR_CODES = {462, 16500}


def translate_error(error: PyMongoError) -> DomainError:
    """Map a driver error to the domain taxonomy."""
    if isinstance(error, WaitQueueTimeoutError):
        return ThrottledError()
    if isinstance(error, OperationFailure) and error.code in THROTTLING_ERROR_CODES:
        return ThrottledError()
    return StoreUnavailableError()


class MongoUserRepository:
    def __init__(self, db: Database):
        self.db = db
        self.collection = db[USERS_COLLECTION_NAME]

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User.from_dict({k: v for k, v in doc.items() if k != '_id'})

    @staticmethod
    def _to_set_fields(patch: UserPatch) -> dict:
        fields = {}
        if patch.last_login_at is not None:
            fields['lastLoginAt'] = patch.last_login_at
        if patch.completed_lessons is not None:
            fields['completedLessons'] = [lesson.to_dict() for lesson in patch.completed_lessons]
        return fields

    def create(self, user: User) -> User:
        """Insert the user; the unique _id makes this a conditional insert."""
        user_doc = {'_id': user.user_id, **user.to_dict()}
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: userId already exists", extra={"userId": user.user_id})
            raise AlreadyExistsError()
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"userId": user.user_id, "error": str(e)})
            raise translate_error(e) from e

        logger.info("User created", extra={"userId": user.user_id})
        return user

    def get(self, user_id: str) -> User:
        try:
            doc = self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e

        if doc is None:
            raise NotFoundError()
        return self._to_domain(doc)

    def update(self, user_id: str, patch: UserPatch) -> User:
        """Apply patch with a single filtered update; no match means NotFound."""
        if patch.is_empty:
            return self.get(user_id)

        try:
            doc = self.collection.find_one_and_update(
                {'_id': user_id},
                {'$set': self._to_set_fields(patch)},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to update user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e

        if doc is None:
            raise NotFoundError()
        logger.debug("User updated", extra={"userId": user_id})
        return self._to_domain(doc)

    def delete(self, user_id: str) -> None:
        try:
            result = self.collection.delete_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e

        if result.deleted_count == 0:
            raise NotFoundError()

    def ping(self) -> bool:
        try:
            self.db.command('ping')
            return True
        except PyMongoError as e:
            logger.warning("MongoDB ping failed", extra={"error": str(e)[:200]})
            return False
