"""Service context: the repository wiring shared by all use cases."""

import logging
import os
from dataclasses import dataclass

from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

USER_STORE_BACKENDS = ('mongodb', 'dynamodb', 'memory')


@dataclass(frozen=True)
class ServiceContext:
    """Holds the repository instance, built once per process.

    Use cases receive it explicitly; it carries no per-request state.
    """

    user_repository: UserRepository


def build_repository(backend: str) -> UserRepository:
    """Construct the repository adapter for ``backend``."""
    if backend == 'mongodb':
        from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME
        from adapter.mongodb.user_repository import MongoUserRepository
        return MongoUserRepository(get_mongodb_client()[DATABASE_NAME])
    if backend == 'dynamodb':
        from adapter.dynamodb.user_repository import DynamoUserRepository
        return DynamoUserRepository.from_env()
    if backend == 'memory':
        from adapter.fake.user_repository import FakeUserRepository
        return FakeUserRepository()
    raise ValueError(
        f"Unknown USER_STORE '{backend}', expected one of {', '.join(USER_STORE_BACKENDS)}"
    )


def build_context(backend: str | None = None) -> ServiceContext:
    backend = (backend or os.getenv('USER_STORE', 'mongodb')).strip().lower()
    context = ServiceContext(user_repository=build_repository(backend))
    logger.info("Service context built", extra={"userStore": backend})
    return context
