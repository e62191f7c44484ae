import os
import logging
from pymongo import MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

# Set pymongo logger to WARNING to reduce noise from driver-level logs
logging.getLogger('pymongo').setLevel(logging.WARNING)

MONGO_URL = os.getenv('MONGO_URL')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'user_progress')

_client_cache: MongoClient | None = None


def reset_client():
    """Close and drop the cached client. Called on application shutdown."""
    global _client_cache
    if _client_cache is not None:
        _client_cache.close()
    _client_cache = None


def get_mongodb_client(url: str | None = None) -> MongoClient:
    """Get a cached MongoDB client.

    The client connects lazily: an unreachable server at startup is only
    logged, and each later operation fails with a server selection error
    that the repository reports as StoreUnavailableError.

    Raises:
        ValueError: if no connection string is configured.
    """
    global _client_cache

    if _client_cache is not None:
        return _client_cache

    url = url or MONGO_URL
    if not url:
        raise ValueError("MONGO_URL is required when USER_STORE=mongodb")

    client = MongoClient(
        url,
        serverSelectionTimeoutMS=5000,  # 5s timeout for server selection
        connectTimeoutMS=5000,  # 5s timeout for initial connection
        socketTimeoutMS=30000,  # 30s timeout for operations
        maxPoolSize=10,
        minPoolSize=0,   # Don't maintain idle connections
        maxIdleTimeMS=30000,
        waitQueueTimeoutMS=10000,  # Pool exhaustion surfaces as WaitQueueTimeoutError
        retryWrites=True,
        retryReads=True,
    )
    try:
        client.admin.command('ping')
        logger.info(f"[MONGODB] Connected successfully to {DATABASE_NAME}")
    except PyMongoError as e:
        logger.error(f"[MONGODB] Initial connection failed: {str(e)[:200]}")

    _client_cache = client
    return client
