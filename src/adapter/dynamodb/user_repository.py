"""DynamoDB implementation of UserRepository.

One item per user, partition key ``userId``. Existence checks are
expressed as ``ConditionExpression`` on the write itself so concurrent
callers race inside DynamoDB, not in this process.
"""

import logging
import os
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from domain.model.errors import (
    AlreadyExistsError,
    DomainError,
    NotFoundError,
    StoreUnavailableError,
    ThrottledError,
)
from domain.model.user import User, UserPatch

logger = logging.getLogger(__name__)
logging.getLogger('botocore').setLevel(logging.WARNING)

CONDITION_FAILED = "ConditionalCheckFailedException"
THROTTLING_ERROR_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
}


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def translate_error(error: Exception) -> DomainError:
    """Map a boto error to the domain taxonomy; anything unknown is StoreUnavailable."""
    if isinstance(error, ClientError) and error_code(error) in THROTTLING_ERROR_CODES:
        return ThrottledError()
    return StoreUnavailableError()


class DynamoUserRepository:
    """DynamoDB table of user profiles keyed by userId."""

    DEFAULT_REGION = "us-east-1"
    DEFAULT_TABLE_NAME = "speak-greek-now-users"

    def __init__(self, table):
        self.table = table

    @classmethod
    def from_env(
        cls,
        table_name: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> "DynamoUserRepository":
        table_name = table_name or os.environ.get("USERS_TABLE_NAME", cls.DEFAULT_TABLE_NAME)
        region = region or os.environ.get("AWS_REGION", cls.DEFAULT_REGION)
        endpoint_url = endpoint_url or os.environ.get("DYNAMODB_ENDPOINT_URL")

        dynamodb = boto3.resource("dynamodb", region_name=region, endpoint_url=endpoint_url)
        logger.info(f"DynamoDB initialized: {table_name} ({region})")
        return cls(dynamodb.Table(table_name))

    @staticmethod
    def _build_update(patch: UserPatch) -> Dict[str, Any]:
        """Build UpdateExpression arguments from the typed patch."""
        assignments = []
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}

        if patch.last_login_at is not None:
            assignments.append("#lastLoginAt = :lastLoginAt")
            names["#lastLoginAt"] = "lastLoginAt"
            values[":lastLoginAt"] = patch.last_login_at
        if patch.completed_lessons is not None:
            assignments.append("#completedLessons = :completedLessons")
            names["#completedLessons"] = "completedLessons"
            values[":completedLessons"] = [lesson.to_dict() for lesson in patch.completed_lessons]

        return {
            "UpdateExpression": "SET " + ", ".join(assignments),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
        }

    def create(self, user: User) -> User:
        try:
            self.table.put_item(
                Item=user.to_dict(),
                ConditionExpression="attribute_not_exists(userId)",
            )
        except ClientError as e:
            if error_code(e) == CONDITION_FAILED:
                logger.warning("User creation failed: userId already exists", extra={"userId": user.user_id})
                raise AlreadyExistsError()
            logger.error("Failed to create user", extra={"userId": user.user_id, "error": str(e)})
            raise translate_error(e) from e
        except BotoCoreError as e:
            logger.error("Failed to create user", extra={"userId": user.user_id, "error": str(e)})
            raise translate_error(e) from e

        logger.info("User created", extra={"userId": user.user_id})
        return user

    def get(self, user_id: str) -> User:
        try:
            resp = self.table.get_item(Key={"userId": user_id}, ConsistentRead=True)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to get user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e

        item = resp.get("Item")
        if not item:
            raise NotFoundError()
        return User.from_dict(item)

    def update(self, user_id: str, patch: UserPatch) -> User:
        if patch.is_empty:
            return self.get(user_id)

        try:
            resp = self.table.update_item(
                Key={"userId": user_id},
                ConditionExpression="attribute_exists(userId)",
                ReturnValues="ALL_NEW",
                **self._build_update(patch),
            )
        except ClientError as e:
            if error_code(e) == CONDITION_FAILED:
                raise NotFoundError()
            logger.error("Failed to update user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e
        except BotoCoreError as e:
            logger.error("Failed to update user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e

        logger.debug("User updated", extra={"userId": user_id})
        return User.from_dict(resp["Attributes"])

    def delete(self, user_id: str) -> None:
        try:
            self.table.delete_item(
                Key={"userId": user_id},
                ConditionExpression="attribute_exists(userId)",
            )
        except ClientError as e:
            if error_code(e) == CONDITION_FAILED:
                raise NotFoundError()
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e
        except BotoCoreError as e:
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            raise translate_error(e) from e

    def ping(self) -> bool:
        try:
            self.table.load()
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"DynamoDB ping failed: {e}")
            return False
