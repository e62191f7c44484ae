"""Tests for DynamoUserRepository with a mocked boto3 Table."""

import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError, EndpointConnectionError

from adapter.dynamodb.user_repository import DynamoUserRepository, translate_error
from domain.model.errors import (
    AlreadyExistsError,
    NotFoundError,
    StoreUnavailableError,
    ThrottledError,
)
from domain.model.user import CompletedLesson, User, UserPatch


def client_error(code: str, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


ITEM = {
    "userId": "u1",
    "email": "a@b.com",
    "createdAt": "2024-01-01T00:00:00Z",
    "completedLessons": [],
}


@pytest.fixture
def table():
    return MagicMock()


@pytest.fixture
def repo(table):
    return DynamoUserRepository(table)


@pytest.fixture
def user():
    return User(user_id="u1", email="a@b.com", created_at="2024-01-01T00:00:00Z")


class TestCreate:

    def test_put_is_conditional_on_absence(self, repo, table, user):
        assert repo.create(user) == user
        table.put_item.assert_called_once_with(
            Item=ITEM,
            ConditionExpression="attribute_not_exists(userId)",
        )

    def test_condition_failure_is_already_exists(self, repo, table, user):
        table.put_item.side_effect = client_error("ConditionalCheckFailedException")
        with pytest.raises(AlreadyExistsError):
            repo.create(user)

    def test_throughput_exceeded_is_throttled(self, repo, table, user):
        table.put_item.side_effect = client_error("ProvisionedThroughputExceededException")
        with pytest.raises(ThrottledError):
            repo.create(user)

    def test_connection_error_is_store_unavailable(self, repo, table, user):
        table.put_item.side_effect = EndpointConnectionError(endpoint_url="http://localhost:8001")
        with pytest.raises(StoreUnavailableError):
            repo.create(user)


class TestGet:

    def test_get_returns_user(self, repo, table, user):
        table.get_item.return_value = {"Item": dict(ITEM)}
        assert repo.get("u1") == user
        table.get_item.assert_called_once_with(Key={"userId": "u1"}, ConsistentRead=True)

    def test_missing_item_is_not_found(self, repo, table):
        table.get_item.return_value = {}
        with pytest.raises(NotFoundError):
            repo.get("missing")


class TestUpdate:

    def test_update_builds_expression_from_patch(self, repo, table):
        table.update_item.return_value = {"Attributes": {
            **ITEM,
            "lastLoginAt": "2024-03-01T00:00:00Z",
            "completedLessons": [{"id": "lesson-1", "at": "2024-02-01T00:00:00Z"}],
        }}
        patch = UserPatch(
            last_login_at="2024-03-01T00:00:00Z",
            completed_lessons=(CompletedLesson(id="lesson-1", at="2024-02-01T00:00:00Z"),),
        )

        updated = repo.update("u1", patch)

        assert updated.last_login_at == "2024-03-01T00:00:00Z"
        assert updated.completed_lessons == patch.completed_lessons
        table.update_item.assert_called_once_with(
            Key={"userId": "u1"},
            ConditionExpression="attribute_exists(userId)",
            ReturnValues="ALL_NEW",
            UpdateExpression="SET #lastLoginAt = :lastLoginAt, #completedLessons = :completedLessons",
            ExpressionAttributeNames={
                "#lastLoginAt": "lastLoginAt",
                "#completedLessons": "completedLessons",
            },
            ExpressionAttributeValues={
                ":lastLoginAt": "2024-03-01T00:00:00Z",
                ":completedLessons": [{"id": "lesson-1", "at": "2024-02-01T00:00:00Z"}],
            },
        )

    def test_lessons_only_patch_does_not_touch_last_login(self, repo, table):
        table.update_item.return_value = {"Attributes": dict(ITEM)}

        repo.update("u1", UserPatch(completed_lessons=()))

        kwargs = table.update_item.call_args.kwargs
        assert kwargs["UpdateExpression"] == "SET #completedLessons = :completedLessons"
        assert kwargs["ExpressionAttributeValues"] == {":completedLessons": []}

    def test_condition_failure_is_not_found(self, repo, table):
        table.update_item.side_effect = client_error("ConditionalCheckFailedException", "UpdateItem")
        with pytest.raises(NotFoundError):
            repo.update("missing", UserPatch(last_login_at="2024-03-01T00:00:00Z"))

    def test_empty_patch_checks_existence(self, repo, table):
        table.get_item.return_value = {}
        with pytest.raises(NotFoundError):
            repo.update("missing", UserPatch())
        table.update_item.assert_not_called()


class TestDelete:

    def test_delete_is_conditional_on_existence(self, repo, table):
        repo.delete("u1")
        table.delete_item.assert_called_once_with(
            Key={"userId": "u1"},
            ConditionExpression="attribute_exists(userId)",
        )

    def test_condition_failure_is_not_found(self, repo, table):
        table.delete_item.side_effect = client_error("ConditionalCheckFailedException", "DeleteItem")
        with pytest.raises(NotFoundError):
            repo.delete("missing")


class TestTranslateError:

    @pytest.mark.parametrize("code", [
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
    ])
    def test_capacity_codes_are_throttled(self, code):
        assert isinstance(translate_error(client_error(code)), ThrottledError)

    def test_unknown_code_is_store_unavailable(self):
        assert isinstance(translate_error(client_error("InternalServerError")), StoreUnavailableError)


def test_ping_reports_failure(repo, table):
    table.load.side_effect = client_error("ResourceNotFoundException", "DescribeTable")
    assert repo.ping() is False
