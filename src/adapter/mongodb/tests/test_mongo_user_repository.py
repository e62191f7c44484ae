"""Tests for MongoUserRepository with a mocked pymongo collection."""

import unittest
from unittest.mock import MagicMock

from pymongo import ReturnDocument
from pymongo.errors import (
    DuplicateKeyError,
    OperationFailure,
    ServerSelectionTimeoutError,
    WaitQueueTimeoutError,
)

from adapter.mongodb import USERS_COLLECTION_NAME, connection
from adapter.mongodb.user_repository import MongoUserRepository, translate_error
from domain.model.errors import (
    AlreadyExistsError,
    NotFoundError,
    StoreUnavailableError,
    ThrottledError,
)
from domain.model.user import CompletedLesson, User, UserPatch


USER_DOC = {
    '_id': 'u1',
    'userId': 'u1',
    'email': 'a@b.com',
    'createdAt': '2024-01-01T00:00:00Z',
    'completedLessons': [],
}


class MongoRepositoryTestCase(unittest.TestCase):

    def setUp(self):
        self.collection = MagicMock()
        self.db = MagicMock()
        self.db.__getitem__.return_value = self.collection
        self.repo = MongoUserRepository(self.db)
        self.user = User(user_id='u1', email='a@b.com', created_at='2024-01-01T00:00:00Z')


class TestCreate(MongoRepositoryTestCase):

    def test_uses_users_collection(self):
        self.db.__getitem__.assert_called_with(USERS_COLLECTION_NAME)

    def test_create_inserts_document_keyed_by_user_id(self):
        result = self.repo.create(self.user)

        self.assertEqual(result, self.user)
        self.collection.insert_one.assert_called_once_with(USER_DOC)

    def test_duplicate_key_raises_already_exists(self):
        self.collection.insert_one.side_effect = DuplicateKeyError('E11000 duplicate key error', 11000)

        with self.assertRaises(AlreadyExistsError):
            self.repo.create(self.user)

    def test_connection_failure_raises_store_unavailable(self):
        self.collection.insert_one.side_effect = ServerSelectionTimeoutError('no servers')

        with self.assertRaises(StoreUnavailableError):
            self.repo.create(self.user)


class TestGet(MongoRepositoryTestCase):

    def test_get_returns_domain_user(self):
        self.collection.find_one.return_value = dict(USER_DOC)

        self.assertEqual(self.repo.get('u1'), self.user)
        self.collection.find_one.assert_called_once_with({'_id': 'u1'})

    def test_get_missing_raises_not_found(self):
        self.collection.find_one.return_value = None

        with self.assertRaises(NotFoundError):
            self.repo.get('missing')


class TestUpdate(MongoRepositoryTestCase):

    def test_update_sets_only_supplied_fields(self):
        lessons = (CompletedLesson(id='lesson-1', at='2024-02-01T00:00:00Z'),)
        self.collection.find_one_and_update.return_value = {
            **USER_DOC, 'completedLessons': [{'id': 'lesson-1', 'at': '2024-02-01T00:00:00Z'}],
        }

        updated = self.repo.update('u1', UserPatch(completed_lessons=lessons))

        self.assertEqual(updated.completed_lessons, lessons)
        self.collection.find_one_and_update.assert_called_once_with(
            {'_id': 'u1'},
            {'$set': {'completedLessons': [{'id': 'lesson-1', 'at': '2024-02-01T00:00:00Z'}]}},
            return_document=ReturnDocument.AFTER,
        )

    def test_update_last_login_only(self):
        self.collection.find_one_and_update.return_value = {**USER_DOC, 'lastLoginAt': '2024-03-01T00:00:00Z'}

        self.repo.update('u1', UserPatch(last_login_at='2024-03-01T00:00:00Z'))

        update_doc = self.collection.find_one_and_update.call_args[0][1]
        self.assertEqual(update_doc, {'$set': {'lastLoginAt': '2024-03-01T00:00:00Z'}})

    def test_update_missing_raises_not_found(self):
        self.collection.find_one_and_update.return_value = None

        with self.assertRaises(NotFoundError):
            self.repo.update('missing', UserPatch(last_login_at='2024-03-01T00:00:00Z'))

    def test_empty_patch_reads_without_writing(self):
        self.collection.find_one.return_value = None

        with self.assertRaises(NotFoundError):
            self.repo.update('missing', UserPatch())
        self.collection.find_one_and_update.assert_not_called()

    def test_rate_limited_update_raises_throttled(self):
        self.collection.find_one_and_update.side_effect = OperationFailure('Request rate is large', 16500)

        with self.assertRaises(ThrottledError):
            self.repo.update('u1', UserPatch(last_login_at='2024-03-01T00:00:00Z'))


class TestDelete(MongoRepositoryTestCase):

    def test_delete_existing(self):
        self.collection.delete_one.return_value = MagicMock(deleted_count=1)

        self.repo.delete('u1')

        self.collection.delete_one.assert_called_once_with({'_id': 'u1'})

    def test_delete_missing_raises_not_found(self):
        self.collection.delete_one.return_value = MagicMock(deleted_count=0)

        with self.assertRaises(NotFoundError):
            self.repo.delete('missing')


class TestTranslateError(unittest.TestCase):

    def test_pool_exhaustion_is_throttled(self):
        self.assertIsInstance(translate_error(WaitQueueTimeoutError('pool exhausted')), ThrottledError)

    def test_unknown_operation_failure_is_store_unavailable(self):
        self.assertIsInstance(translate_error(OperationFailure('boom', 2)), StoreUnavailableError)


class TestPing(MongoRepositoryTestCase):

    def test_ping_failure_returns_false(self):
        self.db.command.side_effect = ServerSelectionTimeoutError('no servers')
        self.assertFalse(self.repo.ping())

    def test_ping_success(self):
        self.assertTrue(self.repo.ping())
        self.db.command.assert_called_once_with('ping')


class TestResetClient(unittest.TestCase):

    def tearDown(self):
        connection._client_cache = None

    def test_reset_closes_cached_client(self):
        client = MagicMock()
        connection._client_cache = client

        connection.reset_client()

        client.close.assert_called_once_with()
        self.assertIsNone(connection._client_cache)

    def test_reset_without_client_is_noop(self):
        connection._client_cache = None
        connection.reset_client()
        self.assertIsNone(connection._client_cache)
