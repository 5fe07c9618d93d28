import unittest
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from db.schema.api_key import ApiKeySave
from db.sql_util import SQLUtil


class ApiKeyCRUDTest(unittest.TestCase):
    sql: SQLUtil

    def setUp(self):
        self.sql = SQLUtil()

    def tearDown(self):
        self.sql.end_session()

    def test_create_api_key(self):
        api_key_data = ApiKeySave(id = "key-1", key = "fk-secret-1")

        api_key = self.sql.api_key_crud().create(api_key_data)

        self.assertEqual(api_key.id, api_key_data.id)
        self.assertEqual(api_key.key, api_key_data.key)
        self.assertIsInstance(api_key.created_at, datetime)

    def test_get_api_key(self):
        created_key = self.sql.api_key_crud().create(ApiKeySave(id = "key-1", key = "fk-secret-1"))

        fetched_key = self.sql.api_key_crud().get(created_key.id)

        self.assertIsNotNone(fetched_key)
        self.assertEqual(fetched_key.id, created_key.id)
        self.assertEqual(fetched_key.key, created_key.key)

    def test_get_missing_api_key(self):
        self.assertIsNone(self.sql.api_key_crud().get("missing"))

    def test_get_all_api_keys_sorted_by_id(self):
        self.sql.api_key_crud().create(ApiKeySave(id = "key-b", key = "fk-secret-b"))
        self.sql.api_key_crud().create(ApiKeySave(id = "key-a", key = "fk-secret-a"))
        self.sql.api_key_crud().create(ApiKeySave(id = "key-c", key = "fk-secret-c"))

        fetched_keys = self.sql.api_key_crud().get_all()

        self.assertEqual([key.id for key in fetched_keys], ["key-a", "key-b", "key-c"])

    def test_create_duplicate_key_is_rejected(self):
        self.sql.api_key_crud().create(ApiKeySave(id = "key-1", key = "fk-secret-1"))

        with self.assertRaises(IntegrityError):
            self.sql.api_key_crud().create(ApiKeySave(id = "key-2", key = "fk-secret-1"))

        # the session stays usable after the rollback
        self.assertEqual([key.id for key in self.sql.api_key_crud().get_all()], ["key-1"])
        self.sql.api_key_crud().create(ApiKeySave(id = "key-2", key = "fk-secret-2"))
        self.assertEqual(len(self.sql.api_key_crud().get_all()), 2)

    def test_get_by_key(self):
        self.sql.api_key_crud().create(ApiKeySave(id = "key-1", key = "fk-secret-1"))

        fetched_key = self.sql.api_key_crud().get_by_key("fk-secret-1")

        self.assertIsNotNone(fetched_key)
        self.assertEqual(fetched_key.id, "key-1")
        self.assertIsNone(self.sql.api_key_crud().get_by_key("fk-unknown"))

    def test_delete_api_key(self):
        created_key = self.sql.api_key_crud().create(ApiKeySave(id = "key-1", key = "fk-secret-1"))

        deleted_key = self.sql.api_key_crud().delete(created_key.id)

        self.assertEqual(deleted_key.id, created_key.id)
        self.assertIsNone(self.sql.api_key_crud().get(created_key.id))

    def test_delete_missing_api_key(self):
        self.assertIsNone(self.sql.api_key_crud().delete("missing"))

    def test_delete_all_counts_only_existing(self):
        self.sql.api_key_crud().create(ApiKeySave(id = "key-1", key = "fk-secret-1"))
        self.sql.api_key_crud().create(ApiKeySave(id = "key-2", key = "fk-secret-2"))
        self.sql.api_key_crud().create(ApiKeySave(id = "key-3", key = "fk-secret-3"))

        deleted = self.sql.api_key_crud().delete_all(["key-1", "key-3", "missing"])

        self.assertEqual(deleted, 2)
        self.assertEqual([key.id for key in self.sql.api_key_crud().get_all()], ["key-2"])

    def test_delete_all_empty_list(self):
        self.sql.api_key_crud().create(ApiKeySave(id = "key-1", key = "fk-secret-1"))

        self.assertEqual(self.sql.api_key_crud().delete_all([]), 0)
        self.assertEqual(len(self.sql.api_key_crud().get_all()), 1)
