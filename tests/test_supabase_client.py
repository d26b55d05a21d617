import os
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from clients import supabase_client
from utils.exceptions import ConfigurationError, NotFoundError, PersistenceError, UpstreamError


class TestSupabaseClient(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        patcher = patch("clients.supabase_client.get_supabase", return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _insert_returns(self, data):
        self.client.table.return_value.insert.return_value.execute.return_value = SimpleNamespace(data=data)

    def test_insert_rows_sends_one_batch(self):
        rows = [{"question": "a"}, {"question": "b"}]
        self._insert_returns([dict(r, id=str(i)) for i, r in enumerate(rows)])

        inserted = supabase_client.insert_rows("flashcards", rows)

        self.client.table.assert_called_once_with("flashcards")
        self.client.table.return_value.insert.assert_called_once_with(rows)
        self.assertEqual([r["id"] for r in inserted], ["0", "1"])

    def test_partial_result_is_failure(self):
        self._insert_returns([{"id": "0"}])
        with self.assertRaises(PersistenceError):
            supabase_client.insert_rows("flashcards", [{"q": 1}, {"q": 2}])

    def test_rejected_insert_is_failure(self):
        self.client.table.return_value.insert.return_value.execute.side_effect = Exception("check constraint")
        with self.assertRaises(PersistenceError):
            supabase_client.insert_rows("flashcards", [{"q": 1}])

    def test_empty_batch_refused(self):
        with self.assertRaises(PersistenceError):
            supabase_client.insert_rows("flashcards", [])
        self.client.table.assert_not_called()

    def test_file_record_scoped_to_owner(self):
        query = self.client.table.return_value.select.return_value
        query.eq.return_value.eq.return_value.limit.return_value.execute.return_value = SimpleNamespace(
            data=[{"id": "file-1", "user_id": "user-1"}]
        )

        row = supabase_client.get_file_record("file-1", "user-1")

        self.assertEqual(row["id"], "file-1")
        query.eq.assert_called_once_with("id", "file-1")
        query.eq.return_value.eq.assert_called_once_with("user_id", "user-1")

    def test_missing_file_is_not_found(self):
        query = self.client.table.return_value.select.return_value
        query.eq.return_value.eq.return_value.limit.return_value.execute.return_value = SimpleNamespace(data=[])
        with self.assertRaises(NotFoundError):
            supabase_client.get_file_record("file-x", "user-1")

    @patch.dict(os.environ, {"STORAGE_BUCKET": "student-files"})
    def test_download_failure_is_upstream_error(self):
        self.client.storage.from_.return_value.download.side_effect = Exception("Object not found")
        with self.assertRaises(UpstreamError):
            supabase_client.download_file("user-1/1.pdf")
        self.client.storage.from_.assert_called_with("student-files")

    def test_upload_passes_content_type(self):
        supabase_client.upload_file("user-1/1.pdf", b"%PDF", "application/pdf")
        self.client.storage.from_.return_value.upload.assert_called_once_with(
            "user-1/1.pdf", b"%PDF", {"content-type": "application/pdf"}
        )


class TestGetSupabase(unittest.TestCase):
    @patch.object(supabase_client, "_supabase_client", None)
    @patch.dict(os.environ, {"SUPABASE_URL": "", "SUPABASE_SERVICE_ROLE_KEY": "", "SUPABASE_KEY": ""})
    def test_missing_credentials_is_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            supabase_client.get_supabase()


if __name__ == '__main__':
    unittest.main()
