import os
import unittest
from datetime import timedelta
from unittest.mock import patch

from models.study_models import ArtifactKind, GeneratedArtifactRequest, RequestState
from services.request_tracker import RequestStatusTracker
from utils.exceptions import NotFoundError, UpstreamError


class TestRequestStatusTracker(unittest.TestCase):
    def setUp(self):
        self.tracker = RequestStatusTracker()
        self.request = GeneratedArtifactRequest(file_id="file-1", user_id="user-1", kind=ArtifactKind.QUIZ)

    def test_lifecycle_to_success(self):
        self.assertEqual(self.tracker.register(self.request).state, RequestState.PENDING)
        self.tracker.mark_running(self.request.request_id)
        self.assertEqual(self.tracker.get(self.request.request_id).state, RequestState.RUNNING)

        self.tracker.mark_succeeded(self.request.request_id, 7)

        status = self.tracker.get(self.request.request_id)
        self.assertEqual(status.state, RequestState.SUCCEEDED)
        self.assertEqual(status.record_count, 7)
        self.assertGreaterEqual(status.updated_at, status.created_at)

    def test_failure_records_error_code(self):
        self.tracker.register(self.request)
        self.tracker.mark_failed(self.request.request_id, UpstreamError("Gemini API returned 500", upstream_status=500))

        status = self.tracker.get(self.request.request_id)
        self.assertEqual(status.state, RequestState.FAILED)
        self.assertEqual(status.error_code, "UPSTREAM_ERROR")

    def test_plain_exception_is_internal_error(self):
        self.tracker.register(self.request)
        self.tracker.mark_failed(self.request.request_id, RuntimeError("boom"))
        self.assertEqual(self.tracker.get(self.request.request_id).error_code, "INTERNAL_ERROR")

    def test_returned_status_is_a_copy(self):
        self.tracker.register(self.request)
        status = self.tracker.get(self.request.request_id)
        status.record_count = 99
        self.assertEqual(self.tracker.get(self.request.request_id).record_count, 0)

    def test_unknown_request(self):
        with self.assertRaises(NotFoundError):
            self.tracker.get("missing")

    def test_timestamps_are_timezone_aware(self):
        status = self.tracker.register(self.request)
        self.assertEqual(status.created_at.utcoffset(), timedelta(0))


def _request(i):
    return GeneratedArtifactRequest(file_id="file-1", user_id="user-1", kind=ArtifactKind.FLASHCARDS, request_id=f"req-{i}")


class TestTrackerBound(unittest.TestCase):
    def test_finished_entries_are_evicted_oldest_first(self):
        tracker = RequestStatusTracker(max_entries=3)
        for i in range(10):
            tracker.register(_request(i))
            tracker.mark_succeeded(f"req-{i}", 1)

        self.assertEqual(len(tracker), 3)
        with self.assertRaises(NotFoundError):
            tracker.get("req-0")
        self.assertEqual(tracker.get("req-9").state, RequestState.SUCCEEDED)

    def test_in_flight_entries_are_kept(self):
        tracker = RequestStatusTracker(max_entries=2)
        tracker.register(_request(0))
        tracker.mark_running("req-0")
        for i in range(1, 5):
            tracker.register(_request(i))
            tracker.mark_failed(f"req-{i}", RuntimeError("boom"))

        self.assertEqual(tracker.get("req-0").state, RequestState.RUNNING)
        self.assertEqual(len(tracker), 2)

    @patch.dict(os.environ, {"REQUEST_STATUS_LIMIT": "5"})
    def test_limit_from_environment(self):
        self.assertEqual(RequestStatusTracker().max_entries, 5)


if __name__ == '__main__':
    unittest.main()
