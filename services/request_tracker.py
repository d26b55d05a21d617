import logging
import threading
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Optional

from models.study_models import GeneratedArtifactRequest, GenerationStatus, RequestState
from utils.config import get_request_status_limit
from utils.exceptions import NotFoundError, StudyPlanError

logger = logging.getLogger(__name__)

FINISHED_STATES = (RequestState.SUCCEEDED, RequestState.FAILED)


class RequestStatusTracker:
    """
    In-process registry of generation request states, keyed by request id.

    Holds at most max_entries statuses. When full, the oldest finished
    requests are evicted; pending and running requests are never dropped.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries or get_request_status_limit()
        self._statuses: "OrderedDict[str, GenerationStatus]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._statuses)

    def register(self, request: GeneratedArtifactRequest) -> GenerationStatus:
        status = GenerationStatus(
            request_id=request.request_id,
            kind=request.kind,
            file_id=request.file_id,
            user_id=request.user_id,
        )
        with self._lock:
            self._statuses.pop(request.request_id, None)
            self._statuses[request.request_id] = status
            self._evict()
        return status.model_copy()

    def mark_running(self, request_id: str) -> None:
        self._update(request_id, state=RequestState.RUNNING)

    def mark_succeeded(self, request_id: str, record_count: int) -> None:
        self._update(request_id, state=RequestState.SUCCEEDED, record_count=record_count)

    def mark_failed(self, request_id: str, error: Exception) -> None:
        if isinstance(error, StudyPlanError):
            code, message = error.error_code, error.message
        else:
            code, message = "INTERNAL_ERROR", str(error)
        self._update(request_id, state=RequestState.FAILED, error_code=code, error_message=message)

    def get(self, request_id: str) -> GenerationStatus:
        with self._lock:
            status = self._statuses.get(request_id)
            if status is None:
                raise NotFoundError(f"Unknown generation request: {request_id}", error_code="REQUEST_NOT_FOUND")
            return status.model_copy()

    def _update(self, request_id: str, **fields) -> None:
        with self._lock:
            status = self._statuses.get(request_id)
            if status is None:
                logger.warning(f"Status update for unregistered request {request_id}")
                return
            self._statuses[request_id] = status.model_copy(
                update={**fields, "updated_at": datetime.now(timezone.utc)}
            )
            self._evict()

    def _evict(self) -> None:
        # caller holds the lock
        overflow = len(self._statuses) - self.max_entries
        if overflow <= 0:
            return
        finished = [rid for rid, s in self._statuses.items() if s.state in FINISHED_STATES]
        victims = finished[:overflow]
        for request_id in victims:
            del self._statuses[request_id]
        if victims:
            logger.info(f"Evicted {len(victims)} finished request statuses")
