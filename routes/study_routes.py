"""
FastAPI routes for study artifact generation and the study assistant chat.
Request bodies mirror what the web client sends (camelCase ids).
"""

from fastapi import APIRouter, UploadFile, File, Form
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool
from typing import Optional
import json
import logging

from models.study_models import (
    ChatRequestBody, GenerateArtifactBody, GenerateSummaryBody, FlashcardReviewBody
)
from services.chat_service import ChatSession
from services.file_service import upload_source_file
from services.flashcard_review import record_review
from services.generation_service import StudyArtifactService
from utils.exceptions import StudyPlanError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["study"])

# Initialize services
artifact_service = StudyArtifactService()


@router.post("/files", status_code=201)
async def upload_file(
    user_id: str = Form(...),
    file: UploadFile = File(...)
):
    """Upload a study file to {userId}/{timestamp}.{ext} and record it."""
    data = await file.read()
    # storage and table writes are blocking calls
    source = await run_in_threadpool(
        upload_source_file, user_id, file.filename or "upload", data, file.content_type
    )
    return {"success": True, "file": source.model_dump()}


@router.post("/generate-flashcards")
def generate_flashcards(request: GenerateArtifactBody):
    """
    Generate 5-10 flashcards from one file and store them as a single batch.
    Blocking - returns once the rows are written. Pass requestId to look the
    request up later, including after a failure.
    """
    return artifact_service.generate_flashcards(
        request.file_id, request.user_id, request_id=request.request_id
    )


@router.post("/generate-quiz")
def generate_quiz(request: GenerateArtifactBody):
    """Generate a multiple choice quiz (four options per question) from one file."""
    return artifact_service.generate_quiz(
        request.file_id, request.user_id, request_id=request.request_id
    )


@router.post("/generate-summary")
def generate_summary(request: GenerateSummaryBody):
    """Generate a concise, bullet_points or key_definitions summary of one file."""
    return artifact_service.generate_summary(
        request.file_id, request.user_id, request.summary_type.value, request_id=request.request_id
    )


@router.get("/generation-requests/{request_id}")
def get_generation_status(request_id: str):
    """Status of a generation request: pending, running, succeeded or failed."""
    return artifact_service.tracker.get(request_id).model_dump(mode="json")


@router.post("/flashcards/{flashcard_id}/review")
def review_flashcard(flashcard_id: str, request: FlashcardReviewBody):
    """Record one study-session answer; mastery moves one step up or down."""
    flashcard = record_review(flashcard_id, request.user_id, request.correct)
    return {"success": True, "flashcard": flashcard}


# SSE Streaming Helpers

def _sse_event(data: dict) -> str:
    """Format a dict as an SSE data line."""
    return f"data: {json.dumps(data, default=str)}\n\n"


def _sse_error_event(exc: Exception, context: Optional[dict] = None) -> str:
    """Build a structured SSE error event from an exception."""
    if isinstance(exc, StudyPlanError):
        error_code, status_code, message = exc.error_code, exc.status_code, exc.message
        context = exc.context
    else:
        error_code, status_code, message = "INTERNAL_ERROR", 500, "Failed to get response"
    return _sse_event({
        "type": "error",
        "error": error_code,
        "message": message,
        "status_code": status_code,
        "context": context,
    })


@router.post("/chat")
def chat(request: ChatRequestBody):
    """
    Relay the conversation to the study assistant and stream the reply as SSE.

    Events: {"type": "delta", "content"} per chunk, then {"type": "done"}.
    Rate-limit (429), payment (402) and start-up failures are returned as
    plain error responses; failures after the first chunk arrive as an
    {"type": "error"} event.
    """
    session = ChatSession(history=request.messages[:-1])
    deltas = session.stream_reply(request.messages[-1].content)
    # pull the first chunk here so start-up failures keep their HTTP status
    first = next(deltas, None)

    def event_generator():
        try:
            if first is not None:
                yield _sse_event({"type": "delta", "content": first})
                for delta in deltas:
                    yield _sse_event({"type": "delta", "content": delta})
            yield _sse_event({"type": "done"})
        except Exception as e:
            logger.error(f"Chat SSE stream error: {e}")
            yield _sse_error_event(e)

    return StreamingResponse(event_generator(), media_type="text/event-stream")
