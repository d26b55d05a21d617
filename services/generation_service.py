"""
Study artifact generation service.

Runs the pipeline for one user action:
file -> extracted text -> prompt -> model output -> validated items -> one batch write.
Every stage fails fast; nothing is retried here.
"""

import logging
import time
from typing import Any, Dict, Optional, Tuple

from clients import supabase_client
from clients.generation_client import generate_text
from models.study_models import (
    ArtifactKind, GeneratedArtifactRequest, SourceFile, SummaryType
)
from prompts.study_prompts import build_prompt
from services import persistence_writer
from services.content_extractor import extract_text, placeholder_context
from services.request_tracker import RequestStatusTracker
from services.response_parser import parse_flashcards, parse_quiz, parse_summary
from utils.exceptions import StudyPlanError, ValidationError

logger = logging.getLogger(__name__)


class StudyArtifactService:
    """Generates flashcards, quizzes and summaries from a stored file"""

    def __init__(self, tracker: Optional[RequestStatusTracker] = None):
        self.tracker = tracker or RequestStatusTracker()

    def generate_flashcards(self, file_id: str, user_id: str, request_id: Optional[str] = None) -> Dict[str, Any]:
        request = self._new_request(file_id, user_id, ArtifactKind.FLASHCARDS, request_id=request_id)
        return self.run(request)

    def generate_quiz(self, file_id: str, user_id: str, request_id: Optional[str] = None) -> Dict[str, Any]:
        request = self._new_request(file_id, user_id, ArtifactKind.QUIZ, request_id=request_id)
        return self.run(request)

    def generate_summary(
        self,
        file_id: str,
        user_id: str,
        summary_type: str = "concise",
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        try:
            variant = SummaryType(summary_type)
        except ValueError:
            raise ValidationError(
                f"Unknown summary type: {summary_type}. Available: {[s.value for s in SummaryType]}",
                error_code="INVALID_SUMMARY_TYPE",
            )
        request = self._new_request(file_id, user_id, ArtifactKind.SUMMARY, variant, request_id)
        return self.run(request)

    def run(self, request: GeneratedArtifactRequest) -> Dict[str, Any]:
        """Execute one request end to end and record its status."""
        self.tracker.register(request)
        self.tracker.mark_running(request.request_id)
        start_time = time.time()
        logger.info(f"[{request.request_id}] Generating {request.kind.value} for file {request.file_id}")

        try:
            source, text = self._load_source(request.file_id, request.user_id)
            if request.kind == ArtifactKind.FLASHCARDS:
                result, count = self._flashcards(request, source, text)
            elif request.kind == ArtifactKind.QUIZ:
                result, count = self._quiz(request, source, text)
            else:
                result, count = self._summary(request, source, text)
        except Exception as e:
            logger.error(f"[{request.request_id}] {request.kind.value} generation failed: {e}")
            self.tracker.mark_failed(request.request_id, e)
            if isinstance(e, StudyPlanError):
                e.context.setdefault("request_id", request.request_id)
            raise

        self.tracker.mark_succeeded(request.request_id, count)
        elapsed = time.time() - start_time
        logger.info(f"[{request.request_id}] {request.kind.value} generation completed in {elapsed:.2f}s ({count} records)")
        return {"success": True, "requestId": request.request_id, **result}

    def _new_request(
        self,
        file_id: str,
        user_id: str,
        kind: ArtifactKind,
        summary_type: Optional[SummaryType] = None,
        request_id: Optional[str] = None
    ) -> GeneratedArtifactRequest:
        if not file_id or not user_id:
            raise ValidationError("Missing required fields: fileId and userId")
        fields = {"file_id": file_id, "user_id": user_id, "kind": kind, "summary_type": summary_type}
        if request_id:
            fields["request_id"] = request_id
        return GeneratedArtifactRequest(**fields)

    def _load_source(self, file_id: str, user_id: str) -> Tuple[SourceFile, str]:
        source = SourceFile.model_validate(supabase_client.get_file_record(file_id, user_id))
        data = supabase_client.download_file(source.file_path)
        text = extract_text(data, source.file_type, source.name)
        if not text.strip():
            logger.warning(f"No text extracted from {source.name}, using filename context")
            text = placeholder_context(source.name)
        return source, text

    def _flashcards(self, request, source: SourceFile, text: str) -> Tuple[Dict[str, Any], int]:
        prompt = build_prompt(text, request.kind.value, file_name=source.name)
        cards = parse_flashcards(generate_text(prompt))
        inserted = persistence_writer.write_flashcards(cards, request.user_id, request.file_id)
        return {
            "flashcards": inserted,
            "message": f"Generated {len(inserted)} flashcards successfully!",
        }, len(inserted)

    def _quiz(self, request, source: SourceFile, text: str) -> Tuple[Dict[str, Any], int]:
        prompt = build_prompt(text, request.kind.value, file_name=source.name)
        questions = parse_quiz(generate_text(prompt))
        quiz, inserted = persistence_writer.write_quiz(
            questions, request.user_id, request.file_id, title=f"Quiz: {source.name}"
        )
        return {"quizId": quiz["id"], "questionCount": len(inserted)}, len(inserted)

    def _summary(self, request, source: SourceFile, text: str) -> Tuple[Dict[str, Any], int]:
        summary_type = (request.summary_type or SummaryType.CONCISE).value
        prompt = build_prompt(text, request.kind.value, summary_type=summary_type, file_name=source.name)
        content = parse_summary(generate_text(prompt))
        summary = persistence_writer.write_summary(content, request.user_id, request.file_id, summary_type)
        return {"summary": summary}, 1
