"""
Pydantic models for study artifact generation.
Draft models validate model output before anything is persisted.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Dict, List, Optional, Any
from datetime import datetime, timezone
from enum import Enum
import uuid


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArtifactKind(str, Enum):
    FLASHCARDS = "flashcards"
    QUIZ = "quiz"
    SUMMARY = "summary"


class SummaryType(str, Enum):
    CONCISE = "concise"
    BULLET_POINTS = "bullet_points"
    KEY_DEFINITIONS = "key_definitions"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class RequestState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Stored rows
class SourceFile(BaseModel):
    """A file in the student's storage bucket. Never copied by artifacts."""
    id: str
    user_id: str
    name: str
    file_path: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    category: Optional[str] = "document"


class GeneratedArtifactRequest(BaseModel):
    """One user action; discarded once the pipeline completes."""
    file_id: str
    user_id: str
    kind: ArtifactKind
    summary_type: Optional[SummaryType] = None
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


# Parsed model output
class FlashcardDraft(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    difficulty: Difficulty = Difficulty.MEDIUM

    @field_validator("question", "answer", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalise_difficulty(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return Difficulty.MEDIUM
        return value.strip().lower() if isinstance(value, str) else value


class QuizQuestionDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1)
    options: Dict[str, str] = Field(..., min_length=1)
    correct_answer: str = Field(..., alias="correctAnswer", min_length=1)
    explanation: str = ""

    @field_validator("question", mode="before")
    @classmethod
    def _strip_question(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("explanation", mode="before")
    @classmethod
    def _explanation_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode="after")
    def _correct_answer_among_options(self) -> "QuizQuestionDraft":
        label = self.correct_answer.strip()
        if label in self.options:
            self.correct_answer = label
            return self
        for option_label in self.options:
            if option_label.strip().lower() == label.lower():
                self.correct_answer = option_label
                return self
        raise ValueError(
            f"correct answer {self.correct_answer!r} is not one of the options {list(self.options)}"
        )


class ChatMessage(BaseModel):
    role: ChatRole
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class GenerationStatus(BaseModel):
    """Explicit per-request status, keyed by request id."""
    request_id: str
    kind: ArtifactKind
    file_id: str
    user_id: str
    state: RequestState = RequestState.PENDING
    record_count: int = 0
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


# API request bodies (camelCase matches the web client)
class GenerateArtifactBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(..., alias="fileId", min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)
    request_id: Optional[str] = Field(None, alias="requestId", min_length=1)


class GenerateSummaryBody(GenerateArtifactBody):
    summary_type: SummaryType = Field(SummaryType.CONCISE, alias="summaryType")


class FlashcardReviewBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    correct: bool


class ChatRequestBody(BaseModel):
    """Full conversation resent by the client on every turn."""
    messages: List[ChatMessage] = Field(..., min_length=1)

    @field_validator("messages")
    @classmethod
    def _last_is_user(cls, value: List[ChatMessage]) -> List[ChatMessage]:
        if value[-1].role != ChatRole.USER or not value[-1].content.strip():
            raise ValueError("the last message must be a non-empty user message")
        return value
