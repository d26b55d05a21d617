"""
Maps validated drafts to artifact rows and writes each request as one batch.
"""

import logging
from typing import Any, Dict, List, Tuple

from clients import supabase_client
from models.study_models import FlashcardDraft, QuizQuestionDraft
from utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def _require_owner(user_id: str, file_id: str) -> None:
    if not user_id or not file_id:
        raise PersistenceError(
            "Artifact rows require both user_id and file_id",
            context={"user_id": user_id, "file_id": file_id},
        )


def flashcard_rows(cards: List[FlashcardDraft], user_id: str, file_id: str) -> List[Dict[str, Any]]:
    return [
        {
            "user_id": user_id,
            "file_id": file_id,
            "question": card.question,
            "answer": card.answer,
            "difficulty_level": card.difficulty.value,
        }
        for card in cards
    ]


def quiz_question_rows(questions: List[QuizQuestionDraft], quiz_id: str) -> List[Dict[str, Any]]:
    return [
        {
            "quiz_id": quiz_id,
            "question": q.question,
            "options": q.options,
            "correct_answer": q.correct_answer,
            "explanation": q.explanation,
        }
        for q in questions
    ]


def write_flashcards(cards: List[FlashcardDraft], user_id: str, file_id: str) -> List[Dict[str, Any]]:
    """Insert all flashcards for one request in a single batch."""
    _require_owner(user_id, file_id)
    if not cards:
        raise PersistenceError("No flashcards to write")
    inserted = supabase_client.insert_rows("flashcards", flashcard_rows(cards, user_id, file_id))
    logger.info(f"Inserted {len(inserted)} flashcards for file {file_id}")
    return inserted


def write_quiz(
    questions: List[QuizQuestionDraft],
    user_id: str,
    file_id: str,
    title: str
) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Insert the quiz row, then all of its questions as one batch.

    A rejected question batch propagates as PersistenceError; the quiz row is
    left to the store's own cascade rules.
    """
    _require_owner(user_id, file_id)
    if not questions:
        raise PersistenceError("No quiz questions to write")
    quiz = supabase_client.insert_row("quizzes", {
        "user_id": user_id,
        "file_id": file_id,
        "title": title,
    })
    inserted = supabase_client.insert_rows("quiz_questions", quiz_question_rows(questions, quiz["id"]))
    logger.info(f"Inserted quiz {quiz['id']} with {len(inserted)} questions for file {file_id}")
    return quiz, inserted


def write_summary(content: str, user_id: str, file_id: str, summary_type: str) -> Dict[str, Any]:
    _require_owner(user_id, file_id)
    if not content:
        raise PersistenceError("No summary content to write")
    summary = supabase_client.insert_row("summaries", {
        "user_id": user_id,
        "file_id": file_id,
        "summary_type": summary_type,
        "content": content,
    })
    logger.info(f"Inserted {summary_type} summary {summary.get('id')} for file {file_id}")
    return summary
