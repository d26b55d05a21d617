import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from clients import supabase_client
from utils.config import get_mastery_settings

logger = logging.getLogger(__name__)


def adjust_mastery(level: Optional[int], correct: bool, settings: Optional[Dict[str, int]] = None) -> int:
    """Move mastery one step up or down, clamped to the configured bounds."""
    settings = settings or get_mastery_settings()
    current = level if level is not None else settings["min"]
    moved = current + settings["step"] if correct else current - settings["step"]
    return max(settings["min"], min(moved, settings["max"]))


def record_review(flashcard_id: str, user_id: str, correct: bool) -> Dict[str, Any]:
    """Apply one study-session answer to a flashcard's review statistics."""
    card = supabase_client.get_flashcard(flashcard_id, user_id)
    new_level = adjust_mastery(card.get("mastery_level"), correct)
    updated = supabase_client.update_flashcard(flashcard_id, user_id, {
        "last_reviewed": datetime.now(timezone.utc).isoformat(),
        "review_count": (card.get("review_count") or 0) + 1,
        "mastery_level": new_level,
    })
    logger.info(f"Flashcard {flashcard_id} reviewed (correct={correct}), mastery {card.get('mastery_level')} -> {new_level}")
    return updated
