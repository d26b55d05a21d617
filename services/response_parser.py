"""
Structured-payload recovery from raw model output.

Parsing is two-stage: a strict json.loads of the whole text, then a bounded
scan for bracket-delimited spans of the expected type. Nothing here returns an
empty result as success.
"""

import json
import logging
import re
from typing import Any, Callable, List, Optional, Type, Union

from pydantic import ValidationError as PydanticValidationError

from models.study_models import FlashcardDraft, QuizQuestionDraft
from utils.exceptions import ParseError

logger = logging.getLogger(__name__)

MAX_RECOVERY_ATTEMPTS = 50

_BRACKETS = {list: ("[", "]"), dict: ("{", "}")}
_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)


def _matching_close(text: str, start: int, open_char: str, close_char: str) -> Optional[int]:
    """Index of the bracket closing text[start], skipping brackets inside JSON strings."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return i
    return None


def _scan_for_payload(text: str, expected: Type, accept: Callable[[Any], bool]) -> Optional[Any]:
    """Longest accepted bracket span; a short span in the prose never shadows the payload."""
    open_char, close_char = _BRACKETS[expected]
    best = None
    best_length = 0
    position = text.find(open_char)
    attempts = 0
    while position != -1 and attempts < MAX_RECOVERY_ATTEMPTS:
        attempts += 1
        end = _matching_close(text, position, open_char, close_char)
        if end is not None and end + 1 - position > best_length:
            try:
                value = json.loads(text[position:end + 1])
            except json.JSONDecodeError:
                value = None
            if isinstance(value, expected) and accept(value):
                best, best_length = value, end + 1 - position
        position = text.find(open_char, position + 1)
    return best


def _any_value(value: Any) -> bool:
    return True


def _object_items(value: Any) -> bool:
    return all(isinstance(item, dict) for item in value)


def extract_json_payload(
    text: str,
    expected: Type = list,
    accept: Optional[Callable[[Any], bool]] = None
) -> Union[list, dict]:
    """
    Parse a JSON array (or object) out of model output.

    Args:
        text: Raw generated text, possibly wrapped in prose or code fences.
        expected: list or dict.
        accept: Optional shape check; spans that parse but fail it are skipped.

    Returns:
        The parsed value, of the expected type. When several spans qualify,
        the longest one wins.

    Raises:
        ParseError if no well-formed span of the expected type is found.
    """
    if expected not in _BRACKETS:
        raise ValueError(f"expected must be list or dict, got {expected!r}")
    if not text or not text.strip():
        raise ParseError("Unparseable model output: empty response")
    accept = accept or _any_value

    try:
        value = json.loads(text.strip())
        if isinstance(value, expected) and accept(value):
            return value
    except json.JSONDecodeError:
        pass

    value = _scan_for_payload(text, expected, accept)
    if value is None:
        logger.error(f"Could not extract JSON {expected.__name__} from: {text[:500]}")
        raise ParseError(
            f"Unparseable model output: no JSON {expected.__name__} found",
            context={"preview": text[:200]},
        )
    return value


def _require_items(text: str, label: str) -> List[Any]:
    items = extract_json_payload(text, list, accept=_object_items)
    if not items:
        raise ParseError(f"Model returned an empty {label} list")
    return items


def parse_flashcards(text: str) -> List[FlashcardDraft]:
    """Validate every item as a flashcard; one bad item rejects the batch."""
    items = _require_items(text, "flashcard")
    try:
        cards = [FlashcardDraft.model_validate(item) for item in items]
    except PydanticValidationError as e:
        raise ParseError(f"Invalid flashcard in model output: {e}") from e
    logger.info(f"Parsed {len(cards)} flashcards")
    return cards


def parse_quiz(text: str) -> List[QuizQuestionDraft]:
    """Validate every item as a quiz question whose correct label is one of its options."""
    items = _require_items(text, "quiz question")
    try:
        questions = [QuizQuestionDraft.model_validate(item) for item in items]
    except PydanticValidationError as e:
        raise ParseError(f"Invalid quiz question in model output: {e}") from e
    logger.info(f"Parsed {len(questions)} quiz questions")
    return questions


def parse_summary(text: str) -> str:
    content = (text or "").strip()
    fenced = _FENCE_RE.match(content)
    if fenced:
        content = fenced.group(1).strip()
    if not content:
        raise ParseError("Model returned an empty summary")
    return content
