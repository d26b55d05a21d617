"""
Prompt templates for flashcard, quiz and summary generation.
Every template pins the output format so the response parser can validate it.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from services.content_extractor import placeholder_context
from utils.config import get_content_budgets
from utils.exceptions import ValidationError


FLASHCARD_SYSTEM_PROMPT = """You are an educational AI assistant that creates flashcards for students.
Based on the provided content, create between 5 and 10 flashcards that help students learn and review the material.
Each flashcard must have a clear question and a comprehensive answer.

OUTPUT FORMAT (JSON array only - no markdown, no prose before or after the array):
[
  {
    "question": "Clear, specific question about the content",
    "answer": "Detailed answer that explains the concept",
    "difficulty": "easy|medium|hard"
  }
]

RULES:
1. Return between 5 and 10 objects.
2. "difficulty" must be exactly one of: easy, medium, hard.
3. Questions should test understanding, not just memorization. Mix difficulty levels.
4. Do not include any explanation or commentary outside the JSON array."""

QUIZ_SYSTEM_PROMPT = """You are an educational AI assistant that writes multiple choice quizzes for students.
Based on the provided content, write between 5 and 10 multiple choice questions.

OUTPUT FORMAT (JSON array only - no markdown, no prose before or after the array):
[
  {
    "question": "What is...",
    "options": {
      "A": "Option A",
      "B": "Option B",
      "C": "Option C",
      "D": "Option D"
    },
    "correctAnswer": "A",
    "explanation": "The correct answer is A because..."
  }
]

RULES:
1. Return between 5 and 10 objects.
2. Every question has exactly four options labelled A, B, C and D.
3. "correctAnswer" is exactly one of the labels A, B, C or D, and only one option is correct.
4. "explanation" justifies why the correct option is right.
5. Do not include any explanation or commentary outside the JSON array."""

SUMMARY_SYSTEM_PROMPTS: Dict[str, str] = {
    "concise": (
        "You are a helpful study assistant that creates concise, well-organized summaries "
        "from lecture notes and documents. Your summary should capture the main ideas, key "
        "points, and essential information in a clear, easy-to-understand paragraph format. "
        "Keep it focused and comprehensive without being too lengthy."
    ),
    "bullet_points": (
        "You are a helpful study assistant that creates clear, concise bullet-point summaries "
        "from lecture notes and documents. Format your response as a series of bullet points "
        "(using - ) that capture the key concepts and facts. Focus on the most important "
        "information that students need to remember."
    ),
    "key_definitions": (
        "You are a helpful study assistant that identifies and defines key terms and concepts "
        "from lecture notes and documents. Format your response as a list of terms with their "
        "definitions. Each entry should be: **Term:** followed by the definition. Focus on "
        "important vocabulary, concepts, and terminology that students need to understand."
    ),
}

SUMMARY_OUTPUT_RULE = "Respond with the summary text only, without any preamble or closing remarks."


@dataclass(frozen=True)
class GenerationPrompt:
    kind: str
    system: str
    user: str
    content: str

    def as_messages(self) -> List[Dict[str, str]]:
        """Chat-completion message list."""
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]

    def as_text(self) -> str:
        """Single prompt string for completion-style backends."""
        return f"{self.system}\n\n{self.user}"


def truncate_content(content: str, kind: str) -> str:
    """Cut content to the character budget configured for kind."""
    budgets = get_content_budgets()
    if kind not in budgets:
        raise ValidationError(f"Unknown artifact kind: {kind}", error_code="INVALID_ARTIFACT_KIND")
    return content[:budgets[kind]]


def build_flashcard_prompt(content: str) -> GenerationPrompt:
    return GenerationPrompt(
        kind="flashcards",
        system=FLASHCARD_SYSTEM_PROMPT,
        user=f"Create flashcards from this content:\n\n{content}",
        content=content,
    )


def build_quiz_prompt(content: str) -> GenerationPrompt:
    return GenerationPrompt(
        kind="quiz",
        system=QUIZ_SYSTEM_PROMPT,
        user=f"Content to generate the quiz from:\n\n{content}",
        content=content,
    )


def build_summary_prompt(content: str, summary_type: str = "concise") -> GenerationPrompt:
    if summary_type not in SUMMARY_SYSTEM_PROMPTS:
        raise ValidationError(
            f"Unknown summary type: {summary_type}. Available: {list(SUMMARY_SYSTEM_PROMPTS)}",
            error_code="INVALID_SUMMARY_TYPE",
        )
    return GenerationPrompt(
        kind="summary",
        system=f"{SUMMARY_SYSTEM_PROMPTS[summary_type]}\n{SUMMARY_OUTPUT_RULE}",
        user=f"Please create a {summary_type.replace('_', ' ')} summary from the following content:\n\n{content}",
        content=content,
    )


def build_prompt(
    content: str,
    kind: str,
    summary_type: Optional[str] = None,
    file_name: Optional[str] = None
) -> GenerationPrompt:
    """
    Build the prompt for an artifact kind.

    Empty content is replaced by filename placeholder context, then the content
    is truncated to the kind's budget before it is embedded.
    """
    if not content or not content.strip():
        content = placeholder_context(file_name or "unnamed file")
    limited = truncate_content(content, kind)

    if kind == "flashcards":
        return build_flashcard_prompt(limited)
    if kind == "quiz":
        return build_quiz_prompt(limited)
    return build_summary_prompt(limited, summary_type or "concise")
