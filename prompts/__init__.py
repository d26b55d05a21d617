# Prompts module initialization

# Study artifact prompts
from .study_prompts import (
    GenerationPrompt,
    build_prompt,
    build_flashcard_prompt,
    build_quiz_prompt,
    build_summary_prompt,
    truncate_content,
    SUMMARY_SYSTEM_PROMPTS
)

__all__ = [
    'GenerationPrompt',
    'build_prompt',
    'build_flashcard_prompt',
    'build_quiz_prompt',
    'build_summary_prompt',
    'truncate_content',
    'SUMMARY_SYSTEM_PROMPTS'
]
