from services.content_extractor import extract_text, placeholder_context
from services.response_parser import extract_json_payload, parse_flashcards, parse_quiz, parse_summary

__all__ = [
    'extract_text',
    'placeholder_context',
    'extract_json_payload',
    'parse_flashcards',
    'parse_quiz',
    'parse_summary'
]
