import os
import unittest
from unittest.mock import patch

from prompts.study_prompts import build_prompt, truncate_content
from utils.exceptions import ValidationError

BUDGETS = {
    "FLASHCARD_CONTENT_BUDGET": "8000",
    "QUIZ_CONTENT_BUDGET": "8000",
    "SUMMARY_CONTENT_BUDGET": "50000",
}


@patch.dict(os.environ, BUDGETS)
class TestPromptBuilder(unittest.TestCase):
    def test_embedded_content_never_exceeds_budget(self):
        limits = {"flashcards": 8000, "quiz": 8000, "summary": 50000}
        for kind, limit in limits.items():
            for length in (1, 500, limit - 1, limit, limit + 1, limit * 3):
                prompt = build_prompt("x" * length, kind, file_name="notes.txt")
                self.assertLessEqual(len(prompt.content), limit, f"{kind} at {length}")
                self.assertIn(prompt.content, prompt.user)

    def test_summary_budget_is_larger_than_flashcard_budget(self):
        text = "y" * 20000
        self.assertEqual(len(build_prompt(text, "flashcards").content), 8000)
        self.assertEqual(len(build_prompt(text, "summary").content), 20000)

    def test_budget_comes_from_environment(self):
        with patch.dict(os.environ, {"FLASHCARD_CONTENT_BUDGET": "100"}):
            self.assertEqual(len(truncate_content("z" * 1000, "flashcards")), 100)

    def test_empty_content_uses_placeholder(self):
        prompt = build_prompt("   ", "quiz", file_name="week3.pptx")
        self.assertIn("week3.pptx", prompt.content)

    def test_flashcard_contract(self):
        prompt = build_prompt("Osmosis moves water.", "flashcards")
        self.assertIn("between 5 and 10", prompt.system)
        self.assertIn('"difficulty"', prompt.system)
        self.assertIn("easy, medium, hard", prompt.system)
        self.assertEqual(prompt.as_messages()[0]["role"], "system")
        self.assertTrue(prompt.user.endswith("Osmosis moves water."))

    def test_quiz_contract_requires_four_options(self):
        prompt = build_prompt("Osmosis moves water.", "quiz")
        self.assertIn("exactly four options", prompt.system)
        self.assertIn('"correctAnswer"', prompt.system)
        self.assertIn('"explanation"', prompt.system)

    def test_summary_variants(self):
        bullets = build_prompt("text", "summary", summary_type="bullet_points")
        definitions = build_prompt("text", "summary", summary_type="key_definitions")
        concise = build_prompt("text", "summary")
        self.assertIn("bullet", bullets.system)
        self.assertIn("**Term:**", definitions.system)
        self.assertIn("paragraph", concise.system)
        self.assertTrue(concise.as_text().startswith(concise.system))

    def test_unknown_summary_type_rejected(self):
        with self.assertRaises(ValidationError):
            build_prompt("text", "summary", summary_type="haiku")

    def test_prompt_is_deterministic(self):
        self.assertEqual(build_prompt("same", "quiz"), build_prompt("same", "quiz"))


if __name__ == '__main__':
    unittest.main()
