"""
Prompt Management Module

Loads LLM prompts from text files next to this module so prompt wording can
change without touching code.
"""

from __future__ import annotations

import os
from pathlib import Path

PROMPTS_DIR = Path(__file__).parent

# Set FEEDBACKQ_ANALYSIS_PROMPT to use an alternate prompt file
ANALYSIS_PROMPT_NAME = os.getenv("FEEDBACKQ_ANALYSIS_PROMPT", "feedback_analysis")


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self):
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load a prompt template from file.

        Args:
            prompt_name: Name of the prompt file (without .txt extension)

        Returns:
            Prompt template string
        """
        if prompt_name not in self._cache:
            prompt_path = PROMPTS_DIR / f"{prompt_name}.txt"

            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")

            with open(prompt_path, encoding="utf-8") as f:
                self._cache[prompt_name] = f.read()

        return self._cache[prompt_name]

    def get_analysis_prompt(self, feedback: str) -> str:
        """Get the feedback analysis prompt with the feedback text injected."""
        template = self.load_prompt(ANALYSIS_PROMPT_NAME)
        return template.format(feedback=feedback)


_loader = PromptLoader()


def get_analysis_prompt(feedback: str) -> str:
    """Convenience wrapper around the shared PromptLoader."""
    return _loader.get_analysis_prompt(feedback)
