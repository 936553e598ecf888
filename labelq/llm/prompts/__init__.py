"""
Prompt Management Module

Loads LLM prompt templates from text files next to this module so prompt
wording can change without touching code.
"""

from __future__ import annotations

from pathlib import Path

PROMPTS_DIR = Path(__file__).parent


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self) -> None:
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

    def get_smart_label_prompt(self, *, label_definitions: str, threads: str) -> str:
        """
        Get the smart label classification prompt with variables injected.

        Args:
            label_definitions: One `LABEL_ID:<id> — <description>` line per label
            threads: One `ID:<thread> | From: ... | Subject: ... | <snippet>` line per thread
        """
        template = self.load_prompt("smart_label_prompt")
        return template.format(label_definitions=label_definitions, threads=threads)


# Global instance
_loader = PromptLoader()


def get_smart_label_prompt(*, label_definitions: str, threads: str) -> str:
    """Get smart label prompt (convenience function)"""
    return _loader.get_smart_label_prompt(label_definitions=label_definitions, threads=threads)
