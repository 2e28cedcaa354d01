"""Prompt generation for directories that still need documentation."""

from .builder import PromptBuilder
from .constants import DEFAULT_PROMPT_FILENAME, DEFAULT_PROMPT_TEMPLATE

__all__ = ["DEFAULT_PROMPT_FILENAME", "DEFAULT_PROMPT_TEMPLATE", "PromptBuilder"]
