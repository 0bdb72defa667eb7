"""Shared dependencies for API routes."""

from services.gemini_client import get_executor
from services.prompt_executor import PromptExecutor


def get_prompt_executor() -> PromptExecutor | None:
    return get_executor()
