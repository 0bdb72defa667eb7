"""Shared test configuration, sample documents and fake prompt executors."""

import asyncio
import json

import pytest

from models.schemas.raw_document import RawDocument
from services.errors import AIProviderError
from services.prompt_executor import PromptResponse, TokenUsage


SAMPLE_RESUME = """Jane Doe
jane.doe@example.com | (555) 123-4567 | Austin, TX

SUMMARY
Backend engineer with 6 years of experience building APIs.

EXPERIENCE
Senior Engineer - Acme Corp
Jan 2020 - Present, Remote
• Shipped X to 2M users
• Led Y

Software Engineer at Initech
Jun 2016 - Dec 2019, Austin, TX
• Built billing service

EDUCATION
State University
B.S. in Computer Science, 2016

SKILLS
Languages: Python, SQL
Tools: Docker, Git
"""


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end parse scenarios on literal documents"
    )


class StaticExecutor:
    """Returns the same completion for every prompt and records the calls."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.calls = []

    async def execute(self, messages, options):
        self.calls.append((list(messages), options))
        return PromptResponse(text=self.text, usage=TokenUsage(input=100, output=50))


class FailingExecutor:
    async def execute(self, messages, options):
        raise AIProviderError("503 Service Unavailable")


class SlowExecutor:
    """Never answers within a test's patience."""

    def __init__(self) -> None:
        self.cancelled = False

    async def execute(self, messages, options):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return PromptResponse(text="{}")


@pytest.fixture
def sample_document() -> RawDocument:
    return RawDocument(text=SAMPLE_RESUME)


@pytest.fixture
def ai_executor():
    """Factory: ai_executor({...}) answers with that payload as JSON, ai_executor("...") verbatim."""
    def make(payload, prose: str = "") -> StaticExecutor:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        return StaticExecutor(prose + text)
    return make


@pytest.fixture
def failing_executor() -> FailingExecutor:
    return FailingExecutor()


@pytest.fixture
def slow_executor() -> SlowExecutor:
    return SlowExecutor()
