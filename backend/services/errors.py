"""Error taxonomy for the resume parsing pipeline.

Only CatastrophicExtractionFailure signals a broken heuristic path. The AI
errors and SchemaValidationError travel inside Err results and end up as
warnings or validation errors on the final result.
"""

from typing import NamedTuple


class ParsingError(Exception):
    """Base class for all pipeline errors."""


class AIGenerationError(ParsingError):
    """The AI candidate could not be produced."""


class AIProviderError(AIGenerationError):
    """Transport, auth, rate-limit, timeout or cancellation in a PromptExecutor."""


class AIResponseParseError(AIGenerationError):
    """The model's text could not be coerced into a structured resume."""


class FieldIssue(NamedTuple):
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class SchemaValidationError(ParsingError):
    def __init__(self, issues: list[FieldIssue]) -> None:
        self.issues = issues
        super().__init__(f"{len(issues)} schema validation error(s)")

    @property
    def errors(self) -> list[str]:
        return [str(issue) for issue in self.issues]


class CatastrophicExtractionFailure(ParsingError):
    """The heuristic extractor itself raised."""
