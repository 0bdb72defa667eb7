from enum import Enum

from pydantic import ConfigDict

from models.schemas.structured_resume import CamelModel, StructuredResume


class ParseMethod(str, Enum):
    HEURISTIC = "heuristic"
    AI_ENHANCED = "ai-enhanced"
    FALLBACK = "fallback"


class ParseMetadata(CamelModel):
    word_count: int = 0
    char_count: int = 0
    page_count: int = 1


class ReconciliationResult(CamelModel):
    """Final pipeline output. Field names and method values are a UI contract."""
    model_config = ConfigDict(frozen=True)

    resume: StructuredResume = StructuredResume()
    confidence: float = 0.0
    method: ParseMethod = ParseMethod.HEURISTIC
    improvements: list[str] = []
    warnings: list[str] = []
    validation_errors: list[str] = []
    processing_time_ms: int = 0
    metadata: ParseMetadata = ParseMetadata()


class ParseReview(CamelModel):
    is_valid: bool = True
    critical_issues: list[str] = []
    suggestions: list[str] = []
