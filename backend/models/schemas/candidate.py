"""A structured resume tagged with how it was produced."""

from enum import Enum

from pydantic import BaseModel

from models.schemas.structured_resume import StructuredResume


class SourceMethod(str, Enum):
    HEURISTIC = "heuristic"
    AI = "ai"


class ExtractionCandidate(BaseModel):
    resume: StructuredResume = StructuredResume()
    confidence: float = 0.0  # 0-1
    source_method: SourceMethod = SourceMethod.HEURISTIC
    warnings: list[str] = []
