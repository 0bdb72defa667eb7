"""Thresholds and weights used by extraction, reconciliation and scoring.

The defaults were picked empirically and have not been fitted against a
labeled resume corpus. Override them through settings (TUNING__* env vars)
rather than editing the services.
"""

from pydantic import BaseModel, Field


class ParserTuning(BaseModel):
    # Segmenter
    heading_max_length: int = 30
    default_section_confidence: float = 0.7
    layout_heading_font_ratio: float = 1.2

    # Heuristic extractor
    header_fallback_lines: int = 10
    heuristic_base_confidence: float = 0.3
    heuristic_confidence_cap: float = 0.75
    personal_field_weight: float = 0.1  # per name / email / phone found
    experience_weight: float = 0.2
    education_weight: float = 0.1
    skills_weight: float = 0.1

    # Reconciler
    title_max_length: int = 100
    experience_match_similarity: float = Field(0.8, ge=0.0, le=1.0)
    skill_category_similarity: float = Field(0.7, ge=0.0, le=1.0)
    skill_item_duplicate_similarity: float = Field(0.9, ge=0.0, le=1.0)

    # Confidence scorer
    ai_success_bonus: float = 0.2
    validation_error_penalty: float = 0.05
    improvement_bonus: float = 0.02
    min_confidence: float = 0.1
    max_confidence: float = 1.0


DEFAULT_TUNING = ParserTuning()
