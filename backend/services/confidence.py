"""Final confidence for a reconciled parse."""

from models.schemas.tuning import DEFAULT_TUNING, ParserTuning


def score(
    heuristic_confidence: float,
    ai_succeeded: bool,
    validation_error_count: int,
    improvement_count: int,
    tuning: ParserTuning = DEFAULT_TUNING,
) -> float:
    """Heuristic baseline, plus a bonus for verified AI improvements, minus
    a penalty per validation error; clamped to [min_confidence, max_confidence]."""
    confidence = heuristic_confidence
    if ai_succeeded and improvement_count > 0:
        confidence += tuning.ai_success_bonus
    confidence -= tuning.validation_error_penalty * validation_error_count
    confidence += tuning.improvement_bonus * improvement_count
    clamped = min(tuning.max_confidence, max(tuning.min_confidence, confidence))
    return round(clamped, 4)
