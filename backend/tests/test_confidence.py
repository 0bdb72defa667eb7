import pytest

from models.schemas.tuning import ParserTuning
from services.confidence import score


def test_score_formula():
    # 0.5 + 0.2 AI bonus - 2 * 0.05 + 3 * 0.02
    assert score(0.5, True, 2, 3) == pytest.approx(0.66)


def test_no_ai_bonus_without_improvements():
    assert score(0.5, True, 0, 0) == pytest.approx(0.5)


def test_no_ai_bonus_when_ai_failed():
    assert score(0.5, False, 0, 2) == pytest.approx(0.54)


def test_score_is_clamped():
    assert score(0.75, True, 0, 10) == 1.0
    assert score(0.3, True, 20, 0) == 0.1


def test_score_monotonic_in_improvements():
    scores = [score(0.45, True, 0, k) for k in range(15)]
    assert scores == sorted(scores)


def test_score_uses_tuning():
    tuning = ParserTuning(ai_success_bonus=0.0, improvement_bonus=0.1)
    assert score(0.4, True, 0, 2, tuning) == pytest.approx(0.6)
