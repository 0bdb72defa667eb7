import pytest

from services.similarity import category_similarity, similarity


def test_similarity_identical_ignores_case():
    assert similarity("Python", "python") == 1.0


def test_similarity_both_empty():
    assert similarity("", "") == 1.0


def test_similarity_one_empty():
    assert similarity("Acme", "") == 0.0


def test_similarity_normalized_edit_distance():
    # kitten -> sitting is 3 edits over 7 characters
    assert similarity("kitten", "sitting") == pytest.approx(4 / 7)


def test_similarity_near_duplicate_company():
    assert similarity("Acme Corp", "Acme Corp.") > 0.8
    assert similarity("Acme Corp", "Globex") < 0.5


def test_category_similarity_ignores_generic_words():
    assert category_similarity("Technical", "Technical Skills") == 1.0
    assert category_similarity("Skills", "skills") == 1.0
    assert category_similarity("Skills", "Cloud") < 0.7
