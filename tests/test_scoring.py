import pytest

from mockinterview.interview.scoring import (
    build_evaluation_record,
    build_session_analysis,
    canonical_rating,
    extract_score,
    has_scores,
    record_mean,
)
from mockinterview.models.schemas import CATEGORY_KEYS, CategoryScore


@pytest.mark.parametrize("value,expected", [
    ("7/10", 7.0),
    ("8.5", 8.5),
    (" 6 / 10", 6.0),
    (9, 9.0),
    (CategoryScore(score="4/10"), 4.0),
    ("n/a", 0.0),
    ("", 0.0),
    (None, 0.0),
    ("15/10", 10.0),
    (12.5, 10.0),
    (-3, 0.0),
])
def test_extract_score(value, expected):
    assert extract_score(value) == expected


@pytest.mark.parametrize("text,expected", [
    ("Good", "Good"),
    ("excellent overall", "Excellent"),
    ("Needs Improvement", "Needs Improvement"),
    ("somewhere in between", ""),
    ("Not good", ""),
    ("Could be Excellent with practice", ""),
    ("**Satisfactory** overall", "Satisfactory"),
    (None, ""),
])
def test_canonical_rating(text, expected):
    assert canonical_rating(text) == expected


def test_record_carries_all_categories_and_falls_back_for_suggestion():
    parsed = {
        "Correctness": {"score": "8/10", "explanation": "Right"},
        "Overall Feedback Summary": "Strong answer.",
    }
    record = build_evaluation_record("Why pandas?", "It is fast", parsed)

    assert set(record.scores) == set(CATEGORY_KEYS)
    assert record.scores["Relevance"] == CategoryScore(score="", explanation="")
    assert record.suggestion == "Strong answer."
    assert has_scores(record)
    assert record_mean(record) == pytest.approx(8 / 6)


def test_record_without_scores():
    record = build_evaluation_record("Q", "A", {})
    assert not has_scores(record)
    assert record.rating == ""


def test_session_analysis_has_six_scores():
    analysis = build_session_analysis({"Overall Feedback Summary": "Fine"})
    assert len(analysis.scores) == 6
    assert analysis.overall_feedback_summary == "Fine"
