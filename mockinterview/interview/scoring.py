"""
Score extraction and evaluation-record construction.
Shared by the live turn flow and the dashboard aggregation so both apply the
same numeric coercion rules.
"""
import re
from typing import Any, Dict, Iterable, Mapping, Optional

from mockinterview.models.schemas import (
    CATEGORY_KEYS,
    CategoryScore,
    EvaluationRecord,
    Rating,
    SessionAnalysis,
)

MIN_SCORE = 0.0
MAX_SCORE = 10.0

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")

# Longest labels first so "Needs Improvement" is tried before shorter labels
_RATINGS_BY_LENGTH = sorted(Rating, key=lambda r: len(r.value), reverse=True)
_RATING_MARKUP = re.compile(r"^[\s*_\"']+")


def extract_score(value: Any) -> float:
    """
    Numeric value of a score such as "7/10" or "8.5".

    Missing or unparseable values count as 0; values are clamped to 0-10.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, CategoryScore):
        value = value.score
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        number = float(match.group(1)) if match else 0.0
    return max(MIN_SCORE, min(number, MAX_SCORE))


def is_recognized_score(value: Any) -> bool:
    if isinstance(value, CategoryScore):
        value = value.score
    return bool(value) and _LEADING_NUMBER.match(str(value)) is not None


def category_scores(parsed: Mapping[str, Any]) -> Dict[str, CategoryScore]:
    """All six categories from a parse result; omitted ones get an empty score."""
    scores = {}
    for key in CATEGORY_KEYS:
        entry = parsed.get(key) or {}
        if isinstance(entry, Mapping):
            scores[key] = CategoryScore(
                score=str(entry.get("score") or ""),
                explanation=str(entry.get("explanation") or ""),
            )
        else:
            scores[key] = CategoryScore()
    return scores


def canonical_rating(text: Optional[str]) -> str:
    """Rating label the free text starts with, or "" when it starts with none."""
    if not text:
        return ""
    lowered = _RATING_MARKUP.sub("", text).lower()
    for rating in _RATINGS_BY_LENGTH:
        if lowered.startswith(rating.value.lower()):
            return rating.value
    return ""


def build_evaluation_record(question: str, user_response: str, parsed: Mapping[str, Any]) -> EvaluationRecord:
    """Turn a parse result into a stored EvaluationRecord."""
    overall = parsed.get("Overall Feedback Summary", "")
    return EvaluationRecord(
        question=question or "",
        user_response=user_response or "",
        scores=category_scores(parsed),
        overall_feedback=overall,
        model_answer=parsed.get("Model Answer", ""),
        improvement_suggestions=parsed.get("Improvement Suggestions", ""),
        key_points=parsed.get("Key Points", ""),
        rating=canonical_rating(parsed.get("Rating")),
        suggestion=parsed.get("Suggestion") or overall,
    )


def build_session_analysis(parsed: Mapping[str, Any]) -> SessionAnalysis:
    return SessionAnalysis(
        scores=category_scores(parsed),
        overall_feedback_summary=parsed.get("Overall Feedback Summary", ""),
    )


def has_scores(record: EvaluationRecord) -> bool:
    """True when at least one category carries a parseable score."""
    return any(is_recognized_score(score) for score in record.scores.values())


def category_values(scores: Mapping[str, Any]) -> Dict[str, float]:
    """Numeric value per category, missing categories as 0."""
    return {key: extract_score(scores.get(key)) for key in CATEGORY_KEYS}


def record_mean(record: EvaluationRecord) -> float:
    """Mean of the six category scores of one answer."""
    values = category_values(record.scores)
    return sum(values.values()) / len(CATEGORY_KEYS)


def mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0
