"""
Dashboard statistics over a user's interviews.

Everything here is a pure function of the records passed in; nothing is cached
or persisted.
"""
import logging
from collections import Counter
from typing import Dict, Iterable, List

from mockinterview.analytics.normalizer import (
    COMPANY,
    LEVEL,
    ROLE,
    CategoryNormalizer,
    category_normalizer,
)
from mockinterview.interview.scoring import category_values, has_scores, mean, record_mean
from mockinterview.models.schemas import (
    CATEGORY_KEYS,
    AggregateStats,
    AverageScores,
    EvaluationRecord,
    InterviewRecord,
    TrendSeries,
)

logger = logging.getLogger(__name__)

# Category key -> AverageScores field
AVERAGE_FIELDS: Dict[str, str] = {
    "Correctness": "correctness",
    "Clarity & Structure": "clarity_structure",
    "Completeness": "completeness",
    "Relevance": "relevance",
    "Confidence & Tone": "confidence_tone",
    "Communication Skills": "communication_skills",
}


class AggregationEngine:
    """Folds stored interviews and their evaluations into AggregateStats."""

    def __init__(self, normalizer: CategoryNormalizer = None):
        self.normalizer = normalizer or category_normalizer

    def aggregate(self, interviews: Iterable[InterviewRecord]) -> AggregateStats:
        interviews = list(interviews)
        if not interviews:
            return AggregateStats()

        stats = AggregateStats(
            total_interviews=len(interviews),
            average_scores=self.average_scores(interviews),
            trends_over_time=self.trend(interviews),
            role_distribution=self.distribution(interviews, ROLE),
            level_distribution=self.distribution(interviews, LEVEL),
            company_distribution=self.distribution(interviews, COMPANY),
        )
        logger.debug(f"Aggregated {stats.total_interviews} interviews")
        return stats

    @staticmethod
    def scored_records(interview: InterviewRecord) -> List[EvaluationRecord]:
        return [record for record in interview.evaluations if has_scores(record)]

    def average_scores(self, interviews: List[InterviewRecord]) -> AverageScores:
        """
        Per-category mean over every scored answer; a category the model
        omitted counts as 0. Overall is the mean of the six category means.
        """
        records = [r for interview in interviews for r in self.scored_records(interview)]
        if not records:
            return AverageScores()

        totals = {key: 0.0 for key in CATEGORY_KEYS}
        for record in records:
            for key, value in category_values(record.scores).items():
                totals[key] += value

        averages = {AVERAGE_FIELDS[key]: totals[key] / len(records) for key in CATEGORY_KEYS}
        averages["overall"] = mean(averages[AVERAGE_FIELDS[key]] for key in CATEGORY_KEYS)
        return AverageScores(**averages)

    def trend(self, interviews: List[InterviewRecord]) -> TrendSeries:
        """One point per interview with scored answers, oldest first."""
        series = TrendSeries()
        for interview in sorted(interviews, key=lambda i: i.created_at):
            records = self.scored_records(interview)
            if not records:
                continue
            series.dates.append(interview.created_at.date().isoformat())
            series.scores.append(mean(record_mean(record) for record in records))
        return series

    def distribution(self, interviews: List[InterviewRecord], vocabulary: str) -> Dict[str, int]:
        raw_counts = Counter(getattr(interview, vocabulary) for interview in interviews)
        return self.normalizer.normalize_counts(vocabulary, raw_counts)


aggregation_engine = AggregationEngine()
