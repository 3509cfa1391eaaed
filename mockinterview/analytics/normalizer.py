"""
Canonical buckets for free-text interview labels (role, level, company).

Each vocabulary is an ordered table of (rule, canonical name) pairs; the first
matching rule wins. New synonyms are added to the tables, not to code paths.
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from mockinterview.utils.cleaning import clean_label

ROLE = "role"
LEVEL = "level"
COMPANY = "company"

UNKNOWN_LABEL = "Unknown"

_TOKEN = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class NormalizationRule:
    """
    Matches a cleaned label by whole-label equality, substring containment,
    or whole-word equality. Short abbreviations go in `tokens` so that e.g.
    "pm" does not match inside "development".
    """
    equals: Tuple[str, ...] = ()
    contains: Tuple[str, ...] = ()
    tokens: Tuple[str, ...] = ()

    def matches(self, label: str) -> bool:
        if label in self.equals:
            return True
        if any(needle in label for needle in self.contains):
            return True
        if self.tokens:
            words = set(_TOKEN.findall(label))
            return any(token in words for token in self.tokens)
        return False


RuleTable = List[Tuple[NormalizationRule, str]]

LEVEL_RULES: RuleTable = [
    (NormalizationRule(equals=("1", "entry", "entry level", "entry-level")), "Entry Level"),
    (NormalizationRule(equals=("junior", "jjunior", "jr")), "Junior"),
    (NormalizationRule(equals=("mid", "mid-level", "mid level", "middle")), "Mid-Level"),
    (NormalizationRule(equals=("senior", "sr")), "Senior"),
    (NormalizationRule(equals=("lead", "tech lead")), "Lead"),
]

COMPANY_RULES: RuleTable = [
    (NormalizationRule(contains=("google", "googl")), "Google"),
    (NormalizationRule(contains=("microsoft",), tokens=("msft",)), "Microsoft"),
    (NormalizationRule(contains=("amazon",), tokens=("amzn",)), "Amazon"),
    (NormalizationRule(contains=("apple",), tokens=("appl", "aapl")), "Apple"),
    (NormalizationRule(contains=("facebook",), tokens=("meta", "fb")), "Meta"),
    (NormalizationRule(contains=("netflix",), tokens=("nflx",)), "Netflix"),
    (NormalizationRule(contains=("tesla",), tokens=("tsla",)), "Tesla"),
    (NormalizationRule(contains=("uber",), tokens=("ubr",)), "Uber"),
    (NormalizationRule(contains=("airbnb",), tokens=("abnb",)), "Airbnb"),
    (NormalizationRule(contains=("spotify",), tokens=("spot",)), "Spotify"),
]

# Specific roles precede the generic "dev"/"analyst" rules
ROLE_RULES: RuleTable = [
    (NormalizationRule(contains=("product data scientist",), tokens=("pds",)), "Product Data Scientist"),
    (NormalizationRule(contains=("devops", "dev ops")), "DevOps Engineer"),
    (NormalizationRule(contains=("frontend", "front-end", "front end")), "Frontend Engineer"),
    (NormalizationRule(contains=("backend", "back-end", "back end")), "Backend Engineer"),
    (NormalizationRule(contains=("fullstack", "full-stack", "full stack")), "Full Stack Engineer"),
    (NormalizationRule(contains=("machine learning", "ml engineer")), "ML Engineer"),
    (NormalizationRule(contains=("software engineer", "software developer", "dev"), tokens=("swe",)), "Software Engineer"),
    (NormalizationRule(contains=("data scientist",), tokens=("ds",)), "Data Scientist"),
    (NormalizationRule(contains=("data analyst", "analyst")), "Data Analyst"),
    (NormalizationRule(contains=("product manager",), tokens=("pm",)), "Product Manager"),
    (NormalizationRule(contains=("ui/ux", "user experience"), tokens=("ux",)), "UX Designer"),
]

RULE_TABLES: Dict[str, RuleTable] = {
    ROLE: ROLE_RULES,
    LEVEL: LEVEL_RULES,
    COMPANY: COMPANY_RULES,
}


def _capitalize_words(label: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in label.split(" "))


class CategoryNormalizer:
    """Stateless label normalizer over the vocabularies in RULE_TABLES."""

    def __init__(self, tables: Mapping[str, RuleTable] = None):
        self.tables = dict(tables or RULE_TABLES)

    def clean(self, vocabulary: str, raw_label: str) -> str:
        cleaned = clean_label(raw_label)
        if vocabulary == LEVEL:
            cleaned = re.sub(r"^(?:level\s+)+", "", cleaned)
        return cleaned

    def normalize(self, vocabulary: str, raw_label: str) -> str:
        if vocabulary not in self.tables:
            raise ValueError(f"Unknown vocabulary: {vocabulary}")

        cleaned = self.clean(vocabulary, raw_label)
        if not cleaned:
            return UNKNOWN_LABEL

        for rule, canonical in self.tables[vocabulary]:
            if rule.matches(cleaned):
                return canonical

        if vocabulary == LEVEL:
            return cleaned[0].upper() + cleaned[1:]
        return _capitalize_words(cleaned)

    def normalize_counts(self, vocabulary: str, counts: Mapping[str, int]) -> Dict[str, int]:
        """Fold raw-label counts into canonical buckets."""
        folded: Dict[str, int] = {}
        for raw_label, count in counts.items():
            bucket = self.normalize(vocabulary, raw_label)
            folded[bucket] = folded.get(bucket, 0) + count
        return folded


category_normalizer = CategoryNormalizer()


def normalize(vocabulary: str, raw_label: str) -> str:
    return category_normalizer.normalize(vocabulary, raw_label)
