import pytest

from mockinterview.analytics.normalizer import (
    COMPANY,
    LEVEL,
    RULE_TABLES,
    ROLE,
    UNKNOWN_LABEL,
    category_normalizer,
    normalize,
)


@pytest.mark.parametrize("raw,expected", [
    ("Senior", "Senior"),
    ("Level Senior", "Senior"),
    ("level level senior", "Senior"),
    ("Level 1", "Entry Level"),
    ("entry-level", "Entry Level"),
    ("Jr.", "Junior"),
    ("Mid Level", "Mid-Level"),
    ("staff engineer", "Staff engineer"),
])
def test_level(raw, expected):
    assert normalize(LEVEL, raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("SWE", "Software Engineer"),
    ("software developer.", "Software Engineer"),
    ("DevOps Engineer", "DevOps Engineer"),
    ("Sr. Backend Developer", "Backend Engineer"),
    ("Product Data Scientist", "Product Data Scientist"),
    ("data scientist", "Data Scientist"),
    ("Senior PM", "Product Manager"),
    ("Business Analyst", "Data Analyst"),
    ("chief   happiness officer", "Chief Happiness Officer"),
])
def test_role(raw, expected):
    assert normalize(ROLE, raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("google inc.", "Google"),
    ("MSFT", "Microsoft"),
    ("Meta Platforms", "Meta"),
    ("acme corp", "Acme Corp"),
])
def test_company(raw, expected):
    assert normalize(COMPANY, raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", None, ".,"])
def test_empty_label_is_unknown(raw):
    assert normalize(ROLE, raw) == UNKNOWN_LABEL


def test_canonical_names_are_fixed_points():
    for vocabulary, table in RULE_TABLES.items():
        for _, canonical in table:
            assert normalize(vocabulary, canonical) == canonical


@pytest.mark.parametrize("vocabulary,raw", [
    (ROLE, "chief happiness officer"),
    (LEVEL, "principal"),
    (COMPANY, "acme corp"),
])
def test_fallback_is_idempotent(vocabulary, raw):
    once = normalize(vocabulary, raw)
    assert normalize(vocabulary, once) == once


def test_unknown_vocabulary_is_rejected():
    with pytest.raises(ValueError):
        normalize("industry", "fintech")


def test_counts_fold_into_buckets():
    counts = {"SWE": 2, "Software Engineer": 1, "data scientist": 1}
    assert category_normalizer.normalize_counts(ROLE, counts) == {
        "Software Engineer": 3,
        "Data Scientist": 1,
    }


def test_company_variants_share_a_bucket():
    counts = {"Google Inc.": 1, "googl": 2, "GOOGLE,": 1}
    assert category_normalizer.normalize_counts(COMPANY, counts) == {"Google": 4}
