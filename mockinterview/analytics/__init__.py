"""
Analytics module: label normalization and dashboard aggregation.
"""

from .normalizer import CategoryNormalizer, category_normalizer
from .aggregation import AggregationEngine, aggregation_engine

__all__ = ['CategoryNormalizer', 'category_normalizer', 'AggregationEngine', 'aggregation_engine']
