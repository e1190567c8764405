"""
Search module - rule-based compiler from free-text queries to SQL filters
"""

from smartsearch.search.filters import FilterSpec, SmartSearchResult
from smartsearch.search.hints import HintBundle, HintComposer, hint_composer, hint_context
from smartsearch.search.intensity import IntensityScaler
from smartsearch.search.limits import LimitExtractor
from smartsearch.search.reconciler import ResponseReconciler, describe_filters, parse_candidate
from smartsearch.search.rules import PatternRule
from smartsearch.search.schema_table import SchemaTable, SchemaTableDetector
from smartsearch.search.synonyms import SynonymCategory, SynonymResolver, SynonymTable
from smartsearch.search.thresholds import ThresholdExtractor

__all__ = [
    'FilterSpec',
    'SmartSearchResult',
    'HintBundle',
    'HintComposer',
    'hint_composer',
    'hint_context',
    'IntensityScaler',
    'LimitExtractor',
    'ResponseReconciler',
    'describe_filters',
    'parse_candidate',
    'PatternRule',
    'SchemaTable',
    'SchemaTableDetector',
    'SynonymCategory',
    'SynonymResolver',
    'SynonymTable',
    'ThresholdExtractor',
]
