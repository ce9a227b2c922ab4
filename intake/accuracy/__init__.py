"""
Reviewed accuracy module for measuring extraction agreement after human review.

This module provides:
- Value normalization and outcome classification per field
- Per-document metrics over every schema-declared field
- Corpus-wide aggregation with exclusion tracking
- Config, loaders and reporting for the command line
"""

from .classifier import Outcome, classify_field
from .normalize import (
    NOT_IN_DOCUMENT_VALUE,
    is_empty,
    normalize,
    values_equal,
)
from .schemas import CategoryOverride, Classification, ReviewDocument
from .merge import MergedExtraction, get_extraction_data, get_merged_extraction_data
from .metrics import (
    AccuracyRates,
    AggregateAccuracy,
    DocumentAccuracy,
    OutcomeCounts,
    compute_rates,
)
from .config import AccuracyConfig, load_config, validate_config
from .evaluator import (
    compute_reviewed_accuracy_metrics,
    is_eligible,
    is_reclassified,
    resolve_doc_type,
)
from .aggregator import (
    aggregate_by_doc_type,
    aggregate_reviewed_accuracy,
    documents_frame,
)
from .loader import load_documents, load_schema_map
from .report import format_accuracy_report

__all__ = [
    # Normalization & classification
    "NOT_IN_DOCUMENT_VALUE",
    "Outcome",
    "classify_field",
    "is_empty",
    "normalize",
    "values_equal",
    # Schemas
    "CategoryOverride",
    "Classification",
    "ReviewDocument",
    # Merge
    "MergedExtraction",
    "get_extraction_data",
    "get_merged_extraction_data",
    # Metrics
    "AccuracyRates",
    "AggregateAccuracy",
    "DocumentAccuracy",
    "OutcomeCounts",
    "compute_rates",
    # Config
    "AccuracyConfig",
    "load_config",
    "validate_config",
    # Evaluation
    "compute_reviewed_accuracy_metrics",
    "is_eligible",
    "is_reclassified",
    "resolve_doc_type",
    "aggregate_reviewed_accuracy",
    "aggregate_by_doc_type",
    "documents_frame",
    # I/O
    "load_documents",
    "load_schema_map",
    "format_accuracy_report",
]
