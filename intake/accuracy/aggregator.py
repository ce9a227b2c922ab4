"""
Corpus-wide reviewed accuracy.

Runs the per-document evaluation over a collection, tracks exclusions, and
recomputes rates from the summed counts so that small documents are not
weighted equally with large ones.
"""

from typing import Iterable, Optional

import pandas as pd

from .config import AccuracyConfig
from .evaluator import (
    compute_reviewed_accuracy_metrics,
    is_eligible,
    is_reclassified,
    resolve_doc_type,
)
from .merge import MergeFn
from .metrics import AggregateAccuracy
from .schemas import DocumentLike, SchemaMap, as_document

UNKNOWN_DOC_TYPE = "unknown"


def _fold(
    aggregate: AggregateAccuracy,
    doc,
    schema_map: Optional[SchemaMap],
    config: Optional[AccuracyConfig],
    merge: Optional[MergeFn],
) -> None:
    if not is_eligible(doc, config):
        aggregate.skipped_unreviewed_count += 1
        return
    if is_reclassified(doc):
        aggregate.excluded_reclassified_count += 1
        return

    result = compute_reviewed_accuracy_metrics(
        doc, schema_map, config=config, merge=merge
    )
    if result is None:
        aggregate.skipped_unreviewed_count += 1
        return
    aggregate.add_document(result)


def aggregate_reviewed_accuracy(
    docs: Optional[Iterable[DocumentLike]],
    schema_map: Optional[SchemaMap] = None,
    *,
    config: Optional[AccuracyConfig] = None,
    merge: Optional[MergeFn] = None,
) -> AggregateAccuracy:
    """
    Aggregate reviewed accuracy across many documents.

    Args:
        docs: Documents (ReviewDocument or plain mappings)
        schema_map: Schemas keyed by document type id
        config: Critical fields and metadata prefixes
        merge: Collaborator producing original/final field maps

    Returns:
        AggregateAccuracy with summed counts, recomputed rates and
        exclusion tallies
    """
    aggregate = AggregateAccuracy()
    for doc in docs or []:
        _fold(aggregate, as_document(doc), schema_map, config, merge)
    return aggregate


def aggregate_by_doc_type(
    docs: Optional[Iterable[DocumentLike]],
    schema_map: Optional[SchemaMap] = None,
    *,
    config: Optional[AccuracyConfig] = None,
    merge: Optional[MergeFn] = None,
) -> dict[str, AggregateAccuracy]:
    """
    Aggregate reviewed accuracy separately for each effective document type.

    Documents with no resolvable type are grouped under "unknown".
    """
    by_type: dict[str, AggregateAccuracy] = {}
    for doc in docs or []:
        doc = as_document(doc)
        doc_type = resolve_doc_type(doc) or UNKNOWN_DOC_TYPE
        if doc_type not in by_type:
            by_type[doc_type] = AggregateAccuracy()
        _fold(by_type[doc_type], doc, schema_map, config, merge)
    return dict(sorted(by_type.items()))


def documents_frame(
    docs: Optional[Iterable[DocumentLike]],
    schema_map: Optional[SchemaMap] = None,
    *,
    config: Optional[AccuracyConfig] = None,
    merge: Optional[MergeFn] = None,
) -> pd.DataFrame:
    """
    Per-document metrics as a DataFrame, one row per evaluated document.

    Ineligible and reclassified documents are left out.
    """
    columns = [
        "doc_id", "doc_type",
        "correct", "wrong_value", "miss", "hallucination", "correct_absent",
        "observed_present_accuracy", "observed_miss_rate",
        "observed_wrong_rate", "observed_hallucination_rate",
        "evaluated_field_count", "edited_field_count",
    ]
    rows = []
    for doc in docs or []:
        result = compute_reviewed_accuracy_metrics(
            doc, schema_map, config=config, merge=merge
        )
        if result is None:
            continue
        rows.append({
            "doc_id": result.doc_id,
            "doc_type": result.doc_type,
            **result.counts.to_dict(),
            **result.rates.to_dict(),
            "evaluated_field_count": result.evaluated_field_count,
            "edited_field_count": result.edited_field_count,
        })
    return pd.DataFrame(rows, columns=columns)
