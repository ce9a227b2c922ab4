"""
Per-document reviewed accuracy.

Computes "observed model agreement" by comparing the original extracted
values with the final values on documents that have been through human
review. This is not model confidence: it is agreement measured after a
reviewer accepted, corrected, or marked fields as absent.
"""

from typing import Any, Mapping, Optional

from .classifier import classify_field
from .config import DEFAULT_CONFIG, AccuracyConfig
from .merge import MergeFn, get_merged_extraction_data
from .metrics import DocumentAccuracy, OutcomeCounts
from .normalize import is_empty
from .schemas import DocumentLike, SchemaMap, as_document


# ─── Eligibility & Reclassification ───


def is_eligible(
    doc: Optional[DocumentLike],
    config: Optional[AccuracyConfig] = None,
) -> bool:
    """
    A document is eligible once a reviewer has touched it: its status is
    "reviewed" or it carries at least one edited field.
    """
    doc = as_document(doc)
    if doc is None:
        return False
    config = config or DEFAULT_CONFIG
    if doc.status == config.reviewed_status:
        return True
    return bool(doc.edited_fields)


def is_reclassified(doc: Optional[DocumentLike]) -> bool:
    """True when a reviewer moved the document to a different type."""
    doc = as_document(doc)
    if doc is None:
        return False
    override_id = doc.category_override.id if doc.category_override else None
    original_cat = doc.classification.category if doc.classification else None
    if not override_id or not original_cat:
        return False
    return override_id != original_cat


def resolve_doc_type(doc: Optional[DocumentLike]) -> Optional[str]:
    """
    Resolve the effective document type.

    Uses the override when present (and not a custom type), otherwise the
    automatic classification.
    """
    doc = as_document(doc)
    if doc is None:
        return None
    override = doc.category_override
    if override is not None and not override.is_custom and override.id:
        return override.id
    if doc.classification is not None and doc.classification.category:
        return doc.classification.category
    return None


# ─── Field Universe ───


def schema_field_names(
    schema_map: Optional[SchemaMap],
    doc_type: Optional[str],
) -> Optional[list[str]]:
    """Field names declared by the registered schema, or None if unregistered."""
    if not isinstance(schema_map, Mapping) or not doc_type:
        return None
    entry = schema_map.get(doc_type)
    if not isinstance(entry, Mapping):
        return None
    schema = entry.get("schema")
    if not isinstance(schema, Mapping):
        return None
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        return None
    return [str(name) for name in properties]


def evaluable_fields(
    doc_type: Optional[str],
    final_data: Mapping[str, Any],
    schema_map: Optional[SchemaMap] = None,
    config: Optional[AccuracyConfig] = None,
) -> list[str]:
    """
    Fields to evaluate for a document.

    Prefers the schema's declared fields so that fields the extractor missed
    entirely are still counted; falls back to the keys of the final data.
    Metadata annotation fields are dropped.
    """
    config = config or DEFAULT_CONFIG
    names = schema_field_names(schema_map, doc_type)
    if names is None:
        names = list(final_data or {})
    return [name for name in names if not config.is_metadata_field(name)]


# ─── Per-Document Metrics ───


def compute_reviewed_accuracy_metrics(
    doc: Optional[DocumentLike],
    schema_map: Optional[SchemaMap] = None,
    *,
    config: Optional[AccuracyConfig] = None,
    merge: Optional[MergeFn] = None,
) -> Optional[DocumentAccuracy]:
    """
    Compute reviewed accuracy for a single document.

    Args:
        doc: Document (ReviewDocument or plain mapping)
        schema_map: Schemas keyed by document type id
        config: Critical fields and metadata prefixes (defaults built in)
        merge: Collaborator producing original/final field maps

    Returns:
        DocumentAccuracy, or None if the document is not eligible or was
        reclassified to another type
    """
    doc = as_document(doc)
    config = config or DEFAULT_CONFIG
    if not is_eligible(doc, config):
        return None
    if is_reclassified(doc):
        return None

    doc_type = resolve_doc_type(doc)
    merged = (merge or get_merged_extraction_data)(doc, schema_map)
    final_data = merged.data or {}
    original_data = merged.original_data or {}

    counts = OutcomeCounts()
    critical_counts = OutcomeCounts()
    critical_set = config.critical_set(doc_type)
    field_outcomes = {}
    edited = merged.edited_fields or {}
    likelihoods = merged.likelihoods or {}
    edited_fields = []
    field_likelihoods = {}

    for field_name in evaluable_fields(doc_type, final_data, schema_map, config):
        original = original_data.get(field_name)
        final = final_data.get(field_name)

        # Neither extracted nor supplied by the reviewer: no signal
        if is_empty(original) and is_empty(final):
            continue

        outcome = classify_field(original, final)
        counts.add(outcome)
        if field_name in critical_set:
            critical_counts.add(outcome)
        field_outcomes[field_name] = outcome
        if field_name in edited:
            edited_fields.append(field_name)
        if field_name in likelihoods:
            field_likelihoods[field_name] = likelihoods[field_name]

    return DocumentAccuracy(
        doc_type=doc_type,
        counts=counts,
        critical_counts=critical_counts,
        doc_id=doc.id,
        field_outcomes=field_outcomes,
        edited_fields=edited_fields,
        field_likelihoods=field_likelihoods,
    )
