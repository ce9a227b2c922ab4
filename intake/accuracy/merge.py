"""
Merge reviewer edits over the raw extraction payload.

The extraction service returns its structured output in several envelopes
(wrapped in ``content``, as an OpenAI-style ``choices`` list, or under
``data`` / ``result``). This module unwraps the payload and layers the
reviewer's ``edited_fields`` on top, yielding the original and final field
maps the accuracy engine compares.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .schemas import ReviewDocument, SchemaMap

logger = logging.getLogger(__name__)


@dataclass
class MergedExtraction:
    """Original and reviewer-corrected field maps for one document."""
    data: dict[str, Any] = field(default_factory=dict)
    original_data: dict[str, Any] = field(default_factory=dict)
    likelihoods: dict[str, Any] = field(default_factory=dict)
    edited_fields: dict[str, Any] = field(default_factory=dict)


MergeFn = Callable[[ReviewDocument, Optional[SchemaMap]], MergedExtraction]


def _first_choice_message(content: dict) -> dict:
    choices = content.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict):
            return message
    return {}


def _as_mapping(value: Any) -> dict[str, Any]:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.debug("Extraction payload is not valid JSON, treating as empty")
            return {}
    return dict(value) if isinstance(value, dict) else {}


def get_extraction_data(extraction: Any) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Unwrap field data and likelihoods from an extraction payload.

    Args:
        extraction: Raw payload (wrapped, unwrapped, or None)

    Returns:
        Tuple of (data, likelihoods); both empty when nothing is found
    """
    if not isinstance(extraction, dict) or not extraction:
        return {}, {}

    content = extraction.get("content") or extraction
    if not isinstance(content, dict):
        content = extraction

    message = _first_choice_message(content)
    raw_data = (
        message.get("parsed")
        or content.get("data")
        or content.get("result")
        or {}
    )
    raw_likelihoods = (
        content.get("likelihoods")
        or message.get("likelihoods")
        or extraction.get("likelihoods")
        or {}
    )
    return _as_mapping(raw_data), _as_mapping(raw_likelihoods)


def get_merged_extraction_data(
    doc: ReviewDocument,
    schema_map: Optional[SchemaMap] = None,
) -> MergedExtraction:
    """
    Build the original and final field maps for a document.

    Args:
        doc: Document with a raw extraction and reviewer edits
        schema_map: Unused by the default merge; custom merges may use it to
            coerce edited values to schema types

    Returns:
        MergedExtraction where ``data`` is the extraction with edits applied
    """
    original, likelihoods = get_extraction_data(doc.extraction)
    edits = dict(doc.edited_fields or {})
    merged = {**original, **edits}
    return MergedExtraction(
        data=merged,
        original_data=original,
        likelihoods=likelihoods,
        edited_fields=edits,
    )
