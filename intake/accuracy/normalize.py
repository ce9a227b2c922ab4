"""
Value normalization for reviewed-field comparison.

Extracted and reviewer-accepted values arrive as JSON-shaped data: scalars,
arrays and nested objects. Comparison goes through a canonical string form so
that key order and incidental whitespace never count as disagreement.
"""

import json
import re
from decimal import Decimal
from typing import Any

# Reviewer sentinel: "this field does not apply to this document"
NOT_IN_DOCUMENT_VALUE = "__NOT_IN_DOCUMENT__"

_WHITESPACE_RE = re.compile(r"\s+")


def is_empty(value: Any) -> bool:
    """True when the value is effectively empty (None, "", empty list/dict)."""
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    if isinstance(value, dict):
        return len(value) == 0
    return False


def is_not_in_document(value: Any) -> bool:
    """True when the value is the reviewer's "not in document" sentinel."""
    return isinstance(value, str) and value == NOT_IN_DOCUMENT_VALUE


def _format_number(value: float) -> str:
    # JSON producers render 5.0 as 5
    if value.is_integer():
        return str(int(value))
    return repr(value)


def normalize(value: Any) -> str:
    """
    Normalize a value of unknown shape into a stable comparison string.

    - None -> ""
    - bool -> "true" / "false"
    - numbers -> their string form (integral floats without ".0")
    - strings -> stripped, internal whitespace collapsed
    - lists -> JSON of the normalized elements
    - dicts -> JSON with sorted keys and normalized values

    Never raises.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return str(value)
        return _format_number(value)
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, str):
        return _WHITESPACE_RE.sub(" ", value.strip())
    if isinstance(value, (list, tuple)):
        return json.dumps(
            [normalize(v) for v in value],
            separators=(",", ":"),
            ensure_ascii=False,
        )
    if isinstance(value, dict):
        ordered = {str(k): normalize(value[k]) for k in sorted(value, key=str)}
        return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False)
    return str(value).strip()


def values_equal(a: Any, b: Any) -> bool:
    """Loose equality after normalization."""
    return normalize(a) == normalize(b)
