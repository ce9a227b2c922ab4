"""
Outcome classification for a single reviewed field.

Compares the value the extraction service produced with the value the
reviewer finally accepted, corrected, or marked as not in the document.
"""

from enum import Enum
from typing import Any

from .normalize import is_empty, is_not_in_document, values_equal


class Outcome(str, Enum):
    """Agreement outcome for one field after human review."""
    CORRECT = "correct"                # Extraction matches the accepted value
    WRONG_VALUE = "wrong_value"        # Extracted a value the reviewer changed
    MISS = "miss"                      # Nothing extracted, reviewer supplied a value
    HALLUCINATION = "hallucination"    # Extracted a value for a field not in the document
    CORRECT_ABSENT = "correct_absent"  # Nothing extracted, reviewer confirmed absence


# Outcomes sharing the "present value" denominator
PRESENT_OUTCOMES = (Outcome.CORRECT, Outcome.WRONG_VALUE, Outcome.MISS)
# Outcomes sharing the "absent value" denominator
ABSENT_OUTCOMES = (Outcome.HALLUCINATION, Outcome.CORRECT_ABSENT)


def classify_field(original: Any, final: Any) -> Outcome:
    """
    Classify a single field.

    Args:
        original: Value from the raw extraction
        final: Value from the merged (reviewer-corrected) data

    Returns:
        Exactly one Outcome
    """
    if is_not_in_document(final):
        # Reviewer says the field does not apply
        return Outcome.HALLUCINATION if not is_empty(original) else Outcome.CORRECT_ABSENT

    if is_empty(original) and not is_empty(final):
        return Outcome.MISS
    if values_equal(original, final):
        return Outcome.CORRECT
    return Outcome.WRONG_VALUE
