"""
Counts and rates for reviewed-field agreement.

This module provides:
- Outcome tallies per scope (all fields or critical fields)
- Rate computation with null-safe denominators
- Per-document and corpus-wide result containers
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .classifier import Outcome


@dataclass
class OutcomeCounts:
    """Tally of outcomes for one scope."""
    correct: int = 0
    wrong_value: int = 0
    miss: int = 0
    hallucination: int = 0
    correct_absent: int = 0

    @property
    def total(self) -> int:
        return (
            self.correct
            + self.wrong_value
            + self.miss
            + self.hallucination
            + self.correct_absent
        )

    @property
    def present_total(self) -> int:
        """Fields where the document actually contains a value."""
        return self.correct + self.wrong_value + self.miss

    @property
    def absent_total(self) -> int:
        """Fields the reviewer marked as not in the document."""
        return self.hallucination + self.correct_absent

    def add(self, outcome: Outcome) -> None:
        key = Outcome(outcome).value
        setattr(self, key, getattr(self, key) + 1)

    def merge(self, other: "OutcomeCounts") -> None:
        """Add another tally element-wise."""
        for outcome in Outcome:
            key = outcome.value
            setattr(self, key, getattr(self, key) + getattr(other, key))

    def copy(self) -> "OutcomeCounts":
        return OutcomeCounts(**self.to_dict())

    def to_dict(self) -> dict[str, int]:
        return {outcome.value: getattr(self, outcome.value) for outcome in Outcome}


@dataclass(frozen=True)
class AccuracyRates:
    """
    Rates derived from an OutcomeCounts.

    A rate is None, never 0.0, when its denominator is zero.
    """
    observed_present_accuracy: Optional[float] = None
    observed_miss_rate: Optional[float] = None
    observed_wrong_rate: Optional[float] = None
    observed_hallucination_rate: Optional[float] = None

    def to_dict(self) -> dict[str, Optional[float]]:
        return {
            "observed_present_accuracy": self.observed_present_accuracy,
            "observed_miss_rate": self.observed_miss_rate,
            "observed_wrong_rate": self.observed_wrong_rate,
            "observed_hallucination_rate": self.observed_hallucination_rate,
        }


def compute_rates(counts: OutcomeCounts) -> AccuracyRates:
    """
    Compute rates from counts.

    Present-value rates share the denominator correct + wrong_value + miss;
    the hallucination rate uses hallucination + correct_absent.
    """
    present = counts.present_total
    absent = counts.absent_total
    return AccuracyRates(
        observed_present_accuracy=counts.correct / present if present > 0 else None,
        observed_miss_rate=counts.miss / present if present > 0 else None,
        observed_wrong_rate=counts.wrong_value / present if present > 0 else None,
        observed_hallucination_rate=counts.hallucination / absent if absent > 0 else None,
    )


@dataclass
class DocumentAccuracy:
    """Reviewed accuracy for a single document."""
    doc_type: Optional[str]
    counts: OutcomeCounts
    critical_counts: OutcomeCounts
    doc_id: Optional[str] = None
    field_outcomes: dict[str, Outcome] = field(default_factory=dict)
    edited_fields: list[str] = field(default_factory=list)  # evaluated fields the reviewer changed
    field_likelihoods: dict[str, Any] = field(default_factory=dict)

    @property
    def rates(self) -> AccuracyRates:
        return compute_rates(self.counts)

    @property
    def critical_rates(self) -> AccuracyRates:
        return compute_rates(self.critical_counts)

    @property
    def evaluated_field_count(self) -> int:
        return self.counts.total

    @property
    def edited_field_count(self) -> int:
        return len(self.edited_fields)

    def to_dict(self) -> dict:
        """Serialize with the keys the dashboard layer consumes."""
        return {
            "docId": self.doc_id,
            "docType": self.doc_type,
            "counts": self.counts.to_dict(),
            "rates": self.rates.to_dict(),
            "criticalCounts": self.critical_counts.to_dict(),
            "criticalRates": self.critical_rates.to_dict(),
            "evaluatedFieldCount": self.evaluated_field_count,
            "editedFieldCount": self.edited_field_count,
        }


@dataclass
class AggregateAccuracy:
    """Reviewed accuracy summed across a corpus of documents."""
    counts: OutcomeCounts = field(default_factory=OutcomeCounts)
    critical_counts: OutcomeCounts = field(default_factory=OutcomeCounts)
    reviewed_doc_count: int = 0
    excluded_reclassified_count: int = 0
    skipped_unreviewed_count: int = 0
    total_evaluated_fields: int = 0

    # By field (for identifying worst performers)
    field_counts: dict[str, OutcomeCounts] = field(default_factory=dict)

    @property
    def rates(self) -> AccuracyRates:
        # Always recomputed from summed counts, never averaged per document
        return compute_rates(self.counts)

    @property
    def critical_rates(self) -> AccuracyRates:
        return compute_rates(self.critical_counts)

    @property
    def total_doc_count(self) -> int:
        return (
            self.reviewed_doc_count
            + self.excluded_reclassified_count
            + self.skipped_unreviewed_count
        )

    def add_document(self, result: DocumentAccuracy) -> None:
        """Fold one document's result into the totals."""
        self.reviewed_doc_count += 1
        self.total_evaluated_fields += result.evaluated_field_count
        self.counts.merge(result.counts)
        self.critical_counts.merge(result.critical_counts)
        for field_name, outcome in result.field_outcomes.items():
            if field_name not in self.field_counts:
                self.field_counts[field_name] = OutcomeCounts()
            self.field_counts[field_name].add(outcome)

    def worst_fields(self, n: int = 10) -> list[tuple[str, float]]:
        """Get the n fields with the lowest present accuracy."""
        field_accuracies = []
        for name, counts in self.field_counts.items():
            accuracy = compute_rates(counts).observed_present_accuracy
            if accuracy is not None:
                field_accuracies.append((name, accuracy))
        field_accuracies.sort(key=lambda x: (x[1], x[0]))
        return field_accuracies[:n]

    def to_dict(self) -> dict:
        """Serialize with the keys the dashboard layer consumes."""
        return {
            "counts": self.counts.to_dict(),
            "rates": self.rates.to_dict(),
            "criticalCounts": self.critical_counts.to_dict(),
            "criticalRates": self.critical_rates.to_dict(),
            "reviewedDocCount": self.reviewed_doc_count,
            "excludedReclassifiedCount": self.excluded_reclassified_count,
            "skippedUnreviewedCount": self.skipped_unreviewed_count,
            "totalEvaluatedFields": self.total_evaluated_fields,
        }
