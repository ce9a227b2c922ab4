"""
Tests for corpus-wide reviewed accuracy.

Tests cover:
1. Summed counts and rates recomputed from sums
2. Exclusion tallies and the document-count invariant
3. Per-field and per-type breakdowns
4. Per-document DataFrame
"""

import pytest

from intake.accuracy.aggregator import (
    UNKNOWN_DOC_TYPE,
    aggregate_by_doc_type,
    aggregate_reviewed_accuracy,
    documents_frame,
)
from intake.accuracy.evaluator import compute_reviewed_accuracy_metrics
from intake.accuracy.metrics import OutcomeCounts, compute_rates
from intake.accuracy.normalize import NOT_IN_DOCUMENT_VALUE


def make_doc(doc_id, original, edits=None, status="reviewed", category="invoice", override=None):
    return {
        "id": doc_id,
        "status": status,
        "editedFields": edits or {},
        "classification": {"category": category},
        "categoryOverride": override,
        "extraction": {"data": original},
    }


def corpus():
    return [
        # a, b correct; c wrong -> 2/3
        make_doc("doc-1", {"a": "1", "b": "2", "c": "3"}, {"c": "4"}),
        # d missed -> 0/1
        make_doc("doc-2", {}, {"d": "x"}, category="receipt"),
        # not reviewed
        make_doc("doc-3", {"a": "1"}, status="pending"),
        # reclassified
        make_doc("doc-4", {"a": "1"}, {"a": "2"}, override={"id": "receipt"}),
    ]


class TestOutcomeCounts:
    """Tests for count arithmetic and rates."""

    def test_merge_is_element_wise(self):
        """Merging adds each outcome count independently."""
        a = OutcomeCounts(correct=2, wrong_value=1, hallucination=1)
        b = OutcomeCounts(correct=1, miss=3, correct_absent=2)
        a.merge(b)
        assert a.to_dict() == {
            "correct": 3, "wrong_value": 1, "miss": 3,
            "hallucination": 1, "correct_absent": 2,
        }
        assert a.total == 10

    def test_copy_is_independent(self):
        """Copies do not share state with the source counts."""
        a = OutcomeCounts(correct=1)
        b = a.copy()
        b.correct += 1
        assert a.correct == 1

    def test_zero_denominators(self):
        """Rates with an empty denominator are None."""
        rates = compute_rates(OutcomeCounts())
        assert rates.to_dict() == {
            "observed_present_accuracy": None,
            "observed_miss_rate": None,
            "observed_wrong_rate": None,
            "observed_hallucination_rate": None,
        }


class TestAggregateReviewedAccuracy:
    """Tests for aggregate_reviewed_accuracy()."""

    def test_counts_are_summed(self):
        """Corpus counts are the sum of per-document counts."""
        aggregate = aggregate_reviewed_accuracy(corpus())

        assert aggregate.counts.to_dict() == {
            "correct": 2, "wrong_value": 1, "miss": 1,
            "hallucination": 0, "correct_absent": 0,
        }
        assert aggregate.total_evaluated_fields == 4
        assert aggregate.counts.total == aggregate.total_evaluated_fields

    def test_rates_recomputed_not_averaged(self):
        """2/3 and 0/1 aggregate to 2/4, not their mean of 1/3."""
        docs = corpus()
        per_doc = [compute_reviewed_accuracy_metrics(d) for d in docs[:2]]
        mean_of_rates = sum(r.rates.observed_present_accuracy for r in per_doc) / 2

        aggregate = aggregate_reviewed_accuracy(docs)

        assert aggregate.rates.observed_present_accuracy == pytest.approx(0.5)
        assert aggregate.rates.observed_present_accuracy != pytest.approx(mean_of_rates)
        assert aggregate.rates.observed_miss_rate == pytest.approx(0.25)
        assert aggregate.rates.observed_wrong_rate == pytest.approx(0.25)
        assert aggregate.rates.observed_hallucination_rate is None

    def test_exclusion_tallies(self):
        """Unreviewed and reclassified documents are tallied separately."""
        aggregate = aggregate_reviewed_accuracy(corpus())

        assert aggregate.reviewed_doc_count == 2
        assert aggregate.excluded_reclassified_count == 1
        assert aggregate.skipped_unreviewed_count == 1
        assert aggregate.total_doc_count == 4

    def test_reclassified_never_counted(self):
        """A reclassified document contributes no outcomes."""
        docs = [make_doc("doc-4", {"a": "1"}, {"a": "2"}, override={"id": "receipt"})]
        aggregate = aggregate_reviewed_accuracy(docs)

        assert aggregate.excluded_reclassified_count == 1
        assert aggregate.counts.total == 0
        assert aggregate.reviewed_doc_count == 0

    @pytest.mark.parametrize("docs", [None, []])
    def test_empty_corpus(self, docs):
        """Empty or missing input yields an empty aggregate."""
        aggregate = aggregate_reviewed_accuracy(docs)

        assert aggregate.reviewed_doc_count == 0
        assert aggregate.total_evaluated_fields == 0
        assert aggregate.rates.observed_present_accuracy is None

    def test_none_entries_are_skipped(self):
        """None entries count as unreviewed and never raise."""
        aggregate = aggregate_reviewed_accuracy([None, corpus()[0]])
        assert aggregate.skipped_unreviewed_count == 1
        assert aggregate.reviewed_doc_count == 1

    def test_critical_counts(self):
        """Critical counts come from the effective type's table."""
        docs = [
            make_doc(
                "lien-1",
                {"recording_date": "2024-01-05", "taxpayer_name": "Acme", "notes": "x"},
                {"taxpayer_name": NOT_IN_DOCUMENT_VALUE},
                category="tax_lien",
            ),
        ]
        aggregate = aggregate_reviewed_accuracy(docs)

        assert aggregate.critical_counts.correct == 1
        assert aggregate.critical_counts.hallucination == 1
        assert aggregate.counts.correct == 2
        assert aggregate.critical_rates.observed_hallucination_rate == pytest.approx(1.0)

    def test_worst_fields(self):
        """Worst fields are ranked by present accuracy, then name."""
        aggregate = aggregate_reviewed_accuracy(corpus())

        assert aggregate.field_counts["c"].wrong_value == 1
        assert aggregate.worst_fields(2) == [("c", 0.0), ("d", 0.0)]

    def test_to_dict(self):
        """Aggregate serializes with camelCase keys."""
        payload = aggregate_reviewed_accuracy(corpus()).to_dict()

        assert payload["reviewedDocCount"] == 2
        assert payload["excludedReclassifiedCount"] == 1
        assert payload["totalEvaluatedFields"] == 4
        assert payload["rates"]["observed_present_accuracy"] == pytest.approx(0.5)


class TestAggregateByDocType:
    """Tests for aggregate_by_doc_type()."""

    def test_grouped_by_effective_type(self):
        """Documents are grouped by their resolved type."""
        by_type = aggregate_by_doc_type(corpus())

        assert list(by_type) == ["invoice", "receipt"]
        assert by_type["invoice"].reviewed_doc_count == 1
        assert by_type["invoice"].skipped_unreviewed_count == 1
        assert by_type["receipt"].reviewed_doc_count == 1
        # doc-4 was moved to receipt by the reviewer
        assert by_type["receipt"].excluded_reclassified_count == 1

    def test_unknown_type(self):
        """Documents with no resolvable type go under "unknown"."""
        doc = make_doc("x", {"a": "1"}, category=None)
        doc["classification"] = None
        by_type = aggregate_by_doc_type([doc])
        assert list(by_type) == [UNKNOWN_DOC_TYPE]


class TestDocumentsFrame:
    """Tests for documents_frame()."""

    def test_one_row_per_evaluated_document(self):
        """Only evaluated documents appear as rows."""
        frame = documents_frame(corpus())

        assert list(frame["doc_id"]) == ["doc-1", "doc-2"]
        assert list(frame["evaluated_field_count"]) == [3, 1]
        assert list(frame["edited_field_count"]) == [1, 1]
        assert frame.loc[0, "wrong_value"] == 1
        assert frame.loc[1, "observed_present_accuracy"] == pytest.approx(0.0)

    def test_empty(self):
        """An empty corpus still has the full column set."""
        frame = documents_frame([])
        assert frame.empty
        assert "observed_present_accuracy" in frame.columns


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
