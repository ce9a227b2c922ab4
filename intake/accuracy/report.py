"""
Text reports for reviewed accuracy.
"""

from typing import Optional

from .classifier import Outcome
from .metrics import AccuracyRates, AggregateAccuracy, OutcomeCounts

_OUTCOME_LABELS = {
    Outcome.CORRECT: "Correct:",
    Outcome.WRONG_VALUE: "Wrong value:",
    Outcome.MISS: "Missed:",
    Outcome.HALLUCINATION: "Hallucinated:",
    Outcome.CORRECT_ABSENT: "Correct absent:",
}


def _pct(rate: Optional[float]) -> str:
    return "n/a" if rate is None else f"{rate:.1%}"


def _rate_lines(rates: AccuracyRates) -> list[str]:
    return [
        f"  Present accuracy:     {_pct(rates.observed_present_accuracy)}",
        f"  Miss rate:            {_pct(rates.observed_miss_rate)}",
        f"  Wrong rate:           {_pct(rates.observed_wrong_rate)}",
        f"  Hallucination rate:   {_pct(rates.observed_hallucination_rate)}",
    ]


def _count_lines(counts: OutcomeCounts) -> list[str]:
    return [
        f"  {_OUTCOME_LABELS[outcome]:21} {getattr(counts, outcome.value)}"
        for outcome in Outcome
    ]


def format_accuracy_report(
    aggregate: AggregateAccuracy,
    title: str = "REVIEWED ACCURACY REPORT",
    by_type: Optional[dict[str, AggregateAccuracy]] = None,
    worst_n: int = 10,
) -> str:
    """
    Generate a formatted reviewed accuracy report.

    Args:
        aggregate: Corpus-wide metrics
        title: Report title
        by_type: Optional per-document-type metrics
        worst_n: Number of worst fields to list

    Returns:
        Formatted report string
    """
    lines = []
    sep = "=" * 60

    lines.append(sep)
    lines.append(f" {title}")
    lines.append(sep)
    lines.append("")

    lines.append("DOCUMENTS")
    lines.append("-" * 40)
    lines.append(f"  Reviewed:             {aggregate.reviewed_doc_count}")
    lines.append(f"  Excluded (retyped):   {aggregate.excluded_reclassified_count}")
    lines.append(f"  Not yet reviewed:     {aggregate.skipped_unreviewed_count}")
    lines.append(f"  Evaluated fields:     {aggregate.total_evaluated_fields}")
    lines.append("")

    lines.append("OBSERVED AGREEMENT")
    lines.append("-" * 40)
    lines.extend(_rate_lines(aggregate.rates))
    lines.append("")

    lines.append("OUTCOMES")
    lines.append("-" * 40)
    lines.extend(_count_lines(aggregate.counts))
    lines.append("")

    lines.append("CRITICAL FIELDS")
    lines.append("-" * 40)
    if aggregate.critical_counts.total > 0:
        lines.extend(_rate_lines(aggregate.critical_rates))
        lines.append(f"  Evaluated:            {aggregate.critical_counts.total}")
    else:
        lines.append("  No critical fields evaluated")
    lines.append("")

    if by_type:
        lines.append("ACCURACY BY DOCUMENT TYPE")
        lines.append("-" * 40)
        for doc_type, type_metrics in by_type.items():
            if type_metrics.reviewed_doc_count == 0:
                continue
            counts = type_metrics.counts
            lines.append(
                f"  {doc_type:30} {counts.correct:3}/{counts.present_total:3} "
                f"({_pct(type_metrics.rates.observed_present_accuracy)}) "
                f"docs={type_metrics.reviewed_doc_count}"
            )
        lines.append("")

    worst_fields = aggregate.worst_fields(worst_n)
    if worst_fields:
        lines.append("WORST PERFORMING FIELDS")
        lines.append("-" * 40)
        for field_name, accuracy in worst_fields:
            field_counts = aggregate.field_counts[field_name]
            lines.append(
                f"  {field_name:40} {field_counts.correct}/{field_counts.present_total} "
                f"({accuracy:.1%})"
            )
        lines.append("")

    lines.append(sep)

    return "\n".join(lines)
