"""Extraction accuracy metric records.

Each metric group stores raw counts alongside the ratios derived from them.
``from_counts`` is the only place ratios are computed, so per-scenario
metrics and aggregated metrics always follow the same zero-denominator rules.
"""

from pydantic import Field

from notescore.models.base import CamelModel


def safe_ratio(numerator: float, denominator: float, default: float) -> float:
    """Divide, returning ``default`` when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def f1_from(precision: float, recall: float) -> float:
    if precision + recall == 0:
        return 0.0
    return 2 * precision * recall / (precision + recall)


class DuplicateDetectionMetrics(CamelModel):
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    true_negatives: int = 0
    precision: float = 1.0
    recall: float = 1.0
    f1_score: float = 1.0

    @classmethod
    def from_counts(
        cls,
        true_positives: int = 0,
        false_positives: int = 0,
        false_negatives: int = 0,
        true_negatives: int = 0,
    ) -> 'DuplicateDetectionMetrics':
        precision = safe_ratio(
            true_positives, true_positives + false_positives, default=1.0
        )
        recall = safe_ratio(
            true_positives, true_positives + false_negatives, default=1.0
        )
        return cls(
            true_positives=true_positives,
            false_positives=false_positives,
            false_negatives=false_negatives,
            true_negatives=true_negatives,
            precision=precision,
            recall=recall,
            f1_score=f1_from(precision, recall),
        )


class ConsolidationMetrics(CamelModel):
    correct_consolidations: int = 0
    missed_consolidations: int = 0
    wrong_consolidations: int = 0
    correct_new_notes: int = 0
    accuracy: float = 1.0

    @classmethod
    def from_counts(
        cls,
        correct_consolidations: int = 0,
        missed_consolidations: int = 0,
        wrong_consolidations: int = 0,
        correct_new_notes: int = 0,
    ) -> 'ConsolidationMetrics':
        correct = correct_consolidations + correct_new_notes
        total = correct + missed_consolidations + wrong_consolidations
        return cls(
            correct_consolidations=correct_consolidations,
            missed_consolidations=missed_consolidations,
            wrong_consolidations=wrong_consolidations,
            correct_new_notes=correct_new_notes,
            accuracy=safe_ratio(correct, total, default=1.0),
        )


class TagReuseMetrics(CamelModel):
    reused_existing: int = 0
    correctly_created_new: int = 0
    should_have_reused: int = 0
    reuse_rate: float = 1.0
    total_tags_assigned: int = 0

    @classmethod
    def from_counts(
        cls,
        reused_existing: int = 0,
        correctly_created_new: int = 0,
        should_have_reused: int = 0,
    ) -> 'TagReuseMetrics':
        return cls(
            reused_existing=reused_existing,
            correctly_created_new=correctly_created_new,
            should_have_reused=should_have_reused,
            reuse_rate=safe_ratio(
                reused_existing, reused_existing + should_have_reused, default=1.0
            ),
            total_tags_assigned=(
                reused_existing + correctly_created_new + should_have_reused
            ),
        )


class ConnectionMetrics(CamelModel):
    correct_connections: int = 0
    missed_connections: int = 0
    spurious_connections: int = 0
    precision: float = 1.0
    recall: float = 1.0

    @classmethod
    def from_counts(
        cls,
        correct_connections: int = 0,
        missed_connections: int = 0,
        spurious_connections: int = 0,
    ) -> 'ConnectionMetrics':
        return cls(
            correct_connections=correct_connections,
            missed_connections=missed_connections,
            spurious_connections=spurious_connections,
            precision=safe_ratio(
                correct_connections,
                correct_connections + spurious_connections,
                default=1.0,
            ),
            recall=safe_ratio(
                correct_connections,
                correct_connections + missed_connections,
                default=1.0,
            ),
        )


class TimingMetrics(CamelModel):
    """Wall-clock durations measured by the caller around extraction."""

    total_ms: float = 0.0
    context_retrieval_ms: float = 0.0
    extraction_ms: float = 0.0


class ExtractionMetrics(CamelModel):
    duplicate_detection: DuplicateDetectionMetrics = Field(
        default_factory=DuplicateDetectionMetrics
    )
    consolidation: ConsolidationMetrics = Field(default_factory=ConsolidationMetrics)
    tag_reuse: TagReuseMetrics = Field(default_factory=TagReuseMetrics)
    connections: ConnectionMetrics = Field(default_factory=ConnectionMetrics)
    timing: TimingMetrics = Field(default_factory=TimingMetrics)
