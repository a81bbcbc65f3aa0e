"""Extraction accuracy and note quality evaluation."""

from notescore.evaluation.ground_truth import (
    FuzzyNoteMatcher,
    MatchResult,
    NoteMatcher,
    PatternNoteMatcher,
    check_consolidation,
    create_matcher,
    evaluate_connections,
    find_matching_expected_note,
    should_reuse_tag,
)
from notescore.evaluation.metrics import aggregate_metrics, calculate_all_metrics
from notescore.evaluation.quality import evaluate_quality
from notescore.evaluation.report import format_ci_summary, generate_report

__all__ = [
    'FuzzyNoteMatcher',
    'MatchResult',
    'NoteMatcher',
    'PatternNoteMatcher',
    'aggregate_metrics',
    'calculate_all_metrics',
    'check_consolidation',
    'create_matcher',
    'evaluate_connections',
    'evaluate_quality',
    'find_matching_expected_note',
    'format_ci_summary',
    'generate_report',
    'should_reuse_tag',
]
