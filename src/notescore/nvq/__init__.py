"""Note Vitality Quotient scoring."""

from notescore.nvq.classifiers import ConnectionClassifier, classify_tag
from notescore.nvq.evaluator import NVQEvaluator, identify_issues, quick_evaluate_note
from notescore.nvq.fields import recover_quality_fields
from notescore.nvq.patterns import GRAMMAR_VERSION

__all__ = [
    'GRAMMAR_VERSION',
    'ConnectionClassifier',
    'NVQEvaluator',
    'classify_tag',
    'identify_issues',
    'quick_evaluate_note',
    'recover_quality_fields',
]
