"""
notescore - note quality and extraction accuracy evaluation.

Scores knowledge notes against the Note Vitality Quotient rubric and measures
how accurately an extraction pipeline consolidates notes, reuses tags and
links related notes.
"""

__version__ = '0.1.0'

from notescore.config import NVQEvaluatorConfig
from notescore.nvq.evaluator import NVQEvaluator

__all__ = ['NVQEvaluator', 'NVQEvaluatorConfig']
