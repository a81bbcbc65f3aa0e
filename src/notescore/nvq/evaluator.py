"""
NVQ Evaluator.

Combines the five component scorers into a single Note Vitality Quotient.
"""

from loguru import logger

from notescore.config import NVQEvaluatorConfig
from notescore.errors import ConfigurationError
from notescore.models.notes import QualityExtractedNote
from notescore.models.scores import COMPONENT_NAMES, NVQBreakdown, NVQScore
from notescore.nvq.classifiers import ConnectionClassifier
from notescore.nvq.components import (
    score_connectivity,
    score_metadata,
    score_originality,
    score_taxonomy,
    score_why,
)


class NVQEvaluator:
    """
    Scores notes against the Note Vitality Quotient rubric.

    The evaluator holds no mutable state, so a single instance can score
    notes from several threads at once.

    Example:
        >>> evaluator = NVQEvaluator(NVQEvaluatorConfig(mocs=('Health MOC',)))
        >>> score = evaluator.evaluate(note)
        >>> score.passing
        True
    """

    def __init__(self, config: NVQEvaluatorConfig | None = None):
        """
        Initialize the evaluator.

        Args:
            config: MOCs, projects, goals and passing threshold to score
                against. Defaults to an empty context with a threshold of 7.

        Raises:
            ConfigurationError: If the passing threshold is negative.
        """
        self.config = config or NVQEvaluatorConfig()
        if self.config.passing_threshold < 0:
            raise ConfigurationError(
                'NVQ001',
                f'passing_threshold must be >= 0, got {self.config.passing_threshold}',
                context={'passing_threshold': self.config.passing_threshold},
            )
        self.classifier = ConnectionClassifier(self.config.mocs, self.config.projects)

    def evaluate(self, note: QualityExtractedNote) -> NVQScore:
        """Score a single note."""
        breakdown = NVQBreakdown(
            why=score_why(note, self.config.goals),
            metadata=score_metadata(note),
            taxonomy=score_taxonomy(note, self.config.penalize_tag_overflow),
            connectivity=score_connectivity(note, self.classifier),
            originality=score_originality(note),
        )
        component_scores = breakdown.component_scores()
        total = sum(component_scores.values())
        failing = [name for name in COMPONENT_NAMES if component_scores[name] == 0]

        logger.debug(f"NVQ for '{note.title}': {total}/10 {component_scores}")

        return NVQScore(
            total=total,
            breakdown=breakdown,
            passing=total >= self.config.passing_threshold,
            failing_components=failing,
        )


def identify_issues(score: NVQScore) -> list[str]:
    """Describe what a note needs in order to score higher."""
    breakdown = score.breakdown
    issues = []

    if breakdown.why.score == 0:
        issues.append('Missing purpose statement ("I am keeping this because...")')
    elif not breakdown.why.links_to_goal:
        issues.append('Purpose statement does not link to a personal goal')

    if breakdown.metadata.fields_present < 2:
        issues.append('Missing metadata fields (Status, Type, Stakeholder)')

    if breakdown.taxonomy.topic_tags > breakdown.taxonomy.functional_tags:
        issues.append('Too many topic tags, not enough functional tags')
    if breakdown.taxonomy.exceeds_limit:
        issues.append('Exceeds 5 tag limit - note may need to be split')

    if not breakdown.connectivity.has_upward_link:
        issues.append('Missing upward link to MOC or Project')
    if not breakdown.connectivity.has_sideways_link:
        issues.append('Missing sideways link to related concept')

    if breakdown.originality.is_wikipedia_fact:
        issues.append('Content is too factual - add personal interpretation')

    return issues


def quick_evaluate_note(
    note: QualityExtractedNote, passing_threshold: float = 7
) -> NVQScore:
    """Score a note without any MOC, project or goal context."""
    config = NVQEvaluatorConfig(passing_threshold=passing_threshold)
    return NVQEvaluator(config).evaluate(note)
