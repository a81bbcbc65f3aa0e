"""
Batch NVQ quality evaluation.

Turns raw extracted notes into scored results:

1. Recover quality fields from note content
2. Score each note against the NVQ rubric
3. Match notes to declared quality expectations
4. Reduce all scores into aggregate quality metrics
5. Rank failure reasons and emit recommendations
"""

from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from loguru import logger

from notescore.config import NVQEvaluatorConfig
from notescore.evaluation.ground_truth import content_contains_phrases
from notescore.models.ground_truth import QualityExpectation
from notescore.models.notes import ExtractedNoteResult, QualityExtractedNote
from notescore.models.quality import (
    ComponentFailureRates,
    FailureReason,
    NoteQualityMetrics,
    NVQEvaluationResult,
    QualityEvaluationResults,
    ScoreDistributions,
)
from notescore.models.scores import COMPONENT_MAXIMA, COMPONENT_NAMES, NVQScore
from notescore.nvq.classifiers import normalize_tag
from notescore.nvq.evaluator import NVQEvaluator
from notescore.nvq.fields import recover_quality_fields

TOP_FAILURE_LIMIT = 10

# Component failure rate above which a recommendation is emitted.
RECOMMENDATION_THRESHOLDS = {
    'why': 0.3,
    'metadata': 0.3,
    'taxonomy': 0.3,
    'connectivity': 0.3,
    'originality': 0.5,
}

RECOMMENDATIONS = {
    'why': 'Add purpose statements ("I am keeping this because...") to more notes',
    'metadata': 'Include metadata fields (Status, Type, Stakeholder) in extraction',
    'taxonomy': 'Use functional tags (#task/*, #skill/*) instead of topic tags',
    'connectivity': (
        'Add upward links to projects/MOCs and sideways links to related notes'
    ),
    'originality': 'Encourage synthesis and personal interpretation over raw facts',
}


def get_failure_issue(score: NVQScore, component: str) -> str:
    """Name the most likely reason a component scored zero."""
    breakdown = score.breakdown
    if component == 'why':
        if not breakdown.why.has_first_person:
            return 'Missing first-person statement'
        if not breakdown.why.links_to_goal:
            return 'No link to personal goal'
        if not breakdown.why.is_actionable:
            return 'Not actionable'
        return 'Unknown why issue'
    if component == 'metadata':
        if not breakdown.metadata.has_status:
            return 'Missing status field'
        if not breakdown.metadata.has_type:
            return 'Missing type field'
        if not breakdown.metadata.has_stakeholder:
            return 'Missing stakeholder field'
        return 'Incomplete metadata'
    if component == 'taxonomy':
        if breakdown.taxonomy.topic_tags > 0:
            return 'Contains topic tags instead of functional'
        if breakdown.taxonomy.exceeds_limit:
            return 'Too many tags (>5)'
        return 'No functional tags'
    if component == 'connectivity':
        if not breakdown.connectivity.has_upward_link:
            return 'Missing upward link'
        if not breakdown.connectivity.has_sideways_link:
            return 'Missing sideways link'
        return 'Insufficient connections'
    if component == 'originality':
        if breakdown.originality.is_wikipedia_fact:
            return 'Pure fact without synthesis'
        return 'Low synthesis ratio'
    return 'Unknown issue'


def find_matching_expectation(
    note: ExtractedNoteResult, expectations: Sequence[QualityExpectation]
) -> QualityExpectation | None:
    """First expectation whose title patterns and content phrases all fit."""
    title_lower = note.title.lower()
    for expectation in expectations:
        title_hit = any(
            pattern.lower() in title_lower for pattern in expectation.title_patterns
        )
        if title_hit and content_contains_phrases(
            note.content, expectation.content_must_contain
        ):
            return expectation
    return None


def check_expectation(
    note: QualityExtractedNote, score: NVQScore, expectation: QualityExpectation
) -> list[str]:
    """List the ways a note departs from its matched expectation."""
    issues = []

    declared = (
        ('status', expectation.expected_status, note.status),
        ('type', expectation.expected_type, note.note_type),
        ('stakeholder', expectation.expected_stakeholder, note.stakeholder),
    )
    for label, expected, actual in declared:
        if expected is not None and expected != actual:
            found = actual.value if actual is not None else 'none'
            issues.append(f'Expected {label} {expected.value}, found {found}')

    if expectation.expected_project:
        project = (note.project or '').lower()
        if expectation.expected_project.lower() not in project:
            issues.append(f'Expected project {expectation.expected_project}')

    tags = {normalize_tag(tag).lower() for tag in note.tags}
    for tag in expectation.expected_functional_tags:
        if normalize_tag(tag).lower() not in tags:
            issues.append(f'Missing expected tag {tag}')
    for tag in expectation.forbidden_tags:
        if normalize_tag(tag).lower() in tags:
            issues.append(f'Forbidden tag {tag} assigned')

    if expectation.is_synthesis and score.breakdown.originality.score == 0:
        issues.append('Expected synthesis but content reads as fact')

    return issues


def calculate_nvq_metrics(scores: Sequence[NVQScore]) -> NoteQualityMetrics:
    """
    Reduce a batch of NVQ scores into aggregate quality metrics.

    Args:
        scores: Scores for every evaluated note.

    Returns:
        NoteQualityMetrics: Summary statistics, failure rates, histograms,
            diagnostic counts and the most frequent failure reasons.
    """
    if not scores:
        return NoteQualityMetrics()

    totals = sorted(score.total for score in scores)
    count = len(scores)

    distributions = {
        name: dict.fromkeys(range(COMPONENT_MAXIMA[name] + 1), 0)
        for name in COMPONENT_NAMES
    }
    failures = dict.fromkeys(COMPONENT_NAMES, 0)
    for score in scores:
        for name, value in score.breakdown.component_scores().items():
            distributions[name][value] += 1
            if value == 0:
                failures[name] += 1

    reasons: Counter[tuple[str, str]] = Counter()
    for score in scores:
        for component in score.failing_components:
            reasons[(component, get_failure_issue(score, component))] += 1
    top_failures = [
        FailureReason(component=component, issue=issue, count=n)
        for (component, issue), n in sorted(
            reasons.items(), key=lambda item: item[1], reverse=True
        )[:TOP_FAILURE_LIMIT]
    ]

    passing_count = sum(1 for score in scores if score.passing)

    return NoteQualityMetrics(
        total_notes=count,
        mean_nvq=float(np.mean(totals)),
        median_nvq=float(totals[count // 2]),
        min_nvq=float(totals[0]),
        max_nvq=float(totals[-1]),
        passing_count=passing_count,
        passing_rate=passing_count / count,
        failure_rates=ComponentFailureRates(
            **{name: failures[name] / count for name in COMPONENT_NAMES}
        ),
        score_distributions=ScoreDistributions(**distributions),
        notes_with_purpose=sum(
            1 for s in scores if s.breakdown.why.raw_statement is not None
        ),
        notes_with_complete_metadata=sum(
            1 for s in scores if s.breakdown.metadata.fields_present >= 3
        ),
        notes_with_functional_tags=sum(
            1
            for s in scores
            if s.breakdown.taxonomy.functional_tags > s.breakdown.taxonomy.topic_tags
        ),
        notes_meeting_two_link_minimum=sum(
            1 for s in scores if s.breakdown.connectivity.score == 2
        ),
        notes_with_synthesis=sum(
            1 for s in scores if s.breakdown.originality.has_original_insight
        ),
        top_failures=top_failures,
    )


def generate_quality_recommendations(metrics: NoteQualityMetrics) -> list[str]:
    rates = metrics.failure_rates
    return [
        RECOMMENDATIONS[name]
        for name in COMPONENT_NAMES
        if getattr(rates, name) > RECOMMENDATION_THRESHOLDS[name]
    ]


def _evaluate_note(
    note: ExtractedNoteResult,
    evaluator: NVQEvaluator,
    expectations: Sequence[QualityExpectation],
) -> NVQEvaluationResult:
    quality_note = recover_quality_fields(note)
    score = evaluator.evaluate(quality_note)

    issues = []
    if not score.passing:
        issues.append(f'NVQ score {score.total}/10 below threshold')
    for component in score.failing_components:
        issues.append(f'{component}: {get_failure_issue(score, component)}')

    expectation = find_matching_expectation(note, expectations)
    expectation_issues = (
        check_expectation(quality_note, score, expectation) if expectation else []
    )

    return NVQEvaluationResult(
        note_title=note.title,
        score=score,
        expectation_matched=expectation is not None,
        issues=issues,
        expectation_issues=expectation_issues,
    )


def evaluate_quality(
    extracted_notes: Sequence[ExtractedNoteResult],
    expectations: Sequence[QualityExpectation] = (),
    config: NVQEvaluatorConfig | None = None,
    scenario_name: str = 'unnamed',
    max_workers: int | None = None,
) -> QualityEvaluationResults:
    """
    Score a batch of extracted notes and summarize their quality.

    Notes are independent, so with ``max_workers`` set they are scored on a
    thread pool. Results keep the input order either way.

    Args:
        extracted_notes: Notes produced by the extraction run.
        expectations: Quality expectations for specific notes.
        config: Evaluation context shared by every note.
        scenario_name: Name reported with the results.
        max_workers: Thread pool size, notes are scored serially when unset.

    Returns:
        QualityEvaluationResults: Per-note results, aggregate metrics and
            recommendations.

    Raises:
        ConfigurationError: If the configuration has a negative threshold.
    """
    evaluator = NVQEvaluator(config)

    def evaluate(note: ExtractedNoteResult) -> NVQEvaluationResult:
        return _evaluate_note(note, evaluator, expectations)

    if max_workers and max_workers > 1 and len(extracted_notes) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            note_results = list(executor.map(evaluate, extracted_notes))
    else:
        note_results = [evaluate(note) for note in extracted_notes]

    metrics = calculate_nvq_metrics([result.score for result in note_results])
    recommendations = generate_quality_recommendations(metrics)

    logger.info(
        f"Quality for '{scenario_name}': mean NVQ {metrics.mean_nvq:.1f}, "
        f'{metrics.passing_count}/{metrics.total_notes} passing'
    )

    return QualityEvaluationResults(
        scenario_name=scenario_name,
        note_results=note_results,
        metrics=metrics,
        recommendations=recommendations,
    )
