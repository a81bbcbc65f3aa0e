"""
Extraction accuracy metrics.

Computes confusion-matrix style metrics for one scenario and aggregates them
across scenarios. Aggregation sums raw counts and rederives every ratio from
the sums; per-scenario ratios are never averaged.
"""

from collections.abc import Sequence

import numpy as np
from loguru import logger

from notescore.evaluation.ground_truth import (
    NoteMatcher,
    check_consolidation,
    evaluate_connections,
    find_matching_expected_note,
    should_reuse_tag,
)
from notescore.models.ground_truth import (
    ExistingNote,
    ExpectedConsolidation,
    ExpectedNote,
    TestScenario,
)
from notescore.models.metrics import (
    ConnectionMetrics,
    ConsolidationMetrics,
    DuplicateDetectionMetrics,
    ExtractionMetrics,
    TagReuseMetrics,
    TimingMetrics,
)
from notescore.models.notes import ExtractedNoteResult


def calculate_duplicate_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    expected_consolidations: Sequence[ExpectedConsolidation],
    existing_notes: Sequence[ExistingNote] = (),
) -> DuplicateDetectionMetrics:
    """
    Confusion matrix over "should this note have been consolidated".

    A note consolidated into the wrong target counts as both a false positive
    (wrong pairing made) and a false negative (right pairing missed). Expected
    consolidations whose content no note carried add one false negative each.
    """
    tp = fp = fn = tn = 0
    seen: set[int] = set()

    for note in extracted_notes:
        check = check_consolidation(note, existing_notes, expected_consolidations)
        if check.expected_index is not None:
            seen.add(check.expected_index)

        if check.should_have_consolidated:
            if check.did_consolidate and check.consolidated_correctly:
                tp += 1
            elif check.did_consolidate:
                fp += 1
                fn += 1
            else:
                fn += 1
        elif check.did_consolidate:
            fp += 1
        else:
            tn += 1

    fn += len(expected_consolidations) - len(seen)
    return DuplicateDetectionMetrics.from_counts(
        true_positives=tp,
        false_positives=fp,
        false_negatives=fn,
        true_negatives=tn,
    )


def calculate_consolidation_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    expected_consolidations: Sequence[ExpectedConsolidation],
    existing_notes: Sequence[ExistingNote] = (),
) -> ConsolidationMetrics:
    correct = missed = wrong = correct_new = 0
    seen: set[int] = set()

    for note in extracted_notes:
        check = check_consolidation(note, existing_notes, expected_consolidations)
        if check.expected_index is not None:
            seen.add(check.expected_index)

        if check.should_have_consolidated:
            if check.did_consolidate and check.consolidated_correctly:
                correct += 1
            elif check.did_consolidate:
                wrong += 1
            else:
                missed += 1
        elif check.did_consolidate:
            wrong += 1
        else:
            correct_new += 1

    missed += len(expected_consolidations) - len(seen)
    return ConsolidationMetrics.from_counts(
        correct_consolidations=correct,
        missed_consolidations=missed,
        wrong_consolidations=wrong,
        correct_new_notes=correct_new,
    )


def calculate_tag_reuse_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    existing_tags: Sequence[str],
) -> TagReuseMetrics:
    """
    Classify every tag on every note.

    A tag spelled exactly like an existing tag was reused. A tag that only
    resembles one (different case, a synonym, a spelling variant) should
    have been reused. Anything else is a legitimately new tag.
    """
    exact = {tag.lstrip('#').strip() for tag in existing_tags}
    reused = created_new = should_have_reused = 0

    for note in extracted_notes:
        for tag in note.unique_tags():
            if tag.lstrip('#').strip() in exact:
                reused += 1
            elif should_reuse_tag(tag, existing_tags).should_reuse:
                should_have_reused += 1
            else:
                created_new += 1

    return TagReuseMetrics.from_counts(
        reused_existing=reused,
        correctly_created_new=created_new,
        should_have_reused=should_have_reused,
    )


def calculate_connection_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    expected_notes: Sequence[ExpectedNote],
    existing_notes: Sequence[ExistingNote] = (),
    matcher: NoteMatcher | None = None,
) -> ConnectionMetrics:
    """Sum connection outcomes over notes; unmatched notes are all spurious."""
    titles = [note.title for note in extracted_notes]
    titles.extend(note.title for note in existing_notes)
    correct = missed = spurious = 0

    for note in extracted_notes:
        result = find_matching_expected_note(note, expected_notes, matcher)
        if result.is_trusted:
            evaluation = evaluate_connections(note, result.match, titles)
            correct += evaluation.correct
            missed += evaluation.missed
            spurious += evaluation.spurious
        else:
            spurious += len(note.connections)

    return ConnectionMetrics.from_counts(
        correct_connections=correct,
        missed_connections=missed,
        spurious_connections=spurious,
    )


def calculate_all_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    scenario: TestScenario,
    timing: TimingMetrics | None = None,
    matcher: NoteMatcher | None = None,
) -> ExtractionMetrics:
    """Calculate every metric group for one scenario run.

    Args:
        extracted_notes: Notes the extraction run produced.
        scenario: Ground truth for the run.
        timing: Durations measured by the caller, zero when omitted.
        matcher: Strategy for matching notes to expected notes.

    Returns:
        ExtractionMetrics: Metrics for the scenario.
    """
    metrics = ExtractionMetrics(
        duplicate_detection=calculate_duplicate_metrics(
            extracted_notes, scenario.expected_consolidations, scenario.existing_notes
        ),
        consolidation=calculate_consolidation_metrics(
            extracted_notes, scenario.expected_consolidations, scenario.existing_notes
        ),
        tag_reuse=calculate_tag_reuse_metrics(extracted_notes, scenario.existing_tags),
        connections=calculate_connection_metrics(
            extracted_notes, scenario.expected_notes, scenario.existing_notes, matcher
        ),
        timing=timing or TimingMetrics(),
    )
    dd = metrics.duplicate_detection
    logger.debug(
        f"Scenario '{scenario.name}': TP={dd.true_positives} FP={dd.false_positives} "
        f'FN={dd.false_negatives} TN={dd.true_negatives}, '
        f'{metrics.tag_reuse.total_tags_assigned} tags, '
        f'{metrics.connections.correct_connections} correct connections'
    )
    return metrics


def aggregate_metrics(results: Sequence[ExtractionMetrics]) -> ExtractionMetrics:
    """
    Combine per-scenario metrics into one.

    Counts are summed and ratios recomputed from the sums, so scenarios with
    more notes weigh proportionally more. Timing fields are averaged. With no
    results every count is zero and every ratio takes its zero-denominator
    default.
    """
    if not results:
        return ExtractionMetrics(
            duplicate_detection=DuplicateDetectionMetrics.from_counts(),
            consolidation=ConsolidationMetrics.from_counts(),
            tag_reuse=TagReuseMetrics.from_counts(),
            connections=ConnectionMetrics.from_counts(),
            timing=TimingMetrics(),
        )

    def total(group: str, field: str) -> int:
        return sum(getattr(getattr(r, group), field) for r in results)

    def mean(field: str) -> float:
        return float(np.mean([getattr(r.timing, field) for r in results]))

    return ExtractionMetrics(
        duplicate_detection=DuplicateDetectionMetrics.from_counts(
            true_positives=total('duplicate_detection', 'true_positives'),
            false_positives=total('duplicate_detection', 'false_positives'),
            false_negatives=total('duplicate_detection', 'false_negatives'),
            true_negatives=total('duplicate_detection', 'true_negatives'),
        ),
        consolidation=ConsolidationMetrics.from_counts(
            correct_consolidations=total('consolidation', 'correct_consolidations'),
            missed_consolidations=total('consolidation', 'missed_consolidations'),
            wrong_consolidations=total('consolidation', 'wrong_consolidations'),
            correct_new_notes=total('consolidation', 'correct_new_notes'),
        ),
        tag_reuse=TagReuseMetrics.from_counts(
            reused_existing=total('tag_reuse', 'reused_existing'),
            correctly_created_new=total('tag_reuse', 'correctly_created_new'),
            should_have_reused=total('tag_reuse', 'should_have_reused'),
        ),
        connections=ConnectionMetrics.from_counts(
            correct_connections=total('connections', 'correct_connections'),
            missed_connections=total('connections', 'missed_connections'),
            spurious_connections=total('connections', 'spurious_connections'),
        ),
        timing=TimingMetrics(
            total_ms=mean('total_ms'),
            context_retrieval_ms=mean('context_retrieval_ms'),
            extraction_ms=mean('extraction_ms'),
        ),
    )
