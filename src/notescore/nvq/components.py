"""
NVQ component scorers.

Each scorer is a pure function of a note and the evaluation context it needs.
Missing fields never raise; they simply fail the matching sub-check.

Rubric:
    why           0-3  first person, linked to a goal, actionable
    metadata      0-2  project, status, type, stakeholder
    taxonomy      0-2  functional tags instead of topic tags
    connectivity  0-2  upward and sideways links (Two-Link Minimum)
    originality   0-1  personal synthesis rather than encyclopedic fact
"""

import re
from collections.abc import Iterable

from notescore.models.notes import QualityExtractedNote, UserGoal
from notescore.models.scores import (
    ConnectivityComponentScore,
    LinkDirection,
    MetadataComponentScore,
    OriginalityComponentScore,
    TaxonomyComponentScore,
    WhyComponentScore,
)
from notescore.nvq.classifiers import ConnectionClassifier, classify_tags
from notescore.nvq.patterns import (
    ACTIONABLE,
    ENCYCLOPEDIC_FACT,
    FIRST_PERSON,
    MIN_INSIGHT_MARKERS,
    MIN_KEYWORD_LENGTH,
    ORIGINAL_INSIGHT,
    PURPOSE_LABEL,
    STOP_WORDS,
    SYNTHESIS_RATIO_THRESHOLD,
    TAG_LIMIT,
    calculate_synthesis_ratio,
    count_pattern_matches,
)

_WORD = re.compile(r"[a-z0-9']+")


def significant_keywords(text: str) -> set[str]:
    """Lowercased words long enough to carry meaning, minus stop words."""
    return {
        word
        for word in _WORD.findall(text.lower())
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    }


def _overlaps(statement: str, reference: str | None) -> bool:
    if not reference or not reference.strip():
        return False
    reference_lower = reference.strip().lower()
    if reference_lower in statement.lower():
        return True
    keywords = significant_keywords(reference_lower)
    if not keywords:
        return False
    found = keywords & significant_keywords(statement)
    return len(found) / len(keywords) >= 0.5


def links_to_goal(statement: str, goals: Iterable[UserGoal]) -> bool:
    """Whether the statement mentions a goal title or the goal's deeper why."""
    return any(
        _overlaps(statement, goal.title) or _overlaps(statement, goal.why_root)
        for goal in goals
    )


def score_why(
    note: QualityExtractedNote, goals: Iterable[UserGoal] = ()
) -> WhyComponentScore:
    statement = (note.purpose_statement or '').strip()
    if not statement:
        return WhyComponentScore(
            score=0,
            has_first_person=False,
            links_to_goal=False,
            is_actionable=False,
            raw_statement=None,
        )

    has_first_person = bool(
        FIRST_PERSON.search(statement) or PURPOSE_LABEL.search(statement)
    )
    linked = links_to_goal(statement, goals)
    is_actionable = bool(ACTIONABLE.search(statement))

    return WhyComponentScore(
        score=int(has_first_person) + int(linked) + int(is_actionable),
        has_first_person=has_first_person,
        links_to_goal=linked,
        is_actionable=is_actionable,
        raw_statement=statement,
    )


def score_metadata(note: QualityExtractedNote) -> MetadataComponentScore:
    has_project = bool(note.project and note.project.strip())
    has_status = note.status is not None
    has_type = note.note_type is not None
    has_stakeholder = note.stakeholder is not None
    fields_present = sum((has_project, has_status, has_type, has_stakeholder))

    if fields_present >= 3:
        score = 2
    elif fields_present == 2:
        score = 1
    else:
        score = 0

    return MetadataComponentScore(
        score=score,
        has_project=has_project,
        has_status=has_status,
        has_type=has_type,
        has_stakeholder=has_stakeholder,
        fields_present=fields_present,
    )


def score_taxonomy(
    note: QualityExtractedNote, penalize_overflow: bool = False
) -> TaxonomyComponentScore:
    """Score tag quality.

    ``exceeds_limit`` is always reported. It only lowers the score when
    ``penalize_overflow`` is set, in which case one point is removed.
    """
    breakdown = classify_tags(note.unique_tags())
    functional = sum(1 for tag in breakdown if tag.category.is_functional)
    topic = len(breakdown) - functional
    exceeds_limit = len(breakdown) > TAG_LIMIT

    if functional and not topic:
        score = 2
    elif functional:
        score = 1
    else:
        score = 0

    if penalize_overflow and exceeds_limit:
        score = max(0, score - 1)

    return TaxonomyComponentScore(
        score=score,
        functional_tags=functional,
        topic_tags=topic,
        tag_count=len(breakdown),
        exceeds_limit=exceeds_limit,
        tag_breakdown=breakdown,
    )


def score_connectivity(
    note: QualityExtractedNote, classifier: ConnectionClassifier
) -> ConnectivityComponentScore:
    links = classifier.classify_note_links(note.connections, note.content)
    by_direction: dict[LinkDirection, list[str]] = {d: [] for d in LinkDirection}
    for link in links:
        by_direction[link.direction].append(link.target_title)

    has_upward = bool(by_direction[LinkDirection.UPWARD])
    has_sideways = bool(by_direction[LinkDirection.SIDEWAYS])

    return ConnectivityComponentScore(
        score=int(has_upward) + int(has_sideways),
        has_upward_link=has_upward,
        has_sideways_link=has_sideways,
        upward_links=by_direction[LinkDirection.UPWARD],
        sideways_links=by_direction[LinkDirection.SIDEWAYS],
        downward_links=by_direction[LinkDirection.DOWNWARD],
    )


def score_originality(note: QualityExtractedNote) -> OriginalityComponentScore:
    text = f'{note.title}\n{note.content}'.strip()

    insight_markers = count_pattern_matches(text, ORIGINAL_INSIGHT)
    fact_markers = count_pattern_matches(text, ENCYCLOPEDIC_FACT)
    synthesis_ratio = calculate_synthesis_ratio(text)

    is_wikipedia_fact = fact_markers > 0 and insight_markers < MIN_INSIGHT_MARKERS
    has_original_insight = (
        insight_markers >= MIN_INSIGHT_MARKERS
        or synthesis_ratio > SYNTHESIS_RATIO_THRESHOLD
    )

    if is_wikipedia_fact:
        reasoning = 'Contains primarily factual/encyclopedic content'
    elif has_original_insight:
        reasoning = 'Contains original interpretation and synthesis'
    else:
        reasoning = 'Mostly factual, lacks personal synthesis'

    return OriginalityComponentScore(
        score=int(has_original_insight and not is_wikipedia_fact),
        has_original_insight=has_original_insight,
        is_wikipedia_fact=is_wikipedia_fact,
        synthesis_ratio=synthesis_ratio,
        synthesis_markers=insight_markers,
        reasoning=reasoning,
    )
