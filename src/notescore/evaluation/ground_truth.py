"""
Ground truth matching for extraction accuracy evaluation.

This module compares what an extraction run produced with the hand-authored
expectations of a test scenario:

1. Which expected note an extracted note corresponds to (pluggable matcher)
2. Whether a note should have been consolidated, and into which existing note
3. Whether a newly created tag duplicates an existing tag
4. Which of a note's connections were expected, missed or spurious
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Protocol

from loguru import logger
from rapidfuzz import fuzz

from notescore.errors import ConfigurationError
from notescore.models.ground_truth import (
    ExistingNote,
    ExpectedConsolidation,
    ExpectedNote,
)
from notescore.models.notes import ExtractedNoteResult

# Matches at or below this confidence are treated as unmatched.
MATCH_CONFIDENCE_THRESHOLD = 0.5

TITLE_WEIGHT = 0.4
PHRASE_WEIGHT = 0.4
TAG_WEIGHT = 0.2

DEFAULT_SYNONYM_GROUPS: dict[str, tuple[str, ...]] = {
    'machine-learning': ('ml', 'machine learning', 'machinelearning'),
    'artificial-intelligence': (
        'ai',
        'artificial intelligence',
        'artificialintelligence',
    ),
    'productivity': ('productive', 'being-productive', 'efficiency'),
    'note-taking': ('notes', 'note-management', 'notetaking'),
    'software-development': ('programming', 'coding', 'development'),
    'health': ('wellness', 'wellbeing', 'well-being'),
    'fitness': ('exercise', 'workout', 'workouts', 'physical-fitness'),
    'habits': ('habit', 'routines', 'daily-habits'),
    'learning': ('education', 'study', 'studying'),
}


# ============================================================================
# Result records
# ============================================================================


@dataclass(frozen=True)
class MatchResult:
    """Best expected note for an extracted note, with its confidence."""

    match: ExpectedNote | None
    confidence: float
    threshold: float = MATCH_CONFIDENCE_THRESHOLD

    @property
    def is_trusted(self) -> bool:
        return self.match is not None and self.confidence > self.threshold


@dataclass(frozen=True)
class ConsolidationCheck:
    should_have_consolidated: bool
    did_consolidate: bool
    consolidated_correctly: bool
    expected_target: str | None = None
    actual_target: str | None = None
    expected_index: int | None = None


@dataclass(frozen=True)
class TagReuseCheck:
    should_reuse: bool
    existing_tag: str | None = None


@dataclass(frozen=True)
class TagMatch:
    matches: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConnectionEvaluation:
    correct: int = 0
    missed: int = 0
    spurious: int = 0


# ============================================================================
# Text helpers
# ============================================================================


def pattern_alternatives(pattern: str) -> list[str]:
    """Split a ``|``-separated title pattern into lowercased alternatives."""
    return [alt.strip().lower() for alt in pattern.split('|') if alt.strip()]


def title_matches_patterns(title: str, patterns: Iterable[str]) -> bool:
    """Whether any alternative of any pattern is a substring of the title."""
    title_lower = title.lower()
    return any(
        alt in title_lower
        for pattern in patterns
        for alt in pattern_alternatives(pattern)
    )


def content_contains_phrases(content: str, phrases: Iterable[str]) -> bool:
    content_lower = content.lower()
    return all(phrase.lower() in content_lower for phrase in phrases)


def set_jaccard_similarity(set1: set[str], set2: set[str]) -> float:
    """Jaccard index of two sets, 1.0 when both are empty."""
    if not set1 and not set2:
        return 1.0
    return len(set1 & set2) / len(set1 | set2)


def tags_match(actual_tags: Iterable[str], expected_tags: Iterable[str]) -> TagMatch:
    actual = list(dict.fromkeys(tag.lower() for tag in actual_tags))
    expected = list(dict.fromkeys(tag.lower() for tag in expected_tags))
    actual_set, expected_set = set(actual), set(expected)
    return TagMatch(
        matches=[tag for tag in expected if tag in actual_set],
        missing=[tag for tag in expected if tag not in actual_set],
        extra=[tag for tag in actual if tag not in expected_set],
    )


def _phrase_fraction(content: str, phrases: Sequence[str]) -> float:
    content_lower = content.lower()
    found = sum(1 for phrase in phrases if phrase.lower() in content_lower)
    return found / max(len(phrases), 1)


def _tag_fraction(tags: Iterable[str], expected_tags: Sequence[str]) -> float:
    overlap = tags_match(tags, expected_tags)
    return len(overlap.matches) / max(len(set(t.lower() for t in expected_tags)), 1)


# ============================================================================
# Note matchers
# ============================================================================


class NoteMatcher(Protocol):
    """Strategy that picks the expected note an extracted note corresponds to."""

    def match(
        self, note: ExtractedNoteResult, candidates: Sequence[ExpectedNote]
    ) -> MatchResult: ...


class _WeightedNoteMatcher(ABC):
    """Scores candidates by title, required phrases and expected tags."""

    def __init__(self, threshold: float = MATCH_CONFIDENCE_THRESHOLD):
        self.threshold = threshold

    @abstractmethod
    def title_score(self, title: str, patterns: Sequence[str]) -> float:
        """Score how well a title fits the expected title patterns, 0 to 1."""
        pass

    def score(self, note: ExtractedNoteResult, candidate: ExpectedNote) -> float:
        return (
            TITLE_WEIGHT * self.title_score(note.title, candidate.title_patterns)
            + PHRASE_WEIGHT * _phrase_fraction(note.content, candidate.required_phrases)
            + TAG_WEIGHT * _tag_fraction(note.tags, candidate.expected_tags)
        )

    def match(
        self, note: ExtractedNoteResult, candidates: Sequence[ExpectedNote]
    ) -> MatchResult:
        best: ExpectedNote | None = None
        best_confidence = 0.0
        for candidate in candidates:
            confidence = self.score(note, candidate)
            if confidence > best_confidence:
                best, best_confidence = candidate, confidence
        return MatchResult(best, best_confidence, self.threshold)


class PatternNoteMatcher(_WeightedNoteMatcher):
    """Title counts only when a pattern alternative appears in the title."""

    def title_score(self, title: str, patterns: Sequence[str]) -> float:
        return 1.0 if title_matches_patterns(title, patterns) else 0.0


class FuzzyNoteMatcher(_WeightedNoteMatcher):
    """
    Title similarity from rapidfuzz instead of exact substring hits.

    Tolerates reordered words and small spelling differences between the
    extracted title and the expected patterns ("Morning Routine" vs
    "Routines for the morning").
    """

    def __init__(
        self,
        threshold: float = MATCH_CONFIDENCE_THRESHOLD,
        min_similarity: float = 0.6,
    ):
        super().__init__(threshold)
        self.min_similarity = min_similarity

    def title_score(self, title: str, patterns: Sequence[str]) -> float:
        title_lower = title.lower().strip()
        if not title_lower:
            return 0.0
        best = 0.0
        for pattern in patterns:
            for alt in pattern_alternatives(pattern):
                ratio_basic = fuzz.ratio(title_lower, alt) / 100.0
                ratio_token = max(
                    fuzz.token_sort_ratio(title_lower, alt),
                    fuzz.token_set_ratio(title_lower, alt),
                ) / 100.0
                best = max(best, ratio_basic, ratio_token * 0.95)
        return best if best >= self.min_similarity else 0.0


MATCHERS: dict[str, type[_WeightedNoteMatcher]] = {
    'pattern': PatternNoteMatcher,
    'fuzzy': FuzzyNoteMatcher,
}


def create_matcher(
    name: str, threshold: float = MATCH_CONFIDENCE_THRESHOLD
) -> NoteMatcher:
    """Build a registered matcher by name."""
    try:
        matcher_cls = MATCHERS[name]
    except KeyError:
        raise ConfigurationError(
            'MATCH001',
            f"Unknown matcher '{name}', expected one of {sorted(MATCHERS)}",
            context={'matcher': name},
        ) from None
    return matcher_cls(threshold=threshold)


def find_matching_expected_note(
    extracted: ExtractedNoteResult,
    expected_notes: Sequence[ExpectedNote],
    matcher: NoteMatcher | None = None,
) -> MatchResult:
    """Return the best expected note for ``extracted`` and its confidence.

    Downstream calculators only rely on the match when
    ``MatchResult.is_trusted`` holds.
    """
    return (matcher or PatternNoteMatcher()).match(extracted, expected_notes)


# ============================================================================
# Consolidation
# ============================================================================


@lru_cache(maxsize=256)
def compile_content_pattern(pattern: str) -> re.Pattern:
    """Compile a consolidation pattern, falling back to a literal match."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning(f"Invalid consolidation pattern '{pattern}': {e}")
        return re.compile(re.escape(pattern), re.IGNORECASE)


def check_consolidation(
    extracted: ExtractedNoteResult,
    existing_notes: Sequence[ExistingNote],
    expected_consolidations: Sequence[ExpectedConsolidation],
) -> ConsolidationCheck:
    """
    Compare a note's consolidation with the scenario's expectations.

    The first expected consolidation whose pattern matches the note content
    decides whether the note should have been merged and into which note.

    Args:
        extracted: The extracted note.
        existing_notes: Notes that existed before extraction. A target that
            names none of them can never be correct.
        expected_consolidations: Expected merges for the scenario.

    Returns:
        ConsolidationCheck: Ground truth versus observed behavior.
    """
    expected_index = None
    for index, expectation in enumerate(expected_consolidations):
        if compile_content_pattern(expectation.new_content_pattern).search(
            extracted.content
        ):
            expected_index = index
            break

    should_have_consolidated = expected_index is not None
    actual_target = (extracted.consolidated_with or '').strip() or None
    did_consolidate = actual_target is not None
    expected_target = (
        expected_consolidations[expected_index].existing_note_title
        if expected_index is not None
        else None
    )

    if should_have_consolidated and did_consolidate:
        consolidated_correctly = (
            expected_target is not None
            and actual_target.lower() == expected_target.strip().lower()
        )
    else:
        consolidated_correctly = not should_have_consolidated and not did_consolidate

    if did_consolidate and existing_notes:
        known = {note.title.strip().lower() for note in existing_notes}
        if actual_target.lower() not in known:
            logger.debug(
                f"'{extracted.title}' consolidated into unknown note '{actual_target}'"
            )

    return ConsolidationCheck(
        should_have_consolidated=should_have_consolidated,
        did_consolidate=did_consolidate,
        consolidated_correctly=consolidated_correctly,
        expected_target=expected_target,
        actual_target=actual_target,
        expected_index=expected_index,
    )


# ============================================================================
# Tag reuse
# ============================================================================


def _squash(tag: str) -> str:
    return re.sub(r'[-_\s]', '', tag)


def should_reuse_tag(
    tag: str,
    existing_tags: Iterable[str],
    synonym_groups: dict[str, Sequence[str]] | None = None,
) -> TagReuseCheck:
    """Find the existing tag that ``tag`` duplicates, if any.

    A tag duplicates an existing tag when they are equal ignoring case, when
    both belong to the same synonym group, or when they differ only in
    hyphens, underscores and spaces.
    """
    groups = DEFAULT_SYNONYM_GROUPS if synonym_groups is None else synonym_groups
    new_lower = tag.lstrip('#').strip().lower()
    existing = [t for t in existing_tags if t.strip()]

    for existing_tag in existing:
        if existing_tag.lstrip('#').strip().lower() == new_lower:
            return TagReuseCheck(True, existing_tag)

    for existing_tag in existing:
        existing_lower = existing_tag.lstrip('#').strip().lower()
        for canonical, synonyms in groups.items():
            members = {canonical, *synonyms}
            if new_lower in members and existing_lower in members:
                return TagReuseCheck(True, existing_tag)
        if _squash(new_lower) == _squash(existing_lower):
            return TagReuseCheck(True, existing_tag)

    return TagReuseCheck(False, None)


# ============================================================================
# Connections
# ============================================================================


def evaluate_connections(
    extracted: ExtractedNoteResult,
    expected: ExpectedNote,
    all_note_titles: Iterable[str],
) -> ConnectionEvaluation:
    """
    Compare a note's connections with those expected for its matched note.

    Each actual connection can satisfy at most one expected connection. An
    expected connection that goes unsatisfied only counts as missed when its
    target names a note in ``all_note_titles``; links to notes that were never
    part of the evaluated set cannot be made.

    Args:
        extracted: The extracted note.
        expected: The expected note it was matched to.
        all_note_titles: Titles of every note in the evaluated set.

    Returns:
        ConnectionEvaluation: Correct, missed and spurious connection counts.
    """
    titles = [title.lower() for title in all_note_titles]
    used: set[int] = set()
    correct = 0
    missed = 0

    for exp in expected.expected_connections:
        alternatives = pattern_alternatives(exp.target_title_pattern)
        accepted_types = {t.lower() for t in exp.types}

        hit = None
        for index, actual in enumerate(extracted.connections):
            if index in used:
                continue
            target = actual.target_title.lower()
            if not any(alt in target for alt in alternatives):
                continue
            if accepted_types and actual.type.lower() not in accepted_types:
                continue
            hit = index
            break

        if hit is not None:
            used.add(hit)
            correct += 1
        elif any(alt in title for alt in alternatives for title in titles):
            missed += 1

    return ConnectionEvaluation(
        correct=correct,
        missed=missed,
        spurious=len(extracted.connections) - correct,
    )
