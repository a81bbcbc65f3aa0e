"""
Pattern grammar for NVQ evaluation.

Holds every regular expression the rubric relies on, grouped by concern:

1. Field recovery labels (ordered, first match wins) used to rebuild
   purpose statements and metadata from raw note content.
2. Purpose statement markers used by the Why component.
3. Tag prefixes used by the tag classifier.
4. Link markers used by the connection classifier.
5. Synthesis, encyclopedic and quotation markers used by the Originality
   component.

``GRAMMAR_VERSION`` changes whenever a pattern is added, removed or reordered
so stored scores can be traced back to the rules that produced them.
"""

import re
from dataclasses import dataclass

GRAMMAR_VERSION = '1.0'


@dataclass(frozen=True)
class LabelPattern:
    """A named pattern that extracts one field value from note content."""

    name: str
    regex: re.Pattern
    group: int = 0

    def extract(self, text: str) -> str | None:
        match = self.regex.search(text)
        if not match:
            return None
        value = match.group(self.group).strip()
        return value or None


def _label(name: str, pattern: str, group: int = 0) -> LabelPattern:
    return LabelPattern(name, re.compile(pattern, re.IGNORECASE), group)


# ============================================================================
# Field recovery grammar
# ============================================================================

PURPOSE_LABELS: tuple[LabelPattern, ...] = (
    _label('keeping-because', r"I am keeping this because[^.\n]*\.?"),
    _label('keeping-because-contracted', r"I'm keeping this because[^.\n]*\.?"),
    _label('purpose-label', r'Purpose:\s*[^\n]+'),
    _label('why-label', r'Why:\s*[^\n]+'),
)

PROJECT_LABELS: tuple[LabelPattern, ...] = (
    _label('project-wikilink', r'\[\[Project[/:]([^\]]+)\]\]', group=1),
    _label('project-label-wikilink', r'Project:\s*\[\[([^\]]+)\]\]', group=1),
    _label('project-label', r'Project:\s*([^\n,]+)', group=1),
)

STATUS_LABELS: tuple[LabelPattern, ...] = (
    _label('status-label', r'Status:\s*(Seed|Sapling|Evergreen)\b', group=1),
    _label('maturity-label', r'Maturity:\s*(Seed|Sapling|Evergreen)\b', group=1),
)

TYPE_LABELS: tuple[LabelPattern, ...] = (
    _label('type-label', r'\bType:\s*(Logic|Technical|Reflection)\b', group=1),
)

STAKEHOLDER_LABELS: tuple[LabelPattern, ...] = (
    _label(
        'stakeholder-label',
        r'Stakeholder:\s*(Self|Future Users|AI Agent)\b',
        group=1,
    ),
)


# ============================================================================
# Purpose statement markers
# ============================================================================

FIRST_PERSON = re.compile(
    r"I am keeping this because|I'm keeping this because|I'm keeping this"
    r'|I need this|This helps me|I want to remember',
    re.IGNORECASE,
)

PURPOSE_LABEL = re.compile(r'\b(Purpose|Why)\s*:', re.IGNORECASE)

ACTIONABLE = re.compile(
    r'(so that|because I can|in order to|will help|enables|allows|supports'
    r'|crucial for|vital for|important for|essential for|necessary for'
    r'|helps me|lets me)',
    re.IGNORECASE,
)

# Minimum length of a goal keyword that counts toward keyword overlap.
MIN_KEYWORD_LENGTH = 4

STOP_WORDS = frozenset(
    {
        'the', 'a', 'an', 'is', 'are', 'was', 'were', 'be', 'been', 'being',
        'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would', 'could',
        'should', 'may', 'might', 'must', 'shall', 'can', 'need', 'dare',
        'ought', 'used', 'to', 'of', 'in', 'for', 'on', 'with', 'at', 'by',
        'from', 'as', 'into', 'through', 'during', 'before', 'after', 'above',
        'below', 'between', 'under', 'again', 'further', 'then', 'once',
        'here', 'there', 'when', 'where', 'why', 'how', 'all', 'each', 'few',
        'more', 'most', 'other', 'some', 'such', 'no', 'nor', 'not', 'only',
        'own', 'same', 'so', 'than', 'too', 'very', 'just', 'and', 'but',
        'if', 'or', 'because', 'until', 'while', 'about', 'against', 'this',
        'that', 'these', 'those', 'what', 'which', 'who', 'whom', 'its',
        'itself', 'they', 'them', 'their', 'theirs', 'themselves', 'you',
        'your', 'yours', 'yourself', 'yourselves', 'really', 'think', 'feel',
        'like', 'want', 'going', 'know', 'make', 'getting', 'also', 'even',
        'much', 'well', 'back', 'now', 'way', 'over', 'take', 'come', 'good',
        'look', 'give', 'use', 'her', 'him', 'his', 'she', 'time', 'see',
        'out', 'day', 'get', 'made', 'find', 'long',
    }
)


# ============================================================================
# Tag prefixes
# ============================================================================

ACTION_TAG = re.compile(r'^(task|decision|action)/', re.IGNORECASE)
SKILL_TAG = re.compile(r'^skill/', re.IGNORECASE)
EVOLUTION_TAG = re.compile(r'^(insight|evolution)/', re.IGNORECASE)
PROJECT_TAG = re.compile(r'^(ui|project)/', re.IGNORECASE)

# Maximum number of tags before a note is flagged as needing a split.
TAG_LIMIT = 5


# ============================================================================
# Link markers
# ============================================================================

WIKILINK = re.compile(r'\[\[([^\]]+)\]\]')
MOC_TITLE = re.compile(r'\bMOC\b|\bmap of content\b', re.IGNORECASE)
MOC_LINK = re.compile(r'\[\[(MOC|Map of Content)[/:]?([^\]]*)\]\]', re.IGNORECASE)
PROJECT_TITLE = re.compile(r'^\s*Project[/:]', re.IGNORECASE)
PROJECT_LINK = re.compile(r'\[\[Project[/:]([^\]]+)\]\]', re.IGNORECASE)

DOWNWARD_TYPES = frozenset({'example_of', 'downward', 'has_example'})


# ============================================================================
# Originality markers
# ============================================================================

ORIGINAL_INSIGHT: tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r'\bI (think|believe|realized|discovered|noticed|found|learned)\b',
        r'\bmy (interpretation|understanding|take|view|insight|conclusion)\b',
        r'\bthis (suggests|implies|means|tells me|indicates|reveals)\b',
        r'\bthe key (insight|takeaway|lesson|point) is\b',
        r'\bfor (my|our) (use case|project|context|situation)\b',
        r'\b(decision|lesson learned|takeaway|conclusion):',
        r'\bI (decided|chose|concluded|determined)\b',
        r'\bwhat this means for\b',
        r'\bin my experience\b',
        r"\bI've (noticed|observed|seen)\b",
    )
)

ENCYCLOPEDIC_FACT: tuple[re.Pattern, ...] = (
    re.compile(
        r'according to (wikipedia|the documentation|the official)', re.IGNORECASE
    ),
    re.compile(r'\bis defined as\b', re.IGNORECASE),
    re.compile(r'\bwas (invented|created|founded|developed) in \d{4}', re.IGNORECASE),
    re.compile(r'\bis an? \b.*\bthat\b', re.IGNORECASE),
    re.compile(r'^(The|A|An) [A-Z][a-z]+ is\b', re.IGNORECASE),
    re.compile(r'\bofficially (released|announced|launched)\b', re.IGNORECASE),
)

QUOTATION: tuple[re.Pattern, ...] = (
    re.compile(r'"[^"]{20,}"'),
    re.compile(r'^>[^\n]{20,}', re.MULTILINE),
    re.compile(r'```.*?```', re.DOTALL),
)

# Minimum number of distinct insight markers that alone prove synthesis.
MIN_INSIGHT_MARKERS = 2

# Share of non-quoted text above which content counts as synthesis.
SYNTHESIS_RATIO_THRESHOLD = 0.7


def count_pattern_matches(text: str, patterns: tuple[re.Pattern, ...]) -> int:
    """Count how many of the patterns match somewhere in the text."""
    return sum(1 for pattern in patterns if pattern.search(text))


def extract_wikilinks(text: str) -> list[str]:
    """Return wikilink targets in order, dropping any ``|alias`` suffix."""
    return [link.split('|', 1)[0].strip() for link in WIKILINK.findall(text)]


def calculate_synthesis_ratio(text: str) -> float:
    """Share of the text that is not quotation, blockquote or code block.

    Returns 0.0 for empty text.
    """
    if not text:
        return 0.0
    quoted = sum(
        len(match.group(0)) for pattern in QUOTATION for match in pattern.finditer(text)
    )
    ratio = (len(text) - quoted) / len(text)
    return min(1.0, max(0.0, ratio))
