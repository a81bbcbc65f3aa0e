"""Tag and connection classification for the NVQ rubric."""

from collections.abc import Iterable

from notescore.models.notes import Connection
from notescore.models.scores import (
    ClassifiedLink,
    FunctionalTag,
    LinkDirection,
    TagCategory,
)
from notescore.nvq.patterns import (
    ACTION_TAG,
    DOWNWARD_TYPES,
    EVOLUTION_TAG,
    MOC_LINK,
    MOC_TITLE,
    PROJECT_LINK,
    PROJECT_TAG,
    PROJECT_TITLE,
    SKILL_TAG,
    extract_wikilinks,
)

_TAG_RULES = (
    (ACTION_TAG, TagCategory.ACTION),
    (SKILL_TAG, TagCategory.SKILL),
    (EVOLUTION_TAG, TagCategory.EVOLUTION),
    (PROJECT_TAG, TagCategory.PROJECT),
)


def normalize_tag(tag: str) -> str:
    return tag.strip().lstrip('#').strip()


def classify_tag(tag: str) -> TagCategory:
    """Classify a tag by its prefix.

    Tags without a recognized functional prefix are topic tags.

    Examples:
        >>> classify_tag('#task/review')
        <TagCategory.ACTION: 'action'>
        >>> classify_tag('productivity')
        <TagCategory.TOPIC: 'topic'>
    """
    normalized = normalize_tag(tag)
    for pattern, category in _TAG_RULES:
        if pattern.match(normalized):
            return category
    return TagCategory.TOPIC


def classify_tags(tags: Iterable[str]) -> list[FunctionalTag]:
    return [FunctionalTag(tag=tag, category=classify_tag(tag)) for tag in tags]


class ConnectionClassifier:
    """Classifies links as upward, sideways or downward.

    A link is upward when its target is a Map of Content or a project, either
    one of the configured names or a title carrying the usual MOC or
    ``Project/`` markers. Links typed ``example_of`` point downward. Anything
    else is a sideways link to a related concept.
    """

    def __init__(self, mocs: Iterable[str] = (), projects: Iterable[str] = ()):
        self.mocs = [name.lower() for name in mocs if name.strip()]
        self.projects = [name.lower() for name in projects if name.strip()]

    def is_moc(self, target_title: str) -> bool:
        target = target_title.lower()
        return (
            any(name in target for name in self.mocs)
            or bool(MOC_TITLE.search(target_title))
            or bool(MOC_LINK.search(target_title))
        )

    def is_project(self, target_title: str) -> bool:
        target = target_title.lower()
        return (
            any(name in target for name in self.projects)
            or bool(PROJECT_TITLE.match(target_title))
            or bool(PROJECT_LINK.search(target_title))
        )

    def classify(self, target_title: str, link_type: str = 'related') -> LinkDirection:
        if self.is_moc(target_title) or self.is_project(target_title):
            return LinkDirection.UPWARD
        if link_type.lower() in DOWNWARD_TYPES:
            return LinkDirection.DOWNWARD
        return LinkDirection.SIDEWAYS

    def classify_note_links(
        self, connections: Iterable[Connection], content: str = ''
    ) -> list[ClassifiedLink]:
        """Classify declared connections plus wikilinks found in the content."""
        links = [(conn.target_title, conn.type) for conn in connections]
        links.extend((target, 'reference') for target in extract_wikilinks(content))
        return [
            ClassifiedLink(
                target_title=target,
                direction=self.classify(target, link_type),
                type=link_type,
            )
            for target, link_type in links
        ]
