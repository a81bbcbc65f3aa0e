"""NVQ rubric score records."""

from enum import Enum

from pydantic import Field, computed_field

from notescore.models.base import CamelModel


class TagCategory(str, Enum):
    ACTION = 'action'
    SKILL = 'skill'
    EVOLUTION = 'evolution'
    PROJECT = 'project'
    TOPIC = 'topic'

    @property
    def is_functional(self) -> bool:
        return self is not TagCategory.TOPIC


class LinkDirection(str, Enum):
    UPWARD = 'upward'
    SIDEWAYS = 'sideways'
    DOWNWARD = 'downward'


COMPONENT_NAMES = ('why', 'metadata', 'taxonomy', 'connectivity', 'originality')

COMPONENT_MAXIMA = {
    'why': 3,
    'metadata': 2,
    'taxonomy': 2,
    'connectivity': 2,
    'originality': 1,
}


class WhyComponentScore(CamelModel):
    score: int = Field(ge=0, le=3)
    has_first_person: bool
    links_to_goal: bool
    is_actionable: bool
    raw_statement: str | None = None


class MetadataComponentScore(CamelModel):
    score: int = Field(ge=0, le=2)
    has_project: bool
    has_status: bool
    has_type: bool
    has_stakeholder: bool
    fields_present: int


class FunctionalTag(CamelModel):
    tag: str
    category: TagCategory


class TaxonomyComponentScore(CamelModel):
    score: int = Field(ge=0, le=2)
    functional_tags: int
    topic_tags: int
    tag_count: int
    exceeds_limit: bool
    tag_breakdown: list[FunctionalTag] = Field(default_factory=list)


class ClassifiedLink(CamelModel):
    target_title: str
    direction: LinkDirection
    type: str


class ConnectivityComponentScore(CamelModel):
    score: int = Field(ge=0, le=2)
    has_upward_link: bool
    has_sideways_link: bool
    upward_links: list[str] = Field(default_factory=list)
    sideways_links: list[str] = Field(default_factory=list)
    downward_links: list[str] = Field(default_factory=list)

    @property
    def total_links(self) -> int:
        return (
            len(self.upward_links) + len(self.sideways_links) + len(self.downward_links)
        )


class OriginalityComponentScore(CamelModel):
    score: int = Field(ge=0, le=1)
    has_original_insight: bool
    is_wikipedia_fact: bool
    synthesis_ratio: float = Field(ge=0.0, le=1.0)
    synthesis_markers: int = 0
    reasoning: str = ''


class NVQBreakdown(CamelModel):
    why: WhyComponentScore
    metadata: MetadataComponentScore
    taxonomy: TaxonomyComponentScore
    connectivity: ConnectivityComponentScore
    originality: OriginalityComponentScore

    def component_scores(self) -> dict[str, int]:
        """Map each rubric component to its integer score, in rubric order."""
        return {name: getattr(self, name).score for name in COMPONENT_NAMES}


class NVQScore(CamelModel):
    """Total rubric score for a single note.

    ``total`` always equals the sum of the five component scores.
    """

    total: int = Field(ge=0, le=10)
    breakdown: NVQBreakdown
    passing: bool
    failing_components: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def quality_status(self) -> str:
        return 'passing' if self.passing else 'needs_review'

    def to_storable_breakdown(self) -> dict[str, int]:
        """Flatten the breakdown to component scores for persistence."""
        return self.breakdown.component_scores()
