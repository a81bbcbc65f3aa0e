"""Hand-authored ground truth for extraction test scenarios."""

from pydantic import Field

from notescore.models.base import CamelModel
from notescore.models.notes import NoteStatus, NoteType, Stakeholder, UserGoal


class ExpectedConnection(CamelModel):
    """A connection the extractor is expected to produce.

    ``target_title_pattern`` may hold several alternatives separated by ``|``.
    """

    target_title_pattern: str
    types: list[str] = Field(default_factory=list)


class ExpectedNote(CamelModel):
    title_patterns: list[str] = Field(default_factory=list)
    required_phrases: list[str] = Field(default_factory=list)
    should_consolidate_with: str | None = Field(default=None)
    expected_tags: list[str] = Field(default_factory=list)
    expected_connections: list[ExpectedConnection] = Field(default_factory=list)


class ExpectedConsolidation(CamelModel):
    """New content that should be merged into an existing note.

    ``new_content_pattern`` is a case-insensitive regular expression.
    """

    new_content_pattern: str
    existing_note_title: str
    merged_content_phrases: list[str] = Field(default_factory=list)


class ExistingNote(CamelModel):
    id: str
    title: str
    content: str = Field(default='')
    tags: list[str] = Field(default_factory=list)


class QualityExpectation(CamelModel):
    """Quality attributes a specific extracted note is expected to carry."""

    title_patterns: list[str] = Field(default_factory=list)
    content_must_contain: list[str] = Field(default_factory=list)
    expected_project: str | None = Field(default=None)
    expected_status: NoteStatus | None = Field(default=None)
    expected_type: NoteType | None = Field(default=None)
    expected_stakeholder: Stakeholder | None = Field(default=None)
    expected_functional_tags: list[str] = Field(default_factory=list)
    forbidden_tags: list[str] = Field(default_factory=list)
    is_synthesis: bool | None = Field(default=None)


class TestScenario(CamelModel):
    """Ground truth bundle for one evaluation run."""

    # Keep pytest from collecting this class.
    __test__ = False

    name: str
    description: str = Field(default='')
    documents: list[str] = Field(default_factory=list)
    existing_notes: list[ExistingNote] = Field(default_factory=list)
    existing_tags: list[str] = Field(default_factory=list)
    expected_notes: list[ExpectedNote] = Field(default_factory=list)
    expected_consolidations: list[ExpectedConsolidation] = Field(
        default_factory=list
    )
    quality_expectations: list[QualityExpectation] = Field(default_factory=list)
    available_projects: list[str] = Field(default_factory=list)
    available_mocs: list[str] = Field(default_factory=list)
    user_goals: list[UserGoal] = Field(default_factory=list)
