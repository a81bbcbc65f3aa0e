"""Schemas for notes produced by an extraction run."""

from enum import Enum

from pydantic import Field

from notescore.models.base import CamelModel


class NoteStatus(str, Enum):
    SEED = 'Seed'
    SAPLING = 'Sapling'
    EVERGREEN = 'Evergreen'


class NoteType(str, Enum):
    LOGIC = 'Logic'
    TECHNICAL = 'Technical'
    REFLECTION = 'Reflection'


class Stakeholder(str, Enum):
    SELF = 'Self'
    FUTURE_USERS = 'Future Users'
    AI_AGENT = 'AI Agent'


class Connection(CamelModel):
    """A directed link from an extracted note to another note."""

    target_title: str
    type: str = Field(default='related')
    strength: float = Field(default=1.0, ge=0.0, le=1.0)


class ExtractedNoteResult(CamelModel):
    """A note as emitted by the extraction pipeline under test."""

    title: str
    content: str = Field(default='')
    tags: list[str] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    consolidated_with: str | None = Field(default=None)
    merged_content: str | None = Field(default=None)

    def unique_tags(self) -> list[str]:
        """Tags in first-seen order with duplicates removed."""
        return list(dict.fromkeys(self.tags))


class QualityExtractedNote(ExtractedNoteResult):
    """An extracted note with its recovered quality fields."""

    purpose_statement: str | None = Field(default=None)
    project: str | None = Field(default=None)
    status: NoteStatus | None = Field(default=None)
    note_type: NoteType | None = Field(default=None)
    stakeholder: Stakeholder | None = Field(default=None)


class UserGoal(CamelModel):
    """A personal goal that purpose statements may refer back to."""

    title: str
    why_root: str | None = Field(default=None)
