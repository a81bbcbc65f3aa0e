"""Recover NVQ quality fields from raw note content."""

from enum import Enum

from notescore.models.notes import (
    ExtractedNoteResult,
    NoteStatus,
    NoteType,
    QualityExtractedNote,
    Stakeholder,
)
from notescore.nvq.patterns import (
    PROJECT_LABELS,
    PURPOSE_LABELS,
    STAKEHOLDER_LABELS,
    STATUS_LABELS,
    TYPE_LABELS,
    LabelPattern,
)


def first_match(text: str, grammar: tuple[LabelPattern, ...]) -> str | None:
    """Return the value of the first label pattern in ``grammar`` that matches."""
    for label in grammar:
        value = label.extract(text)
        if value is not None:
            return value
    return None


def _to_enum(value: str | None, enum_cls: type[Enum]) -> Enum | None:
    if value is None:
        return None
    normalized = ' '.join(value.split()).lower()
    for member in enum_cls:
        if member.value.lower() == normalized:
            return member
    return None


def recover_purpose(content: str) -> str | None:
    return first_match(content, PURPOSE_LABELS)


def recover_project(content: str) -> str | None:
    return first_match(content, PROJECT_LABELS)


def recover_status(content: str) -> NoteStatus | None:
    return _to_enum(first_match(content, STATUS_LABELS), NoteStatus)


def recover_note_type(content: str) -> NoteType | None:
    return _to_enum(first_match(content, TYPE_LABELS), NoteType)


def recover_stakeholder(content: str) -> Stakeholder | None:
    return _to_enum(first_match(content, STAKEHOLDER_LABELS), Stakeholder)


def recover_quality_fields(note: ExtractedNoteResult) -> QualityExtractedNote:
    """Build a ``QualityExtractedNote`` from an extracted note.

    Fields already present on a ``QualityExtractedNote`` input are kept; only
    missing ones are recovered from the note content.

    Args:
        note: The note emitted by the extraction pipeline.

    Returns:
        QualityExtractedNote: The note with purpose statement, project, status,
            type and stakeholder filled in wherever the content declares them.
    """
    data = note.model_dump()
    content = note.content
    recovered = {
        'purpose_statement': recover_purpose(content),
        'project': recover_project(content),
        'status': recover_status(content),
        'note_type': recover_note_type(content),
        'stakeholder': recover_stakeholder(content),
    }
    for field, value in recovered.items():
        if data.get(field) is None:
            data[field] = value
    return QualityExtractedNote.model_validate(data)
