"""notescore error system."""

from notescore.errors.base import (
    ConfigurationError,
    ErrorHandler,
    FixtureError,
    NoteScoreError,
)

__all__ = [
    'ConfigurationError',
    'ErrorHandler',
    'FixtureError',
    'NoteScoreError',
]
