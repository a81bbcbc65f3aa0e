"""Structured error classes for notescore."""

from __future__ import annotations

from typing import Any

from loguru import logger


class NoteScoreError(Exception):
    """Base exception for notescore errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}


class ConfigurationError(NoteScoreError):
    """Error raised for invalid evaluator or runner configuration."""


class FixtureError(NoteScoreError):
    """Error raised when scenario or extraction result data cannot be loaded."""


class ErrorHandler:
    """Collects the errors one scenario evaluation records instead of raising."""

    def __init__(self) -> None:
        self.errors: list[NoteScoreError] = []

    def handle(self, error: NoteScoreError) -> bool:
        """Record an error and return whether the run can continue."""
        log = logger.warning if error.recoverable else logger.error
        log(f'{error.error_code}: {error.message}')
        self.errors.append(error)
        return error.recoverable

    def messages(self) -> list[str]:
        """Return the recorded error messages in the order they were handled."""
        return [err.message for err in self.errors]
