"""Settings and logging setup for notescore."""

import sys
from functools import lru_cache

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from notescore.models.notes import UserGoal


class LoggingConfig(BaseSettings):
    """Configuration for logging."""

    model_config = SettingsConfigDict(
        env_prefix='NOTESCORE_LOG_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )
    level: str = Field('INFO', description='Console logging level')
    logformat: str = Field(
        '{time} | {level} | {file}:{line} | {function} | {message}',
        description='Logging format',
    )
    filename: str | None = Field(
        None, description='Log file path, no file handler when unset'
    )
    filemode: str = Field('a', description='Logging file mode')
    file_level: str = Field('DEBUG', description='File logging level')


class EvaluationSettings(BaseSettings):
    """Runtime settings for evaluation runs."""

    model_config = SettingsConfigDict(
        env_prefix='NOTESCORE_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )
    passing_threshold: float = Field(
        7, description='Minimum NVQ total for a note to pass'
    )
    penalize_tag_overflow: bool = Field(
        False, description='Subtract a taxonomy point when a note has more than 5 tags'
    )
    match_confidence_threshold: float = Field(
        0.5, description='Confidence above which a ground truth match is trusted'
    )
    ci_f1_threshold: float = Field(0.7, description='F1 needed for STATUS=PASS')
    min_consolidation_accuracy: float = Field(
        0.7, description='Consolidation accuracy needed for a zero exit status'
    )
    min_tag_reuse_rate: float = Field(
        0.8, description='Tag reuse rate needed for a zero exit status'
    )
    output_dir: str = Field(
        'test-results', description='Directory for JSON report files'
    )
    max_workers: int | None = Field(
        None, description='Thread pool size for note evaluation, serial when unset'
    )
    logging_config: LoggingConfig = Field(default_factory=LoggingConfig)

    def evaluator_config(
        self,
        mocs: list[str] | None = None,
        projects: list[str] | None = None,
        goals: list[UserGoal] | None = None,
    ) -> 'NVQEvaluatorConfig':
        """Build an evaluator configuration using these settings."""
        return NVQEvaluatorConfig(
            mocs=tuple(mocs or ()),
            projects=tuple(projects or ()),
            goals=tuple(goals or ()),
            passing_threshold=self.passing_threshold,
            penalize_tag_overflow=self.penalize_tag_overflow,
        )


class NVQEvaluatorConfig(BaseModel):
    """Immutable context handed to every NVQ evaluation."""

    model_config = ConfigDict(frozen=True)

    mocs: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()
    goals: tuple[UserGoal, ...] = ()
    passing_threshold: float = 7
    penalize_tag_overflow: bool = False


@lru_cache(maxsize=1)
def get_settings() -> EvaluationSettings:
    """Load settings from the environment once per process."""
    return EvaluationSettings()


def setup_logging(settings: EvaluationSettings) -> None:
    """Set up loguru handlers from the logging configuration.

    Args:
        settings: Evaluation settings holding the logging configuration.

    Returns:
        None: Replaces the default loguru handler with a console handler and,
            when a filename is configured, a rotating file handler.
    """
    config = settings.logging_config
    logger.remove()
    logger.add(
        sys.stderr,
        format=config.logformat,
        level=config.level,
        colorize=True,
    )

    if config.filename:
        logger.add(
            config.filename,
            format=config.logformat,
            level=config.file_level,
            rotation='10 MB',
            mode=config.filemode,
        )
