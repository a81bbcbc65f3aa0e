"""Records produced by batch NVQ quality evaluation."""

from pydantic import Field

from notescore.models.base import CamelModel
from notescore.models.scores import NVQScore


class ComponentFailureRates(CamelModel):
    """Fraction of notes scoring exactly zero on each component."""

    why: float = 0.0
    metadata: float = 0.0
    taxonomy: float = 0.0
    connectivity: float = 0.0
    originality: float = 0.0


class ScoreDistributions(CamelModel):
    """Histogram of score values per component, keyed by every possible score."""

    why: dict[int, int] = Field(default_factory=lambda: dict.fromkeys(range(4), 0))
    metadata: dict[int, int] = Field(default_factory=lambda: dict.fromkeys(range(3), 0))
    taxonomy: dict[int, int] = Field(default_factory=lambda: dict.fromkeys(range(3), 0))
    connectivity: dict[int, int] = Field(
        default_factory=lambda: dict.fromkeys(range(3), 0)
    )
    originality: dict[int, int] = Field(
        default_factory=lambda: dict.fromkeys(range(2), 0)
    )


class FailureReason(CamelModel):
    component: str
    issue: str
    count: int


class NoteQualityMetrics(CamelModel):
    total_notes: int = 0
    mean_nvq: float = 0.0
    median_nvq: float = 0.0
    min_nvq: float = 0.0
    max_nvq: float = 0.0
    passing_count: int = 0
    passing_rate: float = 0.0
    failure_rates: ComponentFailureRates = Field(default_factory=ComponentFailureRates)
    score_distributions: ScoreDistributions = Field(
        default_factory=ScoreDistributions
    )
    notes_with_purpose: int = 0
    notes_with_complete_metadata: int = 0
    notes_with_functional_tags: int = 0
    notes_meeting_two_link_minimum: int = 0
    notes_with_synthesis: int = 0
    top_failures: list[FailureReason] = Field(default_factory=list)


class NVQEvaluationResult(CamelModel):
    note_title: str
    score: NVQScore
    expectation_matched: bool = False
    issues: list[str] = Field(default_factory=list)
    expectation_issues: list[str] = Field(default_factory=list)


class QualityEvaluationResults(CamelModel):
    scenario_name: str
    note_results: list[NVQEvaluationResult] = Field(default_factory=list)
    metrics: NoteQualityMetrics = Field(default_factory=NoteQualityMetrics)
    recommendations: list[str] = Field(default_factory=list)
