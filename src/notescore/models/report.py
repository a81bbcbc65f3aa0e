"""Run-level report records."""

from pydantic import Field

from notescore.models.base import CamelModel
from notescore.models.metrics import ExtractionMetrics
from notescore.models.notes import ExtractedNoteResult
from notescore.models.quality import QualityEvaluationResults


class ScenarioResult(CamelModel):
    """Outcome of evaluating one strategy against one scenario."""

    scenario_name: str
    strategy_name: str
    metrics: ExtractionMetrics
    extracted_notes: list[ExtractedNoteResult] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    quality_results: QualityEvaluationResults | None = None


class ReportSummary(CamelModel):
    overall_f1_score: float
    overall_consolidation_accuracy: float
    overall_tag_reuse_rate: float
    best_strategy: str
    recommendations: list[str] = Field(default_factory=list)


class ScenarioBreakdown(CamelModel):
    by_strategy: dict[str, ExtractionMetrics] = Field(default_factory=dict)


class TestReport(CamelModel):
    # Keep pytest from collecting this class.
    __test__ = False

    run_id: str
    timestamp: str
    summary: ReportSummary
    by_scenario: dict[str, ScenarioBreakdown] = Field(default_factory=dict)
    raw_results: list[ScenarioResult] = Field(default_factory=list)
