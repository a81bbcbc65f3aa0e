"""Data models shared by the scorer, the calculators and the reporter."""

from notescore.models.ground_truth import (
    ExistingNote,
    ExpectedConnection,
    ExpectedConsolidation,
    ExpectedNote,
    QualityExpectation,
    TestScenario,
)
from notescore.models.metrics import (
    ConnectionMetrics,
    ConsolidationMetrics,
    DuplicateDetectionMetrics,
    ExtractionMetrics,
    TagReuseMetrics,
    TimingMetrics,
)
from notescore.models.notes import (
    Connection,
    ExtractedNoteResult,
    NoteStatus,
    NoteType,
    QualityExtractedNote,
    Stakeholder,
    UserGoal,
)
from notescore.models.quality import (
    ComponentFailureRates,
    FailureReason,
    NoteQualityMetrics,
    NVQEvaluationResult,
    QualityEvaluationResults,
    ScoreDistributions,
)
from notescore.models.report import (
    ReportSummary,
    ScenarioBreakdown,
    ScenarioResult,
    TestReport,
)
from notescore.models.scores import (
    COMPONENT_NAMES,
    ConnectivityComponentScore,
    FunctionalTag,
    LinkDirection,
    MetadataComponentScore,
    NVQBreakdown,
    NVQScore,
    OriginalityComponentScore,
    TagCategory,
    TaxonomyComponentScore,
    WhyComponentScore,
)

__all__ = [
    'COMPONENT_NAMES',
    'ComponentFailureRates',
    'Connection',
    'ConnectionMetrics',
    'ConnectivityComponentScore',
    'ConsolidationMetrics',
    'DuplicateDetectionMetrics',
    'ExistingNote',
    'ExpectedConnection',
    'ExpectedConsolidation',
    'ExpectedNote',
    'ExtractedNoteResult',
    'ExtractionMetrics',
    'FailureReason',
    'FunctionalTag',
    'LinkDirection',
    'MetadataComponentScore',
    'NVQBreakdown',
    'NVQEvaluationResult',
    'NVQScore',
    'NoteQualityMetrics',
    'NoteStatus',
    'NoteType',
    'OriginalityComponentScore',
    'QualityEvaluationResults',
    'QualityExpectation',
    'QualityExtractedNote',
    'ReportSummary',
    'ScenarioBreakdown',
    'ScenarioResult',
    'ScoreDistributions',
    'Stakeholder',
    'TagCategory',
    'TagReuseMetrics',
    'TaxonomyComponentScore',
    'TestScenario',
    'TimingMetrics',
    'UserGoal',
    'WhyComponentScore',
]
