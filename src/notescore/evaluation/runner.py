"""
Evaluation runner.

Evaluates every strategy against every scenario, then aggregates per
strategy. Scenario evaluations are independent and may run on a thread
pool; aggregation waits for all of them.
"""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from loguru import logger

from notescore.config import EvaluationSettings
from notescore.errors import ErrorHandler, FixtureError
from notescore.evaluation.fixtures import ScenarioExtraction, StrategyRun
from notescore.evaluation.ground_truth import NoteMatcher
from notescore.evaluation.metrics import aggregate_metrics, calculate_all_metrics
from notescore.evaluation.quality import evaluate_quality
from notescore.models.ground_truth import TestScenario
from notescore.models.metrics import ExtractionMetrics
from notescore.models.report import ScenarioResult


@dataclass
class EvaluationRun:
    """All scenario results of a run plus per-strategy aggregates."""

    results: list[ScenarioResult] = field(default_factory=list)
    strategy_metrics: dict[str, ExtractionMetrics] = field(default_factory=dict)


def evaluate_scenario(
    scenario: TestScenario,
    strategy_name: str,
    extraction: ScenarioExtraction | None,
    settings: EvaluationSettings,
    matcher: NoteMatcher | None = None,
    include_quality: bool = False,
) -> ScenarioResult:
    """Evaluate one strategy's output for one scenario."""
    handler = ErrorHandler()
    if extraction is None:
        handler.handle(
            FixtureError(
                'RUN001',
                f"Strategy '{strategy_name}' has no results for scenario "
                f"'{scenario.name}'",
                recoverable=True,
                context={'scenario': scenario.name, 'strategy': strategy_name},
            )
        )
        extraction = ScenarioExtraction(scenario=scenario.name)

    metrics = calculate_all_metrics(
        extraction.notes, scenario, extraction.timing, matcher
    )

    quality_results = None
    if include_quality:
        config = settings.evaluator_config(
            mocs=scenario.available_mocs,
            projects=scenario.available_projects,
            goals=scenario.user_goals,
        )
        quality_results = evaluate_quality(
            extraction.notes,
            scenario.quality_expectations,
            config,
            scenario_name=scenario.name,
        )

    return ScenarioResult(
        scenario_name=scenario.name,
        strategy_name=strategy_name,
        metrics=metrics,
        extracted_notes=extraction.notes,
        errors=handler.messages(),
        quality_results=quality_results,
    )


def run_evaluation(
    scenarios: Sequence[TestScenario],
    strategy_runs: Sequence[StrategyRun],
    settings: EvaluationSettings,
    matcher: NoteMatcher | None = None,
    include_quality: bool = False,
) -> EvaluationRun:
    """
    Evaluate every strategy run against every scenario.

    Args:
        scenarios: Ground truth scenarios.
        strategy_runs: Extraction output, one entry per strategy.
        settings: Runtime settings, ``max_workers`` enables the thread pool.
        matcher: Strategy for matching notes to expected notes.
        include_quality: Also score each note against the NVQ rubric.

    Returns:
        EvaluationRun: Per-scenario results and per-strategy aggregates.
    """
    scenario_names = {scenario.name for scenario in scenarios}
    tasks = []
    for run in strategy_runs:
        by_scenario = {extraction.scenario: extraction for extraction in run.results}
        for unknown in sorted(set(by_scenario) - scenario_names):
            logger.warning(
                f"Strategy '{run.strategy}' has results for unknown scenario '{unknown}'"
            )
        for scenario in scenarios:
            tasks.append((scenario, run.strategy, by_scenario.get(scenario.name)))

    def evaluate(task) -> ScenarioResult:
        scenario, strategy_name, extraction = task
        return evaluate_scenario(
            scenario, strategy_name, extraction, settings, matcher, include_quality
        )

    logger.info(
        f'Evaluating {len(strategy_runs)} strategy(ies) across '
        f'{len(scenarios)} scenario(s)'
    )
    if settings.max_workers and settings.max_workers > 1:
        with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
            results = list(executor.map(evaluate, tasks))
    else:
        results = [evaluate(task) for task in tasks]

    strategy_metrics = {
        run.strategy: aggregate_metrics(
            [r.metrics for r in results if r.strategy_name == run.strategy]
        )
        for run in strategy_runs
    }
    return EvaluationRun(results=results, strategy_metrics=strategy_metrics)


def meets_thresholds(metrics: ExtractionMetrics, settings: EvaluationSettings) -> bool:
    """Whether aggregated metrics clear every configured quality gate."""
    return (
        metrics.duplicate_detection.f1_score >= settings.ci_f1_threshold
        and metrics.consolidation.accuracy >= settings.min_consolidation_accuracy
        and metrics.tag_reuse.reuse_rate >= settings.min_tag_reuse_rate
    )
