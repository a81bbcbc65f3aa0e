"""
Report generation for extraction accuracy runs.

Renders metrics as rich console tables, writes the JSON report file and
formats the fixed CI summary block.
"""

import time
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.table import Table

from notescore.models.metrics import ExtractionMetrics
from notescore.models.quality import QualityEvaluationResults
from notescore.models.report import (
    ReportSummary,
    ScenarioBreakdown,
    ScenarioResult,
    TestReport,
)

GOOD_THRESHOLD = 0.8
OK_THRESHOLD = 0.6
TAG_GOOD_THRESHOLD = 0.9
TAG_OK_THRESHOLD = 0.7

CI_F1_THRESHOLD = 0.7

# Weights of F1, consolidation accuracy and tag reuse rate in the overall score.
STRATEGY_WEIGHTS = (0.4, 0.3, 0.3)


def format_percent(
    value: float, good: float = GOOD_THRESHOLD, ok: float = OK_THRESHOLD
) -> str:
    """Format a ratio as a percentage with rich color markup."""
    percent = f'{value * 100:.1f}%'
    if value >= good:
        return f'[green]{percent}[/green]'
    if value >= ok:
        return f'[yellow]{percent}[/yellow]'
    return f'[red]{percent}[/red]'


def format_tag_rate(value: float) -> str:
    return format_percent(value, good=TAG_GOOD_THRESHOLD, ok=TAG_OK_THRESHOLD)


def overall_score(metrics: ExtractionMetrics) -> float:
    f1_weight, consolidation_weight, tag_weight = STRATEGY_WEIGHTS
    return (
        metrics.duplicate_detection.f1_score * f1_weight
        + metrics.consolidation.accuracy * consolidation_weight
        + metrics.tag_reuse.reuse_rate * tag_weight
    )


def select_best_strategy(strategy_metrics: Mapping[str, ExtractionMetrics]) -> str:
    """Strategy with the highest weighted score, earliest on ties."""
    best_name = ''
    best_score = -1.0
    for name, metrics in strategy_metrics.items():
        score = overall_score(metrics)
        if score > best_score:
            best_name, best_score = name, score
    return best_name


def generate_recommendations(
    strategy_metrics: Mapping[str, ExtractionMetrics],
) -> list[str]:
    if not strategy_metrics:
        return []

    def best_by(value) -> tuple[str, float]:
        name = max(strategy_metrics, key=lambda s: value(strategy_metrics[s]))
        return name, value(strategy_metrics[name])

    f1_name, f1 = best_by(lambda m: m.duplicate_detection.f1_score)
    cons_name, cons = best_by(lambda m: m.consolidation.accuracy)
    tag_name, tag = best_by(lambda m: m.tag_reuse.reuse_rate)

    recommendations = []
    if f1_name == cons_name == tag_name:
        recommendations.append(
            f'Use "{f1_name}" - it performs best across all metrics'
        )
    else:
        recommendations.append(
            f'Best for duplicate detection: "{f1_name}" (F1: {f1 * 100:.1f}%)'
        )
        recommendations.append(
            f'Best for consolidation: "{cons_name}" (Accuracy: {cons * 100:.1f}%)'
        )
        recommendations.append(
            f'Best for tag reuse: "{tag_name}" (Rate: {tag * 100:.1f}%)'
        )

    for name, metrics in strategy_metrics.items():
        if metrics.duplicate_detection.recall < 0.7:
            recommendations.append(
                f'"{name}": Improve duplicate recall - too many duplicates being missed'
            )
        if metrics.tag_reuse.reuse_rate < 0.8:
            recommendations.append(
                f'"{name}": Improve tag matching - too many synonymous tags being created'
            )
        if (
            metrics.consolidation.missed_consolidations
            > metrics.consolidation.correct_consolidations
        ):
            recommendations.append(
                f'"{name}": Improve consolidation detection - '
                'more consolidations missed than caught'
            )

    return recommendations


def generate_report(
    results: Sequence[ScenarioResult],
    strategy_metrics: Mapping[str, ExtractionMetrics],
    run_id: str | None = None,
) -> TestReport:
    """
    Build the run report.

    Args:
        results: One result per scenario and strategy.
        strategy_metrics: Metrics aggregated per strategy.
        run_id: Identifier for the run, ``run-<epoch ms>`` when omitted.

    Returns:
        TestReport: Summary for the best strategy, per-scenario breakdown and
            the raw results. With no strategies every summary ratio is 0.
    """
    best_strategy = select_best_strategy(strategy_metrics)
    best = strategy_metrics.get(best_strategy)

    by_scenario: dict[str, dict[str, ExtractionMetrics]] = {}
    for result in results:
        by_scenario.setdefault(result.scenario_name, {})[result.strategy_name] = (
            result.metrics
        )

    summary = ReportSummary(
        overall_f1_score=best.duplicate_detection.f1_score if best else 0.0,
        overall_consolidation_accuracy=best.consolidation.accuracy if best else 0.0,
        overall_tag_reuse_rate=best.tag_reuse.reuse_rate if best else 0.0,
        best_strategy=best_strategy,
        recommendations=generate_recommendations(strategy_metrics),
    )

    return TestReport(
        run_id=run_id or f'run-{int(time.time() * 1000)}',
        timestamp=datetime.now(timezone.utc).isoformat(),
        summary=summary,
        by_scenario={
            name: ScenarioBreakdown(by_strategy=strategies)
            for name, strategies in by_scenario.items()
        },
        raw_results=list(results),
    )


def save_report_to_file(report: TestReport, output_dir: str | Path) -> Path:
    """Write the report as ``extraction-accuracy-<runId>.json``."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    filepath = output_path / f'extraction-accuracy-{report.run_id}.json'
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(report.model_dump_json(by_alias=True, indent=2))
    logger.info(f'Report saved to {filepath}')
    return filepath


def format_ci_summary(report: TestReport, f1_threshold: float = CI_F1_THRESHOLD) -> str:
    """Fixed six-line summary parsed by CI jobs."""
    summary = report.summary
    status = 'PASS' if summary.overall_f1_score >= f1_threshold else 'FAIL'
    lines = [
        'EXTRACTION_ACCURACY_TEST_RESULTS',
        f'STATUS={status}',
        f'BEST_STRATEGY={summary.best_strategy}',
        f'F1_SCORE={summary.overall_f1_score * 100:.1f}',
        f'CONSOLIDATION_ACCURACY={summary.overall_consolidation_accuracy * 100:.1f}',
        f'TAG_REUSE_RATE={summary.overall_tag_reuse_rate * 100:.1f}',
    ]
    return '\n'.join(lines)


# ============================================================================
# Console output
# ============================================================================


def print_metrics(
    metrics: ExtractionMetrics, label: str, console: Console | None = None
) -> None:
    console = console or Console()
    dd = metrics.duplicate_detection
    cons = metrics.consolidation
    tags = metrics.tag_reuse
    conn = metrics.connections
    timing = metrics.timing

    table = Table(title=label, show_header=False)
    table.add_column('Metric', style='cyan')
    table.add_column('Value', justify='right')

    table.add_row('[bold]Duplicate Detection[/bold]', '')
    table.add_row('Precision', format_percent(dd.precision))
    table.add_row('Recall', format_percent(dd.recall))
    table.add_row('F1 Score', format_percent(dd.f1_score))
    table.add_row(
        'TP/FP/FN/TN',
        f'{dd.true_positives}/{dd.false_positives}/'
        f'{dd.false_negatives}/{dd.true_negatives}',
    )

    table.add_row('[bold]Consolidation[/bold]', '')
    table.add_row('Accuracy', format_percent(cons.accuracy))
    table.add_row('Correct', str(cons.correct_consolidations))
    table.add_row('Missed', str(cons.missed_consolidations))
    table.add_row('Wrong', str(cons.wrong_consolidations))
    table.add_row('New Notes', str(cons.correct_new_notes))

    table.add_row('[bold]Tag Reuse[/bold]', '')
    table.add_row('Reuse Rate', format_tag_rate(tags.reuse_rate))
    table.add_row('Reused', str(tags.reused_existing))
    table.add_row('Should Reuse', str(tags.should_have_reused))
    table.add_row('New (correct)', str(tags.correctly_created_new))

    table.add_row('[bold]Connections[/bold]', '')
    table.add_row('Precision', format_percent(conn.precision))
    table.add_row('Recall', format_percent(conn.recall))
    table.add_row('Correct', str(conn.correct_connections))
    table.add_row('Missed', str(conn.missed_connections))
    table.add_row('Spurious', str(conn.spurious_connections))

    table.add_row('[bold]Timing[/bold]', '')
    table.add_row('Total', f'{timing.total_ms:.0f}ms')
    table.add_row('Context', f'{timing.context_retrieval_ms:.0f}ms')
    table.add_row('Extraction', f'{timing.extraction_ms:.0f}ms')

    console.print(table)


_COMPARISON_ROWS = (
    ('Dup. F1 Score', lambda m: m.duplicate_detection.f1_score),
    ('Dup. Precision', lambda m: m.duplicate_detection.precision),
    ('Dup. Recall', lambda m: m.duplicate_detection.recall),
    ('Cons. Accuracy', lambda m: m.consolidation.accuracy),
    ('Tag Reuse Rate', lambda m: m.tag_reuse.reuse_rate),
    ('Conn. Precision', lambda m: m.connections.precision),
    ('Conn. Recall', lambda m: m.connections.recall),
)


def print_strategy_comparison(
    strategy_metrics: Mapping[str, ExtractionMetrics], console: Console | None = None
) -> None:
    console = console or Console()
    table = Table(title='Strategy Comparison')
    table.add_column('Metric', style='cyan')
    for name in strategy_metrics:
        table.add_column(name, justify='right')

    for label, value in _COMPARISON_ROWS:
        table.add_row(
            label, *(f'{value(m) * 100:.1f}%' for m in strategy_metrics.values())
        )
    table.add_row(
        'Avg Time (ms)',
        *(f'{m.timing.total_ms:.0f}' for m in strategy_metrics.values()),
    )
    console.print(table)


def print_report(report: TestReport, console: Console | None = None) -> None:
    console = console or Console()
    summary = report.summary

    console.rule('[bold magenta]EXTRACTION ACCURACY TEST REPORT[/bold magenta]')
    console.print(f'Run ID: {report.run_id}')
    console.print(f'Time: {report.timestamp}')

    console.print('\n[bold]SUMMARY[/bold]')
    console.print(f'Best Strategy: [cyan]{summary.best_strategy}[/cyan]')
    console.print(f'Overall F1 Score: {format_percent(summary.overall_f1_score)}')
    console.print(
        'Consolidation Accuracy: '
        f'{format_percent(summary.overall_consolidation_accuracy)}'
    )
    console.print(f'Tag Reuse Rate: {format_tag_rate(summary.overall_tag_reuse_rate)}')

    console.print('\n[bold]RECOMMENDATIONS[/bold]')
    for recommendation in summary.recommendations:
        console.print(f'  - {recommendation}')

    table = Table(title='Results by Scenario')
    table.add_column('Scenario', style='blue')
    table.add_column('Strategy', style='cyan')
    table.add_column('F1', justify='right')
    table.add_column('Cons.', justify='right')
    table.add_column('Tags', justify='right')
    for scenario_name, breakdown in report.by_scenario.items():
        for strategy_name, metrics in breakdown.by_strategy.items():
            table.add_row(
                scenario_name,
                strategy_name,
                format_percent(metrics.duplicate_detection.f1_score),
                format_percent(metrics.consolidation.accuracy),
                format_tag_rate(metrics.tag_reuse.reuse_rate),
            )
    console.print(table)
    console.rule()


def print_quality_summary(
    results: QualityEvaluationResults, console: Console | None = None
) -> None:
    console = console or Console()
    metrics = results.metrics

    table = Table(title=f'Note Quality: {results.scenario_name}')
    table.add_column('Note', style='cyan')
    table.add_column('NVQ', justify='right')
    table.add_column('Status', justify='center')
    table.add_column('Failing', style='dim')
    for result in results.note_results:
        score = result.score
        status = '[green]pass[/green]' if score.passing else '[red]fail[/red]'
        table.add_row(
            result.note_title,
            f'{score.total}/10',
            status,
            ', '.join(score.failing_components),
        )
    console.print(table)

    console.print(
        f'Mean NVQ: {metrics.mean_nvq:.1f}  Median: {metrics.median_nvq:.0f}  '
        f'Range: {metrics.min_nvq:.0f}-{metrics.max_nvq:.0f}  '
        f'Passing: {format_percent(metrics.passing_rate)}'
    )
    for failure in metrics.top_failures:
        console.print(f'  [dim]{failure.count}x[/dim] {failure.component}: {failure.issue}')
    for recommendation in results.recommendations:
        console.print(f'  - {recommendation}')
