"""
Tests for report.py - Report Generation.

Tests:
1. Percentage formatting and color bands
2. Best strategy selection by weighted score
3. Recommendations
4. JSON report file and CI summary block
5. Console rendering
"""

import io
import json

import pytest
from rich.console import Console

from notescore.evaluation.report import (
    format_ci_summary,
    format_percent,
    format_tag_rate,
    generate_recommendations,
    generate_report,
    overall_score,
    print_metrics,
    print_quality_summary,
    print_report,
    print_strategy_comparison,
    save_report_to_file,
    select_best_strategy,
)
from notescore.evaluation.quality import evaluate_quality
from notescore.models import (
    ConsolidationMetrics,
    DuplicateDetectionMetrics,
    ExtractionMetrics,
    ReportSummary,
    ScenarioResult,
    TagReuseMetrics,
    TestReport,
)
from tests.fixtures.note_fixtures import factual_note, ideal_config, ideal_note


@pytest.fixture
def strategy_metrics():
    """Strategy "a" wins on F1, "b" wins overall."""
    return {
        'a': ExtractionMetrics(
            duplicate_detection=DuplicateDetectionMetrics.from_counts(true_positives=1),
            consolidation=ConsolidationMetrics.from_counts(
                correct_consolidations=1, missed_consolidations=1
            ),
            tag_reuse=TagReuseMetrics.from_counts(
                reused_existing=1, should_have_reused=1
            ),
        ),
        'b': ExtractionMetrics(
            duplicate_detection=DuplicateDetectionMetrics.from_counts(
                true_positives=1, false_negatives=2
            ),
            consolidation=ConsolidationMetrics.from_counts(correct_consolidations=2),
            tag_reuse=TagReuseMetrics.from_counts(reused_existing=2),
        ),
    }


@pytest.fixture
def results(strategy_metrics):
    return [
        ScenarioResult(scenario_name='health-notes', strategy_name=name, metrics=m)
        for name, m in strategy_metrics.items()
    ]


def make_report(f1: float) -> TestReport:
    return TestReport(
        run_id='run-1',
        timestamp='2026-01-01T00:00:00+00:00',
        summary=ReportSummary(
            overall_f1_score=f1,
            overall_consolidation_accuracy=0.9,
            overall_tag_reuse_rate=0.8,
            best_strategy='baseline',
        ),
    )


def recording_console() -> Console:
    return Console(record=True, width=120, file=io.StringIO())


class TestFormatting:
    """Test percentage color bands."""

    @pytest.mark.parametrize(
        'value,expected',
        [
            (0.85, '[green]85.0%[/green]'),
            (0.8, '[green]80.0%[/green]'),
            (0.7, '[yellow]70.0%[/yellow]'),
            (0.5, '[red]50.0%[/red]'),
        ],
    )
    def test_format_percent(self, value, expected):
        assert format_percent(value) == expected

    def test_tag_rate_uses_stricter_bands(self):
        assert format_tag_rate(0.85) == '[yellow]85.0%[/yellow]'
        assert format_tag_rate(0.95) == '[green]95.0%[/green]'
        assert format_tag_rate(0.65) == '[red]65.0%[/red]'


class TestBestStrategy:
    """Test weighted strategy ranking."""

    def test_weighted_score(self, strategy_metrics):
        assert overall_score(strategy_metrics['a']) == pytest.approx(0.7)
        assert overall_score(strategy_metrics['b']) == pytest.approx(0.8)

    def test_best_overall_wins(self, strategy_metrics):
        assert select_best_strategy(strategy_metrics) == 'b'

    def test_tie_keeps_first(self):
        metrics = ExtractionMetrics()
        assert select_best_strategy({'x': metrics, 'y': metrics}) == 'x'

    def test_no_strategies(self):
        assert select_best_strategy({}) == ''


class TestRecommendations:
    """Test strategy recommendations."""

    def test_single_dominant_strategy(self):
        assert generate_recommendations({'only': ExtractionMetrics()}) == [
            'Use "only" - it performs best across all metrics'
        ]

    def test_split_winners(self, strategy_metrics):
        recommendations = generate_recommendations(strategy_metrics)
        assert recommendations[:3] == [
            'Best for duplicate detection: "a" (F1: 100.0%)',
            'Best for consolidation: "b" (Accuracy: 100.0%)',
            'Best for tag reuse: "b" (Rate: 100.0%)',
        ]
        assert (
            '"a": Improve tag matching - too many synonymous tags being created'
            in recommendations
        )
        assert (
            '"b": Improve duplicate recall - too many duplicates being missed'
            in recommendations
        )

    def test_missed_consolidations(self):
        metrics = ExtractionMetrics(
            consolidation=ConsolidationMetrics.from_counts(missed_consolidations=2)
        )
        assert (
            '"x": Improve consolidation detection - '
            'more consolidations missed than caught'
        ) in generate_recommendations({'x': metrics})

    def test_empty(self):
        assert generate_recommendations({}) == []


class TestGenerateReport:
    """Test report assembly."""

    def test_summary_uses_best_strategy(self, results, strategy_metrics):
        report = generate_report(results, strategy_metrics, run_id='run-42')
        assert report.run_id == 'run-42'
        assert report.summary.best_strategy == 'b'
        assert report.summary.overall_f1_score == pytest.approx(0.5)
        assert report.summary.overall_consolidation_accuracy == 1.0
        assert set(report.by_scenario['health-notes'].by_strategy) == {'a', 'b'}
        assert len(report.raw_results) == 2

    def test_default_run_id(self):
        report = generate_report([], {})
        assert report.run_id.startswith('run-')
        assert report.run_id[4:].isdigit()

    def test_no_strategies(self):
        summary = generate_report([], {}).summary
        assert summary.best_strategy == ''
        assert summary.overall_f1_score == 0.0
        assert summary.overall_tag_reuse_rate == 0.0
        assert summary.recommendations == []

    def test_save_to_file(self, tmp_path, results, strategy_metrics):
        report = generate_report(results, strategy_metrics, run_id='run-7')
        path = save_report_to_file(report, tmp_path / 'out')

        assert path.name == 'extraction-accuracy-run-7.json'
        data = json.loads(path.read_text())
        assert data['runId'] == 'run-7'
        assert data['summary']['bestStrategy'] == 'b'
        assert 'overallF1Score' in data['summary']
        metrics = data['byScenario']['health-notes']['byStrategy']['a']
        assert metrics['duplicateDetection']['f1Score'] == 1.0
        assert data['rawResults'][0]['scenarioName'] == 'health-notes'


class TestCISummary:
    """Test the fixed CI block."""

    def test_pass(self):
        assert format_ci_summary(make_report(0.85)).splitlines() == [
            'EXTRACTION_ACCURACY_TEST_RESULTS',
            'STATUS=PASS',
            'BEST_STRATEGY=baseline',
            'F1_SCORE=85.0',
            'CONSOLIDATION_ACCURACY=90.0',
            'TAG_REUSE_RATE=80.0',
        ]

    def test_fail(self):
        assert 'STATUS=FAIL' in format_ci_summary(make_report(0.65)).splitlines()

    def test_threshold_is_inclusive(self):
        assert 'STATUS=PASS' in format_ci_summary(make_report(0.7)).splitlines()

    def test_custom_threshold(self):
        summary = format_ci_summary(make_report(0.85), f1_threshold=0.9)
        assert 'STATUS=FAIL' in summary.splitlines()


class TestConsoleOutput:
    """Test rich rendering."""

    def test_print_report(self, results, strategy_metrics):
        console = recording_console()
        print_report(generate_report(results, strategy_metrics), console)
        text = console.export_text()
        assert 'EXTRACTION ACCURACY TEST REPORT' in text
        assert 'Best Strategy: b' in text
        assert 'health-notes' in text

    def test_print_metrics(self, strategy_metrics):
        console = recording_console()
        print_metrics(strategy_metrics['a'], 'Strategy a', console)
        text = console.export_text()
        assert 'Duplicate Detection' in text
        assert '1/0/0/0' in text

    def test_print_strategy_comparison(self, strategy_metrics):
        console = recording_console()
        print_strategy_comparison(strategy_metrics, console)
        text = console.export_text()
        assert 'Strategy Comparison' in text
        assert 'Dup. F1 Score' in text

    def test_print_quality_summary(self):
        results = evaluate_quality(
            [ideal_note(), factual_note()], config=ideal_config(), scenario_name='q'
        )
        console = recording_console()
        print_quality_summary(results, console)
        text = console.export_text()
        assert '10/10' in text
        assert 'Mean NVQ: 5.0' in text
