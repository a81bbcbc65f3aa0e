"""
Tests for runner.py - Evaluation Runner.

Tests:
1. Every strategy is evaluated against every scenario
2. Missing results are recorded as recoverable errors
3. Per-strategy aggregation
4. Thread pool and serial runs agree
5. Quality gates
"""

import pytest
from loguru import logger

from notescore.config import EvaluationSettings
from notescore.evaluation.fixtures import ScenarioExtraction, StrategyRun
from notescore.evaluation.runner import evaluate_scenario, meets_thresholds, run_evaluation
from notescore.models import (
    ConsolidationMetrics,
    DuplicateDetectionMetrics,
    ExtractionMetrics,
    TagReuseMetrics,
    TimingMetrics,
)
from tests.fixtures.note_fixtures import ideal_note, make_note


@pytest.fixture
def settings():
    return EvaluationSettings()


@pytest.fixture
def baseline():
    return StrategyRun(
        strategy='baseline',
        results=[
            ScenarioExtraction(
                scenario='health-notes',
                notes=[
                    make_note(
                        title='Sleep schedule',
                        content='Moved my sleep schedule earlier.',
                        consolidated_with='Sleep Hygiene',
                    ),
                    ideal_note(),
                ],
                timing=TimingMetrics(total_ms=250.0),
            ),
            ScenarioExtraction(scenario='ghost'),
        ],
    )


@pytest.fixture
def empty_run():
    return StrategyRun(strategy='empty')


class TestEvaluateScenario:
    """Test evaluating one strategy against one scenario."""

    def test_metrics(self, scenario, baseline, settings):
        result = evaluate_scenario(scenario, 'baseline', baseline.results[0], settings)
        assert result.scenario_name == 'health-notes'
        assert result.strategy_name == 'baseline'
        assert result.metrics.duplicate_detection.f1_score == pytest.approx(2 / 3)
        assert result.metrics.timing.total_ms == 250.0
        assert result.errors == []
        assert result.quality_results is None

    def test_missing_results_recorded(self, scenario, settings):
        result = evaluate_scenario(scenario, 'empty', None, settings)
        assert result.errors == [
            "Strategy 'empty' has no results for scenario 'health-notes'"
        ]
        assert result.extracted_notes == []
        assert result.metrics.duplicate_detection.false_negatives == 2

    def test_quality_uses_scenario_context(self, scenario, baseline, settings):
        scenario = scenario.model_copy(update={'available_mocs': ['Health Hub']})
        result = evaluate_scenario(
            scenario, 'baseline', baseline.results[0], settings, include_quality=True
        )
        quality = result.quality_results
        assert quality.scenario_name == 'health-notes'
        assert [r.note_title for r in quality.note_results] == [
            'Sleep schedule',
            'Morning Routine Design',
        ]


class TestRunEvaluation:
    """Test the full scenario by strategy run."""

    def test_every_strategy_and_scenario(self, scenario, baseline, empty_run, settings):
        run = run_evaluation([scenario], [baseline, empty_run], settings)
        assert [(r.strategy_name, r.scenario_name) for r in run.results] == [
            ('baseline', 'health-notes'),
            ('empty', 'health-notes'),
        ]
        assert list(run.strategy_metrics) == ['baseline', 'empty']
        assert run.results[1].errors

    def test_aggregates_per_strategy(self, scenario, baseline, settings):
        second = scenario.model_copy(update={'name': 'health-notes-2'})
        run = run_evaluation([scenario, second], [baseline], settings)
        dd = run.strategy_metrics['baseline'].duplicate_detection
        # the second scenario has no results, so both its expectations are missed
        assert (dd.true_positives, dd.false_negatives) == (1, 3)
        assert run.strategy_metrics['baseline'].timing.total_ms == 125.0

    def test_unknown_scenario_warns(self, scenario, baseline, settings):
        messages = []
        logger.add(messages.append, level='WARNING', format='{message}')
        run_evaluation([scenario], [baseline], settings)
        assert any("unknown scenario 'ghost'" in m for m in messages)

    def test_thread_pool_matches_serial(self, scenario, baseline, empty_run):
        serial = run_evaluation([scenario], [baseline, empty_run], EvaluationSettings())
        threaded = run_evaluation(
            [scenario], [baseline, empty_run], EvaluationSettings(max_workers=4)
        )
        assert threaded.results == serial.results
        assert threaded.strategy_metrics == serial.strategy_metrics

    def test_no_strategies(self, scenario, settings):
        run = run_evaluation([scenario], [], settings)
        assert run.results == []
        assert run.strategy_metrics == {}


class TestMeetsThresholds:
    """Test the quality gates behind the exit status."""

    def test_defaults_pass(self, settings):
        metrics = ExtractionMetrics(
            duplicate_detection=DuplicateDetectionMetrics.from_counts(true_positives=1)
        )
        assert meets_thresholds(metrics, settings)

    def test_low_f1_fails(self, settings):
        metrics = ExtractionMetrics(
            duplicate_detection=DuplicateDetectionMetrics.from_counts(
                true_positives=1, false_negatives=1
            )
        )
        assert not meets_thresholds(metrics, settings)

    def test_low_consolidation_fails(self, settings):
        metrics = ExtractionMetrics(
            consolidation=ConsolidationMetrics.from_counts(
                correct_consolidations=1, wrong_consolidations=1
            )
        )
        assert not meets_thresholds(metrics, settings)

    def test_low_tag_reuse_fails(self, settings):
        metrics = ExtractionMetrics(
            tag_reuse=TagReuseMetrics.from_counts(reused_existing=1, should_have_reused=1)
        )
        assert not meets_thresholds(metrics, settings)

    def test_configured_threshold(self):
        metrics = ExtractionMetrics(
            duplicate_detection=DuplicateDetectionMetrics.from_counts(
                true_positives=1, false_negatives=1
            )
        )
        assert meets_thresholds(metrics, EvaluationSettings(ci_f1_threshold=0.5))
