"""
Tests for the notescore command line.

Tests:
1. evaluate prints the CI block and sets the exit status from quality gates
2. evaluate writes the JSON report
3. score-note prints a breakdown or JSON
4. Load errors exit with status 2
"""

import json

import pytest

from notescore.cli.main import main
from tests.fixtures.note_fixtures import health_scenario, ideal_note, make_note


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / 'scenarios.json'
    path.write_text(json.dumps([health_scenario().to_json_dict()]), encoding='utf-8')
    return path


def write_run(tmp_path, strategy, notes):
    path = tmp_path / f'{strategy}.json'
    data = {
        'strategy': strategy,
        'results': [
            {
                'scenario': 'health-notes',
                'notes': [note.to_json_dict() for note in notes],
            }
        ],
    }
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


@pytest.fixture
def good_run(tmp_path):
    return write_run(
        tmp_path,
        'good',
        [
            make_note(
                content='My sleep schedule slipped.', consolidated_with='Sleep Hygiene'
            ),
            make_note(
                content='Tracking protein intake.', consolidated_with='Nutrition Basics'
            ),
        ],
    )


@pytest.fixture
def poor_run(tmp_path):
    return write_run(tmp_path, 'poor', [make_note(content='My sleep schedule slipped.')])


class TestEvaluateCommand:
    """Test the evaluate subcommand."""

    def test_ci_pass(self, scenario_file, good_run, capsys):
        code = main(
            [
                'evaluate',
                '--scenarios',
                str(scenario_file),
                '--results',
                str(good_run),
                '--ci',
                '--no-save',
            ]
        )
        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert out == [
            'EXTRACTION_ACCURACY_TEST_RESULTS',
            'STATUS=PASS',
            'BEST_STRATEGY=good',
            'F1_SCORE=100.0',
            'CONSOLIDATION_ACCURACY=100.0',
            'TAG_REUSE_RATE=100.0',
        ]

    def test_below_thresholds_exit_one(self, scenario_file, poor_run, capsys):
        code = main(
            [
                'evaluate',
                '--scenarios',
                str(scenario_file),
                '--results',
                str(poor_run),
                '--ci',
                '--no-save',
            ]
        )
        assert code == 1
        assert 'STATUS=FAIL' in capsys.readouterr().out

    def test_compares_strategies_and_saves(
        self, tmp_path, scenario_file, good_run, poor_run, capsys
    ):
        output = tmp_path / 'reports'
        code = main(
            [
                'evaluate',
                '--scenarios',
                str(scenario_file),
                '--results',
                str(poor_run),
                '--results',
                str(good_run),
                '--output',
                str(output),
                '--quality',
            ]
        )
        assert code == 0
        (report_file,) = output.glob('extraction-accuracy-run-*.json')
        report = json.loads(report_file.read_text())
        assert report['summary']['bestStrategy'] == 'good'
        assert report['rawResults'][0]['qualityResults']['scenarioName'] == (
            'health-notes'
        )
        out = capsys.readouterr().out
        assert 'Strategy Comparison' in out

    def test_strategy_filter(self, scenario_file, good_run, poor_run, capsys):
        code = main(
            [
                'evaluate',
                '--scenarios',
                str(scenario_file),
                '--results',
                str(good_run),
                '--results',
                str(poor_run),
                '--strategy',
                'poor',
                '--ci',
                '--no-save',
            ]
        )
        assert code == 1
        assert 'BEST_STRATEGY=poor' in capsys.readouterr().out

    def test_missing_scenarios_exit_two(self, tmp_path, good_run, capsys):
        code = main(
            [
                'evaluate',
                '--scenarios',
                str(tmp_path / 'missing.json'),
                '--results',
                str(good_run),
                '--no-save',
            ]
        )
        assert code == 2
        assert 'FIX001' in capsys.readouterr().err

    def test_undecodable_scenarios_exit_two(self, tmp_path, good_run, capsys):
        bad = tmp_path / 'bad.json'
        bad.write_bytes(b'{"name": "\xff"}')
        code = main(
            ['evaluate', '--scenarios', str(bad), '--results', str(good_run), '--no-save']
        )
        assert code == 2
        assert 'FIX002' in capsys.readouterr().err

    def test_directory_results_exit_two(self, scenario_file, tmp_path, capsys):
        code = main(
            [
                'evaluate',
                '--scenarios',
                str(scenario_file),
                '--results',
                str(tmp_path),
                '--no-save',
            ]
        )
        assert code == 2
        assert 'FIX001' in capsys.readouterr().err

    def test_unknown_matcher_exit_two(self, scenario_file, good_run, capsys):
        code = main(
            [
                'evaluate',
                '--scenarios',
                str(scenario_file),
                '--results',
                str(good_run),
                '--matcher',
                'semantic',
                '--no-save',
            ]
        )
        assert code == 2
        assert 'MATCH001' in capsys.readouterr().err


class TestScoreNoteCommand:
    """Test the score-note subcommand."""

    @pytest.fixture
    def note_file(self, tmp_path):
        path = tmp_path / 'note.json'
        path.write_text(json.dumps(ideal_note().to_json_dict()), encoding='utf-8')
        return path

    def test_json_output(self, note_file, capsys):
        code = main(
            ['score-note', str(note_file), '--json', '--goal', 'consistent morning routine']
        )
        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data['total'] == 10
        assert data['qualityStatus'] == 'passing'

    def test_threshold_override(self, note_file, capsys):
        main(['score-note', str(note_file), '--json', '--threshold', '10'])
        data = json.loads(capsys.readouterr().out)
        assert data['total'] == 9
        assert data['passing'] is False

    def test_table_output(self, note_file, capsys):
        code = main(['score-note', str(note_file)])
        out = capsys.readouterr().out
        assert code == 0
        assert 'total' in out
        assert 'Purpose statement does not link to a personal goal' in out

    def test_invalid_note_exit_two(self, tmp_path, capsys):
        path = tmp_path / 'note.json'
        path.write_text('{"content": "no title"}', encoding='utf-8')
        assert main(['score-note', str(path)]) == 2
        assert 'FIX003' in capsys.readouterr().err

    def test_undecodable_note_exit_two(self, tmp_path, capsys):
        path = tmp_path / 'note.json'
        path.write_bytes(b'{"title": "caf\xe9"}')
        assert main(['score-note', str(path)]) == 2
        assert 'FIX002' in capsys.readouterr().err
