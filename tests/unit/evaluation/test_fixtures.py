"""Tests for loading scenarios and extraction results from JSON."""

import json

import pytest

from notescore.errors import FixtureError
from notescore.evaluation.fixtures import (
    load_scenarios,
    load_strategy_run,
    read_json,
    save_scenarios,
)

SCENARIO = {
    'name': 'health-notes',
    'existingNotes': [{'id': 'n1', 'title': 'Sleep Hygiene'}],
    'existingTags': ['health'],
    'expectedConsolidations': [
        {'newContentPattern': 'sleep schedule', 'existingNoteTitle': 'Sleep Hygiene'}
    ],
    'expectedNotes': [
        {
            'titlePatterns': ['morning routine'],
            'expectedConnections': [
                {'targetTitlePattern': 'sleep hygiene', 'types': ['related']}
            ],
        }
    ],
    'userGoals': [{'title': 'Sleep better', 'whyRoot': 'Energy'}],
}

STRATEGY_RUN = {
    'strategy': 'baseline',
    'results': [
        {
            'scenario': 'health-notes',
            'notes': [
                {
                    'title': 'Sleep schedule',
                    'content': 'Moved my sleep schedule.',
                    'consolidatedWith': 'Sleep Hygiene',
                    'connections': [{'targetTitle': 'Sleep Hygiene'}],
                }
            ],
            'timing': {'totalMs': 120, 'extractionMs': 90},
        }
    ],
}


def write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


class TestLoadScenarios:
    """Test scenario loading."""

    def test_single_object(self, tmp_path):
        scenarios = load_scenarios(write_json(tmp_path / 's.json', SCENARIO))
        assert len(scenarios) == 1
        scenario = scenarios[0]
        assert scenario.name == 'health-notes'
        assert scenario.existing_notes[0].title == 'Sleep Hygiene'
        assert scenario.expected_notes[0].expected_connections[0].types == ['related']
        assert scenario.user_goals[0].why_root == 'Energy'

    def test_list_of_scenarios(self, tmp_path):
        second = dict(SCENARIO, name='second')
        scenarios = load_scenarios(write_json(tmp_path / 's.json', [SCENARIO, second]))
        assert [s.name for s in scenarios] == ['health-notes', 'second']

    def test_directory_sorted_by_filename(self, tmp_path):
        write_json(tmp_path / 'b.json', dict(SCENARIO, name='b'))
        write_json(tmp_path / 'a.json', dict(SCENARIO, name='a'))
        (tmp_path / 'notes.txt').write_text('ignored')
        assert [s.name for s in load_scenarios(tmp_path)] == ['a', 'b']

    def test_missing_file(self, tmp_path):
        with pytest.raises(FixtureError) as exc_info:
            load_scenarios(tmp_path / 'missing.json')
        assert exc_info.value.error_code == 'FIX001'

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{"name": ', encoding='utf-8')
        with pytest.raises(FixtureError) as exc_info:
            load_scenarios(path)
        assert exc_info.value.error_code == 'FIX002'
        assert exc_info.value.context['path'] == str(path)

    def test_invalid_scenario(self, tmp_path):
        path = write_json(tmp_path / 's.json', {'description': 'no name'})
        with pytest.raises(FixtureError) as exc_info:
            load_scenarios(path)
        assert exc_info.value.error_code == 'FIX003'
        assert exc_info.value.context['errors'][0]['loc'] == ('name',)

    def test_save_and_reload(self, tmp_path, scenario):
        path = save_scenarios([scenario], tmp_path / 'nested' / 'scenarios.json')
        assert load_scenarios(path) == [scenario]
        assert 'existingNotes' in json.loads(path.read_text())[0]


class TestLoadStrategyRun:
    """Test extraction result loading."""

    def test_load(self, tmp_path):
        run = load_strategy_run(write_json(tmp_path / 'r.json', STRATEGY_RUN))
        assert run.strategy == 'baseline'
        extraction = run.results[0]
        assert extraction.notes[0].consolidated_with == 'Sleep Hygiene'
        assert extraction.notes[0].connections[0].type == 'related'
        assert extraction.timing.total_ms == 120.0
        assert extraction.timing.context_retrieval_ms == 0.0

    def test_missing_strategy_name(self, tmp_path):
        path = write_json(tmp_path / 'r.json', {'results': []})
        with pytest.raises(FixtureError) as exc_info:
            load_strategy_run(path)
        assert exc_info.value.error_code == 'FIX003'

    def test_directory_path(self, tmp_path):
        with pytest.raises(FixtureError) as exc_info:
            load_strategy_run(tmp_path)
        assert exc_info.value.error_code == 'FIX001'
        assert exc_info.value.context['path'] == str(tmp_path)


class TestReadJson:
    """Test raw JSON file reading."""

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / 'latin.json'
        path.write_bytes(b'{"name": "\xff"}')
        with pytest.raises(FixtureError) as exc_info:
            read_json(path)
        assert exc_info.value.error_code == 'FIX002'
        assert 'UTF-8' in exc_info.value.message

    def test_invalid_utf8_scenarios(self, tmp_path):
        path = tmp_path / 'latin.json'
        path.write_bytes(b'{"name": "caf\xe9"}')
        with pytest.raises(FixtureError) as exc_info:
            load_scenarios(path)
        assert exc_info.value.error_code == 'FIX002'
