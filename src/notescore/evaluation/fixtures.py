"""Load scenarios and extraction results from JSON files."""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import Field, ValidationError

from notescore.errors import FixtureError
from notescore.models.base import CamelModel
from notescore.models.ground_truth import TestScenario
from notescore.models.metrics import TimingMetrics
from notescore.models.notes import ExtractedNoteResult


class ScenarioExtraction(CamelModel):
    """Notes one strategy produced for one scenario."""

    scenario: str
    notes: list[ExtractedNoteResult] = Field(default_factory=list)
    timing: TimingMetrics = Field(default_factory=TimingMetrics)


class StrategyRun(CamelModel):
    strategy: str
    results: list[ScenarioExtraction] = Field(default_factory=list)


def _json_files(path: Path) -> list[Path]:
    if path.is_dir():
        return sorted(path.glob('*.json'))
    return [path]


def read_json(path: Path) -> Any:
    """
    Read a UTF-8 JSON file.

    Raises:
        FixtureError: FIX001 if the file is missing or unreadable, FIX002 if
            it is not UTF-8 encoded JSON.
    """
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise FixtureError(
            'FIX001', f'File not found: {path}', context={'path': str(path)}
        ) from e
    except OSError as e:
        raise FixtureError(
            'FIX001',
            f'Cannot read {path}: {e.strerror or e}',
            context={'path': str(path)},
        ) from e
    except json.JSONDecodeError as e:
        raise FixtureError(
            'FIX002',
            f'Invalid JSON in {path}: {e}',
            context={'path': str(path), 'line': e.lineno},
        ) from e
    except UnicodeDecodeError as e:
        raise FixtureError(
            'FIX002',
            f'Invalid UTF-8 in {path}: {e.reason} at byte {e.start}',
            context={'path': str(path)},
        ) from e


def _validation_error(path: Path, error: ValidationError) -> FixtureError:
    return FixtureError(
        'FIX003',
        f'Invalid data in {path}: {error.error_count()} validation error(s)',
        context={'path': str(path), 'errors': error.errors(include_url=False)},
    )


def load_scenarios(path: str | Path) -> list[TestScenario]:
    """
    Load test scenarios from a file or a directory of files.

    Each file holds either a single scenario object or a list of them.

    Raises:
        FixtureError: If a file is missing, is not JSON, or does not describe
            valid scenarios.
    """
    scenarios = []
    for file in _json_files(Path(path)):
        data = read_json(file)
        items = data if isinstance(data, list) else [data]
        try:
            scenarios.extend(TestScenario.model_validate(item) for item in items)
        except ValidationError as e:
            raise _validation_error(file, e) from e
    logger.info(f'Loaded {len(scenarios)} scenario(s) from {path}')
    return scenarios


def load_strategy_run(path: str | Path) -> StrategyRun:
    """Load the notes one extraction strategy produced across scenarios."""
    file = Path(path)
    data = read_json(file)
    try:
        run = StrategyRun.model_validate(data)
    except ValidationError as e:
        raise _validation_error(file, e) from e
    logger.info(
        f"Loaded {len(run.results)} result set(s) for strategy '{run.strategy}'"
    )
    return run


def save_scenarios(scenarios: list[TestScenario], path: str | Path) -> Path:
    """Write scenarios as a camelCase JSON list."""
    file = Path(path)
    file.parent.mkdir(parents=True, exist_ok=True)
    with open(file, 'w', encoding='utf-8') as f:
        json.dump([s.to_json_dict() for s in scenarios], f, indent=2)
    return file
