from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from notescore.config import EvaluationSettings
from notescore.errors import FixtureError
from notescore.evaluation.fixtures import read_json
from notescore.models.notes import QualityExtractedNote, UserGoal
from notescore.models.scores import COMPONENT_MAXIMA
from notescore.nvq.evaluator import NVQEvaluator, identify_issues
from notescore.nvq.fields import recover_quality_fields


def load_note(path: str) -> QualityExtractedNote:
    file = Path(path)
    data = read_json(file)
    try:
        return QualityExtractedNote.model_validate(data)
    except ValidationError as e:
        raise FixtureError('FIX003', f'Invalid note in {file}: {e}') from e


def run_score_note(args, settings: EvaluationSettings) -> int:
    """Score a single note JSON file and print its NVQ breakdown."""
    settings = settings.model_copy(
        update={'passing_threshold': args.threshold}
        if args.threshold is not None
        else {}
    )
    config = settings.evaluator_config(
        mocs=args.moc,
        projects=args.project,
        goals=[UserGoal(title=title) for title in args.goal or []],
    )
    note = recover_quality_fields(load_note(args.note))
    score = NVQEvaluator(config).evaluate(note)

    if args.json:
        print(score.model_dump_json(by_alias=True, indent=2))
        return 0

    console = Console()
    table = Table(title=f'NVQ: {note.title}')
    table.add_column('Component', style='cyan')
    table.add_column('Score', justify='right')
    for name, value in score.to_storable_breakdown().items():
        style = 'red' if value == 0 else 'green'
        table.add_row(name, f'[{style}]{value}/{COMPONENT_MAXIMA[name]}[/{style}]')
    table.add_row('[bold]total[/bold]', f'[bold]{score.total}/10[/bold]')
    console.print(table)

    verdict = '[green]PASSING[/green]' if score.passing else '[red]NEEDS REVIEW[/red]'
    console.print(verdict)
    for issue in identify_issues(score):
        console.print(f'  - {issue}', markup=False)
    return 0


def configure_subparser(subparsers):
    """Configure the subparser for the score-note command."""
    parser = subparsers.add_parser(
        'score-note', help='Score one note against the NVQ rubric'
    )
    parser.add_argument('note', type=str, help='Path to a note JSON file')
    parser.add_argument(
        '--threshold', type=float, help='Passing threshold. Defaults to config value.'
    )
    parser.add_argument(
        '--moc', type=str, action='append', help='Map of Content title. Repeatable.'
    )
    parser.add_argument(
        '--project', type=str, action='append', help='Project name. Repeatable.'
    )
    parser.add_argument(
        '--goal', type=str, action='append', help='Personal goal title. Repeatable.'
    )
    parser.add_argument(
        '--json', action='store_true', help='Print the score as JSON'
    )
    parser.set_defaults(func=run_score_note)
