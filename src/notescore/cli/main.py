import argparse

from rich.console import Console

from notescore.config import get_settings, setup_logging
from notescore.errors import NoteScoreError

from . import evaluate, score


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the notescore CLI."""
    parser = argparse.ArgumentParser(
        description='notescore - note quality and extraction accuracy evaluation'
    )
    subparsers = parser.add_subparsers(
        dest='command', help='Command to run', required=True
    )

    evaluate.configure_subparser(subparsers)
    score.configure_subparser(subparsers)

    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings)

    try:
        return args.func(args, settings)
    except NoteScoreError as e:
        Console(stderr=True).print(f'[red]{e.error_code}: {e.message}[/red]')
        return 2
