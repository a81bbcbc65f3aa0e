from pathlib import Path

from loguru import logger
from rich.console import Console

from notescore.config import EvaluationSettings
from notescore.evaluation.fixtures import load_scenarios, load_strategy_run
from notescore.evaluation.ground_truth import create_matcher
from notescore.evaluation.report import (
    format_ci_summary,
    generate_report,
    print_quality_summary,
    print_report,
    print_strategy_comparison,
    save_report_to_file,
)
from notescore.evaluation.runner import meets_thresholds, run_evaluation


def run_evaluate(args, settings: EvaluationSettings) -> int:
    """
    Evaluate extraction results against scenario ground truth.

    Returns 0 when the best strategy clears every quality gate, 1 otherwise.
    """
    console = Console()

    scenarios = load_scenarios(args.scenarios)
    if args.scenario:
        wanted = set(args.scenario)
        scenarios = [s for s in scenarios if s.name in wanted]
        logger.info(f'Filtered to {len(scenarios)} scenario(s)')

    strategy_runs = [load_strategy_run(path) for path in args.results]
    if args.strategy:
        wanted = set(args.strategy)
        strategy_runs = [run for run in strategy_runs if run.strategy in wanted]

    matcher = create_matcher(args.matcher, settings.match_confidence_threshold)
    evaluation = run_evaluation(
        scenarios,
        strategy_runs,
        settings,
        matcher=matcher,
        include_quality=args.quality,
    )
    report = generate_report(evaluation.results, evaluation.strategy_metrics)

    if not args.no_save:
        output_dir = Path(args.output or settings.output_dir)
        save_report_to_file(report, output_dir)

    if args.ci:
        print(format_ci_summary(report, settings.ci_f1_threshold))
    else:
        if len(evaluation.strategy_metrics) > 1:
            print_strategy_comparison(evaluation.strategy_metrics, console)
        print_report(report, console)
        if args.quality:
            for result in evaluation.results:
                if result.quality_results is not None:
                    print_quality_summary(result.quality_results, console)

    best = evaluation.strategy_metrics.get(report.summary.best_strategy)
    if best is None or not meets_thresholds(best, settings):
        logger.warning('Extraction accuracy below required thresholds')
        return 1
    return 0


def configure_subparser(subparsers):
    """Configure the subparser for the evaluate command."""
    parser = subparsers.add_parser(
        'evaluate', help='Evaluate extraction results against ground truth'
    )
    parser.add_argument(
        '--scenarios',
        type=str,
        required=True,
        help='Scenario JSON file or directory of scenario files',
    )
    parser.add_argument(
        '--results',
        type=str,
        action='append',
        required=True,
        help='Extraction results JSON for one strategy. Repeat to compare.',
    )
    parser.add_argument(
        '--strategy',
        type=str,
        action='append',
        help='Only evaluate the named strategy. Repeatable.',
    )
    parser.add_argument(
        '--scenario',
        type=str,
        action='append',
        help='Only evaluate the named scenario. Repeatable.',
    )
    parser.add_argument(
        '--output', type=str, help='Report directory. Defaults to config value.'
    )
    parser.add_argument(
        '--no-save', action='store_true', help='Do not write the JSON report'
    )
    parser.add_argument(
        '--ci', action='store_true', help='Print only the CI summary block'
    )
    parser.add_argument(
        '--quality',
        action='store_true',
        help='Also score every extracted note against the NVQ rubric',
    )
    parser.add_argument(
        '--matcher',
        type=str,
        default='pattern',
        help='Note matching strategy: pattern or fuzzy. Default: pattern',
    )
    parser.set_defaults(func=run_evaluate)
