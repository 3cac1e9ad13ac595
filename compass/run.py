"""
Command line runner for the compass engine.

Loads a population (questions, users, answers, snapshots) from YAML into the
in-memory stores and runs one engine operation, printing JSON to stdout.

Usage:
    python -m compass.run --config configs/config.yaml compass --user u1
    python -m compass.run snapshot --user u1 --name "After quick compass"
    python -m compass.run history --user u1
    python -m compass.run diff --from s1 --to s2
    python -m compass.run matches --user u1 --mode complement --limit 5
    python -m compass.run analytics
"""

import argparse
import json
import logging
import sys
from typing import Dict, Any, List, Optional

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def run_command(
    command: str,
    config: Dict[str, Any],
    population,
    args: argparse.Namespace
) -> Dict[str, Any]:
    """
    Execute one engine operation against a loaded population.

    Args:
        command: One of compass, snapshot, history, diff, matches, analytics
        config: Configuration dictionary
        population: Loaded Population
        args: Parsed command line arguments

    Returns:
        JSON-serializable result
    """
    from .analytics import aggregate_compass, axis_distribution, compass_trends, latest_vectors
    from .configs import get_config_value
    from .history import current_compass, diff_snapshot_ids, save_snapshot, snapshot_history
    from .matching import Matchmaker, MatchmakingConfig

    if command == "compass":
        vector = current_compass(args.user, population.responses, args.scope)
        return vector.to_dict()

    if command == "snapshot":
        snapshot = save_snapshot(
            args.user, population.responses, population.snapshots,
            name=args.name, scope=args.scope
        )
        return snapshot.to_dict()

    if command == "history":
        return {
            "snapshots": [
                s.to_dict() for s in snapshot_history(args.user, population.snapshots, args.scope)
            ]
        }

    if command == "diff":
        return diff_snapshot_ids(population.snapshots, args.from_id, args.to_id).to_dict()

    if command == "matches":
        matchmaker = Matchmaker(
            snapshots=population.snapshots,
            responses=population.responses,
            pool=population.directory,
            privacy=population.directory,
            config=MatchmakingConfig.from_config(config)
        )
        report = matchmaker.find_matches(
            args.user, mode=args.mode, limit=args.limit, threshold=args.threshold
        )
        return report.to_dict()

    if command == "analytics":
        user_ids = population.directory.list_discoverable_users()
        vectors = latest_vectors(user_ids, population.snapshots)
        discoverable = set(user_ids)
        snapshots = [s for s in population.snapshots.list_all() if s.user_id in discoverable]
        months = args.months or get_config_value(config, "analytics.trend_months", 12)
        return {
            "aggregate": aggregate_compass(vectors).to_dict(),
            "distribution": [d.to_dict() for d in axis_distribution(vectors)],
            "trends": [t.to_dict() for t in compass_trends(snapshots, months=months)]
        }

    raise ValueError(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with one subcommand per engine operation."""
    parser = argparse.ArgumentParser(
        description="Run civic compass scoring and matchmaking operations"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Population YAML file (overrides config data.path)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    compass = subparsers.add_parser("compass", help="Live compass of a user")
    compass.add_argument("--user", required=True)
    compass.add_argument("--scope", default=None, help="Questionnaire id")

    snapshot = subparsers.add_parser(
        "snapshot",
        help="Dry run: build a snapshot of a user's compass (not persisted)",
        description=(
            "Dry run. The snapshot is saved into the in-memory store loaded "
            "from the population file and is not persisted after the command exits."
        )
    )
    snapshot.add_argument("--user", required=True)
    snapshot.add_argument("--name", default=None)
    snapshot.add_argument("--scope", default=None, help="Questionnaire id")

    history = subparsers.add_parser("history", help="List a user's snapshots, newest first")
    history.add_argument("--user", required=True)
    history.add_argument("--scope", default=None, help="Questionnaire id")

    diff = subparsers.add_parser("diff", help="Diff two snapshots")
    diff.add_argument("--from", dest="from_id", required=True)
    diff.add_argument("--to", dest="to_id", required=True)

    matches = subparsers.add_parser("matches", help="Rank matches for a user")
    matches.add_argument("--user", required=True)
    matches.add_argument("--mode", default="mirror", choices=["mirror", "challenger", "complement"])
    matches.add_argument("--limit", type=int, default=None)
    matches.add_argument("--threshold", type=float, default=None)

    analytics = subparsers.add_parser("analytics", help="Population aggregate, distribution and trends")
    analytics.add_argument("--months", type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the runner."""
    from .configs import load_config, validate_config, get_config_value
    from .storage import load_population

    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        issues = validate_config(config)
        for issue in issues:
            logger.warning(f"Config issue: {issue}")
        setup_logging(get_config_value(config, "global.log_level", "INFO"))

        data_path = args.data or get_config_value(config, "data.path")
        if data_path is None:
            logger.error("No population file given (use --data or data.path)")
            return 1
        population = load_population(data_path)

        result = run_command(args.command, config, population, args)
    except Exception as e:
        logger.exception(f"Command {args.command} failed with error: {e}")
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
