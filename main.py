"""Command-line entry point for the vinyl release scoring service.

    python main.py rescore captured.json [--config override.json] [--json]
    python main.py validate-config override.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from config.settings import get_settings
from core.dependencies import get_config_store, shutdown_posthog
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from core.sentry import init_sentry
from lookup.orchestrator import rescore_releases
from scoring.aggregate import format_album
from scoring.config import (
    DEFAULT_SCORING_CONFIG,
    ScoringConfig,
    load_override_document,
    merge_scoring_config,
    validate_scoring_config,
)
from scoring.models import RawCandidate
from scoring.score import format_scoring_result

logger = logging.getLogger(__name__)

_candidate_list = TypeAdapter(list[RawCandidate])


def configure_service() -> None:
    """Load .env, then set up logging and Sentry from settings."""
    load_dotenv()
    settings = get_settings()

    setup_logging(level=settings.log_level)
    init_sentry(
        dsn=settings.sentry_dsn,
        environment="production" if settings.log_level != "DEBUG" else "development",
        release=settings.app_version,
    )
    logger.debug(f"Starting {settings.app_name} v{settings.app_version}")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="Score and aggregate vinyl release candidates",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    rescore_parser = subparsers.add_parser(
        "rescore", help="Re-run scoring and aggregation on captured raw candidates"
    )
    rescore_parser.add_argument(
        "candidates",
        type=Path,
        help="JSON list of raw candidates, or a saved result with a rawCandidates key",
    )
    rescore_parser.add_argument(
        "--config", type=Path, default=None, help="Scoring override document to apply"
    )
    rescore_parser.add_argument(
        "--json", action="store_true", help="Print the full result as camelCase JSON"
    )

    validate_parser = subparsers.add_parser(
        "validate-config", help="Check a scoring override document"
    )
    validate_parser.add_argument("path", type=Path, help="Override document to check")

    return parser


def load_candidates(path: Path) -> list[RawCandidate]:
    """Read captured raw candidates.

    Raises:
        ValueError: If the file is not JSON or does not hold raw candidates
    """
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Cannot read {path}: {e}") from e

    if isinstance(document, dict):
        document = document.get("rawCandidates", document.get("raw_candidates"))

    try:
        return _candidate_list.validate_python(document)
    except ValidationError as e:
        raise ValueError(f"{path} does not contain raw candidates: {e}") from e


def load_config(path: Path | None) -> ScoringConfig | None:
    """Defaults merged with the override at ``path``; None defers to the config store.

    Raises:
        ConfigurationError: If the override is missing, unreadable or invalid
    """
    if path is None:
        return None

    override = load_override_document(path)
    if override is None:
        raise ConfigurationError(f"Scoring config not found: {path}", details={"path": str(path)})
    return merge_scoring_config(DEFAULT_SCORING_CONFIG, override)


def run_rescore(args: argparse.Namespace) -> int:
    try:
        candidates = load_candidates(args.candidates)
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    result = rescore_releases(candidates, config, config_store=get_config_store())

    if args.json:
        print(result.model_dump_json(by_alias=True, indent=2))
    else:
        for album in result.albums:
            print(format_album(album))
            print()
        if result.scoring_details:
            print("Scoring details:")
            for detail in result.scoring_details:
                print(format_scoring_result(detail))
                print()

    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)
    return 1 if result.errors else 0


def run_validate_config(args: argparse.Namespace) -> int:
    try:
        document = json.loads(args.path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read {args.path}: {e}", file=sys.stderr)
        return 1

    errors = validate_scoring_config(document)
    if errors:
        for error in errors:
            print(error)
        return 1

    print(f"{args.path}: configuration is valid")
    return 0


COMMANDS = {
    "rescore": run_rescore,
    "validate-config": run_validate_config,
}


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    configure_service()
    try:
        return COMMANDS[args.command](args)
    finally:
        shutdown_posthog()


if __name__ == "__main__":
    sys.exit(main())
