from __future__ import annotations

import argparse
import json
import sys
from datetime import date, datetime, time, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

from dailyfive.cli import validate_artifact
from dailyfive.config import (
    AppConfig,
    apply_env_overrides,
    load_config,
    reroll_nonce_from_env,
)
from dailyfive.daycount import resolve_day
from dailyfive.errors import DailyFiveError
from dailyfive.pipeline import STATUS_UNCHANGED, generate_daily
from dailyfive.utils.logging import setup_logging
from dailyfive.utils.logging_config import RunContextFilter

DEFAULT_CONFIG = "configs/default.yaml"


def _load_cfg(path: str | None) -> AppConfig:
    """Load config, falling back to defaults when the default file is absent."""
    if path is None:
        path = DEFAULT_CONFIG if Path(DEFAULT_CONFIG).exists() else None
    return apply_env_overrides(load_config(path))


def _cmd_generate(args: argparse.Namespace, cfg: AppConfig) -> int:
    if args.artifact:
        cfg.paths.artifact = args.artifact
    if args.ledger:
        cfg.paths.ledger = args.ledger
    if args.skip_api:
        cfg.source.skip_api = True
    if args.pools:
        cfg.source.pools_dir = args.pools
    if args.verbose:
        cfg.logging.level = "DEBUG"
    nonce = args.nonce if args.nonce is not None else reroll_nonce_from_env()

    logger = setup_logging(
        cfg.logging.log_dir, cfg.logging.filename, cfg.logging.level, cfg.logging.structured
    )
    now = datetime.now(timezone.utc)
    info = resolve_day(now, cfg.schedule.timezone, cfg.schedule.epoch)
    run_filter = RunContextFilter(info.day, info.index)
    for handler in logger.handlers:
        handler.addFilter(run_filter)

    try:
        result = generate_daily(cfg, now=now, nonce=nonce, force=args.force)
    except DailyFiveError as e:
        print(f"Error: {e}")
        logger.error("Generation failed: %s", e, exc_info=True)
        return 1
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        logger.error("Generation failed: %s", e)
        return 1
    except KeyboardInterrupt:
        print("\nGeneration interrupted by user")
        logger.info("Generation interrupted by user (KeyboardInterrupt)")
        return 1
    finally:
        for handler in logger.handlers:
            handler.removeFilter(run_filter)

    if result.status == STATUS_UNCHANGED:
        print(f"Artifact for {info.day} already present at {cfg.paths.artifact}")
    else:
        print(f"Wrote {cfg.paths.artifact} for {info.day} (dayIndex {info.index})")
    return 0


def _cmd_day(args: argparse.Namespace, cfg: AppConfig) -> int:
    if args.date:
        # Noon in the configured zone is unambiguous for the civil date.
        d = date.fromisoformat(args.date)
        now = datetime.combine(d, time(12, 0), tzinfo=ZoneInfo(cfg.schedule.timezone))
    else:
        now = None
    info = resolve_day(now, cfg.schedule.timezone, cfg.schedule.epoch)
    print(json.dumps({"day": info.day, "dayIndex": info.index}))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Daily Five - build the daily five-question trivia artifact",
        epilog="""Examples:
  # Generate today's quiz (OpenTDB, then local pools, then built-in set)
  python cli.py generate

  # Offline run against the local pools only
  python cli.py generate --skip-api

  # Reroll today's quiz with a nonce
  python cli.py generate --nonce abc

  # Show the day key and index for a date
  python cli.py day --date 2025-08-25

  # Check an artifact before publishing
  python cli.py validate daily.json
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen = subparsers.add_parser("generate", help="Generate today's artifact")
    gen.add_argument("--config", "-c", help=f"Config file (default: {DEFAULT_CONFIG} if present)")
    gen.add_argument("--nonce", help="Reroll nonce (default: $REROLL_NONCE)")
    gen.add_argument("--skip-api", action="store_true", help="Do not contact OpenTDB")
    gen.add_argument("--force", action="store_true", help="Regenerate even if today's artifact exists")
    gen.add_argument("--artifact", help="Artifact output path")
    gen.add_argument("--ledger", help="Ledger path")
    gen.add_argument("--pools", help="Local pools directory")
    gen.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    day = subparsers.add_parser("day", help="Print the day key and day index")
    day.add_argument("--config", "-c", help=f"Config file (default: {DEFAULT_CONFIG} if present)")
    day.add_argument("--date", help="Civil date YYYY-MM-DD (default: today)")

    val = subparsers.add_parser("validate", help="Validate an artifact file")
    val.add_argument("artifact", help="Path to the artifact")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "validate":
        return validate_artifact.main([args.artifact])

    try:
        cfg = _load_cfg(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1
    except (ValueError, TypeError) as e:
        print(f"Error: Invalid configuration: {e}")
        return 1

    if args.command == "generate":
        return _cmd_generate(args, cfg)
    if args.command == "day":
        try:
            return _cmd_day(args, cfg)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
    return 1


if __name__ == "__main__":
    sys.exit(main())
