import argparse
from pathlib import Path

from . import __version__
from .config import RebuildConfig
from .database import get_session
from .logger import get_logger
from .rebuild import rebuild_feed
from .schema import validate_config
from .verify import verify_feed


def build_config(args: argparse.Namespace) -> RebuildConfig:
    try:
        config = RebuildConfig.from_env()
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    config = config.with_overrides(
        db_path=Path(args.db) if args.db else None,
        max_age=args.max_age,
        batch_limit=args.batch_limit,
    )
    errors = validate_config(config)
    if errors:
        print("Invalid configuration:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    return config


def cmd_rebuild(args: argparse.Namespace) -> None:
    config = build_config(args)
    logger = get_logger(
        level=args.log_level,
        log_dir=Path(args.log_dir) if args.log_dir else None,
        enable_file=not args.no_log_file,
    )

    if not config.db_path.exists():
        raise SystemExit(f"Database not found: {config.db_path}")

    session = get_session(config.db_path)
    try:
        rebuild_feed(session, config, logger=logger)
        logger.log_metrics_summary()

        if args.verify:
            problems = verify_feed(session, config)
            if problems:
                logger.warning(f"Verification found {len(problems)} problems")
                for p in problems:
                    logger.warning(f"  {p}")
                raise SystemExit(1)
            logger.info("Verification passed")
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feedrebuild",
        description="Rebuild the recent changes table from revisions and logs",
    )
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to the SQLite wiki database (or set FEEDREBUILD_DB_PATH)")
    parser.add_argument("--max-age", type=int, help="Lookback window in seconds (default: 90 days)")
    parser.add_argument("--batch-limit", type=int, help="Maximum rows seeded per source (default: 5000)")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Console log level")
    parser.add_argument("--log-dir", help="Directory for log files (default: logs/)")
    parser.add_argument("--no-log-file", action="store_true", help="Only log to the console")
    parser.add_argument("--verify", action="store_true", help="Check linkage and duplicate invariants after rebuilding")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    cmd_rebuild(args)


if __name__ == "__main__":
    main()
