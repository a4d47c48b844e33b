"""
MoneyFex data migration command line.

Usage:
    moneyfex-migrate run [--source URL] [--target URL] [--batch-size N] [--create-schema]
    moneyfex-migrate create-schema [PATH] [--target URL]
    moneyfex-migrate validate [--source URL] [--target URL]

Exit status is 0 on success, 1 on failure.
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from moneyfex_migrator.config import Settings, get_settings
from moneyfex_migrator.database import create_source_engine, create_target_engine
from moneyfex_migrator.engine.orchestrator import MigrationOrchestrator, summarize
from moneyfex_migrator.engine.schema import bootstrap_schema
from moneyfex_migrator.engine.validation import validate_migration
from moneyfex_migrator.utils.logger import configure_run_logging, get_logger

logger = get_logger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="moneyfex-migrate",
        description="Migrate the legacy MoneyFex database into the canonical schema.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--source", help="Legacy database URL (default: SOURCE_DATABASE_URL)")
    parser.add_argument("--target", help="Target database URL (default: TARGET_DATABASE_URL)")
    parser.add_argument("--log-path", help="Run log file (default: LOG_PATH)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging and SQL echo")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the full migration")
    run.add_argument("--batch-size", type=int, help="Rows per commit (default: BATCH_SIZE)")
    run.add_argument("--no-validation", action="store_true", help="Skip post-run validation")
    run.add_argument("--create-schema", action="store_true", help="Run the DDL script first")

    schema = sub.add_parser("create-schema", help="Create the target schema from a DDL script")
    schema.add_argument("path", nargs="?", help="DDL script (default: SCHEMA_PATH)")

    sub.add_parser("validate", help="Compare source and target without migrating")

    return parser.parse_args(argv)


def _settings_for(args: argparse.Namespace) -> Settings:
    """CLI flags override environment settings"""
    overrides = {}
    if args.source:
        overrides["SOURCE_DATABASE_URL"] = args.source
    if args.target:
        overrides["TARGET_DATABASE_URL"] = args.target
    if args.log_path:
        overrides["LOG_PATH"] = args.log_path
    if args.debug:
        overrides["DEBUG"] = True
    if getattr(args, "batch_size", None):
        overrides["BATCH_SIZE"] = args.batch_size
    if getattr(args, "no_validation", False):
        overrides["ENABLE_VALIDATION"] = False
    return get_settings().model_copy(update=overrides)


async def _run(settings: Settings, create_schema: bool) -> int:
    orchestrator = MigrationOrchestrator.from_settings(settings)
    try:
        if create_schema:
            await bootstrap_schema(orchestrator.target_engine, settings.SCHEMA_PATH)
        result = await orchestrator.run()
    finally:
        await orchestrator.dispose()

    for line in summarize(result):
        print(line)
    if not result.success or result.validation_passed is False:
        return 1
    return 0


async def _create_schema(settings: Settings, path: Optional[str]) -> int:
    engine = create_target_engine(settings)
    try:
        await bootstrap_schema(engine, path or settings.SCHEMA_PATH)
    finally:
        await engine.dispose()
    print("Schema creation completed")
    return 0


async def _validate(settings: Settings) -> int:
    source_engine = create_source_engine(settings)
    target_engine = create_target_engine(settings)
    try:
        report = await validate_migration(source_engine, target_engine)
    finally:
        await source_engine.dispose()
        await target_engine.dispose()

    report.log(logger)
    print(f"Validation {'passed' if report.passed else 'FAILED'}")
    return 0 if report.passed else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    settings = _settings_for(args)
    configure_run_logging(settings.LOG_PATH, settings.DEBUG)

    print(f"{settings.APP_NAME} v{settings.APP_VERSION}")
    try:
        if args.command == "run":
            return asyncio.run(_run(settings, args.create_schema))
        if args.command == "create-schema":
            return asyncio.run(_create_schema(settings, args.path))
        return asyncio.run(_validate(settings))
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception(f"{args.command} failed")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
