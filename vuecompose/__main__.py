import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List

from .core.ast_parser import is_supported_file, should_skip_directory
from .core.config import ConfigError, load_config
from .core.migration import MigrationEngine, MigrationResult, MigrationStatus


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


logger = logging.getLogger(__name__)


def collect_files(paths: List[str]) -> List[str]:
    """Expand files and directories into the list of migratable files."""
    files: List[str] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            if is_supported_file(str(path)):
                files.append(str(path))
            else:
                logger.warning(f"Skipping unsupported file: {path}")
            continue
        if not path.is_dir():
            logger.warning(f"Path not found: {path}")
            continue
        for root, dirs, names in os.walk(path):
            dirs[:] = sorted(d for d in dirs if not should_skip_directory(d))
            for name in sorted(names):
                candidate = os.path.join(root, name)
                if is_supported_file(candidate):
                    files.append(candidate)
    return files


def write_report(results: List[MigrationResult], report_path: str) -> None:
    report = {
        "files": [r.to_dict() for r in results],
        "summary": {
            status.value: sum(1 for r in results if r.status == status)
            for status in MigrationStatus
        },
    }
    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    logger.info(f"Wrote diagnostics report to {report_path}")


def main(argv: List[str] = None) -> int:
    """Main entry point for VueCompose."""
    parser = argparse.ArgumentParser(
        description="VueCompose - migrate Vue options-API components to the composition API"
    )
    parser.add_argument("paths", nargs="+", help="Files or directories to migrate")
    parser.add_argument(
        "--write",
        action="store_true",
        help="Write migrated sources back in place"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file (default: config/vuecompose.yaml)"
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Number of files migrated in parallel"
    )
    parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Write a JSON diagnostics report to this file"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any file was rolled back or reported an error"
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        setup_logging(args.log_level or "INFO")
        logger.error(str(e))
        return 2

    # Setup logging
    setup_logging(args.log_level or config.log_level)

    files = collect_files(args.paths)
    if not files:
        logger.warning("No files to migrate")
        return 0
    logger.info(f"Migrating {len(files)} file(s)")

    engine = MigrationEngine(config)
    results = engine.migrate_files(files, jobs=args.jobs)

    for result in results:
        if not result.changed:
            continue
        if args.write:
            with open(result.file_path, "w", encoding="utf-8") as f:
                f.write(result.output)
            logger.info(f"Wrote {result.file_path}")
        elif len(files) == 1:
            sys.stdout.write(result.output)

    if args.report:
        write_report(results, args.report)

    migrated = sum(1 for r in results if r.status == MigrationStatus.MIGRATED)
    rolled_back = sum(1 for r in results if r.status == MigrationStatus.ROLLED_BACK)
    logger.info(f"Done: {migrated} migrated, {rolled_back} rolled back, {len(results)} total")

    if args.strict and any(r.status == MigrationStatus.ROLLED_BACK or r.has_errors for r in results):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
