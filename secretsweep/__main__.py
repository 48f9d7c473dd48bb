"""Entry point: python -m secretsweep [--format FMT] [--fail-on LEVEL] <file>..."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import load_settings, searched_locations
from .core.models import RiskLevel
from .errors import ConfigNotFoundError, SecretSweepError
from .reporting import FORMATS, render
from .scanners.files import FileBatchScanner

logger = logging.getLogger("secretsweep")

_FAIL_ON_LEVELS = {
    "low": RiskLevel.LOW,
    "medium": RiskLevel.MEDIUM,
    "high": RiskLevel.HIGH,
    "critical": RiskLevel.CRITICAL,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="secretsweep",
        description="Scan files for hardcoded secrets, credentials and endpoints",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Files to scan")
    parser.add_argument("--format", choices=FORMATS, default="text", help="Report format (default: text)")
    parser.add_argument("-o", "--output", type=Path, help="Write the report to a file instead of stdout")
    parser.add_argument(
        "--fail-on",
        choices=list(_FAIL_ON_LEVELS),
        default="critical",
        help="Minimum overall risk level that causes a non-zero exit code (default: critical)",
    )
    parser.add_argument("--config", type=Path, help="Path to a settings YAML file")
    parser.add_argument("--patterns", type=Path, help="Path to a custom pattern table YAML")
    parser.add_argument("--max-files", type=int, help="Maximum number of files per batch")
    parser.add_argument("--workers", type=int, help="Number of files scanned in parallel")
    parser.add_argument("--encoding", help="Text encoding used to decode files (default: utf-8)")
    parser.add_argument(
        "--strict-decoding",
        action="store_true",
        default=None,
        help="Fail the batch on undecodable bytes instead of replacing them",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not args.files:
        print("No files given.", file=sys.stderr)
        print("Usage: python -m secretsweep <file> [<file> ...]", file=sys.stderr)
        return 1

    try:
        settings = load_settings(args.config).with_overrides(
            max_files=args.max_files,
            workers=args.workers,
            encoding=args.encoding,
            strict_decoding=args.strict_decoding,
            patterns_path=args.patterns,
        )
        scanner = FileBatchScanner(settings)
        result = scanner.scan_paths(args.files, on_progress=_log_progress)
    except ConfigNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        print(f"  searched: {', '.join(searched_locations(args.config))}", file=sys.stderr)
        return 1
    except SecretSweepError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    output = render(result, args.format)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Report written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(output)

    if not result.findings:
        print(
            f"Scan complete. No findings in {result.files_scanned} file(s) for the patterns checked.",
            file=sys.stderr,
        )

    threshold = _FAIL_ON_LEVELS[args.fail_on]
    return 1 if result.report.level.rank >= threshold.rank else 0


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _log_progress(completed: int, total: int) -> None:
    logger.info("scanned %d/%d files", completed, total)


if __name__ == "__main__":
    sys.exit(main())
