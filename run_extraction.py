#!/usr/bin/env python3
"""
Top-level runner for code element extraction.

Walks a source tree, extracts Java methods and .proto message/enum blocks,
and writes them as one pretty-printed JSON array. Recoverable problems are
written one per line to a separate error log.

Usage:
    python run_extraction.py /path/to/project
    python run_extraction.py ./repo --output-file out/elements.json --error-log out/errors.log
    python run_extraction.py ./repo --config extraction.yaml --strict-config
"""

import argparse
import logging
import os
import sys
import time
from dataclasses import replace
from typing import List, Optional

from core.run_artifacts import write_diagnostics_log, write_elements_json, write_run_report
from core.startup_config import ConfigValidationError, resolve_strict_config_validation
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from extraction.config import load_extraction_config
from extraction.diagnostics import DiagnosticSink
from extraction.extractor import extract_directory

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FILE = "output.json"
DEFAULT_ERROR_LOG = "errors.log"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Extract Java methods and proto message/enum blocks as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_extraction.py ./my-project\n"
            "  python run_extraction.py ./my-project --output-file out/elements.json\n"
        ),
    )

    parser.add_argument(
        "source_dir",
        help="Root directory of the project to extract from.",
    )
    parser.add_argument(
        "--output-file",
        default=DEFAULT_OUTPUT_FILE,
        help=f"Path for the JSON element output. Default: {DEFAULT_OUTPUT_FILE}",
    )
    parser.add_argument(
        "--error-log",
        default=DEFAULT_ERROR_LOG,
        help=f"Path for the diagnostics log. Default: {DEFAULT_ERROR_LOG}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML/JSON extraction config (excluded_segments, extensions, ...).",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config_validation(default=False),
        help="Fail instead of falling back to defaults when the config file is invalid.",
    )
    parser.add_argument(
        "--include-constructors",
        action="store_true",
        default=False,
        help="Also emit Java constructors as Method elements.",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="If set, write a JSON run report with counts into this directory.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="If set, also write run logs to this file.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity. Default: INFO",
    )

    return parser.parse_args(argv)


def _final_status(fatal: bool, diagnostics: int) -> str:
    if fatal:
        return "failed"
    if diagnostics:
        return "partial_success"
    return "success"


def _write_error_log(lines: List[str], error_log: str) -> None:
    try:
        count = write_diagnostics_log(lines, error_log)
    except OSError as e:
        logger.error(f"Failed to write error log {error_log}: {e}")
        return
    logger.info(f"Wrote {count} diagnostics to {error_log}")


def run(args: argparse.Namespace) -> int:
    """Run one extraction and return the process exit status."""
    run_id = set_run_id()
    sink = DiagnosticSink()
    fatal_lines: List[str] = []
    report = {
        "source_dir": os.path.abspath(args.source_dir),
        "output_file": os.path.abspath(args.output_file),
        "error_log": os.path.abspath(args.error_log),
    }

    try:
        config = load_extraction_config(args.config, strict=args.strict_config)
    except ConfigValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        _write_error_log([f"FATAL: Invalid configuration: {e}"], args.error_log)
        return 1

    if args.include_constructors:
        config = replace(config, include_constructors=True)

    t0 = time.time()
    try:
        with phase_scope("extraction"):
            elements, stats = extract_directory(args.source_dir, config, sink)
    except OSError as e:
        logger.error(f"Failed during file traversal: {e}")
        _write_error_log(
            sink.lines() + [f"FATAL: Failed during file traversal: {e}"],
            args.error_log,
        )
        return 1

    logger.info(
        "Extraction completed in %.2fs: %d elements from %d files (%d failed)",
        time.time() - t0,
        stats.elements_extracted,
        stats.files_processed + stats.files_failed,
        stats.files_failed,
    )

    with phase_scope("serialization"):
        try:
            written = write_elements_json(
                (element.to_dict() for element in elements),
                args.output_file,
            )
            logger.info(f"Wrote {written} elements to {args.output_file}")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write JSON output to {args.output_file}: {e}")
            fatal_lines.append(
                f"FATAL: Failed to write JSON output to {args.output_file}: {e}"
            )

        _write_error_log(sink.lines() + fatal_lines, args.error_log)

    status = _final_status(bool(fatal_lines), len(sink))
    if args.report_dir:
        report.update(stats.to_dict())
        report["status"] = status
        path = write_run_report(report, run_id, output_dir=args.report_dir)
        logger.info(f"Run report written to {path}")

    if fatal_lines:
        return 1

    logger.info(f"Results written to: {args.output_file}")
    logger.info(f"Errors (if any) logged to: {args.error_log}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_structured_logging(
        level=getattr(logging, args.log_level),
        log_file=args.log_file,
    )

    try:
        return run(args)
    except Exception as e:
        logger.error(f"Extraction failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
