"""Batch driver: ingest a directory of codebook workbooks and report.

Usage:
    python -m scripts.ingest_codebooks [DIR] [--language nl --language en]
        [--status-code draft|final] [--continue-on-error]

Defaults come from the environment / .env (see codebook_ingest.config.settings).
Prints one line per version followed by every diagnostic recorded during
the run. Exit code is 1 when any ERROR was recorded, 2 on a fatal failure.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from codebook_ingest.config.settings import RunParameters, get_settings
from codebook_ingest.ingestion.diagnostics import RecordingSink
from codebook_ingest.ingestion.errors import CodebookIngestionError
from codebook_ingest.ingestion.manager import CodebookManager


def _print_summary(manager: CodebookManager) -> None:
    """Print one row per ingested version."""
    w = 100
    print("=" * w)
    print("  Codebook ingestion summary")
    print("=" * w)
    print(
        f"  {'Version':>8} {'Effective date':<20} {'Concepts':>9}"
        f" {'Entries':>8}  Ingestion id"
    )
    for codebook in manager:
        print(
            f"  {codebook.version:>8g} {codebook.effective_date_text:<20}"
            f" {len(codebook):>9} {codebook.code_list_entry_count:>8}"
            f"  {codebook.ingestion_id}"
        )
    if not len(manager):
        print("  (no codebooks found)")


def _print_diagnostics(sink: RecordingSink) -> None:
    """Print accumulated diagnostics."""
    print()
    print(
        f"  Diagnostics: {len(sink.errors)} error(s), "
        f"{len(sink.warnings)} warning(s)"
    )
    for diagnostic in sink.diagnostics:
        label = diagnostic.version_label or "-"
        print(f"  [{diagnostic.severity}] version {label}: {diagnostic.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ingest codebook workbooks and report diagnostics",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory with .xlsx codebooks (default: $CODEBOOK_DIRECTORY)",
    )
    parser.add_argument(
        "--language",
        action="append",
        dest="languages",
        help="Active language code; repeat for several (default: $LANGUAGES)",
    )
    parser.add_argument(
        "--status-code",
        choices=["draft", "final"],
        default=None,
        help="Status code stamped on every concept (default: $STATUS_CODE)",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Skip workbooks that cannot be ingested instead of aborting",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Batch ingestion entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.value,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        params: RunParameters = settings.to_run_parameters(
            codebook_directory=args.directory,
            languages=args.languages,
            status_code=args.status_code,
        )
    except ValidationError as exc:
        print(f"Invalid run configuration:\n{exc}", file=sys.stderr)
        return 2

    sink = RecordingSink()
    try:
        manager = CodebookManager.from_run_parameters(
            params, sink=sink, continue_on_error=args.continue_on_error
        )
    except (CodebookIngestionError, FileNotFoundError, NotADirectoryError) as exc:
        print(f"Ingestion aborted: {exc}", file=sys.stderr)
        _print_diagnostics(sink)
        return 2

    _print_summary(manager)
    _print_diagnostics(sink)
    return 1 if sink.errors else 0


if __name__ == "__main__":
    sys.exit(main())
