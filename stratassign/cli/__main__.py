from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Any

import pandas as pd
from dotenv import load_dotenv

from stratassign.config.loader import DEFAULT_CONFIG_PATH, ConfigError, build_config, load_config, merge_overrides
from stratassign.csvio.reader import CsvHeaderError, CsvParseError, default_output_path, read_csv_dataset
from stratassign.csvio.writer import write_csv_table
from stratassign.logging.error_log import ErrorLogBuffer, records_from_issues
from stratassign.logging.init import log_summary, set_debug, setup_logging
from stratassign.models.run_result import RandomizationFailure
from stratassign.services.progress import PhaseProgress
from stratassign.services.randomizer import PHASES, RandomizationSession
from stratassign.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env (STRATASSIGN_CONFIG may point at the YAML config)
- load config file (optional when it does not exist and flags are given)
- read the CSV, randomize with phase progress, report issues or write output

Exit codes: 0 success, 1 fatal (config file / input unreadable), 2 run rejected.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2

CONFIG_ENV_VAR = "STRATASSIGN_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv; a broken file only produces a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _split_columns(values: list[str] | None) -> list[str] | None:
    if not values:
        return None
    out: list[str] = []
    for v in values:
        out.extend(part.strip() for part in v.split(",") if part.strip())
    return out


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="stratassign",
        description="Seeded stratified treatment/control assignment for CSV files",
    )
    p.add_argument("input", type=Path, help="Input CSV file (header row required)")
    p.add_argument("--config", type=Path, default=None, help="YAML config file (default: config/randomize.yml)")
    p.add_argument("--unit-column", dest="unit_column", default=None, help="Column identifying the randomization unit")
    p.add_argument("--assignment-column", dest="assignment_column", default=None, help="Name of the new assignment column")
    p.add_argument(
        "--stratify",
        dest="stratification_columns",
        action="append",
        default=None,
        help="Stratification column (repeatable or comma separated)",
    )
    p.add_argument("--ratio", dest="treatment_ratio", default=None, help="Treatment ratio in [0, 1]")
    p.add_argument("--seed", dest="seed", default=None, help="Integer seed")
    p.add_argument("--treatment-label", dest="treatment_label", default=None)
    p.add_argument("--control-label", dest="control_label", default=None)
    p.add_argument("--max-examples", dest="max_examples", type=int, default=None, help="Examples listed per error")
    p.add_argument("--output", type=Path, default=None, help="Output CSV (default: randomized_<input>)")
    p.add_argument("--preview", type=int, default=0, help="Print the first N output rows")
    p.add_argument("--no-write", action="store_true", help="Do not write the output CSV")
    p.add_argument("--error-log", action="store_true", help="Write rejected-run issues to logs/errors-*.log")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "unit_column": args.unit_column,
        "assignment_column": args.assignment_column,
        "stratification_columns": _split_columns(args.stratification_columns),
        "treatment_ratio": args.treatment_ratio,
        "seed": args.seed,
        "treatment_label": args.treatment_label,
        "control_label": args.control_label,
        "max_examples": args.max_examples,
    }


def _resolve_config(args: argparse.Namespace, logger):
    """Config file (explicit, env var or default path) merged with CLI flags."""
    explicit = args.config or (Path(os.environ[CONFIG_ENV_VAR]) if os.getenv(CONFIG_ENV_VAR) else None)
    path = explicit or DEFAULT_CONFIG_PATH
    if explicit is None and not path.exists():
        logger.debug(f"no config file at {path}; using CLI flags only")
        return build_config(merge_overrides({}, _overrides(args)))
    return load_config(path, _overrides(args))


def _print_preview(rows: list[dict[str, str]]) -> None:
    if not rows:
        return
    print(pd.DataFrame(rows).to_string(index=False))


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        config = _resolve_config(args, logger)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if not args.input.exists():
        logger.error(f"input not found: {args.input}")
        return EXIT_FATAL

    logger.info(f"Parsing CSV: {args.input}")
    try:
        dataset = read_csv_dataset(args.input)
    except (CsvHeaderError, CsvParseError) as e:
        logger.error(f"csv: {e}")
        return EXIT_FATAL
    logger.info(f"Loaded {len(dataset.rows)} rows, {len(dataset.header)} columns")

    session = RandomizationSession(dataset)
    start = time.perf_counter()
    with PhaseProgress(PHASES) as progress:
        outcome = session.randomize(config, checkpoint=progress)
    elapsed = time.perf_counter() - start

    if isinstance(outcome, RandomizationFailure):
        logger.error("Fix these issues:")
        for line in outcome.messages():
            logger.error(line)
        if args.error_log:
            buf = ErrorLogBuffer()
            buf.extend(records_from_issues(dataset.source_name, outcome.issues))
            path = buf.flush()
            logger.info(f"error log written: {path}")
        return EXIT_REJECTED

    result = outcome
    logger.info(f"{result.row_count} rows, {result.unit_count} units, {result.stratum_count} strata")

    if args.preview > 0:
        _print_preview(session.preview(limit=args.preview))

    if not args.no_write:
        output = args.output or default_output_path(args.input)
        fields, rows = session.export_table()
        write_csv_table(fields, rows, output)
        logger.info(f"output written: {output}")

    # log_summary が "SUMMARY " を付与するため先頭ラベルを除去
    summary_line = render_summary_line(result, elapsed)
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
