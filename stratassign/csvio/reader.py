from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from ..models.dataset import Dataset, ParseIssue

"""CSV reader.

- first non-empty line is the header; every cell is read as text (no NA
  conversion, no type inference)
- lines that are empty or contain only blank cells are skipped
- data rows with more or fewer fields than the header are reported as
  ParseIssue with their 1-based data row number
- duplicate header names are reported as ParseIssue as well (row=-1)
"""

__all__ = [
    "CsvHeaderError",
    "CsvParseError",
    "read_csv_dataset",
    "default_output_path",
]

NO_HEADER_MESSAGE = "CSV has no headers. Please include a header row."

# Placeholder row handed back to pandas for an over-long line so the line
# keeps its position in the frame.
_BAD_LINE_MARKER = "\x00stratassign:bad-line\x00"


class CsvHeaderError(Exception):
    """Raised when the file has no usable header row."""


class CsvParseError(Exception):
    """Raised when the file cannot be tokenized at all."""


def _is_missing(value: Any) -> bool:
    # padding added by pandas for short lines; real empty cells are ""
    return value is None or (not isinstance(value, str) and bool(pd.isna(value)))


def _cell(value: Any) -> str:
    return "" if _is_missing(value) else str(value)


def read_csv_dataset(path: Path, *, encoding: str = "utf-8") -> Dataset:
    long_line_widths: list[int] = []

    def _on_bad_line(fields: list[str]) -> list[str]:
        long_line_widths.append(len(fields))
        return [_BAD_LINE_MARKER]

    try:
        raw = pd.read_csv(
            path,
            header=None,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_on_bad_line,
            encoding=encoding,
        )
    except pd.errors.EmptyDataError as e:
        raise CsvHeaderError(NO_HEADER_MESSAGE) from e
    except pd.errors.ParserError as e:
        raise CsvParseError(f"CSV parsing failed: {e}") from e
    except UnicodeDecodeError as e:
        raise CsvParseError(f"CSV is not valid {encoding}: {e}") from e

    header = [_cell(c).strip() for c in raw.iloc[0].tolist()] if raw.shape[0] else []
    if not any(header):
        raise CsvHeaderError(NO_HEADER_MESSAGE)
    expected = len(header)

    issues: list[ParseIssue] = []
    seen: set[str] = set()
    for name in header:
        if name in seen:
            issues.append(ParseIssue(row=-1, message=f"Duplicate header name: '{name}'"))
        seen.add(name)

    widths = iter(long_line_widths)
    records: list[dict[str, str]] = []
    row_numbers: list[int] = []
    data_row = 0
    for values in raw.iloc[1:].itertuples(index=False, name=None):
        if values and values[0] == _BAD_LINE_MARKER:
            data_row += 1
            issues.append(
                ParseIssue(
                    row=data_row,
                    message=f"Too many fields: expected {expected} fields but parsed {next(widths)}",
                )
            )
            continue

        cells = [_cell(v) for v in values]
        # greedy skip: 全セル空白の行は空行扱い
        if all(c.strip() == "" for c in cells):
            continue
        data_row += 1

        parsed = sum(1 for v in values if not _is_missing(v))
        if parsed < expected:
            issues.append(
                ParseIssue(row=data_row, message=f"Too few fields: expected {expected} fields but parsed {parsed}")
            )
        records.append(dict(zip(header, cells, strict=False)))
        row_numbers.append(data_row)

    return Dataset.from_records(
        header,
        records,
        parse_errors=issues,
        source_name=Path(path).name,
        row_numbers=row_numbers,
    )


def default_output_path(input_path: Path) -> Path:
    """``randomized_<name>`` next to the input file."""
    input_path = Path(input_path)
    return input_path.with_name(f"randomized_{input_path.name}")
