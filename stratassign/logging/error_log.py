from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord
from ..models.run_result import IssueCategory, RunIssue

"""Error log buffering (JSON Lines).

- fixed record schema (see models.error_record)
- one ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC) per buffer, created on first flush
- serial use only, no locking
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "records_from_issues",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def records_from_issues(file_name: str, issues: Iterable[RunIssue]) -> list[ErrorRecord]:
    """One record per example row for BLANK_UNIT, one per issue otherwise."""
    records: list[ErrorRecord] = []
    for issue in issues:
        error_type = issue.category.value
        if issue.category is IssueCategory.BLANK_UNIT and issue.examples:
            for row in issue.examples:
                records.append(ErrorRecord.create(file_name, int(row), error_type, issue.message))
            continue
        message = " ".join(issue.lines())
        records.append(ErrorRecord.create(file_name, -1, error_type, message))
    return records


class ErrorLogBuffer:
    """In-memory buffer for error records. flush() appends JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path:
        fp = self.file_path
        if not self._records:
            return fp
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
