from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .row_data import RowData

"""Dataset and ParseIssue models.

A Dataset is produced once by the CSV reader (csvio.reader) and is read-only
thereafter. Every row carries exactly the header's columns; missing cells are
stored as empty strings.
"""

__all__ = [
    "ParseIssue",
    "Dataset",
]


@dataclass(frozen=True)
class ParseIssue:
    """Row-level problem reported by the CSV reader.

    row: 1-based data row number, -1 when the reader cannot tell which row
    """
    row: int
    message: str

    def render(self) -> str:
        where = f"Row {self.row}" if self.row >= 0 else "Row ?"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class Dataset:
    header: tuple[str, ...]
    rows: tuple[RowData, ...]
    parse_errors: tuple[ParseIssue, ...] = ()
    source_name: str = ""

    def __len__(self) -> int:
        return len(self.rows)

    @classmethod
    def from_records(
        cls,
        header: Sequence[str],
        records: Iterable[Mapping[str, Any]],
        *,
        parse_errors: Iterable[ParseIssue] = (),
        source_name: str = "",
        row_numbers: Sequence[int] | None = None,
    ) -> Dataset:
        """Build a Dataset, normalizing every record onto the header.

        None / missing cells become ``""``; non-string cells are stringified;
        keys outside the header are dropped. Rows are numbered 1..n unless
        ``row_numbers`` gives one number per record.
        """
        columns = tuple(str(c) for c in header)
        records = list(records)
        if row_numbers is None:
            row_numbers = range(1, len(records) + 1)
        elif len(row_numbers) != len(records):
            raise ValueError("row_numbers must have one entry per record")
        rows: list[RowData] = []
        for idx, record in zip(row_numbers, records):
            values: dict[str, str] = {}
            for col in columns:
                raw = record.get(col)
                values[col] = "" if raw is None else str(raw)
            rows.append(RowData(row_number=idx, values=values))
        return cls(
            header=columns,
            rows=tuple(rows),
            parse_errors=tuple(parse_errors),
            source_name=source_name,
        )
