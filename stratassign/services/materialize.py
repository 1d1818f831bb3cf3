from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..models.dataset import Dataset
from .validator import unit_key

"""Map the unit -> label table back onto the original rows.

Used for the bounded preview (``limit``) and for the full export. Input rows
are never touched; every output row is a fresh dict.
"""

__all__ = [
    "DEFAULT_PREVIEW_ROWS",
    "output_headers",
    "materialize_rows",
    "to_table",
]

DEFAULT_PREVIEW_ROWS = 20


def output_headers(header: Sequence[str], assignment_column: str) -> list[str]:
    return [*header, assignment_column]


def materialize_rows(
    dataset: Dataset,
    assignments: Mapping[str, str],
    unit_column: str,
    assignment_column: str,
    *,
    limit: int | None = None,
) -> list[dict[str, str]]:
    rows = dataset.rows if limit is None else dataset.rows[: max(limit, 0)]
    out: list[dict[str, str]] = []
    for row in rows:
        record = {col: row.get(col) for col in dataset.header}
        key = unit_key(row.get(unit_column))
        record[assignment_column] = assignments.get(key, "") if key is not None else ""
        out.append(record)
    return out


def to_table(
    dataset: Dataset,
    assignments: Mapping[str, str],
    unit_column: str,
    assignment_column: str,
) -> tuple[list[str], list[list[str]]]:
    """(fields, rows) in original row order for the CSV writer."""
    fields = output_headers(dataset.header, assignment_column)
    records = materialize_rows(dataset, assignments, unit_column, assignment_column)
    return fields, [[rec[f] for f in fields] for rec in records]
