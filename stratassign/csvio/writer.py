from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

"""CSV writer for materialized output tables."""

__all__ = [
    "render_csv_table",
    "write_csv_table",
]


def _frame(fields: Sequence[str], rows: Sequence[Sequence[str]]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=list(fields), dtype=str)


def render_csv_table(fields: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    return _frame(fields, rows).to_csv(index=False, lineterminator="\n")


def write_csv_table(fields: Sequence[str], rows: Sequence[Sequence[str]], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    _frame(fields, rows).to_csv(path, index=False, lineterminator="\n", encoding="utf-8")
    return path
