from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.config_models import DEFAULT_MAX_EXAMPLES
from ..models.dataset import Dataset
from ..models.row_data import RowData
from ..models.run_result import IssueCategory, RunIssue
from ..models.stratum import BLANK, Present, StratumCell, StratumKey

"""Unit / stratum consistency validation.

One pass over every row:
- derive the Unit Key (trimmed unit cell); blank keys are recorded by row number
- derive the Stratum Key from the stratification columns
- remember the first stratum seen per unit; a later row of the same unit with a
  different stratum marks the unit as mismatched (first mapping is kept)

Both checks always run over the full dataset so the caller can report every
category in a single failed run.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "BLANK_UNIT_MESSAGE",
    "STRATUM_MISMATCH_MESSAGE",
    "UnitValidation",
    "unit_key",
    "stratum_key",
    "validate_units",
]

BLANK_UNIT_MESSAGE = "Randomization unit column has empty values."
STRATUM_MISMATCH_MESSAGE = (
    "Some units map to multiple strata. Ensure stratification columns are consistent per unit."
)


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def unit_key(raw: Any) -> str | None:
    """Trimmed unit identifier, None when blank or missing."""
    if _is_blank(raw):
        return None
    return str(raw).strip()


def stratum_key(row: RowData, columns: Sequence[str]) -> StratumKey:
    """Build the StratumKey of a row; blank cells become BLANK, others keep their raw text."""
    cells: list[StratumCell] = []
    for col in columns:
        value = row.get(col)
        cells.append(BLANK if _is_blank(value) else Present(str(value)))
    return StratumKey(tuple(cells))


@dataclass
class UnitValidation:
    """Result of validate_units.

    unit_strata is the first-seen Unit Key -> StratumKey mapping in discovery
    order. It must only be consumed when ``issues`` is empty.
    """
    unit_strata: dict[str, StratumKey] = field(default_factory=dict)
    blank_rows: list[int] = field(default_factory=list)
    blank_total: int = 0
    mismatched_units: list[str] = field(default_factory=list)
    issues: list[RunIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def validate_units(
    dataset: Dataset,
    unit_column: str,
    stratification_columns: Sequence[str] = (),
    *,
    max_examples: int = DEFAULT_MAX_EXAMPLES,
) -> UnitValidation:
    result = UnitValidation()
    mismatched: dict[str, None] = {}  # 順序付き set として利用

    for row in dataset.rows:
        key = unit_key(row.get(unit_column))
        if key is None:
            result.blank_total += 1
            if len(result.blank_rows) < max_examples:
                result.blank_rows.append(row.row_number)
            continue

        skey = stratum_key(row, stratification_columns)
        seen = result.unit_strata.get(key)
        if seen is None:
            result.unit_strata[key] = skey
        elif seen != skey:
            mismatched.setdefault(key, None)

    result.mismatched_units = list(mismatched)

    if result.blank_total:
        result.issues.append(
            RunIssue(
                category=IssueCategory.BLANK_UNIT,
                message=BLANK_UNIT_MESSAGE,
                examples=tuple(result.blank_rows),
                total=result.blank_total,
                example_label="Example row numbers",
            )
        )
    if mismatched:
        result.issues.append(
            RunIssue(
                category=IssueCategory.STRATUM_MISMATCH,
                message=STRATUM_MISMATCH_MESSAGE,
                examples=tuple(result.mismatched_units[:max_examples]),
                total=len(result.mismatched_units),
                example_label="Example unit IDs",
            )
        )

    logger.debug(
        "validated rows=%d units=%d blank_units=%d mismatched_units=%d",
        len(dataset.rows),
        len(result.unit_strata),
        result.blank_total,
        len(result.mismatched_units),
    )
    return result
