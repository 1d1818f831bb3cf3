from __future__ import annotations

import json
from dataclasses import dataclass

"""Stratum key model.

Each stratification cell is a tagged value: Present(value) or Blank. Blank is
a distinct variant, not a magic string, so a data value that happens to spell
out a placeholder token can never be merged with genuinely empty cells.
"""

__all__ = [
    "Present",
    "Blank",
    "BLANK",
    "StratumCell",
    "StratumKey",
]


@dataclass(frozen=True)
class Present:
    value: str


@dataclass(frozen=True)
class Blank:
    def __repr__(self) -> str:
        return "BLANK"


BLANK = Blank()

StratumCell = Present | Blank


@dataclass(frozen=True)
class StratumKey:
    """Ordered tuple of stratification cells for one unit."""
    cells: tuple[StratumCell, ...] = ()

    def canonical(self) -> str:
        """Stable string form used for seed derivation.

        JSON array, compact separators, non-ASCII kept as-is; Present cells are
        JSON strings and Blank cells are JSON null.
        """
        payload = [c.value if isinstance(c, Present) else None for c in self.cells]
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))

    def __str__(self) -> str:
        return self.canonical()
