from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

"""RowData model.

RowData represents a single data row of the input CSV after header
normalization. Rows are immutable inputs: ``values`` is exposed as a
read-only mapping and every consumer builds new dicts when it needs to add
fields (see services.materialize).
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single CSV data row.

    row_number is the 1-based position among data rows (header excluded) and is
    used only for error reporting.
    """
    row_number: int
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.values, MappingProxyType):
            object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, column: str) -> str:
        """Raw cell value, ``""`` when the cell is missing."""
        value = self.values.get(column)
        return "" if value is None else value
