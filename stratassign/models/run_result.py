from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .stratum import StratumKey

"""Run outcome models.

A randomization run returns either RandomizationSuccess (output headers, the
unit -> label map and per-stratum statistics) or RandomizationFailure (a list
of categorized issues). Nothing is mutated in place; a failed run carries no
partial assignment map.
"""

__all__ = [
    "IssueCategory",
    "RunIssue",
    "StratumSummary",
    "RandomizationSuccess",
    "RandomizationFailure",
    "RandomizationOutcome",
]


class IssueCategory(Enum):
    """Category tag for run-level problems.

    - CONFIG: missing/invalid configuration, detected before any data scan
    - PARSE: malformed source data surfaced by the CSV reader
    - EMPTY_DATASET: nothing to randomize
    - BLANK_UNIT: at least one row lacks a unit identifier
    - STRATUM_MISMATCH: a unit appears with more than one stratum
    """
    CONFIG = "CONFIG"
    PARSE = "PARSE"
    EMPTY_DATASET = "EMPTY_DATASET"
    BLANK_UNIT = "BLANK_UNIT"
    STRATUM_MISMATCH = "STRATUM_MISMATCH"


@dataclass(frozen=True)
class RunIssue:
    """One categorized, user-facing problem.

    examples holds at most ``max_examples`` entries (row numbers, unit keys or
    parse messages); total is the full count found during the scan.
    """
    category: IssueCategory
    message: str
    examples: tuple[Any, ...] = ()
    total: int = 0
    example_label: str = "Examples"

    def lines(self) -> list[str]:
        out = [self.message]
        if self.examples:
            joined = ", ".join(str(e) for e in self.examples)
            out.append(f"{self.example_label}: {joined}")
        return out


@dataclass(frozen=True)
class StratumSummary:
    """Per-stratum assignment statistics (diagnostics only)."""
    key: StratumKey
    size: int
    treated: int
    seed: int

    @property
    def control(self) -> int:
        return self.size - self.treated


@dataclass(frozen=True)
class RandomizationSuccess:
    output_headers: tuple[str, ...]
    assignments: Mapping[str, str]
    unit_column: str
    assignment_column: str
    unit_count: int
    stratum_count: int
    row_count: int
    strata: tuple[StratumSummary, ...] = ()
    treatment_label: str = ""
    control_label: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.assignments, MappingProxyType):
            object.__setattr__(self, "assignments", MappingProxyType(dict(self.assignments)))

    @property
    def ok(self) -> bool:
        return True

    @property
    def treated_count(self) -> int:
        return sum(s.treated for s in self.strata)

    @property
    def control_count(self) -> int:
        return self.unit_count - self.treated_count


@dataclass(frozen=True)
class RandomizationFailure:
    issues: tuple[RunIssue, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return False

    @property
    def categories(self) -> list[IssueCategory]:
        return [i.category for i in self.issues]

    def messages(self) -> list[str]:
        """Flatten issues into category-tagged lines."""
        out: list[str] = []
        for issue in self.issues:
            for line in issue.lines():
                out.append(f"[{issue.category.value}] {line}")
        return out


RandomizationOutcome = RandomizationSuccess | RandomizationFailure
