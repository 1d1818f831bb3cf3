from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from ..models.config_models import RandomizationConfig
from ..models.run_result import IssueCategory, RunIssue

"""Semantic configuration checks.

check_config collects every applicable problem instead of stopping at the
first one; it only looks at the configuration and the dataset header, never at
row data. normalize_config returns the coerced copy (trimmed names/labels,
float ratio, int seed) once check_config reported nothing.
"""

__all__ = [
    "check_config",
    "normalize_config",
    "coerce_ratio",
    "coerce_seed",
    "coerce_max_examples",
]


def coerce_ratio(value: Any) -> float | None:
    """Float in [0, 1] or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        ratio = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(ratio) or ratio < 0 or ratio > 1:
        return None
    return ratio


def coerce_seed(value: Any) -> int | None:
    """Integer seed or None.

    Accepts ints, integral floats (``42.0``) and integer strings (``" 42 "``).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            as_float = float(text)
        except ValueError:
            return None
        if math.isfinite(as_float) and as_float.is_integer():
            return int(as_float)
    return None


def coerce_max_examples(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _issue(message: str) -> RunIssue:
    return RunIssue(category=IssueCategory.CONFIG, message=message, total=1)


def check_config(config: RandomizationConfig, header: Sequence[str]) -> list[RunIssue]:
    issues: list[RunIssue] = []
    header_set = set(header)

    unit_column = config.unit_column or ""
    if not unit_column:
        issues.append(_issue("Select a randomization unit column."))
    elif unit_column not in header_set:
        issues.append(_issue(f"Unit column '{unit_column}' is not in the CSV header."))

    assignment_column = _text(config.assignment_column)
    if not assignment_column:
        issues.append(_issue("Assignment column name cannot be empty."))
    elif assignment_column in header_set:
        issues.append(_issue("Assignment column already exists in the CSV header."))

    unknown = [c for c in config.stratification_columns if c not in header_set]
    if unknown:
        issues.append(
            _issue(f"Stratification columns not in the CSV header: {', '.join(map(str, unknown))}")
        )
    duplicated = sorted(
        {c for c in config.stratification_columns if config.stratification_columns.count(c) > 1}, key=str
    )
    if duplicated:
        issues.append(_issue(f"Stratification columns listed more than once: {', '.join(map(str, duplicated))}"))

    if coerce_ratio(config.treatment_ratio) is None:
        issues.append(_issue("Treatment ratio must be a number between 0 and 1."))

    if coerce_seed(config.seed) is None:
        issues.append(_issue("Seed must be an integer."))

    if not _text(config.treatment_label) or not _text(config.control_label):
        issues.append(_issue("Treatment and control labels cannot be empty."))

    if coerce_max_examples(config.max_examples) is None:
        issues.append(_issue("Max examples must be a positive integer."))

    return issues


def normalize_config(config: RandomizationConfig) -> RandomizationConfig:
    """Coerced copy of a config that passed check_config."""
    ratio = coerce_ratio(config.treatment_ratio)
    seed = coerce_seed(config.seed)
    max_examples = coerce_max_examples(config.max_examples)
    if ratio is None or seed is None or max_examples is None:
        raise ValueError("normalize_config called on a config that failed check_config")
    return replace(
        config,
        assignment_column=_text(config.assignment_column),
        treatment_ratio=ratio,
        seed=seed,
        treatment_label=_text(config.treatment_label),
        control_label=_text(config.control_label),
        max_examples=max_examples,
    )
