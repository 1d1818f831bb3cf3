from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..models.config_models import DEFAULT_MAX_EXAMPLES, RandomizationConfig
from ..models.dataset import Dataset
from ..models.run_result import (
    IssueCategory,
    RandomizationFailure,
    RandomizationOutcome,
    RandomizationSuccess,
    RunIssue,
)
from .assignment import assign_units
from .config_check import check_config, coerce_max_examples, normalize_config
from .materialize import DEFAULT_PREVIEW_ROWS, materialize_rows, output_headers, to_table
from .validator import validate_units

"""Run orchestration for one randomization.

randomize() is a pure function of (Dataset, RandomizationConfig): it returns
RandomizationSuccess or RandomizationFailure and never mutates its inputs.
RandomizationSession keeps the last successful result for preview / export.

Phase order:
    parse issues -> empty dataset -> config -> validating -> randomizing -> done
The optional ``checkpoint`` callable is invoked between the long phases so a
host (CLI progress bar, event loop wrapper) can regain control.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "PARSE_FAILURE_MESSAGE",
    "NO_DATA_MESSAGE",
    "NOT_RANDOMIZED_MESSAGE",
    "PHASES",
    "SessionStateError",
    "randomize",
    "RandomizationSession",
]

PARSE_FAILURE_MESSAGE = "CSV parsing failed. Please check formatting."
NO_HEADER_MESSAGE = "CSV has no headers. Please include a header row."
NO_DATA_MESSAGE = "Upload a CSV file before randomizing."
NOT_RANDOMIZED_MESSAGE = "Randomize the file before downloading."

PHASES = ("validating", "randomizing", "done")

Checkpoint = Callable[[str], Any]


class SessionStateError(Exception):
    """Raised when a session operation is called out of order."""


def _noop(_phase: str) -> None:
    return None


def _parse_issue(dataset: Dataset, max_examples: int) -> RunIssue | None:
    if not dataset.header:
        return RunIssue(category=IssueCategory.PARSE, message=NO_HEADER_MESSAGE, total=1)
    if not dataset.parse_errors:
        return None
    return RunIssue(
        category=IssueCategory.PARSE,
        message=PARSE_FAILURE_MESSAGE,
        examples=tuple(e.render() for e in dataset.parse_errors[:max_examples]),
        total=len(dataset.parse_errors),
        example_label="Examples",
    )


def _failure(*issues: RunIssue) -> RandomizationFailure:
    for issue in issues:
        logger.warning("run rejected: [%s] %s", issue.category.value, issue.message)
    return RandomizationFailure(issues=tuple(issues))


def randomize(
    dataset: Dataset,
    config: RandomizationConfig,
    *,
    checkpoint: Checkpoint | None = None,
) -> RandomizationOutcome:
    """Validate ``dataset`` against ``config`` and assign every unit.

    Returns:
        RandomizationSuccess with the unit -> label map, or RandomizationFailure
        listing every categorized issue found in the first failing stage.
    """
    checkpoint = checkpoint or _noop
    max_examples = coerce_max_examples(config.max_examples) or DEFAULT_MAX_EXAMPLES

    parse_issue = _parse_issue(dataset, max_examples)
    if parse_issue is not None:
        return _failure(parse_issue)

    if not dataset.rows:
        return _failure(RunIssue(category=IssueCategory.EMPTY_DATASET, message=NO_DATA_MESSAGE, total=1))

    config_issues = check_config(config, dataset.header)
    if config_issues:
        return _failure(*config_issues)
    cfg = normalize_config(config)

    checkpoint("validating")
    logger.info("Validating %d rows (unit=%s strata=%s)", len(dataset.rows), cfg.unit_column, list(cfg.stratification_columns))
    validation = validate_units(
        dataset, cfg.unit_column, cfg.stratification_columns, max_examples=cfg.max_examples
    )
    if not validation.ok:
        return _failure(*validation.issues)

    checkpoint("randomizing")
    plan = assign_units(validation.unit_strata, cfg)
    logger.info("Randomizing %d units across %d strata...", len(validation.unit_strata), len(plan.strata))

    checkpoint("done")
    return RandomizationSuccess(
        output_headers=tuple(output_headers(dataset.header, cfg.assignment_column)),
        assignments=plan.assignments,
        unit_column=cfg.unit_column,
        assignment_column=cfg.assignment_column,
        unit_count=len(validation.unit_strata),
        stratum_count=len(plan.strata),
        row_count=len(dataset.rows),
        strata=tuple(plan.strata),
        treatment_label=cfg.treatment_label,
        control_label=cfg.control_label,
    )


class RandomizationSession:
    """Holds one loaded dataset and its last successful randomization.

    - load() discards any previous result
    - randomize() replaces the stored result only when the new run succeeds,
      so a rejected re-run leaves the previous preview/export intact
    """

    def __init__(self, dataset: Dataset | None = None) -> None:
        self._dataset: Dataset | None = None
        self._result: RandomizationSuccess | None = None
        if dataset is not None:
            self.load(dataset)

    @property
    def dataset(self) -> Dataset | None:
        return self._dataset

    @property
    def result(self) -> RandomizationSuccess | None:
        return self._result

    @property
    def randomized(self) -> bool:
        return self._result is not None

    def load(self, dataset: Dataset) -> None:
        self._dataset = dataset
        self._result = None

    def randomize(self, config: RandomizationConfig, *, checkpoint: Checkpoint | None = None) -> RandomizationOutcome:
        if self._dataset is None:
            return _failure(RunIssue(category=IssueCategory.EMPTY_DATASET, message=NO_DATA_MESSAGE, total=1))
        outcome = randomize(self._dataset, config, checkpoint=checkpoint)
        if isinstance(outcome, RandomizationSuccess):
            self._result = outcome
        return outcome

    def _require_result(self) -> tuple[Dataset, RandomizationSuccess]:
        if self._dataset is None:
            raise SessionStateError(NO_DATA_MESSAGE)
        if self._result is None:
            raise SessionStateError(NOT_RANDOMIZED_MESSAGE)
        return self._dataset, self._result

    def preview(self, limit: int = DEFAULT_PREVIEW_ROWS) -> list[dict[str, str]]:
        dataset, result = self._require_result()
        return materialize_rows(
            dataset, result.assignments, result.unit_column, result.assignment_column, limit=limit
        )

    def export_table(self) -> tuple[list[str], list[list[str]]]:
        dataset, result = self._require_result()
        return to_table(dataset, result.assignments, result.unit_column, result.assignment_column)
