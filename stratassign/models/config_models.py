from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Run configuration model.

RandomizationConfig carries the values as the user supplied them (config file,
CLI flags, or programmatic callers). Semantic validation happens in
services.config_check so that every problem can be reported in one go;
services.config_check.normalize_config returns the coerced copy the engine
actually uses.
"""

__all__ = [
    "DEFAULT_MAX_EXAMPLES",
    "RandomizationConfig",
]

DEFAULT_MAX_EXAMPLES = 20


@dataclass(frozen=True)
class RandomizationConfig:
    """Configuration for one randomization run.

    unit_column: column identifying the randomization unit
    assignment_column: name of the new output column (must not exist in the header)
    stratification_columns: ordered columns defining strata (may be empty)
    treatment_ratio: fraction of each stratum assigned to treatment, in [0, 1]
    seed: integer master seed
    treatment_label / control_label: the two assignment values
    max_examples: cap on example rows/units listed per error category
    """
    unit_column: str
    assignment_column: str = "assignment"
    stratification_columns: tuple[str, ...] = ()
    treatment_ratio: Any = 0.5
    seed: Any = None
    treatment_label: str = "treatment"
    control_label: str = "control"
    max_examples: Any = DEFAULT_MAX_EXAMPLES

    def __post_init__(self) -> None:
        # list -> tuple (YAML / argparse から渡される想定)
        cols = self.stratification_columns
        if cols is None:
            cols = ()
        elif isinstance(cols, str):
            cols = (cols,)
        object.__setattr__(self, "stratification_columns", tuple(cols))
