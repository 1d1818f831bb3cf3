from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..models.config_models import RandomizationConfig
from ..models.run_result import StratumSummary
from ..models.stratum import StratumKey
from .prng import hash_string, make_rng, shuffle

"""Stratified assignment engine.

For each stratum (discovery order):
1. sort its Unit Keys by UTF-16 code unit (locale independent)
2. k = floor(n * ratio) treatment labels followed by n - k control labels
3. per-stratum seed = hash_string(f"{seed}|{stratum_key.canonical()}")
4. shuffle the labels with mulberry32(per-stratum seed)
5. labels[i] goes to the i-th sorted unit

The canonical sort makes the outcome independent of input row order, and the
per-stratum seed makes strata independent of each other.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "AssignmentPlan",
    "group_strata",
    "split_size",
    "utf16_sort_key",
    "stratum_seed",
    "assign_stratum",
    "assign_units",
]


@dataclass
class AssignmentPlan:
    assignments: dict[str, str] = field(default_factory=dict)
    strata: list[StratumSummary] = field(default_factory=list)


def group_strata(unit_strata: Mapping[str, StratumKey]) -> dict[StratumKey, list[str]]:
    groups: dict[StratumKey, list[str]] = {}
    for unit, key in unit_strata.items():
        groups.setdefault(key, []).append(unit)
    return groups


def utf16_sort_key(unit: str) -> bytes:
    # big-endian UTF-16 bytes compare like code units; astral characters sort
    # below U+E000..U+FFFF, unlike plain str ordering
    return unit.encode("utf-16-be", errors="surrogatepass")


def split_size(n: int, ratio: float) -> int:
    """Treatment count for a stratum of size n (always rounded down)."""
    return math.floor(n * ratio)


def stratum_seed(seed: int, key: StratumKey) -> int:
    return hash_string(f"{seed}|{key.canonical()}")


def assign_stratum(
    units: Sequence[str], key: StratumKey, config: RandomizationConfig
) -> tuple[dict[str, str], StratumSummary]:
    ordered = sorted(units, key=utf16_sort_key)
    n = len(ordered)
    k = split_size(n, config.treatment_ratio)
    labels = [config.treatment_label] * k + [config.control_label] * (n - k)

    seed = stratum_seed(config.seed, key)
    shuffle(labels, make_rng(seed))

    assigned = dict(zip(ordered, labels, strict=True))
    return assigned, StratumSummary(key=key, size=n, treated=k, seed=seed)


def assign_units(unit_strata: Mapping[str, StratumKey], config: RandomizationConfig) -> AssignmentPlan:
    """Assign every validated unit exactly once.

    ``config`` must already be normalized (float ratio, int seed).
    """
    plan = AssignmentPlan()
    for key, units in group_strata(unit_strata).items():
        assigned, summary = assign_stratum(units, key, config)
        plan.assignments.update(assigned)
        plan.strata.append(summary)
        logger.debug(
            "stratum=%s size=%d treated=%d seed=%d", key.canonical(), summary.size, summary.treated, summary.seed
        )
    return plan
