from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Phase progress display with tqdm (TTY only).

PhaseProgress is passed to services.randomizer.randomize as its ``checkpoint``
hook: each call advances the bar to the named phase. In non-TTY environments
(CI, pipes) no bar is created, to avoid ANSI control sequence spam.
"""

__all__ = [
    "PhaseProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class PhaseProgress:
    """Progress over a fixed sequence of named run phases."""

    def __init__(self, phases: Sequence[str], *, description: str = "Randomizing") -> None:
        self.phases = list(phases)
        self.description = description
        self.completed: list[str] = []

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=len(self.phases),
                desc=description,
                unit="phase",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, phase: str) -> None:
        self.advance(phase)

    def advance(self, phase: str) -> None:
        """Mark ``phase`` as reached.

        Unknown phase names are recorded but do not move the bar.
        """
        self.completed.append(phase)
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({phase})")
            if phase in self.phases:
                self.pbar.update(1)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> PhaseProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
