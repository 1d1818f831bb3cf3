from __future__ import annotations

import math
from collections.abc import Callable, MutableSequence
from typing import TypeVar

"""Deterministic hash / PRNG / shuffle primitives.

All arithmetic is done modulo 2**32 (``Math.imul`` / ``>>>`` semantics) so
that a given seed yields the same assignments on every platform. Python ints
never overflow, so every multiply is masked explicitly.
"""

__all__ = [
    "FNV_OFFSET_BASIS",
    "FNV_PRIME",
    "imul32",
    "hash_string",
    "make_rng",
    "shuffle",
]

T = TypeVar("T")

UINT32_MASK = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MULBERRY_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296


def imul32(a: int, b: int) -> int:
    """32-bit wrapping multiply (unsigned result)."""
    return ((a & UINT32_MASK) * (b & UINT32_MASK)) & UINT32_MASK


def _utf16_code_units(s: str):
    data = s.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def hash_string(s: str) -> int:
    """FNV-1a (32 bit) over the UTF-16 code units of ``s``.

    Non-BMP characters contribute two code units (surrogate pair), exactly as
    ``String.prototype.charCodeAt`` iterates them.
    """
    h = FNV_OFFSET_BASIS
    for unit in _utf16_code_units(s):
        h ^= unit
        h = imul32(h, FNV_PRIME)
    return h


def make_rng(seed: int) -> Callable[[], float]:
    """Return a mulberry32 generator yielding floats in [0, 1).

    The stream is purely a function of ``seed`` and the number of calls made;
    the only way to restart it is to build a new generator.
    """
    state = seed & UINT32_MASK

    def _next() -> float:
        nonlocal state
        state = (state + MULBERRY_INCREMENT) & UINT32_MASK
        t = state
        r = imul32(t ^ (t >> 15), t | 1)
        r ^= (r + imul32(r ^ (r >> 7), r | 61)) & UINT32_MASK
        return ((r ^ (r >> 14)) & UINT32_MASK) / TWO_POW_32

    return _next


def shuffle(items: MutableSequence[T], rng: Callable[[], float]) -> None:
    """In-place Fisher-Yates shuffle consuming exactly ``len(items) - 1`` draws."""
    for i in range(len(items) - 1, 0, -1):
        j = math.floor(rng() * (i + 1))
        items[i], items[j] = items[j], items[i]
