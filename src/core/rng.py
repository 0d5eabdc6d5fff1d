"""
Seeded pseudo-randomness for question selection.

The generator is mulberry32 (32-bit state, one add + two multiply/xorshift
rounds per draw) and the shuffle is a descending Fisher-Yates walk that
consumes one draw per position. Both are frozen: stored sessions are
regenerated from their seed, so any change here silently changes which
questions an old session contains.
"""
from __future__ import annotations

import struct
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
_GOLDEN_GAMMA = 0x6D2B79F5
_TWO_POW_32 = 4294967296

Rng = Callable[[], float]


def mulberry32(seed: int) -> Rng:
    """Return a generator of floats in [0, 1) driven by a 32-bit seed."""
    state = seed & MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + _GOLDEN_GAMMA) & MASK32
        t = state
        result = ((t ^ (t >> 15)) * (t | 1)) & MASK32
        result ^= (result + (((result ^ (result >> 7)) * (result | 61)) & MASK32)) & MASK32
        return ((result ^ (result >> 14)) & MASK32) / _TWO_POW_32

    return next_float


def hash_string_to_seed(value: str) -> int:
    """Fold a string into a non-zero 32-bit seed (hash * 31 + code unit)."""
    hashed = 0
    encoded = value.encode("utf-16-le")
    for (unit,) in struct.iter_unpack("<H", encoded):
        hashed = (hashed * 31 + unit) & MASK32
    return hashed or 1


def normalize_seed(seed: int | str) -> int:
    """Map an int or string seed to the 32-bit integer the generator uses."""
    if isinstance(seed, str):
        return hash_string_to_seed(seed)
    return seed & MASK32


def wall_clock_seed() -> int:
    """Seed for modes that are random by design (drills, legacy starts)."""
    return (time.time_ns() // 1_000_000) & MASK32 or 1


def seeded_shuffle(items: Sequence[T], rng: Rng) -> list[T]:
    """Return a shuffled copy of items; the input is left untouched."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = int(rng() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def pick_int(rng: Rng, low: int, high: int) -> int:
    """Uniform integer in [low, high]."""
    span = high - low + 1
    return int(rng() * span) + low
