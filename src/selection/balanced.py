"""
Bucketed round-robin selection.

Questions are split into category buckets (each pre-shuffled with the
session generator), then categories are walked in a fixed order popping one
question per category per pass. This spreads the result across categories
instead of front-loading the largest bucket. Two variants:

- pick_balanced: round-robin, then best-effort fill from all leftovers
- pick_capped:   round-robin where a category stops contributing at `cap`;
                 never violates the cap, returns an error result instead
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from src.bank.models import BaseQuestion
from src.core.rng import Rng, seeded_shuffle

from .categories import LEGACY_SCHEME, CategoryScheme

Q = TypeVar("Q", bound=BaseQuestion)


@dataclass
class SelectionResult:
    """Ordered, duplicate-free ids, or an explanation of why none could be built."""

    ids: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> SelectionResult:
        return cls(ids=[], error=message)


def bucket_order(scheme: CategoryScheme) -> list[str]:
    """Walk categories first, then any category the walk leaves out."""
    order = list(scheme.walk_order)
    order.extend(c for c in scheme.categories if c not in order)
    return order


def build_buckets(
    pool: Sequence[Q],
    scheme: CategoryScheme,
    rng: Rng,
) -> dict[str, list[Q]]:
    """Group the pool by category and shuffle every bucket in bucket order."""
    buckets: dict[str, list[Q]] = {category: [] for category in bucket_order(scheme)}
    for question in pool:
        buckets[scheme.classify(question.topic, question.prompt)].append(question)
    for category in buckets:
        buckets[category] = seeded_shuffle(buckets[category], rng)
    return buckets


def round_robin(
    buckets: dict[str, list[Q]],
    order: Sequence[str],
    count: int,
    *,
    cap: int | None = None,
    counts: Counter | None = None,
    accept: Callable[[Q], bool] | None = None,
    rejected: list[Q] | None = None,
) -> list[Q]:
    """
    Pop one question per category per pass until count is reached.

    Args:
        buckets: category -> shuffled questions (consumed from the end)
        order: category walk order
        count: target size
        cap: per-category maximum (None for no cap)
        counts: running per-category tally, updated in place
        accept: extra per-question constraint; rejects go to `rejected`
        rejected: collects questions popped but not accepted

    Returns:
        Selected questions in selection order
    """
    counts = counts if counts is not None else Counter()
    selected: list[Q] = []
    progressed = True

    while len(selected) < count and progressed:
        progressed = False
        for category in order:
            if len(selected) >= count:
                break
            if cap is not None and counts[category] >= cap:
                continue
            bucket = buckets.get(category)
            while bucket:
                question = bucket.pop()
                if accept is None or accept(question):
                    selected.append(question)
                    counts[category] += 1
                    progressed = True
                    break
                if rejected is not None:
                    rejected.append(question)

    return selected


def pick_balanced(
    pool: Sequence[Q],
    count: int,
    rng: Rng,
    scheme: CategoryScheme = LEGACY_SCHEME,
) -> list[Q]:
    """Round-robin select, then fill any shortfall from shuffled leftovers."""
    buckets = build_buckets(pool, scheme, rng)
    selected = round_robin(buckets, scheme.walk_order, count)

    if len(selected) < count:
        remaining = seeded_shuffle([q for bucket in buckets.values() for q in bucket], rng)
        selected.extend(remaining[: count - len(selected)])

    return selected


def pick_capped(
    pool: Sequence[Q],
    count: int,
    cap: int,
    rng: Rng,
    scheme: CategoryScheme,
) -> SelectionResult:
    """Round-robin select with a per-category cap; fail rather than exceed it."""
    buckets = build_buckets(pool, scheme, rng)
    counts: Counter = Counter()
    selected = round_robin(buckets, scheme.walk_order, count, cap=cap, counts=counts)

    if len(selected) < count:
        return SelectionResult.failure(
            f"Only {len(selected)} of {count} questions could be selected "
            f"without exceeding {cap} per topic category"
        )
    return SelectionResult(ids=[question.id for question in selected])
