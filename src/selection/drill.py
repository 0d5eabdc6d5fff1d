"""
Weighted topical drills.

A drill draws `count` questions with replacement from one pack of choice
questions. Every candidate starts at weight 1 and gains the bonus of each
DrillWeightRule whose keywords appear in its topic or prompt. The rule table
is plain data so content can be retuned without touching the draw.
"""
from __future__ import annotations

from bisect import bisect_right
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import accumulate

from loguru import logger

from src.bank.models import CHOICE_TYPES, BaseQuestion, ExamBank
from src.bank.resolve import make_drill_entry_id
from src.core.rng import mulberry32, normalize_seed, wall_clock_seed

from .balanced import SelectionResult


@dataclass(frozen=True)
class DrillWeightRule:
    """Adds `bonus` when any keyword occurs in the lower-cased topic + prompt."""

    keywords: tuple[str, ...]
    bonus: int

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


DEFAULT_DRILL_RULES: tuple[DrillWeightRule, ...] = (
    DrillWeightRule(("shift",), 2),
    DrillWeightRule(("normal good",), 1),
    DrillWeightRule(("market supply",), 1),
    DrillWeightRule(("supply curve shifts", "shift in supply", "movement along the supply curve"), 2),
)


def drill_weight(question: BaseQuestion, rules: Sequence[DrillWeightRule] = DEFAULT_DRILL_RULES) -> int:
    text = f"{question.topic} {question.prompt}".lower()
    return 1 + sum(rule.bonus for rule in rules if rule.matches(text))


def drill_pool(bank: ExamBank, pack: str) -> list[BaseQuestion]:
    """Choice questions from the named pack, or whose topic mentions it."""
    choices = [q for q in bank.bank if q.question_type in CHOICE_TYPES]
    in_pack = [q for q in choices if q.pack == pack]
    if in_pack:
        return in_pack
    needle = pack.lower()
    return [q for q in choices if needle in q.topic.lower()]


def generate_drill_session(
    bank: ExamBank,
    pack: str,
    seed: int | str | None = None,
    count: int = 10,
    rules: Sequence[DrillWeightRule] = DEFAULT_DRILL_RULES,
) -> SelectionResult:
    """
    Weighted draw with replacement.

    Repeats of the same base question become distinct entries
    ("<id>", "<id>::2", ...), each answered and scored separately.
    """
    pool = drill_pool(bank, pack)
    if not pool:
        return SelectionResult.failure(f"No drill questions found for {pack!r}")

    rng = mulberry32(normalize_seed(wall_clock_seed() if seed is None else seed))
    cumulative = list(accumulate(drill_weight(q, rules) for q in pool))
    total = cumulative[-1]

    occurrences: Counter = Counter()
    ids: list[str] = []
    for _ in range(count):
        index = bisect_right(cumulative, rng() * total)
        question = pool[min(index, len(pool) - 1)]
        occurrences[question.id] += 1
        ids.append(make_drill_entry_id(question.id, occurrences[question.id]))

    logger.debug(f"Drill {pack!r}: {len(pool)} candidates, total weight {total}")
    return SelectionResult(ids=ids)
