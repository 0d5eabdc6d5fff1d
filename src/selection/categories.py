"""
Topic categorization for balanced selection.

A question's category is found by keyword-substring matching over the
lower-cased "<topic> <prompt>" text. Rules are checked in a fixed priority
order and the first match wins (so a question mentioning both elasticity and
demand is elasticity). Unmatched questions fall into "other".

Each exam mode has its own scheme; the scheme also fixes the round-robin
walk order used by the balanced pickers.
"""
from __future__ import annotations

from dataclasses import dataclass

OTHER = "other"

# =============================================================================
# Keyword groups
# =============================================================================

ELASTICITY_KEYWORDS = ("elasticity", "ped", "pes", "inelastic", "elastic ")
INTERVENTION_KEYWORDS = (
    "tax",
    "subsidy",
    "price ceiling",
    "price floor",
    "minimum wage",
    "rent",
    "intervention",
    "regulation",
    "government",
)
EQUILIBRIUM_KEYWORDS = ("equilibrium", "surplus", "shortage", "market clearing")
SIGNAL_KEYWORDS = ("signal", "adverse selection", "asymmetric information", "moral hazard")
STRUCTURE_KEYWORDS = (
    "monopoly",
    "oligopoly",
    "perfect competition",
    "monopolistic",
    "market structure",
    "price taker",
    "price maker",
)
DEMAND_SUPPLY_KEYWORDS = (
    "demand",
    "supply",
    "substitute",
    "complement",
    "normal good",
    "inferior good",
    "income",
    "preferences",
    "tastes",
    "scarcity",
)
SHIFT_TRAP_KEYWORDS = (
    "movement along",
    "shift vs movement",
    "shift versus movement",
    "quantity demanded",
    "quantity supplied",
)
SUPPLY_KEYWORDS = ("supply", "producer", "cost of production", "costs of production")
DEMAND_KEYWORDS = (
    "demand",
    "consumer",
    "substitute",
    "complement",
    "normal good",
    "inferior good",
    "income",
    "preferences",
    "tastes",
)
FUNDAMENTALS_KEYWORDS = (
    "scarcity",
    "opportunity cost",
    "production possibilit",
    "ppf",
    "factors of production",
    "economic problem",
    "trade-off",
)


@dataclass(frozen=True)
class CategoryScheme:
    """Ordered keyword rules plus the round-robin walk order."""

    name: str
    rules: tuple[tuple[str, tuple[str, ...]], ...]
    walk_order: tuple[str, ...]

    @property
    def categories(self) -> tuple[str, ...]:
        names = [name for name, _ in self.rules]
        return tuple(names) + (OTHER,)

    def classify(self, topic: str, prompt: str) -> str:
        text = f"{topic} {prompt}".lower()
        for category, keywords in self.rules:
            if any(keyword in text for keyword in keywords):
                return category
        return OTHER


LEGACY_SCHEME = CategoryScheme(
    name="legacy",
    rules=(
        ("elasticity", ELASTICITY_KEYWORDS),
        ("intervention", INTERVENTION_KEYWORDS),
        ("equilibrium", EQUILIBRIUM_KEYWORDS),
        ("structure", STRUCTURE_KEYWORDS),
        ("demand/supply", DEMAND_SUPPLY_KEYWORDS),
    ),
    walk_order=("demand/supply", "elasticity", "intervention", "equilibrium", "structure"),
)

EXAM1_SCHEME = CategoryScheme(
    name="exam1",
    rules=(
        ("elasticity", ELASTICITY_KEYWORDS),
        ("intervention", INTERVENTION_KEYWORDS),
        ("equilibrium/signals", EQUILIBRIUM_KEYWORDS + SIGNAL_KEYWORDS),
        ("demand/supply", DEMAND_SUPPLY_KEYWORDS),
    ),
    walk_order=("demand/supply", "elasticity", "intervention", "equilibrium/signals", OTHER),
)

FULL_SIM_SCHEME = CategoryScheme(
    name="full_sim",
    rules=(
        ("elasticity", ELASTICITY_KEYWORDS),
        ("intervention", INTERVENTION_KEYWORDS),
        ("equilibrium", EQUILIBRIUM_KEYWORDS + SIGNAL_KEYWORDS),
        ("supply", SUPPLY_KEYWORDS),
        ("demand", DEMAND_KEYWORDS),
        ("fundamentals", FUNDAMENTALS_KEYWORDS),
    ),
    walk_order=("fundamentals", "demand", "supply", "elasticity", "equilibrium", "intervention"),
)

FULL_SIM2_SCHEME = CategoryScheme(
    name="full_sim2",
    rules=(
        ("shift_trap", SHIFT_TRAP_KEYWORDS),
        ("supply", SUPPLY_KEYWORDS),
        ("demand", DEMAND_KEYWORDS),
        ("fundamentals", FUNDAMENTALS_KEYWORDS),
    ),
    walk_order=("fundamentals", "demand", "supply", "shift_trap"),
)


def categorize_topic(topic: str, prompt: str) -> str:
    return LEGACY_SCHEME.classify(topic, prompt)


def categorize_exam1_topic(topic: str, prompt: str) -> str:
    return EXAM1_SCHEME.classify(topic, prompt)


def categorize_full_sim_topic(topic: str, prompt: str) -> str:
    return FULL_SIM_SCHEME.classify(topic, prompt)


def categorize_full_sim2_topic(topic: str, prompt: str) -> str:
    return FULL_SIM2_SCHEME.classify(topic, prompt)
