"""
Template-based question generation.

A template plus a seed always yields the same concrete question, so a
session that references a template id can regenerate its instance on every
reload instead of persisting it. Nothing here is cached.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from src.core.rng import hash_string_to_seed, mulberry32, pick_int
from src.core.rounding import round_half_up

from .models import PedMidpointTemplate, WrittenQuestion

PED_MARK_SCHEME = [
    "Correct midpoint PED calculation",
    "Correct sign and magnitude",
    "Correct interpretation (elastic/inelastic/unit elastic)",
]


class GeneratedValues(BaseModel):
    model_config = ConfigDict(frozen=True)

    p1: int
    p2: int
    q1: int
    q2: int
    ped: float
    interpretation: str


class GeneratedPedQuestion(WrittenQuestion):
    """Short-answer question materialised from a ped_midpoint template."""

    template_id: str
    generated: GeneratedValues


def interpret_ped(value: float) -> str:
    magnitude = abs(value)
    if abs(magnitude - 1) <= 0.05:
        return "Unit elastic"
    return "Elastic" if magnitude > 1 else "Inelastic"


def _distinct_pair(rng, low: int, high: int) -> tuple[int, int]:
    first = pick_int(rng, low, high)
    second = pick_int(rng, low, high)
    if first == second:
        second = first - 1 if first == high else first + 1
    return first, second


def generate_ped_midpoint_question(
    template: PedMidpointTemplate,
    seed: int,
) -> GeneratedPedQuestion:
    """
    Materialise a midpoint-elasticity question.

    Prices rise (p1 < p2) and quantities fall (q1 > q2), so the PED is
    negative; it is rounded half-up to two decimals before interpretation.

    Args:
        template: The ped_midpoint template
        seed: Session seed

    Returns:
        GeneratedPedQuestion with id "<template id>-<seed>"
    """
    rng = mulberry32(hash_string_to_seed(f"{seed}-{template.id}"))
    ranges = template.ranges
    price_low, price_high = sorted((ranges.price_min, ranges.price_max))
    quantity_low, quantity_high = sorted((ranges.quantity_min, ranges.quantity_max))

    p1, p2 = sorted(_distinct_pair(rng, price_low, price_high))
    q2, q1 = sorted(_distinct_pair(rng, quantity_low, quantity_high))

    percent_delta_q = (q2 - q1) / ((q1 + q2) / 2)
    percent_delta_p = (p2 - p1) / ((p1 + p2) / 2)
    ped = round_half_up(percent_delta_q / percent_delta_p)
    interpretation = interpret_ped(ped)

    prompt = template.prompt
    for placeholder, value in (("{p1}", p1), ("{p2}", p2), ("{q1}", q1), ("{q2}", q2)):
        prompt = prompt.replace(placeholder, str(value), 1)

    return GeneratedPedQuestion(
        id=f"{template.id}-{seed}",
        type="short_answer",
        topic=template.topic,
        points=template.points,
        prompt=prompt,
        mark_scheme=list(PED_MARK_SCHEME),
        model_answer=f"Midpoint PED = {ped}. Interpretation: {interpretation}.",
        template_id=template.id,
        generated=GeneratedValues(
            p1=p1, p2=p2, q1=q1, q2=q2, ped=ped, interpretation=interpretation
        ),
    )
