"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.

The fixture bank is built programmatically so every selection mode has a
pool large enough to succeed, with topic/prompt wording chosen so each
question lands in exactly the category its theme suggests.
"""
import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.bank.loader import parse_bank  # noqa: E402
from src.storage.kv import InMemoryStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# =============================================================================
# Fixture bank
# =============================================================================

SINGLE_THEMES = [
    ("Demand", "Which factor would increase demand for a normal good?"),
    ("Supply", "Which change lowers costs of production for a firm?"),
    ("Elasticity", "A good with many close substitutes has what elasticity?"),
    ("Government intervention", "What is the effect of a specific tax on sellers?"),
    ("Information", "How do signals reduce adverse selection in markets?"),
    ("Fundamentals", "What is the opportunity cost of choosing leisure?"),
]

SHORT_ANSWER_THEMES = [
    (4, "Scarcity and choice", "Explain the opportunity cost of a student's choice"),
    (4, "Demand", "Explain why a rise in consumer incomes affects a normal good"),
    (4, "Supply", "Explain how lower costs of production affect a firm"),
    (3, "Demand analysis", "Distinguish a change in demand from a change in quantity demanded"),
]

SCENARIO_THEMES = [
    (2, "Supply scenario", "A drought hits wheat farmers; analyse the impact on producers"),
    (2, "Demand scenario", "A celebrity endorsement changes consumer tastes; analyse the market"),
    (2, "Price change scenario", "A price rise causes a movement along the demand curve; explain"),
]

DIAGRAM_THEMES = [
    (2, "Demand diagram", "Show the effect of higher consumer income on the market"),
    (2, "Diagram trap", "Show a movement along the supply curve after a price change"),
]


def _single(index: int, topic: str, prompt: str) -> dict:
    return {
        "id": f"MCQ-{index:03d}",
        "type": "mcq_single",
        "topic": topic,
        "points": 1,
        "prompt": f"{prompt} (item {index})",
        "options": {"A": "First", "B": "Second", "C": "Third", "D": "Fourth"},
        "answer_key": "B",
    }


def _written(prefix: str, qtype: str, index: int, topic: str, prompt: str) -> dict:
    return {
        "id": f"{prefix}-{index:03d}",
        "type": qtype,
        "topic": topic,
        "points": 4,
        "prompt": f"{prompt} (item {index})",
        "mark_scheme": ["Identifies the relevant concept", "Applies it to the context"],
        "model_answer": "A model answer.",
    }


def build_bank_document() -> dict:
    """Raw bank document large enough for every selection mode."""
    questions = []

    index = 1
    for topic, prompt in SINGLE_THEMES:
        for _ in range(8):
            questions.append(_single(index, topic, prompt))
            index += 1

    for i in range(1, 7):
        questions.append(
            {
                "id": f"MCQM-{i:03d}",
                "type": "mcq_multi",
                "topic": "Demand and supply",
                "points": 2,
                "prompt": f"Select all factors that shift market demand (item {i})",
                "options": {"A": "Income", "B": "Own price", "C": "Tastes", "D": "Costs"},
                "correct_answers": ["A", "C"],
            }
        )

    for prefix, qtype, themes in (
        ("SA", "short_answer", SHORT_ANSWER_THEMES),
        ("SC", "scenario", SCENARIO_THEMES),
        ("DL", "diagram_logic", DIAGRAM_THEMES),
    ):
        index = 1
        for count, topic, prompt in themes:
            for _ in range(count):
                questions.append(_written(prefix, qtype, index, topic, prompt))
                index += 1

    questions.append(
        {
            "id": "CALC-001",
            "type": "calculation_table",
            "topic": "Market supply",
            "points": 3,
            "prompt": "Complete the market supply schedule",
            "mark_scheme": ["Adds individual supplies at each price"],
            "model_answer": "Sum the firms' quantities at each price.",
            "expected": {"p5": 120, "p4": 95, "p3": 70},
            "row_labels": {"p5": "£5", "p4": "£4", "p3": "£3"},
        }
    )

    return {
        "version": "1.0",
        "module": "Introductory Economics",
        "assessment": "Mock exam",
        "duration_minutes": 50,
        "grading": {"total_points": 100},
        "question_types": [
            "mcq_single",
            "mcq_multi",
            "short_answer",
            "scenario",
            "diagram_logic",
            "calculation_table",
        ],
        "bank": questions,
        "exam_sets": {
            "A": {
                "duration_minutes": 50,
                "target_points": 13,
                "sections": [
                    {"name": "MCQ", "question_ids": [f"MCQ-{i:03d}" for i in range(1, 6)], "points_each": 1},
                    {"name": "Written", "question_ids": ["SA-001", "SA-005"]},
                ],
            },
            "B": {
                "duration_minutes": 40,
                "target_points": 9,
                "sections": [
                    {"name": "MCQ", "question_ids": ["MCQ-009", "MCQ-017", "MCQ-025"]},
                    {"name": "Diagram", "question_ids": ["DL-001"]},
                    {"name": "Table", "question_ids": ["CALC-001"]},
                ],
            },
            "C": {
                "duration_minutes": 30,
                "target_points": 8,
                "sections": [
                    {"name": "MCQ", "question_ids": ["MCQ-010"]},
                    {"name": "Calculation", "question_ids": ["TPL-PED-001"]},
                    {"name": "Written", "question_ids": ["SC-001"]},
                ],
            },
        },
        "templates": [
            {
                "id": "TPL-PED-001",
                "template": "ped_midpoint",
                "topic": "Price elasticity of demand",
                "points": 4,
                "prompt": "Price rises from £{p1} to £{p2} and quantity falls from {q1} to {q2}. Calculate the midpoint PED.",
                "ranges": {"priceMin": 4, "priceMax": 12, "quantityMin": 60, "quantityMax": 140},
            }
        ],
    }


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def bank_document():
    """Fresh raw bank document (safe to mutate)."""
    return build_bank_document()


@pytest.fixture(scope="session")
def bank():
    """Parsed fixture bank."""
    return parse_bank(build_bank_document())


@pytest.fixture
def bank_file(tmp_path, bank_document):
    """Fixture bank written to disk."""
    path = tmp_path / "bank.json"
    path.write_text(json.dumps(bank_document), encoding="utf-8")
    return path


@pytest.fixture
def kv_store():
    """Empty in-memory key-value store."""
    return InMemoryStore()


class FakeClock:
    """Manually advanced clock for session timing tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 10, 9, 0, 0, tzinfo=timezone.utc))
