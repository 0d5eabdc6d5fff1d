"""
Unit tests for the selection engine.

Every generator must be deterministic for a fixed seed and must never return
duplicate ids (drills excepted, where repeats carry a ::n suffix).
"""

from collections import Counter
from datetime import date

import pytest

from src.bank.loader import parse_bank
from src.bank.models import QuestionType
from src.bank.resolve import extract_base_question_id
from src.core.rng import mulberry32
from src.review.schedule import ReviewEntry
from src.selection import (
    EXAM1_SCHEME,
    FULL_SIM2_SCHEME,
    FULL_SIM_SCHEME,
    drill_weight,
    generate_drill_session,
    generate_exam1_mcq_session,
    generate_exam_session,
    generate_exam_type_session,
    generate_full_sim_exam1,
    generate_full_sim_exam2,
    generate_legacy_set_session,
    generate_review_session,
    pick_balanced,
    pick_capped,
)


def _types(bank, ids):
    by_id = bank.question_map()
    return [by_id[qid].question_type for qid in ids]


def _category_counts(bank, ids, scheme):
    by_id = bank.question_map()
    return Counter(scheme.classify(by_id[qid].topic, by_id[qid].prompt) for qid in ids)


# =============================================================================
# Balanced pickers
# =============================================================================


class TestBalancedPickers:
    """Test the bucketed round-robin pickers."""

    def test_pick_balanced_spreads_categories(self, bank):
        pool = bank.questions_of_type(QuestionType.MCQ_SINGLE)
        picked = pick_balanced(pool, 10, mulberry32(3), EXAM1_SCHEME)
        counts = Counter(EXAM1_SCHEME.classify(q.topic, q.prompt) for q in picked)
        assert len(picked) == 10
        assert len({q.id for q in picked}) == 10
        # five categories, two passes
        assert set(counts.values()) == {2}

    def test_pick_balanced_returns_what_it_can(self, bank):
        pool = bank.questions_of_type(QuestionType.DIAGRAM_LOGIC)
        assert len(pick_balanced(pool, 10, mulberry32(3))) == len(pool)

    def test_pick_capped_respects_cap(self, bank):
        pool = bank.questions_of_type(QuestionType.MCQ_SINGLE)
        result = pick_capped(pool, 10, 2, mulberry32(9), EXAM1_SCHEME)
        assert result.ok
        assert max(_category_counts(bank, result.ids, EXAM1_SCHEME).values()) <= 2

    def test_pick_capped_fails_instead_of_exceeding(self, bank):
        pool = bank.questions_of_type(QuestionType.MCQ_SINGLE)
        result = pick_capped(pool, 6, 1, mulberry32(9), EXAM1_SCHEME)
        assert not result.ok
        assert result.ids == []
        assert "1 per topic category" in result.error


# =============================================================================
# Generic and exam-type sessions
# =============================================================================


class TestGenericSessions:
    """Test the generic and exam-type generators."""

    def test_generic_session_composition(self, bank):
        ids = generate_exam_session(bank, seed=11)
        types = Counter(_types(bank, ids))
        assert len(ids) == 18
        assert len(set(ids)) == 18
        assert types[QuestionType.MCQ_SINGLE] == 10
        assert types[QuestionType.SHORT_ANSWER] == 5
        assert types[QuestionType.SCENARIO] == 2
        assert types[QuestionType.DIAGRAM_LOGIC] == 1

    def test_generic_session_deterministic(self, bank):
        assert generate_exam_session(bank, seed="abc") == generate_exam_session(bank, seed="abc")

    def test_exam_type_mcq(self, bank):
        ids = generate_exam_type_session(bank, "exam1_mcq", seed=4)
        assert len(set(ids)) == 20
        assert set(_types(bank, ids)) == {QuestionType.MCQ_SINGLE}

    def test_exam_type_written(self, bank):
        ids = generate_exam_type_session(bank, "exam2_written", seed=4)
        assert len(set(ids)) == 20
        assert QuestionType.MCQ_SINGLE not in _types(bank, ids)

    def test_exam_type_unknown(self, bank):
        with pytest.raises(ValueError):
            generate_exam_type_session(bank, "essay", seed=4)


class TestExam1McqSession:
    """Test the capped exam 1 generator."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 42, "week-3"])
    def test_twenty_unique_within_cap(self, bank, seed):
        result = generate_exam1_mcq_session(bank, seed=seed)
        assert result.ok
        assert len(set(result.ids)) == 20
        assert max(_category_counts(bank, result.ids, EXAM1_SCHEME).values()) <= 8

    def test_deterministic(self, bank):
        assert generate_exam1_mcq_session(bank, seed=5).ids == generate_exam1_mcq_session(bank, seed=5).ids

    def test_small_pool_is_an_error(self, bank):
        small = bank.model_copy(update={"bank": bank.bank[:10]})
        result = generate_exam1_mcq_session(small, seed=5)
        assert not result.ok
        assert "need 20, have 10" in result.error


# =============================================================================
# Full simulations
# =============================================================================


class TestFullSimExam1:
    """Test full simulated exam 1."""

    @pytest.mark.parametrize("seed", [1, 7, 100, "mock"])
    def test_constraints(self, bank, seed):
        result = generate_full_sim_exam1(bank, seed)
        assert result.ok, result.error
        assert len(set(result.ids)) == 20
        types = Counter(_types(bank, result.ids))
        assert types[QuestionType.MCQ_MULTI] <= 3
        assert set(types) <= {QuestionType.MCQ_SINGLE, QuestionType.MCQ_MULTI}
        assert max(_category_counts(bank, result.ids, FULL_SIM_SCHEME).values()) <= 8

    def test_deterministic(self, bank):
        assert generate_full_sim_exam1(bank, 77).ids == generate_full_sim_exam1(bank, 77).ids

    def test_source_prefixes_filter_pool(self, bank):
        result = generate_full_sim_exam1(bank, 1, source_prefixes=("MCQM-",))
        assert not result.ok
        assert "need 20, have 6" in result.error

    @staticmethod
    def _choice_bank(bank_document, topics):
        questions = []
        for index, (topic, prompt) in enumerate(topics, start=1):
            questions.append(
                {
                    "id": f"MCQ-{index:03d}",
                    "type": "mcq_single",
                    "topic": topic,
                    "points": 1,
                    "prompt": f"{prompt} (item {index})",
                    "options": {"A": "First", "B": "Second"},
                    "answer_key": "A",
                }
            )
        for index in range(1, 5):
            questions.append(
                {
                    "id": f"MCQM-{index:03d}",
                    "type": "mcq_multi",
                    "topic": "Misc",
                    "points": 2,
                    "prompt": f"Select every true statement (item {index})",
                    "options": {"A": "First", "B": "Second", "C": "Third"},
                    "correct_answers": ["A", "B"],
                }
            )
        bank_document.update(bank=questions, exam_sets={}, templates=[])
        return parse_bank(bank_document)

    def test_thin_categories_filled_from_the_rest(self, bank_document):
        themes = [
            ("Demand", "Which factor would increase demand for a normal good?"),
            ("Supply", "Which change lowers costs of production for a firm?"),
            ("Elasticity", "A good with many close substitutes has what elasticity?"),
            ("Government intervention", "What is the effect of a specific tax on sellers?"),
            ("Information", "How do signals reduce adverse selection in markets?"),
            ("Fundamentals", "What is the opportunity cost of choosing leisure?"),
        ]
        topics = [theme for theme in themes for _ in range(3)]
        topics += [("Misc", "Which statement is true?")] * 12
        small_bank = self._choice_bank(bank_document, topics)

        result = generate_full_sim_exam1(small_bank, 9)
        assert result.ok, result.error
        assert len(set(result.ids)) == 20
        counts = _category_counts(small_bank, result.ids, FULL_SIM_SCHEME)
        assert counts["other"] == 2
        assert max(counts.values()) <= 8
        assert Counter(_types(small_bank, result.ids))[QuestionType.MCQ_MULTI] <= 3

    def test_caps_block_a_one_topic_pool(self, bank_document):
        topics = [("Demand", "Which factor would increase demand for a normal good?")] * 20
        topics += [("Supply", "Which change lowers costs of production for a firm?")] * 2
        small_bank = self._choice_bank(bank_document, topics)

        result = generate_full_sim_exam1(small_bank, 9)
        assert not result.ok
        assert "Unable to assemble 20 unique" in result.error


class TestFullSimExam2:
    """Test full simulated exam 2."""

    MINIMUMS = {"fundamentals": 1, "demand": 2, "supply": 2, "shift_trap": 1}

    def test_written_only(self, bank):
        result = generate_full_sim_exam2(bank, 3)
        assert result.ok, result.error
        assert len(set(result.ids)) == 8
        types = _types(bank, result.ids)
        assert types == (
            [QuestionType.SHORT_ANSWER] * 5 + [QuestionType.SCENARIO] * 2 + [QuestionType.DIAGRAM_LOGIC]
        )

    def test_with_mcq_section_first(self, bank):
        result = generate_full_sim_exam2(bank, 3, include_mcq=True)
        assert result.ok, result.error
        assert len(set(result.ids)) == 13
        assert _types(bank, result.ids)[:5] == [QuestionType.MCQ_SINGLE] * 5

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5, 99])
    def test_category_minimums(self, bank, seed):
        result = generate_full_sim_exam2(bank, seed)
        counts = _category_counts(bank, result.ids, FULL_SIM2_SCHEME)
        for category, minimum in self.MINIMUMS.items():
            assert counts[category] >= minimum

    def test_deterministic(self, bank):
        assert generate_full_sim_exam2(bank, 12).ids == generate_full_sim_exam2(bank, 12).ids

    def test_missing_category_is_an_error(self, bank):
        written = [q for q in bank.bank if "trap" not in q.topic.lower() and "analysis" not in q.topic.lower()]
        written = [q for q in written if "price change" not in q.topic.lower()]
        result = generate_full_sim_exam2(bank.model_copy(update={"bank": written}), 1)
        assert not result.ok
        assert "shift_trap" in result.error


# =============================================================================
# Legacy, review and drill
# =============================================================================


class TestLegacySets:
    def test_section_order(self, bank):
        assert generate_legacy_set_session(bank, "A") == [
            "MCQ-001",
            "MCQ-002",
            "MCQ-003",
            "MCQ-004",
            "MCQ-005",
            "SA-001",
            "SA-005",
        ]


class TestReviewSession:
    """Test review session assembly."""

    TODAY = date(2026, 1, 10)

    def _entry(self, qid, topic, due):
        return ReviewEntry(id=qid, topic=topic, stage=0, next_review=due)

    def test_due_first_then_same_topic(self, bank):
        review_map = {
            "MCQ-003": self._entry("MCQ-003", "Demand", date(2026, 1, 9)),
            "MCQ-020": self._entry("MCQ-020", "Elasticity", date(2026, 1, 20)),
        }
        ids = generate_review_session(bank, review_map, self.TODAY, limit=5)
        assert ids == ["MCQ-003", "MCQ-001", "MCQ-002", "MCQ-004", "MCQ-005"]

    def test_backfill_beyond_topic(self, bank):
        review_map = {"MCQ-003": self._entry("MCQ-003", "Demand", date(2026, 1, 9))}
        ids = generate_review_session(bank, review_map, self.TODAY, limit=10)
        assert len(ids) == 10
        assert ids[-2:] == ["MCQ-009", "MCQ-010"]

    def test_stale_ids_skipped(self, bank):
        review_map = {"GONE-1": self._entry("GONE-1", "Demand", date(2026, 1, 1))}
        ids = generate_review_session(bank, review_map, self.TODAY, limit=3)
        assert ids == ["MCQ-001", "MCQ-002", "MCQ-003"]

    def test_empty_map_backfills(self, bank):
        assert len(generate_review_session(bank, {}, self.TODAY)) == 10


class TestDrillSession:
    """Test weighted drills."""

    def test_ten_entries_from_pool(self, bank):
        result = generate_drill_session(bank, "Demand", seed=8)
        assert result.ok
        assert len(result.ids) == 10
        assert len(set(result.ids)) == 10
        by_id = bank.question_map()
        for entry_id in result.ids:
            assert "demand" in by_id[extract_base_question_id(entry_id)].topic.lower()

    def test_repeats_are_suffixed_in_order(self, bank):
        result = generate_drill_session(bank, "Demand", seed=8, count=40)
        seen = Counter()
        for entry_id in result.ids:
            base = extract_base_question_id(entry_id)
            seen[base] += 1
            expected = base if seen[base] == 1 else f"{base}::{seen[base]}"
            assert entry_id == expected

    def test_deterministic(self, bank):
        assert generate_drill_session(bank, "Demand", seed=3).ids == generate_drill_session(bank, "Demand", seed=3).ids

    def test_unknown_pack(self, bank):
        result = generate_drill_session(bank, "astrophysics", seed=3)
        assert not result.ok
        assert "astrophysics" in result.error

    def test_weights(self, bank):
        by_id = bank.question_map()
        # "shift" bonus
        assert drill_weight(by_id["MCQM-001"]) == 3
        # "normal good" bonus
        assert drill_weight(by_id["MCQ-001"]) == 2
        assert drill_weight(by_id["MCQ-041"]) == 1
