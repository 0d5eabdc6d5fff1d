"""
Unit tests for markers.

Tests the marker registry, choice scoring in both exam modes, calculation
table row checks and session aggregation.
"""

import pytest

from src.bank.models import ExamQuestion, MultiChoiceQuestion, QuestionType
from src.core.modes import ExamMode
from src.marking import (
    HANDLERS,
    check_table_rows,
    get_marker,
    mark_question,
    parse_numeric,
    retry_question_ids,
    score_mcq_question,
    score_session,
)


@pytest.fixture
def by_id(bank):
    return bank.question_map()


@pytest.fixture
def three_key_multi():
    return MultiChoiceQuestion(
        id="MCQM-900",
        type="mcq_multi",
        topic="Demand",
        points=6,
        prompt="Select every determinant of demand",
        options={"A": "Income", "B": "Tastes", "C": "Prices of substitutes", "D": "Costs"},
        correct_answers=["A", "B", "C"],
    )


class TestMarkerRegistry:
    """Test registration of markers."""

    def test_every_type_has_a_marker(self):
        assert set(HANDLERS) == set(QuestionType)

    def test_lookup_by_string(self):
        assert get_marker("mcq_single") is HANDLERS[QuestionType.MCQ_SINGLE]
        assert get_marker("MCQ_MULTI") is HANDLERS[QuestionType.MCQ_MULTI]

    def test_unknown_type(self):
        assert get_marker("essay") is None

    def test_written_types_share_a_marker(self):
        assert type(get_marker("scenario")) is type(get_marker("short_answer"))


class TestSingleChoice:
    def test_correct(self, by_id):
        result = score_mcq_question(by_id["MCQ-001"], "B")
        assert result.is_correct
        assert result.points_earned == 1

    def test_wrong(self, by_id):
        result = score_mcq_question(by_id["MCQ-001"], "A")
        assert not result.is_correct
        assert result.points_earned == 0
        assert "B" in result.feedback

    @pytest.mark.parametrize("answer", [None, ["B"], {"curve": "Demand"}])
    def test_wrong_shape_is_unanswered(self, by_id, answer):
        assert not score_mcq_question(by_id["MCQ-001"], answer).is_correct


class TestMultiChoice:
    """Test mode-dependent multi-choice scoring."""

    def test_real_exam_needs_exact_set(self, three_key_multi):
        assert score_mcq_question(three_key_multi, ["C", "A", "B"], ExamMode.REAL_EXAM).points_earned == 6
        partial = score_mcq_question(three_key_multi, ["A", "B"], ExamMode.REAL_EXAM)
        assert partial.points_earned == 0
        assert not partial.is_partial

    def test_practice_proportional_credit(self, three_key_multi):
        result = score_mcq_question(three_key_multi, ["A"], "practice")
        assert result.points_earned == 2
        assert result.is_partial
        assert not result.is_correct

    def test_practice_half_credit(self, by_id):
        six_points = by_id["MCQM-001"].model_copy(update={"points": 6})
        result = score_mcq_question(six_points, ["A"], ExamMode.PRACTICE)
        assert result.points_earned == 3
        assert result.is_partial
        assert not result.is_correct
        assert score_mcq_question(six_points, ["C", "A"], ExamMode.REAL_EXAM).points_earned == 6
        assert score_mcq_question(six_points, ["A"], ExamMode.REAL_EXAM).points_earned == 0

    def test_practice_rounds_to_two_places(self, three_key_multi):
        odd = three_key_multi.model_copy(update={"points": 1})
        assert score_mcq_question(odd, ["A"], ExamMode.PRACTICE).points_earned == 0.33

    def test_practice_rounds_halves_up(self):
        keys = "ABCDEFGH"
        eight_keys = MultiChoiceQuestion(
            id="MCQM-901",
            type="mcq_multi",
            topic="Demand",
            points=5,
            prompt="Select every determinant of demand",
            options={key: f"Option {key}" for key in keys},
            correct_answers=list(keys),
        )
        # 5 x 1/8 = 0.625
        assert score_mcq_question(eight_keys, ["A"], ExamMode.PRACTICE).points_earned == 0.63

    def test_practice_wrong_key_zeroes(self, three_key_multi):
        result = score_mcq_question(three_key_multi, ["A", "B", "D"], ExamMode.PRACTICE)
        assert result.points_earned == 0
        assert not result.is_partial

    def test_practice_empty_selection(self, three_key_multi):
        assert score_mcq_question(three_key_multi, [], ExamMode.PRACTICE).points_earned == 0

    def test_practice_full_set(self, by_id):
        result = score_mcq_question(by_id["MCQM-001"], ["A", "C"], ExamMode.PRACTICE)
        assert result.is_correct
        assert result.points_earned == 2

    def test_non_choice_question_rejected(self, by_id):
        with pytest.raises(TypeError):
            score_mcq_question(by_id["SA-001"], "text")


class TestCalculationTable:
    """Test per-row numeric checking."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("£1,200", 1200.0),
            (" 95 ", 95.0),
            ("$3.50", 3.5),
            (70, 70.0),
            ("", None),
            ("about 70", None),
            (None, None),
            (True, None),
        ],
    )
    def test_parse_numeric(self, raw, expected):
        assert parse_numeric(raw) == expected

    def test_rows_checked_independently(self, by_id):
        rows = check_table_rows(by_id["CALC-001"], {"p5": "120", "p4": "£96", "p3": ""})
        assert rows == {"p5": True, "p4": False, "p3": False}

    def test_marker_reports_rows_without_auto_grading(self, by_id):
        item = ExamQuestion("CALC-001", by_id["CALC-001"])
        result = mark_question(item, {"p5": "120", "p4": "95", "p3": "70"}, ExamMode.REAL_EXAM)
        assert result.is_correct
        assert not result.auto_graded
        assert result.feedback == "3 of 3 rows correct"


class TestWrittenMarker:
    def test_self_marked(self, by_id):
        result = mark_question(ExamQuestion("SA-001", by_id["SA-001"]), "An answer", "practice")
        assert not result.auto_graded
        assert result.points_earned == 0
        assert "Self-mark against" in result.feedback


class TestSessionScore:
    """Test aggregation over a session."""

    @pytest.fixture
    def questions(self, by_id):
        return [
            ExamQuestion("MCQ-001", by_id["MCQ-001"]),
            ExamQuestion("MCQ-001::2", by_id["MCQ-001"]),
            ExamQuestion("MCQM-001", by_id["MCQM-001"]),
            ExamQuestion("SA-001", by_id["SA-001"]),
            ExamQuestion("CALC-001", by_id["CALC-001"]),
        ]

    def test_only_choice_questions_count(self, questions):
        answers = {"MCQ-001": "B", "MCQ-001::2": "C", "MCQM-001": ["A", "C"], "SA-001": "text"}
        score = score_session(questions, answers, ExamMode.REAL_EXAM)
        assert score.total == 3
        assert score.correct == 2
        assert score.points_earned == 3
        assert score.points_available == 4
        assert score.percentage == 75.0
        assert set(score.results) == {"MCQ-001", "MCQ-001::2", "MCQM-001"}

    def test_practice_partial_credit_in_totals(self, questions):
        score = score_session(questions, {"MCQM-001": ["A"]}, ExamMode.PRACTICE)
        assert score.points_earned == 1
        assert score.correct == 0

    def test_empty_session(self):
        score = score_session([], {})
        assert score.total == 0
        assert score.percentage == 0.0

    def test_retry_ids(self, questions):
        answers = {"MCQ-001": "B", "MCQM-001": ["A"]}
        assert retry_question_ids(questions, answers, ExamMode.PRACTICE) == ["MCQ-001::2", "MCQM-001"]
