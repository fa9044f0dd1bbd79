"""Unit tests for the question model."""

import pytest

from buddyquest.errors import QuestionValidationError
from buddyquest.questions import (
    DifficultyTier,
    GradeLevel,
    Matching,
    MultipleChoice,
    Ordering,
    Question,
    QuestionType,
    Subject,
    TrueFalse,
    normalize_text,
    payload_from_dict,
)


class TestEnums:
    """Tests for subject and tier enums."""

    def test_subject_display_names(self):
        assert Subject.LANGUAGE_ARTS.display_name == "Language Arts"
        assert Subject.SOCIAL.display_name == "Social Skills"

    def test_tiers_are_ordered(self):
        assert (
            DifficultyTier.BEGINNER
            < DifficultyTier.EASY
            < DifficultyTier.MEDIUM
            < DifficultyTier.HARD
            < DifficultyTier.ADVANCED
        )

    def test_next_and_previous_clamp(self):
        assert DifficultyTier.EASY.next == DifficultyTier.MEDIUM
        assert DifficultyTier.EASY.previous == DifficultyTier.BEGINNER
        assert DifficultyTier.ADVANCED.next == DifficultyTier.ADVANCED
        assert DifficultyTier.BEGINNER.previous == DifficultyTier.BEGINNER


class TestValidation:
    """Tests for Question.validate."""

    def test_valid_multiple_choice(self, make_mc):
        make_mc().validate()

    def test_multiple_choice_needs_four_options(self, make_mc):
        question = make_mc(options=("A", "B", "C"))

        with pytest.raises(QuestionValidationError, match="4 options"):
            question.validate()

    def test_multiple_choice_options_must_be_distinct(self, make_mc):
        question = make_mc(options=("Cat", "cat ", "Dog", "Bird"))

        with pytest.raises(QuestionValidationError, match="distinct"):
            question.validate()

    def test_multiple_choice_index_in_range(self, make_mc):
        question = make_mc()
        broken = Question(
            id=question.id,
            text=question.text,
            payload=MultipleChoice(options=question.payload.options, correct_index=4),
            explanation="",
            subject=question.subject,
            difficulty=question.difficulty,
        )

        with pytest.raises(QuestionValidationError, match="out of range"):
            broken.validate()

    def test_empty_text_rejected(self, make_mc):
        question = make_mc(text="   ")

        with pytest.raises(QuestionValidationError, match="no text"):
            question.validate()

    def test_ordering_needs_permutation(self):
        payload = Ordering(items=("a", "b", "c"), correct_order=(0, 0, 2))

        with pytest.raises(QuestionValidationError, match="permutation"):
            payload.validate()

    def test_ordering_needs_two_items(self):
        with pytest.raises(QuestionValidationError):
            Ordering(items=("a",), correct_order=(0,)).validate()

    def test_matching_columns_same_length(self):
        payload = Matching(left_items=("a", "b"), right_items=("1", "2", "3"), correct_mapping=(0, 1))

        with pytest.raises(QuestionValidationError, match="same length"):
            payload.validate()

    def test_matching_mapping_is_bijection(self):
        payload = Matching(left_items=("a", "b"), right_items=("1", "2"), correct_mapping=(1, 1))

        with pytest.raises(QuestionValidationError, match="exactly once"):
            payload.validate()

    def test_validation_error_is_value_error(self):
        assert issubclass(QuestionValidationError, ValueError)


class TestCorrectAnswerText:
    """Tests for rendering correct answers."""

    def test_multiple_choice(self, make_mc):
        assert make_mc(correct_index=2).correct_answer_text == "Gamma"

    def test_true_false(self, make_tf):
        assert make_tf(correct_answer=False).correct_answer_text == "False"

    def test_ordering(self, ordering_question):
        assert ordering_question.correct_answer_text == "apple, banana, cherry, date"

    def test_matching(self, matching_question):
        assert matching_question.correct_answer_text == "3×4→12, 7+8→15"


class TestSerialization:
    """Tests for dictionary serialization."""

    def test_payload_is_tagged(self, ordering_question):
        data = ordering_question.to_dict()

        assert data["payload"]["type"] == "ordering"
        assert data["subject"] == "language_arts"
        assert data["difficulty"] == 2

    @pytest.mark.parametrize(
        "payload",
        [
            MultipleChoice(options=("1", "2", "3", "4"), correct_index=3),
            TrueFalse(correct_answer=False),
            Ordering(items=("x", "y"), correct_order=(1, 0)),
            Matching(left_items=("a", "b"), right_items=("1", "2"), correct_mapping=(1, 0)),
        ],
    )
    def test_question_round_trip(self, payload):
        question = Question(
            id="q",
            text="Text",
            payload=payload,
            explanation="Why.",
            subject=Subject.SCIENCE,
            difficulty=DifficultyTier.HARD,
            grade_level=GradeLevel.FIFTH,
        )

        assert Question.from_dict(question.to_dict()) == question

    def test_unknown_payload_type(self):
        with pytest.raises(ValueError):
            payload_from_dict({"type": "essay"})

    def test_missing_payload_type(self):
        with pytest.raises(ValueError, match="type"):
            payload_from_dict({"options": []})

    def test_question_type_tags(self):
        assert QuestionType.MULTIPLE_CHOICE.value == "multipleChoice"
        assert QuestionType.TRUE_FALSE.value == "trueFalse"


class TestNormalizeText:
    def test_case_and_whitespace(self):
        assert normalize_text("  What IS\t2 +  2? ") == "what is 2 + 2?"
