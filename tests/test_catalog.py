"""Tests for the bundled static question catalog."""

import pytest

from buddyquest.catalog import static_questions, static_questions_for
from buddyquest.config import BANK_MINIMUM_FOR_QUIZ
from buddyquest.questions import DifficultyTier, QuestionType, Subject, normalize_text


class TestStaticCatalog:
    """Every subject must be playable from the catalog alone."""

    @pytest.mark.parametrize("subject", list(Subject))
    @pytest.mark.parametrize("tier", list(DifficultyTier))
    def test_enough_multiple_choice_per_tier(self, subject, tier):
        questions = static_questions_for(subject, tier, QuestionType.MULTIPLE_CHOICE)

        assert len(questions) >= BANK_MINIMUM_FOR_QUIZ

    @pytest.mark.parametrize("subject", list(Subject))
    def test_all_questions_validate(self, subject):
        for question in static_questions(subject):
            question.validate()
            assert question.subject == subject

    @pytest.mark.parametrize("subject", list(Subject))
    def test_ids_and_texts_unique(self, subject):
        questions = static_questions(subject)

        assert len({q.id for q in questions}) == len(questions)
        assert len({normalize_text(q.text) for q in questions}) == len(questions)

    @pytest.mark.parametrize("subject", list(Subject))
    def test_every_subject_has_other_question_types(self, subject):
        types = {q.question_type for q in static_questions(subject)}

        assert types == set(QuestionType)

    def test_catalog_is_deterministic(self):
        """Generated math content comes from a fixed seed."""
        from buddyquest import catalog

        assert [q.id for q in catalog._math_multiple_choice()] == [
            q.id for q in catalog._math_multiple_choice()
        ]

    def test_static_questions_returns_a_copy(self):
        static_questions(Subject.SCIENCE).clear()

        assert static_questions(Subject.SCIENCE)

    def test_filter_by_tier_and_type(self):
        questions = static_questions_for(
            Subject.LANGUAGE_ARTS, DifficultyTier.BEGINNER, QuestionType.TRUE_FALSE
        )

        assert questions
        assert all(q.difficulty == DifficultyTier.BEGINNER for q in questions)
        assert all(q.question_type == QuestionType.TRUE_FALSE for q in questions)
