"""
Generated-content providers for the question bank.

A provider supplies new questions for replenishment. The bank validates
whatever a provider returns, so a provider only has to honour the Question
schema; it may return fewer questions than requested, or none.
"""

import logging
from typing import Protocol

from buddyquest.math_questions import generate_question_set
from buddyquest.questions import DifficultyTier, GradeLevel, Question, Subject

logger = logging.getLogger(__name__)


class QuestionProvider(Protocol):
    """Source of freshly generated questions."""

    def generate(
        self,
        subject: Subject,
        difficulty: DifficultyTier,
        grade_level: GradeLevel,
        count: int,
        exclude_ids: set[str],
    ) -> list[Question]:
        """
        Produce up to count new questions.

        Args:
            subject: Subject the questions belong to.
            difficulty: Tier the questions should be tagged with.
            grade_level: Grade of the learner.
            count: Maximum number of questions wanted.
            exclude_ids: IDs already in the learner's bank.

        Returns:
            A list of questions, possibly shorter than count.
        """
        ...


class ArithmeticQuestionProvider:
    """Procedural provider for math; produces nothing for other subjects."""

    def __init__(self, rng=None):
        self._rng = rng

    def generate(
        self,
        subject: Subject,
        difficulty: DifficultyTier,
        grade_level: GradeLevel,
        count: int,
        exclude_ids: set[str],
    ) -> list[Question]:
        if subject != Subject.MATH or count <= 0:
            return []
        questions = generate_question_set(
            count, tier=difficulty, exclude_ids=exclude_ids, rng=self._rng
        )
        logger.debug(f"Generated {len(questions)} arithmetic questions at {difficulty.name}")
        return questions
