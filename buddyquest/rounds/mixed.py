"""
Mixed challenge rounds.

A mixed round holds questions of different answer shapes. Each question is
presented by the interaction for its type, while the countdown, progress,
XP, second chance and hints stay shared at round level.
"""

from collections.abc import Sequence

from buddyquest.config import EngineConfig
from buddyquest.questions import Question, QuestionType
from buddyquest.rounds.base import ChallengeRound, QuestionInteraction
from buddyquest.rounds.matching import MatchingInteraction, MatchingRound
from buddyquest.rounds.multiple_choice import MultipleChoiceInteraction, MultipleChoiceRound
from buddyquest.rounds.ordering import OrderingInteraction, OrderingRound
from buddyquest.rounds.true_false import TrueFalseInteraction, TrueFalseRound

# Interaction used for each question type
INTERACTIONS: dict[QuestionType, type[QuestionInteraction]] = {
    QuestionType.MULTIPLE_CHOICE: MultipleChoiceInteraction,
    QuestionType.TRUE_FALSE: TrueFalseInteraction,
    QuestionType.ORDERING: OrderingInteraction,
    QuestionType.MATCHING: MatchingInteraction,
}

# Single-type round for each question type
ROUNDS: dict[QuestionType, type[ChallengeRound]] = {
    QuestionType.MULTIPLE_CHOICE: MultipleChoiceRound,
    QuestionType.TRUE_FALSE: TrueFalseRound,
    QuestionType.ORDERING: OrderingRound,
    QuestionType.MATCHING: MatchingRound,
}


class MixedRound(ChallengeRound):
    """A round whose questions may have any answer shape."""

    def _interaction_for(self, question: Question) -> QuestionInteraction:
        interaction_class = INTERACTIONS.get(question.question_type)
        if interaction_class is None:
            raise TypeError(f"No interaction for {question.question_type.value} questions")
        return interaction_class(question)


def build_round(
    questions: Sequence[Question],
    has_second_chance: bool = False,
    show_hints: bool = False,
    config: EngineConfig | None = None,
) -> ChallengeRound:
    """
    Create the round that fits a list of questions.

    A list of a single type gets that type's round; anything else gets a
    MixedRound.
    """
    question_types = {question.question_type for question in questions}
    if len(question_types) == 1:
        round_class = ROUNDS[question_types.pop()]
    else:
        round_class = MixedRound
    return round_class(
        questions,
        has_second_chance=has_second_chance,
        show_hints=show_hints,
        config=config,
    )
