"""Challenge rounds for the BuddyQuest learning engine."""

from buddyquest.rounds.base import (
    Action,
    ChallengeRound,
    Grade,
    InputState,
    QuestionInteraction,
    question_xp,
)
from buddyquest.rounds.events import (
    AnswerGraded,
    CorrectionInfo,
    HintOffered,
    QuestionStarted,
    RoundCompleted,
    RoundEvent,
    RoundResult,
    SecondChanceUsed,
    TimerTicked,
)
from buddyquest.rounds.matching import MatchingInteraction, MatchingRound, grade_matching
from buddyquest.rounds.mixed import MixedRound, build_round
from buddyquest.rounds.multiple_choice import MultipleChoiceInteraction, MultipleChoiceRound
from buddyquest.rounds.ordering import (
    OrderingInteraction,
    OrderingRound,
    OrderingState,
    grade_ordering,
)
from buddyquest.rounds.true_false import TrueFalseInteraction, TrueFalseRound

__all__ = [
    "Action",
    "AnswerGraded",
    "ChallengeRound",
    "CorrectionInfo",
    "Grade",
    "HintOffered",
    "InputState",
    "MatchingInteraction",
    "MatchingRound",
    "MixedRound",
    "MultipleChoiceInteraction",
    "MultipleChoiceRound",
    "OrderingInteraction",
    "OrderingRound",
    "OrderingState",
    "QuestionInteraction",
    "QuestionStarted",
    "RoundCompleted",
    "RoundEvent",
    "RoundResult",
    "SecondChanceUsed",
    "TimerTicked",
    "TrueFalseInteraction",
    "TrueFalseRound",
    "build_round",
    "grade_matching",
    "grade_ordering",
    "question_xp",
]
