"""
Data-only events emitted by challenge rounds.

Rounds never touch a presentation layer. build(), handle_input() and
update() return lists of these events, and the host decides how to show
them.
"""

from dataclasses import dataclass

from buddyquest.questions import Question


@dataclass(frozen=True)
class RoundResult:
    """Aggregate outcome of a finished round."""

    is_correct: bool
    xp_awarded: int
    correct_count: int
    total: int
    feedback: str
    selected_answer: str  # e.g. "3/5"
    correct_answer: str  # e.g. "5/5"
    per_question_results: tuple[bool, ...]
    per_question_xp: tuple[int, ...]


@dataclass(frozen=True)
class CorrectionInfo:
    """Review data for one answered question."""

    question: Question
    player_answer: str
    correct_answer: str
    explanation: str
    is_correct: bool


@dataclass(frozen=True)
class QuestionStarted:
    index: int
    total: int
    question: Question
    time_limit: float


@dataclass(frozen=True)
class HintOffered:
    index: int
    text: str


@dataclass(frozen=True)
class TimerTicked:
    index: int
    remaining: float
    fraction: float  # remaining / time limit, 1.0 at the start


@dataclass(frozen=True)
class AnswerGraded:
    index: int
    is_correct: bool
    xp_awarded: int
    # Per answer slot: True where the player's answer is right
    position_correct: tuple[bool, ...]
    timed_out: bool = False


@dataclass(frozen=True)
class SecondChanceUsed:
    index: int


@dataclass(frozen=True)
class RoundCompleted:
    result: RoundResult


RoundEvent = QuestionStarted | HintOffered | TimerTicked | AnswerGraded | SecondChanceUsed | RoundCompleted
