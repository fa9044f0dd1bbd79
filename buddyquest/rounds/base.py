"""
Shared machinery for challenge rounds.

A round presents a fixed list of questions one at a time. It is driven
purely by the host: handle_input() for abstract input actions and
update(delta_time) once per tick. Timers and feedback pauses are
accumulated time, so a round is deterministic and can be discarded at any
moment.

Per-question interaction (moving a selection, grabbing ordering items,
pairing matching items) lives in QuestionInteraction subclasses; the round
owns everything shared across questions: progress, the countdown, the
feedback pause, XP, the second chance and hints.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from buddyquest import data
from buddyquest.config import (
    TIME_BONUS_HIGH_THRESHOLD,
    TIME_BONUS_HIGH_XP,
    TIME_BONUS_LOW_THRESHOLD,
    TIME_BONUS_LOW_XP,
    EngineConfig,
)
from buddyquest.errors import InvalidTransitionError
from buddyquest.questions import Question, QuestionType
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

logger = logging.getLogger(__name__)


class Action(Enum):
    """Abstract input actions, independent of the input device."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    INTERACT = "interact"
    CONFIRM = "confirm"
    CANCEL = "cancel"


@dataclass(frozen=True)
class InputState:
    """Actions newly pressed during one tick."""

    pressed: frozenset[Action] = frozenset()

    @classmethod
    def of(cls, *actions: Action) -> "InputState":
        return cls(frozenset(actions))

    def is_pressed(self, action: Action) -> bool:
        return action in self.pressed

    @property
    def is_select(self) -> bool:
        """Interact and confirm both select."""
        return Action.INTERACT in self.pressed or Action.CONFIRM in self.pressed


@dataclass(frozen=True)
class Grade:
    """Grading of one submitted answer."""

    is_correct: bool
    position_correct: tuple[bool, ...]


class QuestionInteraction(ABC):
    """
    Interaction state for a single question.

    Subclasses implement one answer shape. A fresh interaction is created
    whenever a question is shown.
    """

    question_type: ClassVar[QuestionType]
    timer_seconds: ClassVar[float]
    # (high, low) seconds remaining for the time bonus
    time_bonus_thresholds: ClassVar[tuple[float, float]] = (
        TIME_BONUS_HIGH_THRESHOLD,
        TIME_BONUS_LOW_THRESHOLD,
    )

    def __init__(self, question: Question):
        if question.question_type != self.question_type:
            raise TypeError(
                f"{type(self).__name__} cannot present a {question.question_type.value} question"
            )
        self.question = question
        self.payload = question.payload

    @abstractmethod
    def handle_input(self, input_state: InputState) -> bool:
        """
        Apply one tick of input.

        Returns:
            True if the player submitted the answer.
        """

    @abstractmethod
    def grade(self) -> Grade:
        """Grade the current answer."""

    @abstractmethod
    def answer_snapshot(self):
        """An immutable copy of the current answer."""

    @abstractmethod
    def describe_answer(self, snapshot) -> str:
        """Render a snapshot for review screens."""

    @abstractmethod
    def hint(self) -> str:
        """A hint derived from the correct answer."""

    def reopen(self) -> None:
        """Prepare the question for a retry after a second chance."""


def question_xp(
    is_correct: bool,
    remaining: float,
    config: EngineConfig,
    thresholds: tuple[float, float] = (TIME_BONUS_HIGH_THRESHOLD, TIME_BONUS_LOW_THRESHOLD),
) -> int:
    """XP for one answer: base XP plus a time bonus for correct answers."""
    if not is_correct:
        return config.xp_wrong
    high, low = thresholds
    bonus = 0
    if remaining > high:
        bonus = TIME_BONUS_HIGH_XP
    elif remaining > low:
        bonus = TIME_BONUS_LOW_XP
    return config.xp_correct + bonus


class ChallengeRound:
    """
    A timed round of questions.

    Subclasses choose the interaction for each question, either a single
    interaction_class or a per-question dispatch.
    """

    interaction_class: ClassVar[type[QuestionInteraction] | None] = None

    def __init__(
        self,
        questions: Sequence[Question],
        has_second_chance: bool = False,
        show_hints: bool = False,
        config: EngineConfig | None = None,
    ):
        """
        Initialize the round.

        Args:
            questions: The questions of the round, in presentation order.
            has_second_chance: Whether the player may retry one wrong answer.
            show_hints: Whether a hint is offered at the start of each question.
            config: XP values, feedback pause and strictness.

        Raises:
            ValueError: If questions is empty.
            TypeError: If a question cannot be presented by this round.
        """
        if not questions:
            raise ValueError("A round needs at least one question")

        self._questions = tuple(questions)
        self._config = config or EngineConfig()
        self._show_hints = show_hints
        self._second_chance_available = has_second_chance

        # Fail early on questions this round cannot present
        for question in self._questions:
            self._interaction_for(question)

        self._index = 0
        self._results: list[bool] = []
        self._xp: list[int] = []
        self._answers: list = []

        self._interaction: QuestionInteraction | None = None
        self._time_limit = 0.0
        self._remaining = 0.0
        self._timer_active = False
        self._in_feedback = False
        self._feedback_elapsed = 0.0

        self._built = False
        self._complete = False

    def _interaction_for(self, question: Question) -> QuestionInteraction:
        if self.interaction_class is None:
            raise TypeError(f"{type(self).__name__} does not define an interaction")
        return self.interaction_class(question)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def all_round_questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_question(self) -> Question | None:
        if self._complete or self._index >= len(self._questions):
            return None
        return self._questions[self._index]

    @property
    def interaction(self) -> QuestionInteraction | None:
        """Interaction state of the question on screen."""
        return self._interaction

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def is_showing_feedback(self) -> bool:
        return self._in_feedback

    @property
    def remaining_time(self) -> float:
        return self._remaining

    @property
    def time_fraction(self) -> float:
        if self._time_limit <= 0:
            return 0.0
        return self._remaining / self._time_limit

    @property
    def second_chance_available(self) -> bool:
        return self._second_chance_available

    @property
    def per_question_results(self) -> tuple[bool, ...]:
        return tuple(self._results)

    @property
    def per_question_xp(self) -> tuple[int, ...]:
        return tuple(self._xp)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def build(self) -> list[RoundEvent]:
        """Start the round with its first question."""
        if self._built:
            return []
        self._built = True
        return self._start_question()

    def handle_input(self, input_state: InputState) -> list[RoundEvent]:
        """Forward input to the current question. Ignored during feedback."""
        if not self._built or self._complete or self._in_feedback or not self._timer_active:
            return []
        if self._interaction.handle_input(input_state):
            return self._submit(timed_out=False)
        return []

    def update(self, delta_time: float) -> list[RoundEvent]:
        """Advance timers by delta_time seconds."""
        if not self._built or self._complete:
            return []

        if self._in_feedback:
            self._feedback_elapsed += delta_time
            if self._feedback_elapsed < self._config.feedback_pause:
                return []
            self._in_feedback = False
            self._index += 1
            if self._index >= len(self._questions):
                self._complete = True
                self._interaction = None
                return [RoundCompleted(result=self.build_aggregate_result())]
            return self._start_question()

        if not self._timer_active:
            return []

        self._remaining -= delta_time
        if self._remaining <= 0:
            self._remaining = 0.0
            events: list[RoundEvent] = [TimerTicked(self._index, 0.0, 0.0)]
            events.extend(self._submit(timed_out=True))
            return events
        return [TimerTicked(self._index, self._remaining, self.time_fraction)]

    def teardown(self) -> None:
        """Discard per-question state. The round cannot be resumed."""
        self._interaction = None
        self._timer_active = False
        self._in_feedback = False
        self._built = True

    def _start_question(self) -> list[RoundEvent]:
        question = self._questions[self._index]
        self._interaction = self._interaction_for(question)
        self._time_limit = self._interaction.timer_seconds
        self._remaining = self._time_limit
        self._timer_active = True
        self._feedback_elapsed = 0.0

        events: list[RoundEvent] = [
            QuestionStarted(self._index, len(self._questions), question, self._time_limit)
        ]
        if self._show_hints:
            events.append(HintOffered(self._index, self._interaction.hint()))
        return events

    def _submit(self, timed_out: bool) -> list[RoundEvent]:
        grade = self._interaction.grade()

        # A second chance intercepts the first wrong answer the player submits
        if not grade.is_correct and not timed_out and self._second_chance_available:
            self._second_chance_available = False
            self._interaction.reopen()
            logger.debug(f"Second chance used on question {self._index}")
            return [SecondChanceUsed(self._index)]

        self._timer_active = False
        xp = question_xp(
            grade.is_correct,
            self._remaining,
            self._config,
            self._interaction.time_bonus_thresholds,
        )
        self._results.append(grade.is_correct)
        self._xp.append(xp)
        self._answers.append(self._interaction.answer_snapshot())

        self._in_feedback = True
        self._feedback_elapsed = 0.0
        return [AnswerGraded(self._index, grade.is_correct, xp, grade.position_correct, timed_out)]

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def build_aggregate_result(self) -> RoundResult:
        """
        Summarize the round.

        Questions without a recorded answer count as wrong with no XP.

        Raises:
            InvalidTransitionError: In strict mode, if some questions have
                                    no recorded answer.
        """
        total = len(self._questions)
        results = list(self._results)
        xp = list(self._xp)

        if len(results) < total:
            message = f"Round graded with {len(results)} of {total} answers recorded"
            if self._config.strict:
                raise InvalidTransitionError(message)
            logger.warning(message)
            missing = total - len(results)
            results.extend([False] * missing)
            xp.extend([0] * missing)

        correct = sum(results)
        return RoundResult(
            is_correct=correct * 2 > total,
            xp_awarded=sum(xp),
            correct_count=correct,
            total=total,
            feedback=data.ROUND_TALLY.format(correct=correct, total=total),
            selected_answer=data.ROUND_SCORE.format(correct=correct, total=total),
            correct_answer=data.ROUND_SCORE.format(correct=total, total=total),
            per_question_results=tuple(results),
            per_question_xp=tuple(xp),
        )

    def correction_info(self, index: int) -> CorrectionInfo | None:
        """Review data for an answered question, or None if unanswered."""
        if not 0 <= index < len(self._answers):
            return None
        question = self._questions[index]
        interaction = self._interaction_for(question)
        return CorrectionInfo(
            question=question,
            player_answer=interaction.describe_answer(self._answers[index]),
            correct_answer=question.correct_answer_text,
            explanation=question.explanation,
            is_correct=self._results[index],
        )
