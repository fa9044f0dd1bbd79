"""True/false challenge rounds."""

from buddyquest import data
from buddyquest.config import (
    TRUE_FALSE_TIME_BONUS_HIGH_THRESHOLD,
    TRUE_FALSE_TIME_BONUS_LOW_THRESHOLD,
    TRUE_FALSE_TIMER_SECONDS,
)
from buddyquest.questions import Question, QuestionType
from buddyquest.rounds.base import Action, ChallengeRound, Grade, InputState, QuestionInteraction


class TrueFalseInteraction(QuestionInteraction):
    """Two options, "True" on top. Up/down toggles; interact or confirm submits."""

    question_type = QuestionType.TRUE_FALSE
    timer_seconds = TRUE_FALSE_TIMER_SECONDS
    time_bonus_thresholds = (TRUE_FALSE_TIME_BONUS_HIGH_THRESHOLD, TRUE_FALSE_TIME_BONUS_LOW_THRESHOLD)

    def __init__(self, question: Question):
        super().__init__(question)
        self.selected = True

    def handle_input(self, input_state: InputState) -> bool:
        if input_state.is_pressed(Action.MOVE_UP) or input_state.is_pressed(Action.MOVE_DOWN):
            self.selected = not self.selected
        elif input_state.is_select:
            return True
        return False

    def grade(self) -> Grade:
        is_correct = self.selected == self.payload.correct_answer
        return Grade(is_correct=is_correct, position_correct=(is_correct,))

    def answer_snapshot(self) -> bool:
        return self.selected

    def describe_answer(self, snapshot: bool) -> str:
        return data.TRUE_LABEL if snapshot else data.FALSE_LABEL

    def hint(self) -> str:
        if self.payload.correct_answer:
            return data.HINT_LEANS_TRUE
        return data.HINT_LEANS_FALSE

    def reopen(self) -> None:
        self.selected = not self.selected


class TrueFalseRound(ChallengeRound):
    """A round of true/false statements."""

    interaction_class = TrueFalseInteraction
