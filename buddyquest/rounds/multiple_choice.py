"""Multiple-choice challenge rounds."""

from buddyquest import data
from buddyquest.config import MULTIPLE_CHOICE_TIMER_SECONDS
from buddyquest.questions import Question, QuestionType
from buddyquest.rounds.base import Action, ChallengeRound, Grade, InputState, QuestionInteraction


class MultipleChoiceInteraction(QuestionInteraction):
    """Up/down moves the selection (wrapping); interact or confirm submits."""

    question_type = QuestionType.MULTIPLE_CHOICE
    timer_seconds = MULTIPLE_CHOICE_TIMER_SECONDS

    def __init__(self, question: Question):
        super().__init__(question)
        self.selected_index = 0

    def handle_input(self, input_state: InputState) -> bool:
        count = len(self.payload.options)
        if input_state.is_pressed(Action.MOVE_UP):
            self.selected_index = (self.selected_index - 1) % count
        elif input_state.is_pressed(Action.MOVE_DOWN):
            self.selected_index = (self.selected_index + 1) % count
        elif input_state.is_select:
            return True
        return False

    def grade(self) -> Grade:
        is_correct = self.selected_index == self.payload.correct_index
        return Grade(is_correct=is_correct, position_correct=(is_correct,))

    def answer_snapshot(self) -> int:
        return self.selected_index

    def describe_answer(self, snapshot: int) -> str:
        return self.payload.options[snapshot]

    def hint(self) -> str:
        answer = self.payload.correct_option
        if len(answer) > data.HINT_MIN_ANSWER_LENGTH:
            return data.HINT_FIRST_LETTER.format(letter=answer[0].upper())
        return data.HINT_GENERIC

    def reopen(self) -> None:
        # Move off the option that was just marked wrong
        self.selected_index = (self.selected_index + 1) % len(self.payload.options)


class MultipleChoiceRound(ChallengeRound):
    """A round of multiple-choice questions."""

    interaction_class = MultipleChoiceInteraction
