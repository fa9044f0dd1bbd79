"""
Matching challenge rounds.

The screen has three focus regions: the left column, the right column and
the submit control. Selecting a left item and then a right item pairs
them; pairs are one-to-one, so pairing a right item that is already taken
moves it. Selecting an already paired item un-pairs it.
"""

from collections.abc import Sequence
from enum import Enum

from buddyquest import data
from buddyquest.config import MATCHING_TIMER_SECONDS
from buddyquest.questions import Question, QuestionType
from buddyquest.rounds.base import Action, ChallengeRound, Grade, InputState, QuestionInteraction


class MatchingFocus(Enum):
    LEFT = "left"
    RIGHT = "right"
    SUBMIT = "submit"


def grade_matching(submitted: Sequence[int | None], correct: Sequence[int]) -> Grade:
    """
    Compare a submitted mapping with the target, pair by pair.

    Correct only when every left item is paired with its target.
    """
    position_correct = tuple(
        left < len(submitted) and submitted[left] is not None and submitted[left] == target
        for left, target in enumerate(correct)
    )
    return Grade(is_correct=all(position_correct), position_correct=position_correct)


class MatchingInteraction(QuestionInteraction):
    """Two-column pairing."""

    question_type = QuestionType.MATCHING
    timer_seconds = MATCHING_TIMER_SECONDS

    def __init__(self, question: Question):
        super().__init__(question)
        self.mapping: list[int | None] = [None] * len(self.payload.left_items)
        self.focus = MatchingFocus.LEFT
        self.left_focus = 0
        self.right_focus = 0
        self.selected_left: int | None = None

    def handle_input(self, input_state: InputState) -> bool:
        if self.focus == MatchingFocus.LEFT:
            self._handle_left(input_state)
        elif self.focus == MatchingFocus.RIGHT:
            self._handle_right(input_state)
        elif self.focus == MatchingFocus.SUBMIT:
            return self._handle_submit(input_state)
        return False

    def _handle_left(self, input_state: InputState) -> None:
        last = len(self.payload.left_items) - 1
        if input_state.is_pressed(Action.MOVE_UP):
            self.left_focus = max(0, self.left_focus - 1)
        elif input_state.is_pressed(Action.MOVE_DOWN):
            if self.left_focus == last:
                self.focus = MatchingFocus.SUBMIT
            else:
                self.left_focus += 1
        elif input_state.is_pressed(Action.MOVE_RIGHT):
            self.focus = MatchingFocus.RIGHT
        elif input_state.is_select:
            if self.selected_left == self.left_focus:
                self.selected_left = None
            elif self.mapping[self.left_focus] is not None:
                self.mapping[self.left_focus] = None
            else:
                self.selected_left = self.left_focus
                self.focus = MatchingFocus.RIGHT

    def _handle_right(self, input_state: InputState) -> None:
        last = len(self.payload.right_items) - 1
        if input_state.is_pressed(Action.MOVE_UP):
            self.right_focus = max(0, self.right_focus - 1)
        elif input_state.is_pressed(Action.MOVE_DOWN):
            if self.right_focus == last:
                self.focus = MatchingFocus.SUBMIT
            else:
                self.right_focus += 1
        elif input_state.is_pressed(Action.MOVE_LEFT):
            self.focus = MatchingFocus.LEFT
        elif input_state.is_select:
            if self.selected_left is not None:
                self.pair(self.selected_left, self.right_focus)
                self.selected_left = None
                self.focus = MatchingFocus.LEFT
            else:
                self._unpair_right(self.right_focus)

    def _handle_submit(self, input_state: InputState) -> bool:
        if input_state.is_pressed(Action.MOVE_UP):
            self.focus = MatchingFocus.LEFT
            self.left_focus = len(self.payload.left_items) - 1
        elif input_state.is_pressed(Action.MOVE_LEFT):
            self.focus = MatchingFocus.LEFT
        elif input_state.is_pressed(Action.MOVE_RIGHT):
            self.focus = MatchingFocus.RIGHT
        elif input_state.is_select:
            return True
        return False

    def pair(self, left: int, right: int) -> None:
        """Pair a left item with a right item, releasing the right item first."""
        self._unpair_right(right)
        self.mapping[left] = right

    def _unpair_right(self, right: int) -> None:
        for left, paired in enumerate(self.mapping):
            if paired == right:
                self.mapping[left] = None

    def grade(self) -> Grade:
        return grade_matching(self.mapping, self.payload.correct_mapping)

    def answer_snapshot(self) -> tuple[int | None, ...]:
        return tuple(self.mapping)

    def describe_answer(self, snapshot: tuple[int | None, ...]) -> str:
        pairs = []
        for left, right in zip(self.payload.left_items, snapshot):
            partner = data.UNMATCHED if right is None else self.payload.right_items[right]
            pairs.append(f"{left}{data.PAIR_SEPARATOR}{partner}")
        return ", ".join(pairs)

    def hint(self) -> str:
        left = self.payload.left_items[0]
        right = self.payload.right_items[self.payload.correct_mapping[0]]
        return data.HINT_FIRST_PAIR.format(left=left, right=right)

    def reopen(self) -> None:
        self.selected_left = None
        self.focus = MatchingFocus.LEFT
        self.left_focus = 0


class MatchingRound(ChallengeRound):
    """A round of matching questions."""

    interaction_class = MatchingInteraction
