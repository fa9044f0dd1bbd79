"""
Ordering challenge rounds.

The player rearranges items into the right sequence with a three-state
machine:

- navigating: up/down moves the focus between item slots; down on the
  last slot focuses the submit control; select grabs the focused item
- grabbed: up/down swaps the grabbed item with its neighbour and the
  focus follows it; select drops it
- submit focused: up returns to the last slot; select submits

The player's arrangement is kept as a permutation of item indices
(order[position] = item index), separate from the items themselves.
"""

from collections.abc import Sequence
from enum import Enum

from buddyquest import data
from buddyquest.config import ORDERING_TIMER_SECONDS
from buddyquest.questions import Question, QuestionType
from buddyquest.rounds.base import Action, ChallengeRound, Grade, InputState, QuestionInteraction


class OrderingState(Enum):
    NAVIGATING = "navigating"
    GRABBED = "grabbed"
    SUBMIT_FOCUSED = "submit_focused"


def grade_ordering(submitted: Sequence[int], correct: Sequence[int]) -> Grade:
    """
    Compare a submitted permutation with the target, position by position.

    Only an exact match at every position is correct.
    """
    position_correct = tuple(
        position < len(submitted) and submitted[position] == target
        for position, target in enumerate(correct)
    )
    is_correct = len(submitted) == len(correct) and all(position_correct)
    return Grade(is_correct=is_correct, position_correct=position_correct)


class OrderingInteraction(QuestionInteraction):
    """Grab-and-swap arrangement of items."""

    question_type = QuestionType.ORDERING
    timer_seconds = ORDERING_TIMER_SECONDS

    def __init__(self, question: Question):
        super().__init__(question)
        self.order: list[int] = list(range(len(self.payload.items)))
        self.state = OrderingState.NAVIGATING
        self.focus = 0
        self.has_made_move = False

    @property
    def grabbed_index(self) -> int | None:
        """Slot of the grabbed item, or None."""
        if self.state == OrderingState.GRABBED:
            return self.focus
        return None

    @property
    def submit_enabled(self) -> bool:
        """The submit control lights up once the player has moved something."""
        return self.has_made_move

    @property
    def current_items(self) -> list[str]:
        return [self.payload.items[i] for i in self.order]

    def handle_input(self, input_state: InputState) -> bool:
        last = len(self.order) - 1

        if self.state == OrderingState.NAVIGATING:
            if input_state.is_pressed(Action.MOVE_UP):
                self.focus = max(0, self.focus - 1)
            elif input_state.is_pressed(Action.MOVE_DOWN):
                if self.focus == last:
                    self.state = OrderingState.SUBMIT_FOCUSED
                else:
                    self.focus += 1
            elif input_state.is_select:
                self.state = OrderingState.GRABBED

        elif self.state == OrderingState.GRABBED:
            if input_state.is_pressed(Action.MOVE_UP):
                if self.focus > 0:
                    self._swap(self.focus, self.focus - 1)
                    self.focus -= 1
            elif input_state.is_pressed(Action.MOVE_DOWN):
                if self.focus < last:
                    self._swap(self.focus, self.focus + 1)
                    self.focus += 1
            elif input_state.is_select:
                self.state = OrderingState.NAVIGATING

        elif self.state == OrderingState.SUBMIT_FOCUSED:
            if input_state.is_pressed(Action.MOVE_UP):
                self.state = OrderingState.NAVIGATING
                self.focus = last
            elif input_state.is_select:
                return True

        return False

    def _swap(self, a: int, b: int) -> None:
        self.order[a], self.order[b] = self.order[b], self.order[a]
        self.has_made_move = True

    def grade(self) -> Grade:
        return grade_ordering(self.order, self.payload.correct_order)

    def answer_snapshot(self) -> tuple[int, ...]:
        return tuple(self.order)

    def describe_answer(self, snapshot: tuple[int, ...]) -> str:
        return ", ".join(self.payload.items[i] for i in snapshot)

    def hint(self) -> str:
        first = self.payload.items[self.payload.correct_order[0]]
        return data.HINT_FIRST_ITEM.format(item=first)

    def reopen(self) -> None:
        self.state = OrderingState.NAVIGATING
        self.focus = 0


class OrderingRound(ChallengeRound):
    """A round of ordering questions."""

    interaction_class = OrderingInteraction
