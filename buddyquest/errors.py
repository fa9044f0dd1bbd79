"""Exceptions raised by the BuddyQuest engine."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from buddyquest.questions import DifficultyTier, Subject


class BuddyQuestError(Exception):
    """Base class for engine errors."""


class QuestionValidationError(BuddyQuestError, ValueError):
    """A question does not conform to the question schema."""


class CorruptPersistenceError(BuddyQuestError, ValueError):
    """A saved document could not be decoded."""


class InvalidTransitionError(BuddyQuestError, RuntimeError):
    """A challenge round was driven outside its contract."""


class InsufficientContentError(BuddyQuestError):
    """No draw strategy could assemble a full round."""

    def __init__(self, subject: "Subject", difficulty: "DifficultyTier"):
        self.subject = subject
        self.difficulty = difficulty
        super().__init__(
            f"Not enough questions for {subject.display_name} at {difficulty.name.lower()}"
        )
