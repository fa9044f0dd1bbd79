"""
Question model for the BuddyQuest learning engine.

A Question is an immutable, subject- and difficulty-tagged prompt carrying
one of four answer payloads: multiple choice, true/false, ordering or
matching. Payloads are plain dataclasses tagged by QuestionType, and every
consumer dispatches on that tag.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar

from buddyquest.errors import QuestionValidationError


class Subject(Enum):
    """Learning subjects, each mapped to a world zone."""

    LANGUAGE_ARTS = "language_arts"
    MATH = "math"
    SCIENCE = "science"
    SOCIAL = "social"

    @property
    def display_name(self) -> str:
        return SUBJECT_DISPLAY_NAMES[self]


SUBJECT_DISPLAY_NAMES: dict[Subject, str] = {
    Subject.LANGUAGE_ARTS: "Language Arts",
    Subject.MATH: "Math",
    Subject.SCIENCE: "Science",
    Subject.SOCIAL: "Social Skills",
}


class DifficultyTier(IntEnum):
    """Ordered difficulty tiers."""

    BEGINNER = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    ADVANCED = 5

    @property
    def next(self) -> "DifficultyTier":
        """One tier harder, clamped at ADVANCED."""
        return DifficultyTier(min(self.value + 1, DifficultyTier.ADVANCED.value))

    @property
    def previous(self) -> "DifficultyTier":
        """One tier easier, clamped at BEGINNER."""
        return DifficultyTier(max(self.value - 1, DifficultyTier.BEGINNER.value))


DEFAULT_TIER = DifficultyTier.EASY


class GradeLevel(IntEnum):
    """School grade of the learner."""

    KINDERGARTEN = 0
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5
    SIXTH = 6
    SEVENTH = 7
    EIGHTH = 8


class QuestionType(Enum):
    """Payload tags, also used as the "type" key in serialized payloads."""

    MULTIPLE_CHOICE = "multipleChoice"
    TRUE_FALSE = "trueFalse"
    ORDERING = "ordering"
    MATCHING = "matching"


MULTIPLE_CHOICE_OPTION_COUNT = 4


@dataclass(frozen=True)
class MultipleChoice:
    """Four options, one of them correct."""

    question_type: ClassVar[QuestionType] = QuestionType.MULTIPLE_CHOICE

    options: tuple[str, ...]
    correct_index: int

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    def validate(self) -> None:
        if len(self.options) != MULTIPLE_CHOICE_OPTION_COUNT:
            raise QuestionValidationError(
                f"Multiple choice needs {MULTIPLE_CHOICE_OPTION_COUNT} options, "
                f"got {len(self.options)}"
            )
        normalized = {normalize_text(option) for option in self.options}
        if len(normalized) != len(self.options) or "" in normalized:
            raise QuestionValidationError(f"Options must be distinct and non-empty: {self.options}")
        if not 0 <= self.correct_index < len(self.options):
            raise QuestionValidationError(f"correct_index out of range: {self.correct_index}")

    def to_dict(self) -> dict:
        return {
            "type": self.question_type.value,
            "options": list(self.options),
            "correct_index": self.correct_index,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MultipleChoice":
        return cls(options=tuple(data["options"]), correct_index=int(data["correct_index"]))


@dataclass(frozen=True)
class TrueFalse:
    """A statement that is either true or false."""

    question_type: ClassVar[QuestionType] = QuestionType.TRUE_FALSE

    correct_answer: bool

    def validate(self) -> None:
        if not isinstance(self.correct_answer, bool):
            raise QuestionValidationError("correct_answer must be a bool")

    def to_dict(self) -> dict:
        return {"type": self.question_type.value, "correct_answer": self.correct_answer}

    @classmethod
    def from_dict(cls, data: dict) -> "TrueFalse":
        return cls(correct_answer=bool(data["correct_answer"]))


@dataclass(frozen=True)
class Ordering:
    """
    Items to put in sequence.

    items are in display order; correct_order[position] is the index into
    items that belongs at that position.
    """

    question_type: ClassVar[QuestionType] = QuestionType.ORDERING

    items: tuple[str, ...]
    correct_order: tuple[int, ...]

    @property
    def correct_items(self) -> list[str]:
        return [self.items[i] for i in self.correct_order]

    def validate(self) -> None:
        if len(self.items) < 2:
            raise QuestionValidationError("Ordering needs at least 2 items")
        if sorted(self.correct_order) != list(range(len(self.items))):
            raise QuestionValidationError(
                f"correct_order must be a permutation of item indices: {self.correct_order}"
            )

    def to_dict(self) -> dict:
        return {
            "type": self.question_type.value,
            "items": list(self.items),
            "correct_order": list(self.correct_order),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Ordering":
        return cls(
            items=tuple(data["items"]),
            correct_order=tuple(int(i) for i in data["correct_order"]),
        )


@dataclass(frozen=True)
class Matching:
    """
    Two columns to pair up.

    correct_mapping[left_index] is the right_items index it pairs with.
    """

    question_type: ClassVar[QuestionType] = QuestionType.MATCHING

    left_items: tuple[str, ...]
    right_items: tuple[str, ...]
    correct_mapping: tuple[int, ...]

    def validate(self) -> None:
        if len(self.left_items) < 2:
            raise QuestionValidationError("Matching needs at least 2 pairs")
        if len(self.left_items) != len(self.right_items):
            raise QuestionValidationError("Matching columns must have the same length")
        if sorted(self.correct_mapping) != list(range(len(self.right_items))):
            raise QuestionValidationError(
                f"correct_mapping must pair every item exactly once: {self.correct_mapping}"
            )

    def to_dict(self) -> dict:
        return {
            "type": self.question_type.value,
            "left_items": list(self.left_items),
            "right_items": list(self.right_items),
            "correct_mapping": list(self.correct_mapping),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Matching":
        return cls(
            left_items=tuple(data["left_items"]),
            right_items=tuple(data["right_items"]),
            correct_mapping=tuple(int(i) for i in data["correct_mapping"]),
        )


Payload = MultipleChoice | TrueFalse | Ordering | Matching

_PAYLOAD_TYPES: dict[QuestionType, type] = {
    QuestionType.MULTIPLE_CHOICE: MultipleChoice,
    QuestionType.TRUE_FALSE: TrueFalse,
    QuestionType.ORDERING: Ordering,
    QuestionType.MATCHING: Matching,
}


def payload_from_dict(data: dict) -> Payload:
    """
    Decode a payload from its tagged dictionary form.

    Raises:
        ValueError: If the "type" tag is missing or unknown.
    """
    try:
        question_type = QuestionType(data["type"])
    except KeyError:
        raise ValueError("Payload is missing its 'type' tag")
    return _PAYLOAD_TYPES[question_type].from_dict(data)


def normalize_text(text: str) -> str:
    """Normalize question text for duplicate detection."""
    return " ".join(text.lower().split())


@dataclass(frozen=True)
class Question:
    """A single question as presented to the learner."""

    id: str
    text: str
    payload: Payload
    explanation: str
    subject: Subject
    difficulty: DifficultyTier
    grade_level: GradeLevel = GradeLevel.THIRD

    @property
    def question_type(self) -> QuestionType:
        return self.payload.question_type

    @property
    def normalized_text(self) -> str:
        return normalize_text(self.text)

    @property
    def correct_answer_text(self) -> str:
        """The correct answer in a readable form."""
        return correct_answer_text(self.payload)

    def validate(self) -> None:
        """
        Check the question against the schema.

        Raises:
            QuestionValidationError: If any field is out of shape.
        """
        if not self.id:
            raise QuestionValidationError("Question id must not be empty")
        if not self.text.strip():
            raise QuestionValidationError(f"Question {self.id} has no text")
        self.payload.validate()

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "id": self.id,
            "text": self.text,
            "payload": self.payload.to_dict(),
            "explanation": self.explanation,
            "subject": self.subject.value,
            "difficulty": self.difficulty.value,
            "grade_level": self.grade_level.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        """Create from dictionary (from persistence)."""
        return cls(
            id=data["id"],
            text=data["text"],
            payload=payload_from_dict(data["payload"]),
            explanation=data.get("explanation", ""),
            subject=Subject(data["subject"]),
            difficulty=DifficultyTier(data["difficulty"]),
            grade_level=GradeLevel(data.get("grade_level", GradeLevel.THIRD.value)),
        )


def correct_answer_text(payload: Payload) -> str:
    """Render the correct answer of a payload for review screens."""
    if isinstance(payload, MultipleChoice):
        return payload.correct_option
    if isinstance(payload, TrueFalse):
        return "True" if payload.correct_answer else "False"
    if isinstance(payload, Ordering):
        return ", ".join(payload.correct_items)
    if isinstance(payload, Matching):
        return ", ".join(
            f"{left}→{payload.right_items[right]}"
            for left, right in zip(payload.left_items, payload.correct_mapping)
        )
    raise TypeError(f"Unsupported payload: {payload!r}")
