"""
Persistent data models for the BuddyQuest learning engine.

This module defines the per-learner documents: the question bank with
usage and mastery statistics, and the difficulty/progress state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from buddyquest.config import BANK_MASTERY_THRESHOLD
from buddyquest.questions import DEFAULT_TIER, DifficultyTier, Question, Subject

# Document format versions, bumped when the dictionary layout changes
BANK_FORMAT_VERSION = 1
PROGRESS_FORMAT_VERSION = 1


class QuestionSource(Enum):
    """Where a banked question came from."""

    STATIC = "static"
    GENERATED = "generated"


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


@dataclass
class BankedQuestion:
    """
    A question held in a learner's bank together with its usage statistics.

    A question is mastered once it has been answered correctly
    BANK_MASTERY_THRESHOLD times, regardless of how often it was shown.
    """

    question: Question
    times_shown: int = 0
    times_correct: int = 0
    last_shown_date: datetime | None = None
    added_date: datetime = field(default_factory=datetime.now)
    source: QuestionSource = QuestionSource.STATIC

    @property
    def id(self) -> str:
        return self.question.id

    @property
    def is_mastered(self) -> bool:
        return self.times_correct >= BANK_MASTERY_THRESHOLD

    @property
    def accuracy_rate(self) -> float:
        """Accuracy as a value between 0 and 1 (0 for unshown questions)."""
        if self.times_shown == 0:
            return 0.0
        return self.times_correct / self.times_shown

    def record(self, correct: bool, when: datetime | None = None) -> None:
        """Record one showing of this question."""
        self.times_shown += 1
        if correct:
            self.times_correct += 1
        self.last_shown_date = when or datetime.now()

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "question": self.question.to_dict(),
            "times_shown": self.times_shown,
            "times_correct": self.times_correct,
            "last_shown_date": self.last_shown_date.isoformat() if self.last_shown_date else None,
            "added_date": self.added_date.isoformat(),
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BankedQuestion":
        """Create from dictionary (from persistence)."""
        return cls(
            question=Question.from_dict(data["question"]),
            times_shown=int(data.get("times_shown", 0)),
            times_correct=int(data.get("times_correct", 0)),
            last_shown_date=_parse_datetime(data.get("last_shown_date")),
            added_date=_parse_datetime(data.get("added_date")) or datetime.now(),
            source=QuestionSource(data.get("source", QuestionSource.STATIC.value)),
        )


@dataclass
class QuestionBankData:
    """All banked questions of one learner, keyed by subject."""

    questions: dict[Subject, list[BankedQuestion]] = field(default_factory=dict)
    last_replenish: dict[Subject, datetime] = field(default_factory=dict)
    version: int = BANK_FORMAT_VERSION

    def for_subject(self, subject: Subject) -> list[BankedQuestion]:
        """The mutable question list of a subject (created on demand)."""
        return self.questions.setdefault(subject, [])

    def count(self, subject: Subject) -> int:
        return len(self.questions.get(subject, []))

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "version": self.version,
            "questions": {
                subject.value: [banked.to_dict() for banked in banked_list]
                for subject, banked_list in self.questions.items()
            },
            "last_replenish": {
                subject.value: when.isoformat() for subject, when in self.last_replenish.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuestionBankData":
        """Create from dictionary (from persistence)."""
        questions = {
            Subject(key): [BankedQuestion.from_dict(item) for item in items]
            for key, items in data.get("questions", {}).items()
        }
        last_replenish = {
            Subject(key): datetime.fromisoformat(value)
            for key, value in data.get("last_replenish", {}).items()
        }
        return cls(
            questions=questions,
            last_replenish=last_replenish,
            version=data.get("version", BANK_FORMAT_VERSION),
        )


@dataclass
class DifficultyState:
    """
    Per-subject difficulty tiers, rolling outcome windows and lifetime counters.
    """

    tiers: dict[Subject, DifficultyTier] = field(default_factory=dict)
    windows: dict[Subject, list[bool]] = field(default_factory=dict)
    completed: dict[Subject, int] = field(default_factory=dict)
    correct: dict[Subject, int] = field(default_factory=dict)
    rounds: dict[Subject, int] = field(default_factory=dict)  # finished challenge rounds
    version: int = PROGRESS_FORMAT_VERSION

    def tier(self, subject: Subject) -> DifficultyTier:
        return self.tiers.get(subject, DEFAULT_TIER)

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "version": self.version,
            "tiers": {subject.value: tier.value for subject, tier in self.tiers.items()},
            "windows": {subject.value: list(window) for subject, window in self.windows.items()},
            "completed": {subject.value: count for subject, count in self.completed.items()},
            "correct": {subject.value: count for subject, count in self.correct.items()},
            "rounds": {subject.value: count for subject, count in self.rounds.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DifficultyState":
        """Create from dictionary (from persistence)."""
        return cls(
            tiers={
                Subject(key): DifficultyTier(value) for key, value in data.get("tiers", {}).items()
            },
            windows={
                Subject(key): [bool(outcome) for outcome in value]
                for key, value in data.get("windows", {}).items()
            },
            completed={Subject(key): int(v) for key, v in data.get("completed", {}).items()},
            correct={Subject(key): int(v) for key, v in data.get("correct", {}).items()},
            rounds={Subject(key): int(v) for key, v in data.get("rounds", {}).items()},
            version=data.get("version", PROGRESS_FORMAT_VERSION),
        )
