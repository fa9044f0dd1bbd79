"""
Difficulty adaptation for the BuddyQuest learning engine.

Each subject keeps a rolling window of the last answers. Nothing is
decided until the window holds DIFFICULTY_WINDOW_SIZE outcomes; from then
on every new outcome re-evaluates the window:

- accuracy >= 0.8: move one tier up and clear the window
- accuracy <= 0.4: move one tier down and clear the window
- otherwise: keep sliding (the oldest outcome drops off)

Tiers are clamped to [beginner, advanced]. Lifetime completed/correct
counters are updated on every answer and are independent of the window.
"""

import logging
from collections.abc import Iterable

from buddyquest.config import EngineConfig
from buddyquest.models import DifficultyState
from buddyquest.questions import DEFAULT_TIER, DifficultyTier, Subject

logger = logging.getLogger(__name__)


class DifficultyAdapter:
    """
    Per-subject difficulty tracker.

    This class owns the DifficultyState of one learner for a session.
    """

    def __init__(self, state: DifficultyState | None = None, config: EngineConfig | None = None):
        """
        Initialize the adapter.

        Args:
            state: Previously saved state. If None, starts fresh with every
                   subject at the default tier.
            config: Window size and thresholds.
        """
        self._config = config or EngineConfig()
        self._state = state or DifficultyState()

    def tier(self, subject: Subject) -> DifficultyTier:
        """Current tier of a subject."""
        return self._state.tiers.get(subject, DEFAULT_TIER)

    def set_tier(self, subject: Subject, tier: DifficultyTier) -> None:
        """Override the tier of a subject (e.g. from a parent setting)."""
        self._state.tiers[subject] = tier

    def window(self, subject: Subject) -> tuple[bool, ...]:
        """The current rolling window of a subject, oldest first."""
        return tuple(self._state.windows.get(subject, []))

    def record_result(self, subject: Subject, is_correct: bool) -> bool:
        """
        Record one answer and adapt the tier if the window warrants it.

        Args:
            subject: Subject of the answered question.
            is_correct: Whether the answer was correct.

        Returns:
            True if the tier changed.
        """
        self._state.completed[subject] = self._state.completed.get(subject, 0) + 1
        if is_correct:
            self._state.correct[subject] = self._state.correct.get(subject, 0) + 1

        window = self._state.windows.setdefault(subject, [])
        window.append(is_correct)
        if len(window) > self._config.window_size:
            del window[: len(window) - self._config.window_size]

        if len(window) < self._config.window_size:
            return False

        accuracy = sum(window) / len(window)
        current = self.tier(subject)

        if accuracy >= self._config.increase_threshold:
            new_tier = current.next
        elif accuracy <= self._config.decrease_threshold:
            new_tier = current.previous
        else:
            return False

        # The window restarts after every adaptation event, even a clamped one
        window.clear()
        if new_tier == current:
            return False

        self._state.tiers[subject] = new_tier
        logger.info(
            f"{subject.display_name} difficulty {current.name.lower()} -> "
            f"{new_tier.name.lower()} (window accuracy {accuracy:.0%})"
        )
        return True

    def record_results(self, subject: Subject, results: Iterable[bool]) -> bool:
        """
        Record several answers in order.

        Returns:
            True if any of them changed the tier.
        """
        changed = False
        for is_correct in results:
            changed = self.record_result(subject, is_correct) or changed
        return changed

    # ------------------------------------------------------------------
    # Lifetime statistics
    # ------------------------------------------------------------------

    def completed_count(self, subject: Subject) -> int:
        return self._state.completed.get(subject, 0)

    def correct_count(self, subject: Subject) -> int:
        return self._state.correct.get(subject, 0)

    def set_completed_count(self, subject: Subject, count: int) -> None:
        self._state.completed[subject] = count

    def set_correct_count(self, subject: Subject, count: int) -> None:
        self._state.correct[subject] = count

    def rounds_completed(self, subject: Subject) -> int:
        """Number of challenge rounds finished in a subject."""
        return self._state.rounds.get(subject, 0)

    def record_round(self, subject: Subject) -> None:
        self._state.rounds[subject] = self.rounds_completed(subject) + 1

    def accuracy(self, subject: Subject) -> float:
        """Lifetime accuracy of a subject (0 when nothing was answered)."""
        completed = self.completed_count(subject)
        if completed == 0:
            return 0.0
        return self.correct_count(subject) / completed

    def overall_accuracy(self) -> float:
        """Lifetime accuracy across all subjects."""
        completed = self.total_challenges_completed()
        if completed == 0:
            return 0.0
        return sum(self._state.correct.values()) / completed

    def total_challenges_completed(self) -> int:
        return sum(self._state.completed.values())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_state(self) -> DifficultyState:
        """Snapshot of the state for persistence."""
        return DifficultyState(
            tiers=dict(self._state.tiers),
            windows={subject: list(window) for subject, window in self._state.windows.items()},
            completed=dict(self._state.completed),
            correct=dict(self._state.correct),
            rounds=dict(self._state.rounds),
        )

    def import_state(self, state: DifficultyState) -> None:
        """Replace the current state with a loaded one."""
        self._state = state
