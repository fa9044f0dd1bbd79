"""
Quest objective tracking for BuddyQuest.

Quests are static definitions with ordered objectives, a reward and
prerequisites (other quests and a minimum player level). The tracker keeps
the learner's runtime state: active quests with per-objective progress,
completed quests and the world flags their rewards unlocked.

Game events (talking to an NPC, visiting a room, finishing a challenge,
reaching a difficulty tier or player level) advance the objectives of
active quests. Completion is a one-time transition: the reward is handed
out exactly once.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from buddyquest import data
from buddyquest.questions import DifficultyTier, Subject

logger = logging.getLogger(__name__)

QUEST_FORMAT_VERSION = 1


class QuestStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


# ============================================================================
# Objectives
# ============================================================================


@dataclass(frozen=True)
class TalkToNpc:
    npc_id: str
    target = 1

    def describe(self) -> str:
        return data.OBJECTIVE_TALK.format(npc=self.npc_id)


@dataclass(frozen=True)
class VisitRoom:
    room_id: str
    target = 1

    def describe(self) -> str:
        return data.OBJECTIVE_VISIT.format(room=self.room_id)


@dataclass(frozen=True)
class CompleteChallenges:
    subject: Subject
    count: int

    @property
    def target(self) -> int:
        return self.count

    def describe(self) -> str:
        return data.OBJECTIVE_CHALLENGES.format(count=self.count, subject=self.subject.display_name)


@dataclass(frozen=True)
class ReachDifficulty:
    subject: Subject
    tier: DifficultyTier
    target = 1

    def describe(self) -> str:
        return data.OBJECTIVE_DIFFICULTY.format(
            tier=self.tier.name.capitalize(), subject=self.subject.display_name
        )


@dataclass(frozen=True)
class ReachLevel:
    level: int
    target = 1

    def describe(self) -> str:
        return data.OBJECTIVE_LEVEL.format(level=self.level)


Objective = TalkToNpc | VisitRoom | CompleteChallenges | ReachDifficulty | ReachLevel


@dataclass(frozen=True)
class QuestReward:
    """Reward handed out when a quest is completed."""

    xp_bonus: int = 0
    bond_points: int = 0
    unlocks_flag: str | None = None


@dataclass(frozen=True)
class QuestDefinition:
    """Static definition of a quest."""

    id: str
    name: str
    description: str
    giver_npc_id: str
    turn_in_npc_id: str
    objectives: tuple[Objective, ...]
    reward: QuestReward
    prerequisite_quest_ids: tuple[str, ...] = ()
    prerequisite_level: int = 0


# ============================================================================
# Runtime State
# ============================================================================


@dataclass
class QuestRuntimeState:
    """
    Per-learner quest state.

    active maps a quest id to one progress counter per objective.
    """

    active: dict[str, list[int]] = field(default_factory=dict)
    completed: set[str] = field(default_factory=set)
    unlocked_flags: set[str] = field(default_factory=set)
    version: int = QUEST_FORMAT_VERSION

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "version": self.version,
            "active": {quest_id: list(progress) for quest_id, progress in self.active.items()},
            "completed": sorted(self.completed),
            "unlocked_flags": sorted(self.unlocked_flags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuestRuntimeState":
        """Create from dictionary (from persistence)."""
        return cls(
            active={
                quest_id: [int(count) for count in progress]
                for quest_id, progress in data.get("active", {}).items()
            },
            completed=set(data.get("completed", [])),
            unlocked_flags=set(data.get("unlocked_flags", [])),
            version=data.get("version", QUEST_FORMAT_VERSION),
        )


class QuestObjectiveTracker:
    """
    Tracks quest progress for one learner.

    The tracker is driven by game events and never completes a quest on
    its own; the host turns completable quests in via complete_quest().
    """

    def __init__(
        self,
        definitions: Sequence[QuestDefinition] | None = None,
        state: QuestRuntimeState | None = None,
    ):
        """
        Initialize the tracker.

        Args:
            definitions: Quest catalog. Defaults to the built-in quests.
            state: Previously saved state. If None, starts fresh.
        """
        if definitions is None:
            from buddyquest.quest_data import QUESTS

            definitions = QUESTS
        self._definitions: dict[str, QuestDefinition] = {d.id: d for d in definitions}
        self._state = QuestRuntimeState()
        self.import_state(state or QuestRuntimeState())

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def definition(self, quest_id: str) -> QuestDefinition | None:
        return self._definitions.get(quest_id)

    def status(self, quest_id: str) -> QuestStatus | None:
        """Status of a quest, or None if it is neither active nor completed."""
        if quest_id in self._state.completed:
            return QuestStatus.COMPLETED
        if quest_id in self._state.active:
            return QuestStatus.ACTIVE
        return None

    def progress(self, quest_id: str) -> tuple[int, ...]:
        """Per-objective progress counters of an active or completed quest."""
        if quest_id in self._state.completed:
            definition = self._definitions[quest_id]
            return tuple(objective.target for objective in definition.objectives)
        return tuple(self._state.active.get(quest_id, ()))

    def is_flag_unlocked(self, flag: str) -> bool:
        return flag in self._state.unlocked_flags

    @property
    def unlocked_flags(self) -> frozenset[str]:
        return frozenset(self._state.unlocked_flags)

    def active_quests(self) -> list[QuestDefinition]:
        return [self._definitions[quest_id] for quest_id in self._state.active]

    def completed_quests(self) -> list[QuestDefinition]:
        return [d for d in self._definitions.values() if d.id in self._state.completed]

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def can_accept(self, quest_id: str, player_level: int = 1) -> bool:
        """Whether a quest is known, not started and all prerequisites are met."""
        definition = self._definitions.get(quest_id)
        if definition is None:
            return False
        if self.status(quest_id) is not None:
            return False
        if player_level < definition.prerequisite_level:
            return False
        return all(
            prerequisite in self._state.completed
            for prerequisite in definition.prerequisite_quest_ids
        )

    def available_quests(self, player_level: int = 1) -> list[QuestDefinition]:
        return [d for d in self._definitions.values() if self.can_accept(d.id, player_level)]

    def quests_for_npc(self, npc_id: str, player_level: int = 1) -> list[QuestDefinition]:
        """Quests this NPC can hand out right now."""
        return [d for d in self.available_quests(player_level) if d.giver_npc_id == npc_id]

    def npc_has_quest_to_give(self, npc_id: str, player_level: int = 1) -> bool:
        return bool(self.quests_for_npc(npc_id, player_level))

    def completable_quests_for_npc(self, npc_id: str) -> list[QuestDefinition]:
        """Active quests that can be turned in at this NPC."""
        return [
            self._definitions[quest_id]
            for quest_id in self._state.active
            if self._definitions[quest_id].turn_in_npc_id == npc_id
            and self.is_quest_completable(quest_id)
        ]

    def npc_has_quest_to_complete(self, npc_id: str) -> bool:
        return bool(self.completable_quests_for_npc(npc_id))

    def is_quest_completable(self, quest_id: str) -> bool:
        progress = self._state.active.get(quest_id)
        if progress is None:
            return False
        objectives = self._definitions[quest_id].objectives
        return all(count >= objective.target for count, objective in zip(progress, objectives))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def accept_quest(self, quest_id: str, player_level: int = 1) -> bool:
        """
        Start a quest.

        Returns:
            True if the quest became active; False if it is unknown,
            already started or its prerequisites are not met.
        """
        if not self.can_accept(quest_id, player_level):
            logger.debug(f"Quest {quest_id} cannot be accepted at level {player_level}")
            return False
        definition = self._definitions[quest_id]
        self._state.active[quest_id] = [0] * len(definition.objectives)
        logger.info(f"Quest accepted: {definition.name}")
        return True

    def complete_quest(self, quest_id: str) -> QuestReward | None:
        """
        Turn in a quest whose objectives are all met.

        Returns:
            The reward, exactly once. None if the quest is not active, not
            finished, or already completed.
        """
        if not self.is_quest_completable(quest_id):
            return None
        definition = self._definitions[quest_id]
        del self._state.active[quest_id]
        self._state.completed.add(quest_id)
        if definition.reward.unlocks_flag:
            self._state.unlocked_flags.add(definition.reward.unlocks_flag)
        logger.info(f"Quest completed: {definition.name}")
        return definition.reward

    # ------------------------------------------------------------------
    # Game events
    # ------------------------------------------------------------------

    def record_npc_talk(self, npc_id: str) -> list[str]:
        """Returns ids of quests that progressed."""
        return self._advance(lambda o: isinstance(o, TalkToNpc) and o.npc_id == npc_id)

    def record_room_visit(self, room_id: str) -> list[str]:
        return self._advance(lambda o: isinstance(o, VisitRoom) and o.room_id == room_id)

    def record_challenge_complete(self, subject: Subject) -> list[str]:
        return self._advance(
            lambda o: isinstance(o, CompleteChallenges) and o.subject == subject
        )

    def record_difficulty_reached(self, subject: Subject, tier: DifficultyTier) -> list[str]:
        return self._advance(
            lambda o: isinstance(o, ReachDifficulty) and o.subject == subject and tier >= o.tier
        )

    def record_level_reached(self, level: int) -> list[str]:
        return self._advance(lambda o: isinstance(o, ReachLevel) and level >= o.level)

    def _advance(self, matches) -> list[str]:
        progressed = []
        for quest_id, progress in self._state.active.items():
            objectives = self._definitions[quest_id].objectives
            changed = False
            for i, objective in enumerate(objectives):
                if matches(objective) and progress[i] < objective.target:
                    progress[i] += 1
                    changed = True
            if changed:
                progressed.append(quest_id)
        return progressed

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def progress_description(self, quest_id: str) -> str:
        """Multi-line checklist of a quest's objectives."""
        definition = self._definitions.get(quest_id)
        if definition is None:
            return ""
        progress = self.progress(quest_id) or (0,) * len(definition.objectives)

        lines = [definition.name]
        for count, objective in zip(progress, definition.objectives):
            done = count >= objective.target
            mark = data.OBJECTIVE_DONE_MARK if done else data.OBJECTIVE_OPEN_MARK
            line = f"{mark} {objective.describe()}"
            if objective.target > 1 and not done:
                line += f" ({count}/{objective.target})"
            lines.append(line)
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_state(self) -> QuestRuntimeState:
        return QuestRuntimeState.from_dict(self._state.to_dict())

    def import_state(self, state: QuestRuntimeState) -> None:
        """
        Replace the current state with a loaded one.

        Unknown quest ids are dropped and progress is clamped to the
        objective targets.
        """
        completed = {quest_id for quest_id in state.completed if quest_id in self._definitions}
        active: dict[str, list[int]] = {}
        for quest_id, progress in state.active.items():
            definition = self._definitions.get(quest_id)
            if definition is None:
                logger.warning(f"Dropping unknown quest {quest_id} from saved state")
                continue
            if quest_id in completed:
                continue
            counts = list(progress) + [0] * len(definition.objectives)
            active[quest_id] = [
                max(0, min(count, objective.target))
                for count, objective in zip(counts, definition.objectives)
            ]
        self._state = QuestRuntimeState(
            active=active,
            completed=completed,
            unlocked_flags=set(state.unlocked_flags),
        )


# ============================================================================
# Save Migration
# ============================================================================


@dataclass
class PlayerHistory:
    """Aggregate counters of a save that predates quest tracking."""

    player_level: int = 1
    completed_challenges: dict[Subject, int] = field(default_factory=dict)
    tiers: dict[Subject, DifficultyTier] = field(default_factory=dict)


def _drive_quest(
    tracker: QuestObjectiveTracker,
    quest_id: str,
    player_level: int,
    challenge_budget: dict[Subject, int] | None,
) -> QuestReward | None:
    """
    Accept a quest and feed it events through the public API.

    With challenge_budget None every objective is treated as done;
    otherwise only challenge objectives are fed, limited by the budget.
    """
    status = tracker.status(quest_id)
    if status == QuestStatus.COMPLETED:
        return None
    if status is None and not tracker.accept_quest(quest_id, player_level):
        return None

    definition = tracker.definition(quest_id)
    for i, objective in enumerate(definition.objectives):
        reached = tracker.progress(quest_id)[i]
        missing = objective.target - reached
        if isinstance(objective, CompleteChallenges):
            if challenge_budget is not None:
                # Credit history up to its count, not on top of earlier replays
                credited = min(objective.target, challenge_budget.get(objective.subject, 0))
                missing = credited - reached
            for _ in range(missing):
                tracker.record_challenge_complete(objective.subject)
        elif challenge_budget is None and missing > 0:
            if isinstance(objective, TalkToNpc):
                tracker.record_npc_talk(objective.npc_id)
            elif isinstance(objective, VisitRoom):
                tracker.record_room_visit(objective.room_id)
            elif isinstance(objective, ReachDifficulty):
                tracker.record_difficulty_reached(objective.subject, objective.tier)
            elif isinstance(objective, ReachLevel):
                tracker.record_level_reached(objective.level)

    return tracker.complete_quest(quest_id)


def replay_history(
    tracker: QuestObjectiveTracker,
    history: PlayerHistory,
    tutorial_chain: Iterable[str] | None = None,
    zone_entry_quests: Iterable[str] | None = None,
) -> list[QuestReward]:
    """
    Reconstruct quest state for a save made before quests existed.

    The tutorial chain is completed outright. Each zone's entry quest is
    accepted if the player's level allows it and credited with the
    player's past challenges in its subject, then completed if that is
    enough. Finally the current tiers and level are reported.

    Returns:
        Rewards of the quests completed by the replay.
    """
    from buddyquest.quest_data import TUTORIAL_CHAIN, ZONE_ENTRY_QUESTS

    tutorial_chain = TUTORIAL_CHAIN if tutorial_chain is None else tutorial_chain
    zone_entry_quests = ZONE_ENTRY_QUESTS if zone_entry_quests is None else zone_entry_quests

    rewards = []
    for quest_id in tutorial_chain:
        reward = _drive_quest(tracker, quest_id, history.player_level, None)
        if reward is not None:
            rewards.append(reward)

    for quest_id in zone_entry_quests:
        reward = _drive_quest(
            tracker, quest_id, history.player_level, history.completed_challenges
        )
        if reward is not None:
            rewards.append(reward)

    for subject, tier in history.tiers.items():
        tracker.record_difficulty_reached(subject, tier)
    tracker.record_level_reached(history.player_level)

    logger.info(f"Replayed quest history: {len(rewards)} quests completed")
    return rewards
