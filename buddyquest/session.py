"""
Learner session: wires the question bank, difficulty adapter, challenge
rounds and quest tracker of one profile together.

The host drives the session from its game loop:

    session = LearnerSession("profile-1", ProfileStorage.for_dynamodb("profile-1"))
    session.start(player_level=2)
    session.start_round(Subject.MATH, RoundAbilities(show_hints=True))
    while session.active_round is not None:
        events = session.tick(delta_time, input_state)
    summary = session.last_summary
    session.close()
"""

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field

from buddyquest.bank import QuestionBank
from buddyquest.config import EngineConfig
from buddyquest.difficulty import DifficultyAdapter
from buddyquest.errors import InsufficientContentError
from buddyquest.persistence import ProfileStorage
from buddyquest.providers import QuestionProvider
from buddyquest.quest_data import STARTING_QUEST_ID
from buddyquest.questions import DifficultyTier, GradeLevel, Question, Subject
from buddyquest.quests import PlayerHistory, QuestObjectiveTracker, QuestReward, replay_history
from buddyquest.rounds import (
    Action,
    ChallengeRound,
    InputState,
    RoundCompleted,
    RoundEvent,
    RoundResult,
    build_round,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundAbilities:
    """Buddy abilities active for a round."""

    has_second_chance: bool = False
    show_hints: bool = False


@dataclass
class RoundSummary:
    """Everything a finished round changed."""

    subject: Subject
    difficulty: DifficultyTier  # tier the round was played at
    result: RoundResult
    completed: bool
    tier_changed: bool
    new_tier: DifficultyTier
    progressed_quests: list[str] = field(default_factory=list)
    replenish: Future | None = None


@dataclass
class NpcVisit:
    """Quest changes caused by talking to an NPC."""

    progressed_quests: list[str] = field(default_factory=list)
    rewards: dict[str, QuestReward] = field(default_factory=dict)
    accepted_quests: list[str] = field(default_factory=list)


def draw_round_questions(
    bank: QuestionBank,
    subject: Subject,
    difficulty: DifficultyTier,
    grade_level: GradeLevel = GradeLevel.THIRD,
    mixed: bool = True,
    count: int | None = None,
) -> list[Question]:
    """
    Draw the questions of a round, falling back step by step.

    Order: mixed draw, plain draw, seed the subject from the static
    catalog, mixed draw, plain draw. Mixed draws are skipped when mixed is
    False.

    Raises:
        InsufficientContentError: If every step came back empty.
    """
    def attempt() -> list[Question] | None:
        if mixed:
            questions = bank.draw_mixed(subject, difficulty, count, grade_level)
            if questions is not None:
                return questions
        return bank.draw(subject, difficulty, count, grade_level)

    questions = attempt()
    if questions is not None:
        return questions

    logger.warning(
        f"Bank has no {difficulty.name.lower()} {subject.display_name} round, seeding from catalog"
    )
    bank.quick_seed_from_static(subject)

    questions = attempt()
    if questions is not None:
        return questions
    raise InsufficientContentError(subject, difficulty)


class LearnerSession:
    """
    One learner's play session.

    Created per profile. start() loads the profile and must be called
    before anything else; close() saves it and stops background work.
    """

    def __init__(
        self,
        profile_id: str,
        storage: ProfileStorage | None = None,
        config: EngineConfig | None = None,
        provider: QuestionProvider | None = None,
        executor: Executor | None = None,
        grade_level: GradeLevel = GradeLevel.THIRD,
        quest_definitions=None,
    ):
        """
        Initialize the session.

        Args:
            profile_id: The learner profile.
            storage: Where the profile lives. Defaults to DynamoDB.
            config: Engine settings. Defaults to EngineConfig.from_env().
            provider: Source of generated questions for the bank.
            executor: Executor for background replenishment.
            grade_level: Grade of the learner.
            quest_definitions: Quest catalog. Defaults to the built-in quests.
        """
        self.profile_id = profile_id
        self.storage = storage or ProfileStorage.for_dynamodb(profile_id)
        self.config = config or EngineConfig.from_env()
        self.grade_level = grade_level
        self.player_level = 1

        self._provider = provider
        self._executor = executor
        self._quest_definitions = quest_definitions
        self._bank_save_lock = threading.Lock()

        self.adapter: DifficultyAdapter | None = None
        self.bank: QuestionBank | None = None
        self.quests: QuestObjectiveTracker | None = None

        self._round: ChallengeRound | None = None
        self._round_subject: Subject | None = None
        self._round_tier: DifficultyTier | None = None
        self.last_summary: RoundSummary | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, player_level: int = 1) -> list[QuestReward]:
        """
        Load the profile and get every subject ready to play.

        A brand new profile gets the starting quest. A profile saved before
        quests were tracked has its quest state rebuilt from its history.

        Returns:
            Rewards of quests completed while rebuilding quest state.
        """
        self.player_level = player_level
        is_new = self.storage.is_new_profile()

        self.adapter = DifficultyAdapter(self.storage.load_progress(), self.config)
        self.bank = QuestionBank(
            self.storage.load_bank(),
            config=self.config,
            provider=self._provider,
            executor=self._executor,
            on_change=self._save_bank,
        )
        quest_state = self.storage.load_quests()
        self.quests = QuestObjectiveTracker(self._quest_definitions, quest_state)

        rewards: list[QuestReward] = []
        if is_new:
            self.quests.accept_quest(STARTING_QUEST_ID, player_level)
            logger.info(f"New profile {self.profile_id}")
        elif quest_state is None:
            history = PlayerHistory(
                player_level=player_level,
                completed_challenges={s: self.adapter.rounds_completed(s) for s in Subject},
                tiers={s: self.adapter.tier(s) for s in Subject},
            )
            rewards = replay_history(self.quests, history)

        lowest_tier = min(self.adapter.tier(subject) for subject in Subject)
        self.bank.seed_all_subjects_if_needed(lowest_tier, self.grade_level)
        self.save()
        logger.info(f"Session started for profile {self.profile_id} at level {player_level}")
        return rewards

    def save(self) -> None:
        """Persist all three documents."""
        self._require_started()
        self.storage.save_progress(self.adapter.export_state())
        self.storage.save_quests(self.quests.export_state())
        self._save_bank(self.bank)

    def close(self) -> None:
        """Cancel any round, wait for background work and save."""
        if self.bank is None:
            return
        if self._round is not None:
            self.cancel_round()
        self.bank.wait_for_pending()
        self.bank.shutdown(wait_for_work=True)
        self.save()
        logger.info(f"Session closed for profile {self.profile_id}")

    def _save_bank(self, bank: QuestionBank) -> None:
        # Background replenishment saves from a worker thread
        with self._bank_save_lock:
            self.storage.save_bank(bank.export_data())

    def _require_started(self) -> None:
        if self.bank is None:
            raise RuntimeError("Session has not been started")

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    @property
    def active_round(self) -> ChallengeRound | None:
        return self._round

    def start_round(
        self,
        subject: Subject,
        abilities: RoundAbilities | None = None,
    ) -> list[RoundEvent] | None:
        """
        Start a challenge round in a subject at its current tier.

        Returns:
            The opening events of the round, or None if no round could be
            drawn (the host should cancel the challenge).
        """
        self._require_started()
        if self._round is not None:
            logger.warning("Starting a round while another is active, cancelling the old one")
            self.cancel_round()

        abilities = abilities or RoundAbilities()
        tier = self.adapter.tier(subject)
        try:
            questions = draw_round_questions(
                self.bank,
                subject,
                tier,
                self.grade_level,
                mixed=self.config.mixed_rounds,
                count=self.config.round_size,
            )
        except InsufficientContentError as e:
            logger.warning(f"Cancelling challenge: {e}")
            return None

        self._round = build_round(
            questions,
            has_second_chance=abilities.has_second_chance,
            show_hints=abilities.show_hints,
            config=self.config,
        )
        self._round_subject = subject
        self._round_tier = tier
        logger.info(
            f"Round started: {subject.display_name} at {tier.name.lower()}, "
            f"{type(self._round).__name__} with {len(questions)} questions"
        )
        return self._round.build()

    def tick(self, delta_time: float, input_state: InputState | None = None) -> list[RoundEvent]:
        """
        Advance the active round by one frame.

        A cancel action abandons the round unless time already completed it.
        When the round completes it is finished right away and its summary
        is stored in last_summary.
        """
        if self._round is None:
            return []

        events = self._round.update(delta_time)
        if any(isinstance(event, RoundCompleted) for event in events):
            self.finish_round()
            return events

        if input_state is not None:
            if input_state.is_pressed(Action.CANCEL):
                self.cancel_round()
                return events
            events.extend(self._round.handle_input(input_state))

        if any(isinstance(event, RoundCompleted) for event in events):
            self.finish_round()
        return events

    def cancel_round(self) -> None:
        """Abandon the active round without recording anything."""
        if self._round is None:
            return
        self._round.teardown()
        logger.info(f"Round cancelled: {self._round_subject.display_name}")
        self._round = None
        self._round_subject = None
        self._round_tier = None

    def finish_round(self) -> RoundSummary:
        """
        Record the outcome of the active round.

        Answered questions feed the difficulty adapter and the bank; a
        completed round also counts towards quests. The bank is then
        topped up in the background and the profile saved.

        Raises:
            RuntimeError: If no round is active.
            InvalidTransitionError: In strict mode, if the round is not
                                    complete.
        """
        if self._round is None:
            raise RuntimeError("No active round to finish")

        challenge = self._round
        subject = self._round_subject
        tier = self._round_tier
        result = challenge.build_aggregate_result()

        answered = list(challenge.per_question_results)
        questions = list(challenge.all_round_questions[: len(answered)])

        tier_changed = self.adapter.record_results(subject, answered)
        new_tier = self.adapter.tier(subject)

        progressed: list[str] = []
        if challenge.is_complete:
            self.adapter.record_round(subject)
            progressed.extend(self.quests.record_challenge_complete(subject))
        progressed.extend(
            quest_id
            for quest_id in self.quests.record_difficulty_reached(subject, new_tier)
            if quest_id not in progressed
        )

        if questions:
            self.bank.record_results(subject, questions, answered)
        replenish = self.bank.replenish_after_quiz(subject, tier, self.grade_level, answered)

        challenge.teardown()
        self._round = None
        self._round_subject = None
        self._round_tier = None

        self.save()

        summary = RoundSummary(
            subject=subject,
            difficulty=tier,
            result=result,
            completed=challenge.is_complete,
            tier_changed=tier_changed,
            new_tier=new_tier,
            progressed_quests=progressed,
            replenish=replenish,
        )
        self.last_summary = summary
        logger.info(
            f"Round finished: {subject.display_name} {result.correct_count}/{result.total}, "
            f"{result.xp_awarded} XP, tier {new_tier.name.lower()}"
        )
        return summary

    # ------------------------------------------------------------------
    # World events
    # ------------------------------------------------------------------

    def record_room_visit(self, room_id: str) -> list[str]:
        self._require_started()
        return self.quests.record_room_visit(room_id)

    def record_level_reached(self, level: int) -> list[str]:
        """Report a new player level. Also unlocks level-gated quests."""
        self._require_started()
        self.player_level = max(self.player_level, level)
        return self.quests.record_level_reached(level)

    def record_npc_talk(self, npc_id: str) -> NpcVisit:
        """
        Talk to an NPC: progress talk objectives, turn in finished quests
        and accept the quests the NPC has to give.
        """
        self._require_started()
        visit = NpcVisit(progressed_quests=self.quests.record_npc_talk(npc_id))

        for definition in self.quests.completable_quests_for_npc(npc_id):
            reward = self.quests.complete_quest(definition.id)
            if reward is not None:
                visit.rewards[definition.id] = reward

        for definition in self.quests.quests_for_npc(npc_id, self.player_level):
            if self.quests.accept_quest(definition.id, self.player_level):
                visit.accepted_quests.append(definition.id)

        if visit.progressed_quests or visit.rewards or visit.accepted_quests:
            self.storage.save_quests(self.quests.export_state())
        return visit
