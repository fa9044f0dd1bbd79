"""
Adaptive question bank for the BuddyQuest learning engine.

Every learner owns a per-subject bank of questions with usage and mastery
statistics. Rounds are drawn from the bank, results are written back to it,
and after each quiz the bank is topped up in the background from a
QuestionProvider and the bundled static catalog.

Draw policy:
- only questions of the exact requested tier are eligible
- questions that are both mastered and recently shown are excluded
- unmastered questions come first, then questions not shown recently,
  then random order
- a draw never returns a partial round; it returns None instead
"""

import logging
import random
import threading
from collections import deque
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from datetime import datetime, timedelta

from buddyquest.catalog import static_questions, static_questions_for
from buddyquest.config import EngineConfig
from buddyquest.errors import QuestionValidationError
from buddyquest.models import BankedQuestion, QuestionBankData, QuestionSource
from buddyquest.providers import ArithmeticQuestionProvider, QuestionProvider
from buddyquest.questions import (
    DifficultyTier,
    GradeLevel,
    Question,
    QuestionType,
    Subject,
    normalize_text,
)

logger = logging.getLogger(__name__)


class QuestionBank:
    """
    Per-session question bank service.

    All mutation goes through an internal lock, so background replenishment
    can run while the session keeps drawing.
    """

    def __init__(
        self,
        data: QuestionBankData | None = None,
        config: EngineConfig | None = None,
        provider: QuestionProvider | None = None,
        executor: Executor | None = None,
        on_change: Callable[["QuestionBank"], None] | None = None,
        rng=None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the bank.

        Args:
            data: Previously saved bank. If None, starts empty.
            config: Bank sizes, thresholds and cooldown.
            provider: Source of generated questions. Defaults to the
                      arithmetic provider.
            executor: Executor for background replenishment. If None, a
                      single-worker thread pool is created on first use.
            on_change: Called after background work changed the bank,
                       typically to persist it.
            rng: Optional random.Random instance for reproducible draws.
            clock: Source of the current time.
        """
        self._data = data or QuestionBankData()
        self._config = config or EngineConfig()
        self._provider = provider if provider is not None else ArithmeticQuestionProvider()
        self._executor = executor
        self._owns_executor = executor is None
        self._on_change = on_change
        self._rng = rng or random.Random()
        self._clock = clock

        self._lock = threading.RLock()
        self._recent: dict[Subject, deque[str]] = {}
        self._replenishing: set[Subject] = set()
        self._pending: list[Future] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def question_count(self, subject: Subject) -> int:
        with self._lock:
            return self._data.count(subject)

    def is_replenishing(self, subject: Subject) -> bool:
        with self._lock:
            return subject in self._replenishing

    def recently_shown(self, subject: Subject) -> list[str]:
        """IDs of recently shown questions, oldest first."""
        with self._lock:
            return list(self._recent_ring(subject))

    def banked_questions(self, subject: Subject) -> list[BankedQuestion]:
        """A copy of the subject's banked questions."""
        with self._lock:
            return list(self._data.questions.get(subject, []))

    def export_data(self) -> QuestionBankData:
        """A deep copy of the bank for persistence."""
        with self._lock:
            return QuestionBankData.from_dict(self._data.to_dict())

    @property
    def data(self) -> QuestionBankData:
        return self.export_data()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(
        self,
        subject: Subject,
        difficulty: DifficultyTier,
        count: int | None = None,
        grade_level: GradeLevel = GradeLevel.THIRD,
    ) -> list[Question] | None:
        """
        Draw a round of multiple-choice questions.

        Args:
            subject: Subject to draw from.
            difficulty: Exact tier to draw.
            count: Round size. Defaults to the configured round size.
            grade_level: Grade of the learner (used by replenishment only).

        Returns:
            count questions, or None if the bank cannot fill a whole round.
        """
        count = count or self._config.round_size
        with self._lock:
            candidates = self._eligible(subject, difficulty, QuestionType.MULTIPLE_CHOICE)
            if len(candidates) < max(self._config.bank_minimum, count):
                logger.info(
                    f"Not enough {subject.display_name} questions at {difficulty.name.lower()}: "
                    f"{len(candidates)} eligible"
                )
                return None
            ranked = self._rank(subject, candidates)
        return [banked.question for banked in ranked[:count]]

    def draw_mixed(
        self,
        subject: Subject,
        difficulty: DifficultyTier,
        count: int | None = None,
        grade_level: GradeLevel = GradeLevel.THIRD,
    ) -> list[Question] | None:
        """
        Draw a round that mixes question types.

        Up to mixed_max_non_mc true/false, ordering or matching questions
        are combined with multiple-choice ones. Without any eligible
        non-multiple-choice content this is the plain draw.

        Returns:
            count questions in shuffled order, or None.
        """
        count = count or self._config.round_size
        with self._lock:
            candidates = self._eligible(subject, difficulty)
            others = [b for b in candidates if b.question.question_type != QuestionType.MULTIPLE_CHOICE]
            if not others:
                return self.draw(subject, difficulty, count, grade_level)
            if len(candidates) < max(self._config.bank_minimum, count):
                return None

            multiple_choice = self._rank(
                subject,
                [b for b in candidates if b.question.question_type == QuestionType.MULTIPLE_CHOICE],
            )
            others = self._rank(subject, others)

        take_other = min(self._config.mixed_max_non_mc, max(count - 1, 0), len(others))
        take_mc = min(count - take_other, len(multiple_choice))
        take_other += count - take_other - take_mc

        selected = [b.question for b in others[:take_other] + multiple_choice[:take_mc]]
        self._rng.shuffle(selected)
        return selected

    def _recent_ring(self, subject: Subject) -> deque[str]:
        ring = self._recent.get(subject)
        if ring is None:
            ring = deque(maxlen=self._config.recently_shown_window)
            self._recent[subject] = ring
        return ring

    def _eligible(
        self,
        subject: Subject,
        difficulty: DifficultyTier,
        question_type: QuestionType | None = None,
    ) -> list[BankedQuestion]:
        recent = set(self._recent_ring(subject))
        return [
            banked
            for banked in self._data.questions.get(subject, [])
            if banked.question.difficulty == difficulty
            and (question_type is None or banked.question.question_type == question_type)
            and not (banked.is_mastered and banked.id in recent)
        ]

    def _rank(self, subject: Subject, candidates: list[BankedQuestion]) -> list[BankedQuestion]:
        recent = set(self._recent_ring(subject))
        return sorted(
            candidates,
            key=lambda banked: (banked.is_mastered, banked.id in recent, self._rng.random()),
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_results(
        self,
        subject: Subject,
        questions: Sequence[Question],
        results: Sequence[bool],
    ) -> None:
        """
        Write the outcome of a round back to the bank.

        Questions are matched by ID first, then by normalized text.
        Questions that are not in the bank are skipped.

        Raises:
            ValueError: If questions and results differ in length.
        """
        if len(questions) != len(results):
            raise ValueError(
                f"Got {len(questions)} questions but {len(results)} results"
            )

        now = self._clock()
        with self._lock:
            banked_list = self._data.questions.get(subject, [])
            by_id = {banked.id: banked for banked in banked_list}
            by_text = {banked.question.normalized_text: banked for banked in banked_list}
            ring = self._recent_ring(subject)

            for question, correct in zip(questions, results):
                banked = by_id.get(question.id) or by_text.get(question.normalized_text)
                if banked is None:
                    logger.warning(f"Question {question.id} is not in the {subject.display_name} bank")
                    continue
                banked.record(correct, now)
                ring.append(banked.id)

    # ------------------------------------------------------------------
    # Seeding and replenishment
    # ------------------------------------------------------------------

    def quick_seed_from_static(self, subject: Subject) -> int:
        """
        Import the subject's static catalog right away.

        Questions already in the bank are skipped.

        Returns:
            The number of questions added.
        """
        with self._lock:
            added = self._add_questions(subject, static_questions(subject), QuestionSource.STATIC)
        logger.info(f"Seeded {added} static {subject.display_name} questions")
        return added

    def seed_all_subjects_if_needed(
        self,
        difficulty: DifficultyTier,
        grade_level: GradeLevel,
    ) -> list[Future]:
        """
        Make every subject playable and schedule enrichment.

        Subjects below the quiz minimum are seeded from the static catalog
        immediately; subjects below the target size are then topped up in
        the background.

        Returns:
            Futures of the scheduled background work.
        """
        for subject in Subject:
            if self.question_count(subject) < self._config.bank_minimum:
                self.quick_seed_from_static(subject)

        futures = []
        for subject in Subject:
            with self._lock:
                if self._data.count(subject) >= self._config.bank_target:
                    continue
                if subject in self._replenishing:
                    continue
                self._replenishing.add(subject)
            futures.append(self._submit(subject, difficulty, grade_level))
        return futures

    def replenish_after_quiz(
        self,
        subject: Subject,
        difficulty: DifficultyTier,
        grade_level: GradeLevel,
        quiz_results: Sequence[bool],
    ) -> Future | None:
        """
        Schedule a background top-up of a subject after a quiz.

        Safe to call after every round: nothing is scheduled while a
        replenish for the subject is running, within the cooldown window,
        or while the fresh unmastered supply is at the target size.

        Args:
            subject: Subject of the finished quiz.
            difficulty: Tier the quiz was played at.
            grade_level: Grade of the learner.
            quiz_results: Per-question outcomes of the quiz.

        Returns:
            The Future of the scheduled work, or None if skipped.
        """
        now = self._clock()
        with self._lock:
            if subject in self._replenishing:
                logger.debug(f"Replenish of {subject.display_name} already running")
                return None

            last = self._data.last_replenish.get(subject)
            if last is not None and (now - last).total_seconds() < self._config.replenish_cooldown:
                logger.debug(f"Replenish of {subject.display_name} is cooling down")
                return None

            recent = set(self._recent_ring(subject))
            supply = sum(
                1
                for banked in self._data.questions.get(subject, [])
                if not banked.is_mastered and banked.id not in recent
            )
            if supply >= self._config.bank_target:
                return None

            self._replenishing.add(subject)

        target_tier = self._target_tier(difficulty, quiz_results)
        return self._submit(subject, target_tier, grade_level)

    def _target_tier(self, difficulty: DifficultyTier, quiz_results: Sequence[bool]) -> DifficultyTier:
        if not quiz_results:
            return difficulty
        accuracy = sum(quiz_results) / len(quiz_results)
        if accuracy >= self._config.increase_threshold:
            return difficulty.next
        if accuracy <= self._config.decrease_threshold:
            return difficulty.previous
        return difficulty

    def _submit(self, subject: Subject, tier: DifficultyTier, grade_level: GradeLevel) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="buddyquest-replenish"
            )
        try:
            future = self._executor.submit(self._replenish, subject, tier, grade_level)
        except Exception:
            with self._lock:
                self._replenishing.discard(subject)
            raise
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def _replenish(self, subject: Subject, tier: DifficultyTier, grade_level: GradeLevel) -> int:
        """Background replenishment pass. Returns the number of questions added."""
        try:
            with self._lock:
                removed = self._remove_stale_mastered(subject)
                deficit = self._config.bank_target - self._data.count(subject)
                existing_ids = {banked.id for banked in self._data.questions.get(subject, [])}

            added = 0
            if deficit > 0:
                batch = min(deficit, self._config.replenish_batch_size)
                generated = self._generate(subject, tier, grade_level, batch, existing_ids)
                with self._lock:
                    added = self._add_questions(subject, generated[:batch], QuestionSource.GENERATED)
                    if added < batch:
                        added += self._fill_from_catalog(subject, tier, batch - added)

            with self._lock:
                self._data.last_replenish[subject] = self._clock()

            logger.info(
                f"Replenished {subject.display_name} at {tier.name.lower()}: "
                f"{added} added, {removed} retired"
            )
            if self._on_change is not None:
                self._on_change(self)
            return added
        finally:
            with self._lock:
                self._replenishing.discard(subject)

    def _generate(
        self,
        subject: Subject,
        tier: DifficultyTier,
        grade_level: GradeLevel,
        count: int,
        existing_ids: set[str],
    ) -> list[Question]:
        try:
            return list(self._provider.generate(subject, tier, grade_level, count, existing_ids))
        except Exception:
            logger.exception(f"Question provider failed for {subject.display_name}")
            return []

    def _fill_from_catalog(self, subject: Subject, tier: DifficultyTier, count: int) -> int:
        """Top up from the static catalog, the requested tier first."""
        preferred = static_questions_for(subject, tier)
        preferred_ids = {question.id for question in preferred}
        fallback = [q for q in static_questions(subject) if q.id not in preferred_ids]

        added = 0
        for question in preferred + fallback:
            if added >= count:
                break
            added += self._add_questions(subject, [question], QuestionSource.STATIC)
        return added

    def _remove_stale_mastered(self, subject: Subject) -> int:
        """
        Retire mastered questions not shown for mastery_removal_days.

        Never shrinks the subject below twice the quiz minimum.
        """
        banked_list = self._data.questions.get(subject, [])
        floor = self._config.bank_minimum * 2
        cutoff = self._clock() - timedelta(days=self._config.mastery_removal_days)

        kept = []
        removed = 0
        for banked in banked_list:
            stale = (
                banked.is_mastered
                and banked.last_shown_date is not None
                and banked.last_shown_date < cutoff
            )
            if stale and len(banked_list) - removed > floor:
                removed += 1
                continue
            kept.append(banked)

        if removed:
            self._data.questions[subject] = kept
        return removed

    def _add_questions(
        self,
        subject: Subject,
        questions: Sequence[Question],
        source: QuestionSource,
    ) -> int:
        banked_list = self._data.for_subject(subject)
        ids = {banked.id for banked in banked_list}
        texts = {banked.question.normalized_text for banked in banked_list}
        now = self._clock()

        added = 0
        for question in questions:
            try:
                question.validate()
            except QuestionValidationError as e:
                logger.warning(f"Rejected question {question.id}: {e}")
                continue
            if question.subject != subject:
                logger.warning(f"Rejected question {question.id}: belongs to {question.subject.value}")
                continue
            text = normalize_text(question.text)
            if question.id in ids or text in texts:
                continue
            banked_list.append(BankedQuestion(question=question, added_date=now, source=source))
            ids.add(question.id)
            texts.add(text)
            added += 1
        return added

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def wait_for_pending(self, timeout: float | None = None) -> bool:
        """
        Block until scheduled background work has finished.

        Returns:
            True if everything finished within the timeout.
        """
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_work: bool = True) -> None:
        """Stop the executor if the bank created it."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=wait_for_work)
            self._executor = None
