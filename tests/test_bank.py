"""Unit tests for the adaptive question bank."""

import logging
import random
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from buddyquest.bank import QuestionBank
from buddyquest.catalog import static_questions
from buddyquest.config import EngineConfig
from buddyquest.models import BankedQuestion, QuestionBankData, QuestionSource
from buddyquest.questions import DifficultyTier, GradeLevel, QuestionType, Subject

NOW = datetime(2024, 6, 1, 9, 0, 0)


class FakeProvider:
    """Provider returning a prepared list and recording its calls."""

    def __init__(self, questions=None, error=None, gate=None):
        self.questions = questions or []
        self.error = error
        self.gate = gate
        self.calls = []

    def generate(self, subject, difficulty, grade_level, count, exclude_ids):
        self.calls.append((subject, difficulty, count))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return list(self.questions)


def make_bank(banked, subject=Subject.MATH, **kwargs):
    data = QuestionBankData()
    data.for_subject(subject).extend(banked)
    kwargs.setdefault("provider", FakeProvider())
    kwargs.setdefault("rng", random.Random(0))
    kwargs.setdefault("clock", lambda: NOW)
    return QuestionBank(data, **kwargs)


@pytest.fixture
def mc_batch(make_mc):
    """Factory for lists of banked multiple-choice questions."""

    def build(count, prefix="mc", difficulty=DifficultyTier.EASY, times_correct=0, subject=Subject.MATH):
        return [
            BankedQuestion(
                question=make_mc(f"{prefix}_{i}", difficulty=difficulty, subject=subject),
                times_shown=times_correct,
                times_correct=times_correct,
            )
            for i in range(count)
        ]

    return build


class TestDraw:
    """Tests for drawing multiple-choice rounds."""

    def test_draws_a_full_round(self, mc_batch):
        bank = make_bank(mc_batch(5))

        questions = bank.draw(Subject.MATH, DifficultyTier.EASY)

        assert len(questions) == 5
        assert len({q.id for q in questions}) == 5

    def test_returns_none_instead_of_partial_round(self, mc_batch):
        bank = make_bank(mc_batch(4))

        assert bank.draw(Subject.MATH, DifficultyTier.EASY) is None

    def test_only_exact_tier_is_eligible(self, mc_batch):
        bank = make_bank(
            mc_batch(5, "easy") + mc_batch(5, "medium", difficulty=DifficultyTier.MEDIUM)
        )

        questions = bank.draw(Subject.MATH, DifficultyTier.MEDIUM)

        assert all(q.difficulty == DifficultyTier.MEDIUM for q in questions)
        assert bank.draw(Subject.MATH, DifficultyTier.HARD) is None

    def test_ignores_other_question_types(self, mc_batch, make_tf):
        tf = [BankedQuestion(question=make_tf(f"tf_{i}")) for i in range(5)]
        bank = make_bank(mc_batch(2) + tf)

        assert bank.draw(Subject.MATH, DifficultyTier.EASY) is None

    def test_mastered_and_recent_excluded(self, mc_batch):
        mastered = mc_batch(2, "mastered", times_correct=3)
        bank = make_bank(mastered + mc_batch(4, "fresh"))
        bank.record_results(Subject.MATH, [b.question for b in mastered], [True, True])

        assert bank.draw(Subject.MATH, DifficultyTier.EASY) is None

    def test_mastered_but_not_recent_is_still_eligible(self, mc_batch):
        bank = make_bank(mc_batch(5, times_correct=3))

        assert len(bank.draw(Subject.MATH, DifficultyTier.EASY)) == 5

    def test_unmastered_ranked_first(self, mc_batch):
        bank = make_bank(mc_batch(5, "mastered", times_correct=4) + mc_batch(5, "new"))

        questions = bank.draw(Subject.MATH, DifficultyTier.EASY)

        assert {q.id for q in questions} == {f"new_{i}" for i in range(5)}

    def test_recent_ranked_after_unseen(self, mc_batch):
        seen = mc_batch(5, "seen")
        bank = make_bank(seen + mc_batch(5, "unseen"))
        bank.record_results(Subject.MATH, [b.question for b in seen], [False] * 5)

        questions = bank.draw(Subject.MATH, DifficultyTier.EASY)

        assert {q.id for q in questions} == {f"unseen_{i}" for i in range(5)}

    def test_empty_subject(self):
        bank = make_bank([])

        assert bank.draw(Subject.SOCIAL, DifficultyTier.EASY) is None


class TestDrawMixed:
    """Tests for rounds mixing question types."""

    def test_caps_non_multiple_choice(self, mc_batch, make_tf):
        tf = [BankedQuestion(question=make_tf(f"tf_{i}")) for i in range(3)]
        bank = make_bank(mc_batch(5) + tf)

        questions = bank.draw_mixed(Subject.MATH, DifficultyTier.EASY)

        types = [q.question_type for q in questions]
        assert len(questions) == 5
        assert types.count(QuestionType.TRUE_FALSE) == 2
        assert types.count(QuestionType.MULTIPLE_CHOICE) == 3

    def test_tops_up_with_other_types_when_short_of_multiple_choice(self, mc_batch, make_tf):
        tf = [BankedQuestion(question=make_tf(f"tf_{i}")) for i in range(4)]
        bank = make_bank(mc_batch(2) + tf)

        questions = bank.draw_mixed(Subject.MATH, DifficultyTier.EASY)

        types = [q.question_type for q in questions]
        assert len(questions) == 5
        assert types.count(QuestionType.MULTIPLE_CHOICE) == 2
        assert types.count(QuestionType.TRUE_FALSE) == 3

    def test_without_other_types_it_is_a_plain_draw(self, mc_batch):
        bank = make_bank(mc_batch(5))

        questions = bank.draw_mixed(Subject.MATH, DifficultyTier.EASY)

        assert all(q.question_type == QuestionType.MULTIPLE_CHOICE for q in questions)

    def test_not_enough_content(self, mc_batch, make_tf):
        bank = make_bank(mc_batch(2) + [BankedQuestion(question=make_tf())])

        assert bank.draw_mixed(Subject.MATH, DifficultyTier.EASY) is None


class TestRecordResults:
    """Tests for writing round outcomes back to the bank."""

    def test_updates_statistics(self, mc_batch):
        batch = mc_batch(2)
        bank = make_bank(batch)

        bank.record_results(Subject.MATH, [b.question for b in batch], [True, False])

        first, second = bank.banked_questions(Subject.MATH)
        assert (first.times_shown, first.times_correct) == (1, 1)
        assert (second.times_shown, second.times_correct) == (1, 0)
        assert first.last_shown_date == NOW
        assert bank.recently_shown(Subject.MATH) == ["mc_0", "mc_1"]

    def test_matches_by_normalized_text(self, make_mc):
        bank = make_bank([BankedQuestion(question=make_mc("original", text="What is 2 + 2?"))])
        regenerated = make_mc("regenerated", text="  what IS 2 +  2? ")

        bank.record_results(Subject.MATH, [regenerated], [True])

        assert bank.banked_questions(Subject.MATH)[0].times_correct == 1
        assert bank.recently_shown(Subject.MATH) == ["original"]

    def test_unknown_question_is_skipped(self, mc_batch, make_mc, caplog):
        bank = make_bank(mc_batch(1))

        with caplog.at_level(logging.WARNING):
            bank.record_results(Subject.MATH, [make_mc("ghost")], [True])

        assert bank.banked_questions(Subject.MATH)[0].times_shown == 0
        assert "ghost" in caplog.text

    def test_length_mismatch(self, mc_batch):
        batch = mc_batch(2)
        bank = make_bank(batch)

        with pytest.raises(ValueError):
            bank.record_results(Subject.MATH, [b.question for b in batch], [True])

    def test_recently_shown_ring_is_bounded(self, mc_batch):
        batch = mc_batch(20)
        bank = make_bank(batch)

        bank.record_results(Subject.MATH, [b.question for b in batch], [False] * 20)

        recent = bank.recently_shown(Subject.MATH)
        assert len(recent) == 15
        assert recent[-1] == "mc_19"


class TestSeeding:
    """Tests for static catalog seeding."""

    def test_quick_seed_imports_catalog_once(self):
        bank = make_bank([])

        added = bank.quick_seed_from_static(Subject.SCIENCE)

        assert added == len(static_questions(Subject.SCIENCE))
        assert bank.quick_seed_from_static(Subject.SCIENCE) == 0
        assert all(
            b.source == QuestionSource.STATIC for b in bank.banked_questions(Subject.SCIENCE)
        )

    def test_seed_all_subjects_makes_every_subject_playable(self):
        executor = ThreadPoolExecutor(max_workers=1)
        bank = make_bank([], executor=executor)

        futures = bank.seed_all_subjects_if_needed(DifficultyTier.EASY, GradeLevel.THIRD)
        for future in futures:
            future.result(timeout=10)
        executor.shutdown()

        for subject in Subject:
            assert bank.question_count(subject) >= 5
            assert bank.draw(subject, DifficultyTier.EASY) is not None

    def test_seed_all_skips_full_subjects(self, mc_batch):
        config = EngineConfig(bank_target=5)
        bank = make_bank(mc_batch(5), config=config, executor=MagicMock())

        bank.seed_all_subjects_if_needed(DifficultyTier.EASY, GradeLevel.THIRD)

        assert bank.question_count(Subject.MATH) == 5


class TestReplenish:
    """Tests for background replenishment after a quiz."""

    def test_adds_generated_questions(self, make_mc):
        generated = [make_mc(f"gen_{i}", subject=Subject.SCIENCE) for i in range(3)]
        on_change = MagicMock()
        bank = make_bank([], provider=FakeProvider(generated), on_change=on_change)

        future = bank.replenish_after_quiz(
            Subject.SCIENCE, DifficultyTier.EASY, GradeLevel.THIRD, [True, False, True]
        )
        added = future.result(timeout=10)
        bank.shutdown()

        banked = bank.banked_questions(Subject.SCIENCE)
        assert added == 10
        assert sum(b.source == QuestionSource.GENERATED for b in banked) == 3
        assert sum(b.source == QuestionSource.STATIC for b in banked) == 7
        assert bank.export_data().last_replenish[Subject.SCIENCE] == NOW
        on_change.assert_called_once_with(bank)

    def test_provider_failure_falls_back_to_catalog(self, caplog):
        bank = make_bank([], provider=FakeProvider(error=RuntimeError("model offline")))

        with caplog.at_level(logging.ERROR):
            future = bank.replenish_after_quiz(
                Subject.SCIENCE, DifficultyTier.EASY, GradeLevel.THIRD, [True]
            )
            added = future.result(timeout=10)
        bank.shutdown()

        assert added == 10
        assert "Question provider failed" in caplog.text
        assert not bank.is_replenishing(Subject.SCIENCE)

    def test_rejected_submit_does_not_block_later_replenishes(self):
        executor = ThreadPoolExecutor(max_workers=1)
        executor.shutdown()
        bank = make_bank([], executor=executor)

        with pytest.raises(RuntimeError):
            bank.replenish_after_quiz(Subject.SCIENCE, DifficultyTier.EASY, GradeLevel.THIRD, [True])

        assert not bank.is_replenishing(Subject.SCIENCE)

    def test_invalid_generated_questions_are_rejected(self, make_mc):
        broken = [
            make_mc("three_options", options=("A", "B", "C"), subject=Subject.SCIENCE),
            make_mc("wrong_subject", subject=Subject.MATH),
        ]
        bank = make_bank([], provider=FakeProvider(broken))

        bank.replenish_after_quiz(
            Subject.SCIENCE, DifficultyTier.EASY, GradeLevel.THIRD, [True]
        ).result(timeout=10)
        bank.shutdown()

        ids = {b.id for b in bank.banked_questions(Subject.SCIENCE)}
        assert "three_options" not in ids
        assert "wrong_subject" not in ids
        assert all(
            b.source == QuestionSource.STATIC for b in bank.banked_questions(Subject.SCIENCE)
        )

    @pytest.mark.parametrize(
        "results, expected",
        [
            ([True] * 5, DifficultyTier.MEDIUM),
            ([True, True, True, False, False], DifficultyTier.EASY),
            ([False] * 5, DifficultyTier.BEGINNER),
            ([], DifficultyTier.EASY),
        ],
    )
    def test_target_tier_follows_quiz_accuracy(self, results, expected):
        provider = FakeProvider()
        bank = make_bank([], provider=provider)

        bank.replenish_after_quiz(Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, results).result(
            timeout=10
        )
        bank.shutdown()

        assert provider.calls[0][1] == expected

    def test_skipped_while_in_flight(self):
        gate = threading.Event()
        bank = make_bank([], provider=FakeProvider(gate=gate))

        first = bank.replenish_after_quiz(Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, [True])
        second = bank.replenish_after_quiz(Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, [True])

        assert first is not None
        assert second is None
        assert bank.is_replenishing(Subject.MATH)

        gate.set()
        first.result(timeout=10)
        bank.shutdown()
        assert not bank.is_replenishing(Subject.MATH)

    def test_skipped_during_cooldown(self):
        data = QuestionBankData()
        data.last_replenish[Subject.MATH] = NOW - timedelta(seconds=60)
        bank = QuestionBank(data, provider=FakeProvider(), clock=lambda: NOW)

        assert (
            bank.replenish_after_quiz(Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, [True])
            is None
        )

    def test_runs_again_after_cooldown(self):
        data = QuestionBankData()
        data.last_replenish[Subject.MATH] = NOW - timedelta(seconds=601)
        bank = QuestionBank(data, provider=FakeProvider(), clock=lambda: NOW)

        future = bank.replenish_after_quiz(
            Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, [True]
        )
        future.result(timeout=10)
        bank.shutdown()

        assert future is not None

    def test_skipped_when_supply_is_sufficient(self, mc_batch):
        bank = make_bank(mc_batch(5), config=EngineConfig(bank_target=5))

        assert (
            bank.replenish_after_quiz(Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, [True])
            is None
        )

    def test_retires_stale_mastered_questions_down_to_floor(self, make_mc):
        stale = [
            BankedQuestion(
                question=make_mc(f"old_{i}"),
                times_shown=3,
                times_correct=3,
                last_shown_date=NOW - timedelta(days=8),
            )
            for i in range(6)
        ]
        config = EngineConfig(bank_minimum=2, bank_target=4)
        bank = make_bank(stale, config=config)

        added = bank.replenish_after_quiz(
            Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, [True]
        ).result(timeout=10)
        bank.shutdown()

        assert added == 0
        assert bank.question_count(Subject.MATH) == 4

    def test_recently_mastered_questions_are_kept(self, make_mc):
        fresh = [
            BankedQuestion(
                question=make_mc(f"new_{i}"),
                times_shown=3,
                times_correct=3,
                last_shown_date=NOW - timedelta(days=2),
            )
            for i in range(6)
        ]
        bank = make_bank(fresh, config=EngineConfig(bank_minimum=2, bank_target=4))

        bank.replenish_after_quiz(Subject.MATH, DifficultyTier.EASY, GradeLevel.THIRD, [True]).result(
            timeout=10
        )
        bank.shutdown()

        assert bank.question_count(Subject.MATH) == 6

    def test_wait_for_pending(self):
        bank = make_bank([])
        bank.replenish_after_quiz(Subject.SOCIAL, DifficultyTier.EASY, GradeLevel.THIRD, [True])

        assert bank.wait_for_pending(timeout=10)
        bank.shutdown()
        assert bank.question_count(Subject.SOCIAL) > 0
