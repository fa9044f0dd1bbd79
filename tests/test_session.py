"""Tests for the learner session that ties the engine together."""

import random
from unittest.mock import MagicMock, call

import pytest

from buddyquest.config import EngineConfig
from buddyquest.errors import InsufficientContentError
from buddyquest.models import DifficultyState
from buddyquest.persistence import MemoryBlobStore, ProfileStorage
from buddyquest.providers import ArithmeticQuestionProvider
from buddyquest.questions import DifficultyTier, QuestionType, Subject
from buddyquest.quests import QuestReward, QuestStatus
from buddyquest.rounds import Action, InputState, QuestionStarted, RoundCompleted
from buddyquest.rounds.matching import MatchingFocus
from buddyquest.rounds.ordering import OrderingState
from buddyquest.session import LearnerSession, RoundAbilities, draw_round_questions

CONFIRM = InputState.of(Action.CONFIRM)
CANCEL = InputState.of(Action.CANCEL)


# ============================================================================
# Helpers
# ============================================================================


def answer_correctly(interaction):
    """Put the interaction into the correct answer, ready to submit."""
    payload = interaction.payload
    question_type = interaction.question.question_type
    if question_type == QuestionType.MULTIPLE_CHOICE:
        interaction.selected_index = payload.correct_index
    elif question_type == QuestionType.TRUE_FALSE:
        interaction.selected = payload.correct_answer
    elif question_type == QuestionType.ORDERING:
        interaction.order = list(payload.correct_order)
        interaction.state = OrderingState.SUBMIT_FOCUSED
    elif question_type == QuestionType.MATCHING:
        interaction.mapping = list(payload.correct_mapping)
        interaction.focus = MatchingFocus.SUBMIT


def play_round(session):
    """Answer every question of the active round correctly."""
    while session.active_round is not None:
        answer_correctly(session.active_round.interaction)
        session.tick(0.0, CONFIRM)
        session.tick(2.0)
    return session.last_summary


@pytest.fixture
def make_session():
    sessions = []

    def build(storage=None, config=None, profile_id="kid_1"):
        session = LearnerSession(
            profile_id,
            storage=storage or ProfileStorage.in_memory(profile_id),
            config=config or EngineConfig(),
            provider=ArithmeticQuestionProvider(random.Random(1)),
        )
        sessions.append(session)
        return session

    yield build
    for session in sessions:
        session.close()


# ============================================================================
# Session Lifecycle
# ============================================================================


class TestStart:
    """Tests for loading a profile."""

    def test_new_profile(self, make_session):
        session = make_session()

        rewards = session.start()

        assert rewards == []
        assert session.quests.status("tutorial_start") == QuestStatus.ACTIVE
        assert not session.storage.is_new_profile()
        for subject in Subject:
            assert session.bank.question_count(subject) >= 5
            assert session.adapter.tier(subject) == DifficultyTier.EASY

    def test_existing_profile_without_quests_is_replayed(self, make_session):
        storage = ProfileStorage.in_memory("kid_1")
        storage.save_progress(
            DifficultyState(
                tiers={Subject.LANGUAGE_ARTS: DifficultyTier.MEDIUM},
                rounds={Subject.LANGUAGE_ARTS: 5},
            )
        )
        session = make_session(storage)

        rewards = session.start(player_level=3)

        assert len(rewards) == 4
        assert session.quests.status("forest_beginner_path") == QuestStatus.COMPLETED
        assert session.quests.status("peaks_beginner_climb") == QuestStatus.ACTIVE
        assert storage.load_quests() is not None

    def test_saved_quests_are_not_replayed(self, make_session):
        storage = ProfileStorage.in_memory("kid_1")
        first = make_session(storage)
        first.start()
        first.close()

        second = make_session(storage)

        assert second.start() == []
        assert second.quests.status("tutorial_start") == QuestStatus.ACTIVE

    def test_corrupt_progress_still_starts(self, make_session):
        progress = MemoryBlobStore()
        progress.save("kid_1", b"garbage")
        storage = ProfileStorage("kid_1", MemoryBlobStore(), progress, MemoryBlobStore())
        session = make_session(storage)

        session.start()

        assert session.adapter.tier(Subject.MATH) == DifficultyTier.EASY
        assert storage.load_progress() == DifficultyState()

    def test_methods_require_start(self, make_session):
        session = make_session()

        with pytest.raises(RuntimeError):
            session.start_round(Subject.MATH)


class TestRounds:
    """Tests for playing challenge rounds through the session."""

    def test_start_round_opens_first_question(self, make_session):
        session = make_session()
        session.start()

        events = session.start_round(Subject.MATH, RoundAbilities(show_hints=True))

        assert isinstance(events[0], QuestionStarted)
        assert events[0].total == 5
        assert session.active_round is not None

    def test_play_full_round(self, make_session):
        session = make_session()
        session.start()
        session.start_round(Subject.SCIENCE)

        summary = play_round(session)

        assert summary.subject == Subject.SCIENCE
        assert summary.completed
        assert summary.result.correct_count == 5
        assert summary.result.is_correct
        assert not summary.tier_changed
        assert session.active_round is None

        progress = session.storage.load_progress()
        assert progress.completed[Subject.SCIENCE] == 5
        assert progress.correct[Subject.SCIENCE] == 5
        assert progress.rounds[Subject.SCIENCE] == 1
        assert progress.windows[Subject.SCIENCE] == [True] * 5

    def test_round_results_reach_the_bank(self, make_session):
        session = make_session()
        session.start()
        session.start_round(Subject.LANGUAGE_ARTS)
        questions = session.active_round.all_round_questions

        play_round(session)

        banked = {b.id: b for b in session.bank.banked_questions(Subject.LANGUAGE_ARTS)}
        for question in questions:
            assert banked[question.id].times_correct == 1
        assert set(session.bank.recently_shown(Subject.LANGUAGE_ARTS)) >= {q.id for q in questions}

    def test_tier_change(self, make_session):
        session = make_session(config=EngineConfig(window_size=5))
        session.start()
        session.start_round(Subject.MATH)

        summary = play_round(session)

        assert summary.tier_changed
        assert summary.difficulty == DifficultyTier.EASY
        assert summary.new_tier == DifficultyTier.MEDIUM
        assert session.storage.load_progress().tiers[Subject.MATH] == DifficultyTier.MEDIUM

    def test_cancel_records_nothing(self, make_session):
        session = make_session()
        session.start()
        session.start_round(Subject.MATH)

        session.tick(0.0, CONFIRM)
        session.tick(0.5, CANCEL)

        assert session.active_round is None
        assert session.last_summary is None
        assert session.adapter.completed_count(Subject.MATH) == 0

    def test_cancel_on_the_completing_tick_still_records(self, make_session):
        session = make_session()
        session.start()
        session.start_round(Subject.MATH)
        for question_number in range(5):
            answer_correctly(session.active_round.interaction)
            session.tick(0.0, CONFIRM)
            if question_number < 4:
                session.tick(2.0)

        events = session.tick(2.0, CANCEL)

        assert any(isinstance(event, RoundCompleted) for event in events)
        assert session.active_round is None
        assert session.last_summary is not None
        assert session.last_summary.completed
        assert session.adapter.completed_count(Subject.MATH) == 5
        assert session.adapter.rounds_completed(Subject.MATH) == 1

    def test_finish_early_records_answered_questions_only(self, make_session):
        session = make_session()
        session.start()
        session.start_round(Subject.MATH)
        answer_correctly(session.active_round.interaction)
        session.tick(0.0, CONFIRM)

        summary = session.finish_round()

        assert not summary.completed
        assert summary.result.per_question_results == (True, False, False, False, False)
        assert session.adapter.completed_count(Subject.MATH) == 1
        assert session.adapter.rounds_completed(Subject.MATH) == 0

    def test_finish_without_round(self, make_session):
        session = make_session()
        session.start()

        with pytest.raises(RuntimeError):
            session.finish_round()

    def test_completed_round_counts_for_quests(self, make_session):
        session = make_session()
        session.start()
        session.record_npc_talk("guide_pip")
        session.record_room_visit("forest_entrance")
        session.start_round(Subject.LANGUAGE_ARTS)

        summary = play_round(session)

        assert summary.progressed_quests == ["tutorial_first_challenge"]
        assert session.quests.is_quest_completable("tutorial_first_challenge")

    def test_exhausted_content_cancels_round(self, make_session, monkeypatch):
        monkeypatch.setattr("buddyquest.bank.static_questions", lambda subject: [])
        monkeypatch.setattr(
            "buddyquest.bank.static_questions_for", lambda subject, tier=None, question_type=None: []
        )
        session = make_session()
        session.start()

        assert session.start_round(Subject.LANGUAGE_ARTS) is None
        assert session.active_round is None


class TestWorldEvents:
    """Tests for NPC talks, room visits and levels."""

    def test_talking_to_guide(self, make_session):
        session = make_session()
        session.start()

        visit = session.record_npc_talk("guide_pip")

        assert visit.progressed_quests == ["tutorial_start"]
        assert visit.rewards == {"tutorial_start": QuestReward(xp_bonus=10)}
        assert visit.accepted_quests == ["tutorial_first_challenge"]
        saved = session.storage.load_quests()
        assert "tutorial_start" in saved.completed
        assert "tutorial_first_challenge" in saved.active

    def test_level_unlocks_zone_quests(self, make_session):
        session = make_session()
        session.start()

        assert session.record_npc_talk("coach_unity").accepted_quests == []

        session.record_level_reached(2)

        assert session.record_npc_talk("coach_unity").accepted_quests == ["arena_first_teamup"]
        assert session.player_level == 2


# ============================================================================
# Draw Fallback Chain
# ============================================================================


class TestDrawRoundQuestions:
    """Tests for the draw fallback chain."""

    def test_mixed_draw_first(self):
        bank = MagicMock()
        bank.draw_mixed.return_value = ["q"] * 5

        assert draw_round_questions(bank, Subject.MATH, DifficultyTier.EASY) == ["q"] * 5
        bank.draw.assert_not_called()

    def test_seeds_and_retries(self):
        bank = MagicMock()
        bank.draw_mixed.return_value = None
        bank.draw.side_effect = [None, ["q"] * 5]

        questions = draw_round_questions(bank, Subject.SCIENCE, DifficultyTier.HARD)

        assert questions == ["q"] * 5
        assert [c[0] for c in bank.mock_calls] == [
            "draw_mixed",
            "draw",
            "quick_seed_from_static",
            "draw_mixed",
            "draw",
        ]
        assert bank.quick_seed_from_static.call_args == call(Subject.SCIENCE)

    def test_plain_draw_only(self):
        bank = MagicMock()
        bank.draw.return_value = ["q"] * 5

        draw_round_questions(bank, Subject.MATH, DifficultyTier.EASY, mixed=False)

        bank.draw_mixed.assert_not_called()

    def test_raises_when_everything_fails(self):
        bank = MagicMock()
        bank.draw_mixed.return_value = None
        bank.draw.return_value = None

        with pytest.raises(InsufficientContentError) as exc_info:
            draw_round_questions(bank, Subject.SOCIAL, DifficultyTier.ADVANCED)

        assert exc_info.value.subject == Subject.SOCIAL
        assert "Social Skills" in str(exc_info.value)
