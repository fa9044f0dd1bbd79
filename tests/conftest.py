"""Shared fixtures for the BuddyQuest test suite."""

import pytest

from buddyquest.questions import (
    DifficultyTier,
    Matching,
    MultipleChoice,
    Ordering,
    Question,
    Subject,
    TrueFalse,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep BUDDYQUEST_* variables from the host out of the tests."""
    for name in (
        "BUDDYQUEST_ROUND_SIZE",
        "BUDDYQUEST_REPLENISH_COOLDOWN_SECONDS",
        "BUDDYQUEST_STRICT",
        "BUDDYQUEST_MIXED_ROUNDS",
        "BUDDYQUEST_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_mc():
    """Factory for multiple-choice questions."""

    def build(
        question_id="mc_1",
        correct_index=0,
        options=("Alpha", "Beta", "Gamma", "Delta"),
        text=None,
        subject=Subject.MATH,
        difficulty=DifficultyTier.EASY,
    ):
        return Question(
            id=question_id,
            text=text or f"Question {question_id}?",
            payload=MultipleChoice(options=tuple(options), correct_index=correct_index),
            explanation=f"The answer is {options[correct_index]}.",
            subject=subject,
            difficulty=difficulty,
        )

    return build


@pytest.fixture
def make_tf():
    """Factory for true/false questions."""

    def build(
        question_id="tf_1",
        correct_answer=True,
        text=None,
        subject=Subject.MATH,
        difficulty=DifficultyTier.EASY,
    ):
        return Question(
            id=question_id,
            text=text or f"Statement {question_id}",
            payload=TrueFalse(correct_answer=correct_answer),
            explanation="Because.",
            subject=subject,
            difficulty=difficulty,
        )

    return build


@pytest.fixture
def ordering_question():
    """Displayed as cherry, apple, banana, date; sorted it is apple, banana, cherry, date."""
    return Question(
        id="order_fruit",
        text="Put the fruits in alphabetical order.",
        payload=Ordering(
            items=("cherry", "apple", "banana", "date"),
            correct_order=(1, 2, 0, 3),
        ),
        explanation="Alphabetical order goes by the first letter.",
        subject=Subject.LANGUAGE_ARTS,
        difficulty=DifficultyTier.EASY,
    )


@pytest.fixture
def matching_question():
    return Question(
        id="match_sums",
        text="Match each problem to its answer.",
        payload=Matching(
            left_items=("3×4", "7+8"),
            right_items=("15", "12"),
            correct_mapping=(1, 0),
        ),
        explanation="3×4 = 12 and 7+8 = 15.",
        subject=Subject.MATH,
        difficulty=DifficultyTier.EASY,
    )
