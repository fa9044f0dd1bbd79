"""
Engine configuration for BuddyQuest.

Tunable constants live at module level; EngineConfig bundles them for a
session and can be overridden from environment variables.
"""

import logging
import os
from dataclasses import dataclass

# Package logger name used by configure_logging
LOGGER_NAME = "buddyquest"

# DynamoDB table name for persistence (configurable via environment variable)
DYNAMODB_TABLE_NAME = os.environ.get("DYNAMODB_TABLE_NAME", "BuddyQuestProfiles")

# ============================================================================
# Challenge Rounds
# ============================================================================

ROUND_SIZE = 5
XP_PER_CORRECT_ANSWER = 10
XP_PER_WRONG_ANSWER = 2
FEEDBACK_PAUSE_SECONDS = 1.2

# Time bonus thresholds (seconds remaining when a correct answer lands)
TIME_BONUS_HIGH_THRESHOLD = 20.0
TIME_BONUS_HIGH_XP = 2
TIME_BONUS_LOW_THRESHOLD = 10.0
TIME_BONUS_LOW_XP = 1

# True/false runs a shorter timer, so its thresholds sit lower
TRUE_FALSE_TIME_BONUS_HIGH_THRESHOLD = 15.0
TRUE_FALSE_TIME_BONUS_LOW_THRESHOLD = 8.0

MULTIPLE_CHOICE_TIMER_SECONDS = 30.0
TRUE_FALSE_TIMER_SECONDS = 20.0
ORDERING_TIMER_SECONDS = 45.0
MATCHING_TIMER_SECONDS = 45.0

# ============================================================================
# Difficulty Adaptation
# ============================================================================

DIFFICULTY_WINDOW_SIZE = 10
DIFFICULTY_INCREASE_THRESHOLD = 0.8
DIFFICULTY_DECREASE_THRESHOLD = 0.4

# ============================================================================
# Question Bank
# ============================================================================

BANK_TARGET_PER_SUBJECT = 35
BANK_MINIMUM_FOR_QUIZ = 5
BANK_REPLENISH_BATCH_SIZE = 10
BANK_MASTERY_THRESHOLD = 3
BANK_MASTERY_REMOVAL_DAYS = 7
BANK_RECENTLY_SHOWN_WINDOW = 15
BANK_REPLENISH_COOLDOWN_SECONDS = 600.0
MIXED_ROUND_MAX_NON_MC = 2


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {value!r}")


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EngineConfig:
    """Configuration shared by the services of one learner session."""

    round_size: int = ROUND_SIZE
    xp_correct: int = XP_PER_CORRECT_ANSWER
    xp_wrong: int = XP_PER_WRONG_ANSWER
    feedback_pause: float = FEEDBACK_PAUSE_SECONDS

    window_size: int = DIFFICULTY_WINDOW_SIZE
    increase_threshold: float = DIFFICULTY_INCREASE_THRESHOLD
    decrease_threshold: float = DIFFICULTY_DECREASE_THRESHOLD

    bank_target: int = BANK_TARGET_PER_SUBJECT
    bank_minimum: int = BANK_MINIMUM_FOR_QUIZ
    replenish_batch_size: int = BANK_REPLENISH_BATCH_SIZE
    mastery_removal_days: int = BANK_MASTERY_REMOVAL_DAYS
    recently_shown_window: int = BANK_RECENTLY_SHOWN_WINDOW
    replenish_cooldown: float = BANK_REPLENISH_COOLDOWN_SECONDS
    mixed_max_non_mc: int = MIXED_ROUND_MAX_NON_MC

    mixed_rounds: bool = True
    # Raise on round contract violations instead of clamping them
    strict: bool = False

    def __post_init__(self):
        if self.round_size < 1:
            raise ValueError(f"round_size must be positive, got {self.round_size}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be positive, got {self.window_size}")
        if not 0.0 <= self.decrease_threshold < self.increase_threshold <= 1.0:
            raise ValueError(
                "Thresholds must satisfy 0 <= decrease < increase <= 1, "
                f"got {self.decrease_threshold} / {self.increase_threshold}"
            )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """
        Build a config from BUDDYQUEST_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable is set to an unparseable value.
        """
        return cls(
            round_size=_env_int("BUDDYQUEST_ROUND_SIZE", ROUND_SIZE),
            replenish_cooldown=_env_float(
                "BUDDYQUEST_REPLENISH_COOLDOWN_SECONDS", BANK_REPLENISH_COOLDOWN_SECONDS
            ),
            mixed_rounds=_env_bool("BUDDYQUEST_MIXED_ROUNDS", True),
            strict=_env_bool("BUDDYQUEST_STRICT", False),
        )


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """
    Set the level of the package logger.

    Args:
        level: A logging level name or number. Defaults to the
               BUDDYQUEST_LOG_LEVEL environment variable, then INFO.

    Returns:
        The configured package logger.
    """
    if level is None:
        level = os.environ.get("BUDDYQUEST_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger
