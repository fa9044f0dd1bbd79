"""
Arithmetic question engine for the Number Peaks zone.

Generates math questions for every difficulty tier, with support for
addition, subtraction, multiplication and division, as multiple-choice or
true/false questions.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from buddyquest.questions import (
    DifficultyTier,
    GradeLevel,
    MultipleChoice,
    Question,
    QuestionType,
    Subject,
    TrueFalse,
)


class Operation(Enum):
    """Supported math operations."""

    ADDITION = "add"
    SUBTRACTION = "sub"
    MULTIPLICATION = "mul"
    DIVISION = "div"


@dataclass
class TierConfig:
    """Configuration for a specific difficulty tier."""

    tier: DifficultyTier
    grade_level: GradeLevel
    operations: list[Operation]
    number_range: tuple[int, int]  # (min, max)
    multiplication_tables: list[int] | None = None  # For tiers that use times tables


# Arithmetic configuration per difficulty tier
TIER_CONFIGS: dict[DifficultyTier, TierConfig] = {
    DifficultyTier.BEGINNER: TierConfig(
        tier=DifficultyTier.BEGINNER,
        grade_level=GradeLevel.FIRST,
        operations=[Operation.ADDITION],
        number_range=(1, 10),
    ),
    DifficultyTier.EASY: TierConfig(
        tier=DifficultyTier.EASY,
        grade_level=GradeLevel.SECOND,
        operations=[Operation.ADDITION, Operation.SUBTRACTION],
        number_range=(1, 20),
    ),
    DifficultyTier.MEDIUM: TierConfig(
        tier=DifficultyTier.MEDIUM,
        grade_level=GradeLevel.THIRD,
        operations=[Operation.ADDITION, Operation.SUBTRACTION, Operation.MULTIPLICATION],
        number_range=(10, 100),
        multiplication_tables=[2, 5, 10],  # Intro to multiplication
    ),
    DifficultyTier.HARD: TierConfig(
        tier=DifficultyTier.HARD,
        grade_level=GradeLevel.FOURTH,
        operations=[
            Operation.ADDITION,
            Operation.SUBTRACTION,
            Operation.MULTIPLICATION,
            Operation.DIVISION,
        ],
        number_range=(10, 100),
        multiplication_tables=list(range(1, 11)),  # Full times tables 1-10
    ),
    DifficultyTier.ADVANCED: TierConfig(
        tier=DifficultyTier.ADVANCED,
        grade_level=GradeLevel.FIFTH,
        operations=[
            Operation.ADDITION,
            Operation.SUBTRACTION,
            Operation.MULTIPLICATION,
            Operation.DIVISION,
        ],
        number_range=(100, 1000),
        multiplication_tables=list(range(2, 13)),  # Extended tables 2-12
    ),
}


OPERATION_SYMBOLS: dict[Operation, str] = {
    Operation.ADDITION: "+",
    Operation.SUBTRACTION: "-",
    Operation.MULTIPLICATION: "×",
    Operation.DIVISION: "÷",
}

# Offsets used to build wrong answers close to the real one
_DISTRACTOR_OFFSETS = [1, -1, 2, -2, 3, -3, 5, -5, 10, -10]


@dataclass(frozen=True)
class ArithmeticFact:
    """A single arithmetic fact, e.g. 7 + 5 = 12."""

    operation: Operation
    operand1: int
    operand2: int
    answer: int

    @property
    def expression(self) -> str:
        return f"{self.operand1} {OPERATION_SYMBOLS[self.operation]} {self.operand2}"


def generate_question_id(
    operation: Operation,
    operand1: int,
    operand2: int,
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE,
) -> str:
    """Generate a stable question ID, e.g. "math_add_7_5" or "math_add_7_5_tf"."""
    base = f"math_{operation.value}_{operand1}_{operand2}"
    if question_type == QuestionType.TRUE_FALSE:
        return f"{base}_tf"
    return base


def _generate_addition(config: TierConfig, rng) -> ArithmeticFact:
    """Generate an addition fact whose sum stays within the configured range."""
    min_num, max_num = config.number_range
    operand1 = rng.randint(min_num, max_num - min_num)
    operand2 = rng.randint(min_num, max_num - operand1)
    return ArithmeticFact(Operation.ADDITION, operand1, operand2, operand1 + operand2)


def _generate_subtraction(config: TierConfig, rng) -> ArithmeticFact:
    """Generate a subtraction fact with a non-negative result."""
    min_num, max_num = config.number_range
    operand1 = rng.randint(min_num, max_num)
    operand2 = rng.randint(min_num, operand1)  # operand2 <= operand1
    return ArithmeticFact(Operation.SUBTRACTION, operand1, operand2, operand1 - operand2)


def _generate_multiplication(config: TierConfig, rng) -> ArithmeticFact:
    """Generate a multiplication fact from the configured times tables."""
    tables = config.multiplication_tables or [2, 5, 10]
    operand1 = rng.choice(tables)
    operand2 = rng.randint(1, 10)
    if rng.choice([True, False]):
        operand1, operand2 = operand2, operand1
    return ArithmeticFact(Operation.MULTIPLICATION, operand1, operand2, operand1 * operand2)


def _generate_division(config: TierConfig, rng) -> ArithmeticFact:
    """Generate a division fact with a whole number result."""
    tables = config.multiplication_tables or list(range(1, 11))
    divisor = rng.choice(tables)
    quotient = rng.randint(1, 10)
    return ArithmeticFact(Operation.DIVISION, divisor * quotient, divisor, quotient)


# Map operations to their generator functions
_OPERATION_GENERATORS: dict[Operation, Callable[[TierConfig, object], ArithmeticFact]] = {
    Operation.ADDITION: _generate_addition,
    Operation.SUBTRACTION: _generate_subtraction,
    Operation.MULTIPLICATION: _generate_multiplication,
    Operation.DIVISION: _generate_division,
}


def _distractors(answer: int, rng, count: int = 3) -> list[int]:
    """Pick wrong answers near the correct one, never negative."""
    offsets = list(_DISTRACTOR_OFFSETS)
    rng.shuffle(offsets)
    wrong: list[int] = []
    for offset in offsets:
        candidate = answer + offset
        if candidate >= 0 and candidate != answer and candidate not in wrong:
            wrong.append(candidate)
        if len(wrong) == count:
            break
    return wrong


def generate_fact(
    tier: DifficultyTier,
    operation: Operation | None = None,
    rng=None,
) -> ArithmeticFact:
    """
    Generate a random arithmetic fact for the given tier.

    Args:
        tier: The difficulty tier.
        operation: Optional specific operation. If None, randomly selects
                   from operations available for the tier.
        rng: Optional random.Random instance for reproducible output.

    Returns:
        An ArithmeticFact.

    Raises:
        ValueError: If the operation is not available for the tier.
    """
    rng = rng or random
    config = get_tier_config(tier)

    if operation is None:
        operation = rng.choice(config.operations)
    elif operation not in config.operations:
        raise ValueError(
            f"Operation {operation.value} is not available for tier {tier.name.lower()}. "
            f"Available operations: {[op.value for op in config.operations]}"
        )

    return _OPERATION_GENERATORS[operation](config, rng)


def build_question(
    fact: ArithmeticFact,
    tier: DifficultyTier,
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE,
    rng=None,
) -> Question:
    """
    Turn an arithmetic fact into a Question.

    Raises:
        ValueError: If question_type is not multiple choice or true/false.
    """
    rng = rng or random
    config = get_tier_config(tier)
    explanation = f"{fact.expression} = {fact.answer}."
    question_id = generate_question_id(fact.operation, fact.operand1, fact.operand2, question_type)

    if question_type == QuestionType.MULTIPLE_CHOICE:
        options = [fact.answer, *_distractors(fact.answer, rng)]
        rng.shuffle(options)
        payload = MultipleChoice(
            options=tuple(str(option) for option in options),
            correct_index=options.index(fact.answer),
        )
        text = f"What is {fact.expression}?"
    elif question_type == QuestionType.TRUE_FALSE:
        is_true = rng.choice([True, False])
        shown = fact.answer if is_true else _distractors(fact.answer, rng, count=1)[0]
        payload = TrueFalse(correct_answer=is_true)
        text = f"{fact.expression} = {shown}"
    else:
        raise ValueError(f"Arithmetic questions cannot be {question_type.value}")

    return Question(
        id=question_id,
        text=text,
        payload=payload,
        explanation=explanation,
        subject=Subject.MATH,
        difficulty=tier,
        grade_level=config.grade_level,
    )


def generate_question(
    tier: DifficultyTier = DifficultyTier.EASY,
    operation: Operation | None = None,
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE,
    rng=None,
) -> Question:
    """Generate a random arithmetic Question for the given tier."""
    rng = rng or random
    fact = generate_fact(tier, operation=operation, rng=rng)
    return build_question(fact, tier, question_type=question_type, rng=rng)


def generate_question_set(
    count: int = 10,
    tier: DifficultyTier = DifficultyTier.EASY,
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE,
    exclude_ids: set[str] | None = None,
    rng=None,
) -> list[Question]:
    """
    Generate a set of distinct arithmetic questions.

    Args:
        count: Number of questions to generate.
        tier: The difficulty tier.
        question_type: Multiple choice or true/false.
        exclude_ids: Question IDs that must not be produced (already banked).
        rng: Optional random.Random instance for reproducible output.

    Returns:
        Up to count questions with unique IDs. Fewer are returned when the
        tier runs out of fresh facts.
    """
    rng = rng or random
    seen = set(exclude_ids or ())
    questions: list[Question] = []
    max_attempts = count * 20

    for _ in range(max_attempts):
        if len(questions) >= count:
            break
        question = generate_question(tier, question_type=question_type, rng=rng)
        if question.id in seen:
            continue
        seen.add(question.id)
        questions.append(question)

    return questions


def get_available_operations(tier: DifficultyTier) -> list[Operation]:
    """Get the list of available operations for a given tier."""
    return get_tier_config(tier).operations.copy()


def get_tier_config(tier: DifficultyTier) -> TierConfig:
    """Get the arithmetic configuration for a given tier."""
    if tier not in TIER_CONFIGS:
        raise ValueError(f"Unsupported tier: {tier}")
    return TIER_CONFIGS[tier]
