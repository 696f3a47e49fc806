"""
Loyalty levels and ranks.

A user's level is derived from the cumulative value of their settled orders.
Reaching level ``n + 1`` from level ``n`` takes ``required_for_level(n + 1)``
more value, and that per-level requirement itself grows by an arithmetic
series:

    required_for_level(2) = 500
    required_for_level(3) = 500 + 1000 = 1500
    required_for_level(4) = 1500 + 1500 = 3000

so the cumulative thresholds are 0, 500, 2000, 5000, ... for levels
1, 2, 3, 4, ...
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

BASE_REQUIREMENT = 500
REQUIREMENT_STEP = 500
MAX_LEVEL = 250

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class Rank:
    name: str
    color: str
    min_level: int
    max_level: int


RANKS = (
    Rank("Iron", "bg-gray-500", 1, 10),
    Rank("Bronze", "bg-orange-600", 11, 30),
    Rank("Gold", "bg-yellow-500", 31, 60),
    Rank("Platinum", "bg-purple-500", 61, 99),
    Rank("Diamond", "bg-blue-500", 100, 150),
    Rank("Emerald", "bg-green-500", 151, 200),
    Rank("Ruby", "bg-red-500", 201, 250),
)


@dataclass(frozen=True)
class LevelInfo:
    level: int
    rank: str
    color: str
    required_transactions: int
    total_required_transactions: int


@dataclass(frozen=True)
class LevelProgress:
    current_level_transactions: float
    next_level_required: int
    progress: float
    remaining: float


def required_for_level(level: int) -> int:
    """Value needed to go from ``level - 1`` to ``level``."""
    if level <= 1:
        return 0
    # sum of 500 + (i - 1) * 500 for i in 1..level-1
    n = level - 1
    return BASE_REQUIREMENT * n + REQUIREMENT_STEP * n * (n - 1) // 2


def total_required_for_level(level: int) -> int:
    """Cumulative value needed to reach ``level`` starting from zero."""
    if level <= 1:
        return 0
    return sum(required_for_level(i + 1) for i in range(1, level))


def level_for_value(total_value: Number) -> int:
    """
    Map a cumulative transaction value to a level.

    Returns the highest level whose cumulative threshold is at or below
    ``total_value``, capped at ``MAX_LEVEL``.
    """
    level = 1
    threshold = 0
    while level < MAX_LEVEL:
        threshold += required_for_level(level + 1)
        if total_value < threshold:
            return level
        level += 1
    return MAX_LEVEL


def rank_for_level(level: int) -> Rank:
    for rank in RANKS:
        if rank.min_level <= level <= rank.max_level:
            return rank
    # Levels past the table keep the top rank
    return RANKS[-1] if level > RANKS[-1].max_level else RANKS[0]


def level_info(level: int) -> LevelInfo:
    rank = rank_for_level(level)
    return LevelInfo(
        level=level,
        rank=rank.name,
        color=rank.color,
        required_transactions=required_for_level(level),
        total_required_transactions=total_required_for_level(level),
    )


def progress_to_next_level(level: int, total_value: Number) -> LevelProgress:
    """Progress of ``total_value`` through the span between ``level`` and the next."""
    current_threshold = total_required_for_level(level)
    next_threshold = total_required_for_level(level + 1)
    span = next_threshold - current_threshold
    into_level = float(total_value) - current_threshold

    return LevelProgress(
        current_level_transactions=into_level,
        next_level_required=span,
        progress=min(100.0, into_level / span * 100) if span else 100.0,
        remaining=max(0.0, next_threshold - float(total_value)),
    )


def format_transaction_value(value: Number, currency: str = "EGP") -> str:
    value = float(value)
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M {currency}"
    if value >= 1000:
        return f"{value / 1000:.1f}K {currency}"
    return f"{value:.0f} {currency}"
