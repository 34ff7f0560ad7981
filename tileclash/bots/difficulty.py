"""
Difficulty Tiers - Configurable move-search strength.

Tiers adjust:
- Evaluation weights (what the search values)
- Whether abilities are simulated
- Lookahead (whether the opponent's reply is considered)
- Branching caps and randomness among the best moves

Every tier is bounded by construction: candidates x replies x depth
is capped, so the soft time budget holds without preemption.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .evaluator import EvaluationWeights


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class DifficultyProfile:
    """
    A move-search configuration.

    top_n: pick at random among this many best-scored moves
    max_candidates: moves carried into lookahead (hard only)
    max_replies: opponent replies simulated per candidate
    reply_discount: weight of the opponent's best reply
    """
    difficulty: Difficulty
    description: str = ""
    weights: EvaluationWeights = field(default_factory=EvaluationWeights)
    use_abilities: bool = True
    evaluate_board: bool = True
    lookahead: bool = False
    top_n: int = 1
    max_candidates: int = 8
    max_replies: int = 12
    reply_discount: float = 0.7
    time_budget_ms: int = 1500


# ============================================================================
# Predefined Tiers
# ============================================================================

EASY = DifficultyProfile(
    difficulty=Difficulty.EASY,
    description="Greedy on immediate flips, ignores abilities",
    weights=EvaluationWeights(
        owned_cell=0.0,
        card_power=0.0,
        corner_bonus=5.0,
        edge_bonus=0.0,
        center_bonus=0.0,
        quadrant_control=0.0,
        exposure_penalty=0.0,
        ability_value=0.0,
    ),
    use_abilities=False,
    evaluate_board=False,
    top_n=5,
    time_budget_ms=500,
)


MEDIUM = DifficultyProfile(
    difficulty=Difficulty.MEDIUM,
    description="One ply with abilities and board heuristics",
    weights=EvaluationWeights(),
    top_n=3,
    time_budget_ms=1500,
)


HARD = DifficultyProfile(
    difficulty=Difficulty.HARD,
    description="Considers the opponent's best reply before committing",
    weights=EvaluationWeights(
        exposure_penalty=12.0,
        quadrant_control=15.0,
    ),
    lookahead=True,
    top_n=1,
    max_candidates=8,
    max_replies=12,
    time_budget_ms=3000,
)


DIFFICULTIES: dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: EASY,
    Difficulty.MEDIUM: MEDIUM,
    Difficulty.HARD: HARD,
}


def get_profile(difficulty: Difficulty | str | DifficultyProfile) -> DifficultyProfile:
    """Resolve a tier name (in any case), enum or profile to a profile."""
    if isinstance(difficulty, DifficultyProfile):
        return difficulty
    if isinstance(difficulty, str):
        difficulty = difficulty.strip().lower()
    return DIFFICULTIES[Difficulty(difficulty)]
