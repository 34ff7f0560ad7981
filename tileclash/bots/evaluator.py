"""
Heuristic Evaluator - Scores placements and board states for move search.

The evaluator assigns a numeric score based on:
- Combat features (flips won, board ownership, total card power)
- Position features (corners, edges, center, quadrant control)
- Exposure (weak sides left facing open cells)
- Ability features (how valuable the placed card's trigger moments are)

Weights can be adjusted to create different difficulty tiers.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..engine_core.state import BOARD_SIZE, DIRECTIONS, Position
from ..engine_core.effects import TriggerMoment

if TYPE_CHECKING:
    from ..engine_core.state import GameState, InGameCard


# How much each trigger moment is worth when the card is placed.
TRIGGER_VALUES: dict[TriggerMoment, float] = {
    TriggerMoment.ON_PLACE: 30.0,
    TriggerMoment.ON_FLIP: 15.0,
    TriggerMoment.ON_TURN_START: 15.0,
    TriggerMoment.ON_TURN_END: 12.0,
    TriggerMoment.ANY_ON_FLIP: 18.0,
    TriggerMoment.BEFORE_COMBAT: 25.0,
    TriggerMoment.AFTER_COMBAT: 20.0,
    TriggerMoment.ON_DEFEND: 20.0,
    TriggerMoment.ANY_ON_DEFEND: 10.0,
}

WIN_SCORE = 10000.0

_CORNERS = {
    Position(0, 0),
    Position(BOARD_SIZE - 1, 0),
    Position(0, BOARD_SIZE - 1),
    Position(BOARD_SIZE - 1, BOARD_SIZE - 1),
}
_CENTER = {Position(1, 1), Position(2, 1), Position(1, 2), Position(2, 2)}


def is_corner(position: Position) -> bool:
    return position in _CORNERS


def is_center(position: Position) -> bool:
    return position in _CENTER


@dataclass
class EvaluationWeights:
    """
    Weights for the heuristic evaluator.

    Higher values = more importance.
    Zero disables a feature entirely.
    """
    # Combat
    flip_value: float = 100.0  # Per card flipped by the placement
    owned_cell: float = 20.0  # Per point of score lead
    card_power: float = 1.0  # Per point of total power lead on board

    # Position
    corner_bonus: float = 50.0
    edge_bonus: float = 10.0
    center_bonus: float = 15.0
    quadrant_control: float = 10.0  # Per 2x2 quadrant held by majority

    # Exposure
    exposure_penalty: float = 8.0  # Per weak side facing an open cell
    weak_side_threshold: int = 3

    # Abilities
    ability_value: float = 1.0  # Multiplier on TRIGGER_VALUES
    board_ability_value: float = 0.2  # Same, for ability cards already on board

    # Terminal states
    win_value: float = WIN_SCORE


@dataclass
class StateEvaluation:
    """
    Result of evaluating a game state.
    """
    total_score: float
    feature_breakdown: dict[str, float] = field(default_factory=dict)


class HeuristicEvaluator:
    """
    Evaluates boards and placements using weighted heuristics.

    Used by move search:
    1. Generate legal placements
    2. Apply each placement to get a new state
    3. Score the placement plus the resulting state
    4. Select among the best
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def evaluate(self, state: GameState, for_player_id: str) -> StateEvaluation:
        """
        Evaluate a game state from a player's perspective.

        Returns positive score if state is good for player,
        negative if bad.
        """
        w = self.weights
        features: dict[str, float] = {}

        if state.is_completed:
            if state.winner == for_player_id:
                features["terminal"] = w.win_value
            elif state.winner is not None:
                features["terminal"] = -w.win_value
            else:
                features["terminal"] = 0.0
            return StateEvaluation(total_score=features["terminal"], feature_breakdown=features)

        opponent_id = state.opponent_id(for_player_id)
        scores = state.calculate_scores()
        features["score_lead"] = (scores[for_player_id] - scores[opponent_id]) * w.owned_cell

        if w.card_power:
            lead = 0
            for _, card in state.cards_on_board():
                total = card.current_power.total
                lead += total if card.owner == for_player_id else -total
            features["power_lead"] = lead * w.card_power

        if w.quadrant_control:
            features["quadrants"] = self._quadrant_control(state, for_player_id) * w.quadrant_control

        if w.exposure_penalty:
            features["exposure"] = -self._weak_exposed_sides(state, for_player_id) * w.exposure_penalty

        if w.board_ability_value and w.ability_value:
            lead = 0.0
            for _, card in state.cards_on_board():
                value = self.ability_value(card)
                lead += value if card.owner == for_player_id else -value
            features["abilities"] = lead * w.board_ability_value

        return StateEvaluation(total_score=sum(features.values()), feature_breakdown=features)

    def position_bonus(self, position: Position) -> float:
        """Static value of holding a cell."""
        if position in _CORNERS:
            return self.weights.corner_bonus
        if position in _CENTER:
            return self.weights.center_bonus
        return self.weights.edge_bonus

    def ability_value(self, card: InGameCard) -> float:
        if not self.weights.ability_value or card.special_ability is None:
            return 0.0
        total = sum(TRIGGER_VALUES.get(m, 0.0) for m in card.special_ability.trigger_moments)
        return total * self.weights.ability_value

    def placement_score(
        self,
        flips: int,
        position: Position,
        card: InGameCard | None = None,
    ) -> float:
        """Immediate value of a placement, before looking at the resulting board."""
        score = flips * self.weights.flip_value + self.position_bonus(position)
        if card is not None:
            score += self.ability_value(card)
        return score

    def potential_flips(
        self,
        state: GameState,
        card: InGameCard,
        position: Position,
        owner: str,
    ) -> int:
        """Flips a placement would win by direct comparison, without simulating it."""
        flips = 0
        power = card.current_power
        for direction, target in position.neighbors():
            defender = state.card_at(target)
            if defender is None or defender.owner == owner or defender.is_protected:
                continue
            if power.facing(direction) > defender.current_power.facing(direction.opposite):
                flips += 1
        return flips

    def _quadrant_control(self, state: GameState, player_id: str) -> int:
        half = BOARD_SIZE // 2
        control = 0
        for qx in (0, half):
            for qy in (0, half):
                mine = theirs = 0
                for x in range(qx, qx + half):
                    for y in range(qy, qy + half):
                        card = state.card_at(Position(x, y))
                        if card is None:
                            continue
                        if card.owner == player_id:
                            mine += 1
                        else:
                            theirs += 1
                if mine > theirs:
                    control += 1
                elif theirs > mine:
                    control -= 1
        return control

    def _weak_exposed_sides(self, state: GameState, player_id: str) -> int:
        weak = 0
        threshold = self.weights.weak_side_threshold
        for position, card in state.cards_on_board():
            if card.owner != player_id:
                continue
            power = card.current_power
            for direction in DIRECTIONS:
                target = position.step(direction)
                if state.is_playable(target) and power.facing(direction) <= threshold:
                    weak += 1
        return weak
