"""
Action Generator - Generates all legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to show available actions
3. Validation (is this action in legal_actions?)

Design: Generates Action objects, not just action types.
This ensures all generated actions are fully specified.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import GameState, all_positions
from .action import Action, Move


@dataclass
class ActionGenerator:
    """
    Generates legal actions for a player.

    Placement candidates are every (hand card x playable cell) pair,
    cards in hand order and cells in row-major order. A player who has
    already placed this turn has no placements left, only end_turn.
    """

    def generate(self, state: GameState, player_id: str | None = None) -> list[Action]:
        """
        Generate all legal actions for `player_id` (default: current player).

        Returns a list of fully-specified Action objects.
        """
        if state.is_completed:
            return []
        player_id = player_id or state.current_player_id
        if state.get_player(player_id) is None:
            return []

        actions: list[Action] = []
        if player_id == state.current_player_id:
            actions.extend(m.to_action(player_id) for m in self.legal_placements(state, player_id))
            actions.append(Action.end_turn(player_id))
        return actions

    def legal_placements(self, state: GameState, player_id: str | None = None) -> list[Move]:
        """Every (card in hand, empty enabled cell) pair for the player to move."""
        if state.is_completed:
            return []
        player_id = player_id or state.current_player_id
        if player_id != state.current_player_id or state.placed_this_turn:
            return []
        player = state.get_player(player_id)
        if player is None:
            return []

        cells = [p for p in all_positions() if state.is_playable(p)]
        return [Move(card_instance_id=card_id, position=p) for card_id in player.hand for p in cells]


def legal_actions(state: GameState, player_id: str | None = None) -> list[Action]:
    """Convenience function to get legal actions."""
    return ActionGenerator().generate(state, player_id)


def legal_placements(state: GameState, player_id: str | None = None) -> list[Move]:
    return ActionGenerator().legal_placements(state, player_id)
