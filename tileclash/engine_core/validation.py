"""
State Validation - Structural invariants of a GameState.

A state that fails these checks was not produced by the engine (or was
corrupted in storage). It is a fatal precondition violation: the check
raises StateInvariantError and never repairs anything.

Checks:
1. Board is exactly 4x4
2. Hands respect max_cards_in_hand
3. Scores match board ownership and sum to at most 16
4. Every card instance lives in exactly one zone
5. Current player and winner refer to players in the game
"""

from __future__ import annotations
from collections import Counter

from .state import BOARD_CELLS, BOARD_SIZE, GameState, GameStatus


class StateInvariantError(Exception):
    """Raised when a GameState violates its structural invariants."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"GameState invariant violated: {'; '.join(errors)}")


def find_invariant_violations(state: GameState) -> list[str]:
    """Return a description of every broken invariant (empty if none)."""
    errors: list[str] = []

    if len(state.board) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in state.board):
        errors.append(f"board must be {BOARD_SIZE}x{BOARD_SIZE}")
        # Remaining checks walk the board and would be meaningless.
        return errors

    player_ids = [p.user_id for p in state.players]
    if player_ids[0] == player_ids[1]:
        errors.append("players must have distinct ids")
    if state.current_player_id not in player_ids:
        errors.append(f"current player {state.current_player_id} is not in the game")
    if state.winner is not None and state.winner not in player_ids:
        errors.append(f"winner {state.winner} is not in the game")
    if state.winner is not None and state.status != GameStatus.COMPLETED:
        errors.append("an active game cannot have a winner")

    for player in state.players:
        if len(player.hand) > state.max_cards_in_hand:
            errors.append(
                f"{player.user_id} holds {len(player.hand)} cards, max is {state.max_cards_in_hand}"
            )
        if player.score < 0:
            errors.append(f"{player.user_id} has a negative score")

    scores = state.calculate_scores()
    for player in state.players:
        if player.score != scores[player.user_id]:
            errors.append(
                f"{player.user_id} score {player.score} does not match board ({scores[player.user_id]})"
            )
    if sum(p.score for p in state.players) > BOARD_CELLS:
        errors.append("scores exceed the number of board cells")

    locations: Counter[str] = Counter()
    for player in state.players:
        locations.update(player.hand)
        locations.update(player.deck)
        locations.update(player.discard_pile)
    for _, card in state.cards_on_board():
        if card.owner not in player_ids:
            errors.append(f"card {card.instance_id} is owned by unknown player {card.owner}")
        locations[card.instance_id] += 1
    if state.catalog_cache:
        missing = sorted(
            instance_id for instance_id in locations
            if instance_id not in state.catalog_cache
        )
        if missing:
            errors.append(f"card instances missing from catalog cache: {missing}")

    duplicated = sorted(instance_id for instance_id, count in locations.items() if count > 1)
    if duplicated:
        errors.append(f"card instances in more than one zone: {duplicated}")

    return errors


def check_invariants(state: GameState) -> None:
    """Raise StateInvariantError if the state is structurally broken."""
    errors = find_invariant_violations(state)
    if errors:
        raise StateInvariantError(errors)
