"""
Board rules shared by the reducer, the combat resolver and ability effects.

Every helper takes a state and returns a new state together with the
event describing the change (or None when nothing happened). move_card
returns a list, since a move can also consume the destination tile.
"""

from __future__ import annotations

from .state import (
    GameState,
    GameStatus,
    Position,
    TemporaryEffect,
    TileEffect,
    TileStatus,
    InGameCard,
    EffectKind,
)
from .events import (
    CardDrawn,
    CardMoved,
    CardPowerChanged,
    CardRemovedFromBoard,
    GameEvent,
    GameOver,
    TileStateChanged,
)


def draw_card(state: GameState, player_id: str) -> tuple[GameState, CardDrawn | None]:
    """Draw the front card of the player's deck if the hand has room."""
    player = state.get_player(player_id)
    if player is None or len(player.hand) >= state.max_cards_in_hand or not player.deck:
        return state, None
    instance_id, player = player.draw()
    return state.with_player(player), CardDrawn(player_id=player_id, instance_id=instance_id)


def apply_temporary_effect(
    state: GameState,
    position: Position,
    effect: TemporaryEffect,
    source: str = "",
) -> tuple[GameState, CardPowerChanged | None]:
    """Attach an effect to the card at `position`. Debuffs skip cards that ignore them."""
    card = state.card_at(position)
    if card is None:
        return state, None
    if effect.kind == EffectKind.DEBUFF and card.ignores_debuffs:
        return state, None

    updated = card.with_effect(effect)
    state = state.with_card(position, updated)
    if updated.current_power == card.current_power:
        return state, None
    return state, CardPowerChanged(
        instance_id=card.instance_id,
        position=position,
        old_power=card.current_power,
        new_power=updated.current_power,
        source=source,
    )


def remove_from_board(
    state: GameState,
    position: Position,
    source: str = "",
) -> tuple[GameState, CardRemovedFromBoard | None]:
    """Move a board card to the discard pile of the player who brought it."""
    card = state.card_at(position)
    if card is None:
        return state, None

    original = state.catalog_cache.get(card.instance_id)
    discard_owner = original.owner if original is not None else card.owner
    player = state.get_player(discard_owner) or state.get_player(card.owner)

    state = state.with_card(position, None)
    if player is not None:
        state = state.with_player(
            player._copy_with(discard_pile=player.discard_pile + (card.instance_id,))
        )
    return state, CardRemovedFromBoard(
        instance_id=card.instance_id,
        position=position,
        owner_id=discard_owner,
        source=source,
    )


def absorb_tile(card: InGameCard, tile: TileEffect | None) -> InGameCard:
    """The card after landing on `tile`. Only a non-zero tile scoped to its owner transfers."""
    if tile is None or tile.power.is_zero or not tile.applies_to_player(card.owner):
        return card
    return card.with_effect(TemporaryEffect(
        delta_power=tile.power,
        duration=tile.effect_duration,
        name=tile.name or tile.status.value,
    ))


def move_card(
    state: GameState,
    source: Position,
    destination: Position,
) -> tuple[GameState, list[GameEvent]]:
    """
    Move a card to an empty, enabled cell.

    A tile effect on the destination is consumed exactly as a placement
    would consume it.
    """
    card = state.card_at(source)
    if card is None or not state.is_playable(destination):
        return state, []

    cell = state.cell_at(destination)
    tile = cell.tile_effect
    landed = cell._copy_with(card=absorb_tile(card, tile), tile_effect=None)
    state = state.with_card(source, None).with_cell(destination, landed)

    events: list[GameEvent] = [CardMoved(
        instance_id=card.instance_id,
        from_position=source,
        to_position=destination,
    )]
    if tile is not None:
        events.append(TileStateChanged(position=destination, status=TileStatus.NORMAL))
    return state, events


def set_tile_effect(
    state: GameState,
    position: Position,
    effect: TileEffect | None,
) -> tuple[GameState, TileStateChanged]:
    cell = state.cell_at(position)
    state = state.with_cell(position, cell._copy_with(tile_effect=effect))
    if effect is None:
        return state, TileStateChanged(position=position, status=TileStatus.NORMAL)
    return state, TileStateChanged(
        position=position,
        status=effect.status,
        turns_left=effect.turns_left,
        applies_to=effect.applies_to,
    )


def strongest(cards: list[tuple[Position, InGameCard]]) -> tuple[Position, InGameCard] | None:
    """Card with the highest total current power. Ties go to the first in row-major order."""
    best = None
    for entry in cards:
        if best is None or entry[1].current_power.total > best[1].current_power.total:
            best = entry
    return best


def complete_game(state: GameState, winner: str | None, reason: str) -> tuple[GameState, GameOver]:
    state = state.with_scores()._copy_with(status=GameStatus.COMPLETED, winner=winner)
    scores = tuple(state.calculate_scores().items())
    return state, GameOver(winner=winner, reason=reason, scores=scores)


def winner_by_score(state: GameState) -> str | None:
    """Higher score wins; an exact tie is a draw (None)."""
    scores = state.calculate_scores()
    p1 = scores[state.player1.user_id]
    p2 = scores[state.player2.user_id]
    if p1 > p2:
        return state.player1.user_id
    if p2 > p1:
        return state.player2.user_id
    return None
