"""
Redaction - Hide private zones before showing a state to someone.

A pure masking transform over GameState, used for opponents and
spectators. It is not part of the rules: a redacted state is for
display and must never be fed back into the reducer.

What is hidden:
- Opponent hand: ids replaced by placeholders (the count stays visible)
- Both decks: ids replaced by placeholders (order would leak draws)
- Cache entries for every hidden card
"""

from __future__ import annotations
from types import MappingProxyType

from .state import GameState, Player


HIDDEN_CARD_PREFIX = "hidden"


def _placeholder(owner: str, zone: str, index: int) -> str:
    return f"{HIDDEN_CARD_PREFIX}:{owner}:{zone}:{index}"


def _mask(player: Player, hide_hand: bool) -> tuple[Player, set[str]]:
    hidden = set(player.deck)
    deck = tuple(_placeholder(player.user_id, "deck", i) for i in range(len(player.deck)))
    hand = player.hand
    if hide_hand:
        hidden.update(player.hand)
        hand = tuple(_placeholder(player.user_id, "hand", i) for i in range(len(player.hand)))
    return player._copy_with(hand=hand, deck=deck), hidden


def redact_for_viewer(state: GameState, viewer_id: str | None) -> GameState:
    """
    Return the state as `viewer_id` may see it.

    viewer_id=None is a spectator: both hands are hidden.
    """
    player1, hidden1 = _mask(state.player1, hide_hand=viewer_id != state.player1.user_id)
    player2, hidden2 = _mask(state.player2, hide_hand=viewer_id != state.player2.user_id)
    hidden = hidden1 | hidden2
    cache = {
        instance_id: card for instance_id, card in state.catalog_cache.items()
        if instance_id not in hidden
    }
    return state._copy_with(player1=player1, player2=player2, catalog_cache=MappingProxyType(cache))


def is_hidden(instance_id: str) -> bool:
    return instance_id.startswith(f"{HIDDEN_CARD_PREFIX}:")
