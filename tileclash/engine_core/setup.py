"""
Game Setup - Build the initial GameState for a match.

Setup steps:
1. Hydrate every deck card through the catalog into the per-game cache
2. Shuffle each deck with a seeded RNG
3. Deal the initial hand to each player
4. Choose the starting player (given, or drawn from the same RNG)

Instance ids are deterministic ("{player}:{index}:{card_id}"), so the
same seed and decks always produce the same game.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Sequence
import logging
import random

from .state import GameState, Player, Position, empty_board
from .catalog import Catalog, hydrate
from .events import CardDrawn, GameEvent, GameStarted
from ..config import EngineConfig, DEFAULT_CONFIG


logger = logging.getLogger(__name__)


def instance_id_for(player_id: str, index: int, card_id: str) -> str:
    return f"{player_id}:{index}:{card_id}"


def initialize(
    player1_deck_card_ids: Sequence[str],
    player2_deck_card_ids: Sequence[str],
    player1_id: str,
    player2_id: str,
    catalog: Catalog,
    seed: int | None = None,
    starting_player_id: str | None = None,
    config: EngineConfig | None = None,
    disabled_positions: Sequence[Position] = (),
    game_id: str | None = None,
) -> GameState:
    """
    Create a fresh ACTIVE game.

    Raises CatalogError if a deck references an unknown card, and
    ValueError for malformed player ids.
    """
    config = config or DEFAULT_CONFIG
    if player1_id == player2_id:
        raise ValueError("Players must have distinct ids")
    if starting_player_id is not None and starting_player_id not in (player1_id, player2_id):
        raise ValueError(f"Starting player {starting_player_id} is not in this game")
    for position in disabled_positions:
        if not position.is_valid:
            raise ValueError(f"Disabled position {position} is off the board")

    rng = random.Random(seed)
    cache = {}
    players = []
    for player_id, card_ids in ((player1_id, player1_deck_card_ids), (player2_id, player2_deck_card_ids)):
        deck = []
        for index, card_id in enumerate(card_ids):
            instance_id = instance_id_for(player_id, index, card_id)
            cache[instance_id] = hydrate(catalog, card_id, instance_id, player_id)
            deck.append(instance_id)
        rng.shuffle(deck)
        hand_size = min(config.initial_draw_count, config.max_cards_in_hand, len(deck))
        players.append(Player(
            user_id=player_id,
            hand=tuple(deck[:hand_size]),
            deck=tuple(deck[hand_size:]),
        ))

    if starting_player_id is None:
        starting_player_id = rng.choice([player1_id, player2_id])

    state = GameState(
        board=empty_board(disabled_positions),
        player1=players[0],
        player2=players[1],
        current_player_id=starting_player_id,
        max_cards_in_hand=config.max_cards_in_hand,
        initial_draw_count=config.initial_draw_count,
        catalog_cache=MappingProxyType(cache),
        game_id=game_id,
    )
    logger.debug(
        "Initialized game %s: %s vs %s, %s starts",
        game_id or "-", player1_id, player2_id, starting_player_id,
    )
    return state


def start_events(state: GameState) -> list[GameEvent]:
    """Events describing the initial deal, for logs and replays."""
    events: list[GameEvent] = [GameStarted(
        player1_id=state.player1.user_id,
        player2_id=state.player2.user_id,
        starting_player_id=state.current_player_id,
    )]
    for player in state.players:
        events.extend(CardDrawn(player_id=player.user_id, instance_id=i) for i in player.hand)
    return events
