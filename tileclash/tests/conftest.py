"""
Pytest fixtures for TileClash tests.
"""

import pytest
from types import MappingProxyType

from ..engine_core.state import (
    GameState,
    InGameCard,
    Player,
    PowerProfile,
    empty_board,
)
from ..engine_core.catalog import SpecialAbility
from ..engine_core.effect_resolver import AbilityRegistry
from ..engine_core.effects import TriggerMoment
from ..games.mythic import create_mythic_catalog


def _power(power) -> PowerProfile:
    if isinstance(power, PowerProfile):
        return power
    if isinstance(power, int):
        return PowerProfile.uniform(power)
    return PowerProfile(*power)


def build_card(instance_id, owner="p1", power=5, ability=None, tags=()) -> InGameCard:
    """A card instance. power is an int (all sides), a 4-tuple or a PowerProfile."""
    return InGameCard(
        instance_id=instance_id,
        base_card_id=instance_id.split(":")[-1],
        owner=owner,
        base_power=_power(power),
        name=instance_id,
        special_ability=ability,
        tags=tuple(tags),
    )


def build_state(
    board=None,
    hands=None,
    decks=None,
    current="p1",
    disabled=(),
    tiles=None,
    max_hand=10,
    turn=1,
) -> GameState:
    """
    A consistent ACTIVE state for players "p1" and "p2".

    board maps Position -> InGameCard; hands and decks map player id ->
    list of InGameCard. Every card lands in the catalog cache.
    """
    board = board or {}
    hands = hands or {}
    decks = decks or {}
    cache = {}

    rows = [list(row) for row in empty_board(disabled)]
    for position, card in board.items():
        rows[position.y][position.x] = rows[position.y][position.x]._copy_with(card=card)
        cache[card.instance_id] = card
    for position, tile in (tiles or {}).items():
        rows[position.y][position.x] = rows[position.y][position.x]._copy_with(tile_effect=tile)

    players = []
    for player_id in ("p1", "p2"):
        hand = [c.with_owner(player_id) for c in hands.get(player_id, [])]
        deck = [c.with_owner(player_id) for c in decks.get(player_id, [])]
        for card in hand + deck:
            cache[card.instance_id] = card
        players.append(Player(
            user_id=player_id,
            hand=tuple(c.instance_id for c in hand),
            deck=tuple(c.instance_id for c in deck),
        ))

    state = GameState(
        board=tuple(tuple(row) for row in rows),
        player1=players[0],
        player2=players[1],
        current_player_id=current,
        turn_number=turn,
        max_cards_in_hand=max_hand,
        catalog_cache=MappingProxyType(cache),
        game_id="test_game",
    )
    return state.with_scores()


def ability(ability_id, *moments, **parameters) -> SpecialAbility:
    return SpecialAbility(
        ability_id=ability_id,
        trigger_moments=frozenset(moments or (TriggerMoment.ON_PLACE,)),
        parameters=parameters,
        name=ability_id,
    )


@pytest.fixture
def make_card():
    """Factory for card instances."""
    return build_card


@pytest.fixture
def make_state():
    """Factory for consistent game states."""
    return build_state


@pytest.fixture
def make_ability():
    """Factory for ability definitions (ON_PLACE unless moments are given)."""
    return ability


@pytest.fixture
def mythic_catalog():
    """The bundled card set."""
    return create_mythic_catalog()


@pytest.fixture
def mythic_registry(mythic_catalog) -> AbilityRegistry:
    return AbilityRegistry.from_catalog(mythic_catalog)


@pytest.fixture
def spare_cards(make_card):
    """Cards to keep both players stocked so end_turn does not finish the game."""
    return {
        "p1": [make_card("p1:spare1", "p1", 1), make_card("p1:spare2", "p1", 1)],
        "p2": [make_card("p2:spare1", "p2", 1), make_card("p2:spare2", "p2", 1)],
    }
