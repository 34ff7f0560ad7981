"""
Tests for game setup.

Tests:
- Same seed and decks produce the same game
- Initial hands are dealt from the shuffled deck
- Malformed setup parameters are rejected
"""

import pytest

from ..config import EngineConfig
from ..engine_core.catalog import CatalogError
from ..engine_core.events import CardDrawn, GameStarted
from ..engine_core.setup import initialize, instance_id_for, start_events
from ..engine_core.state import GameStatus, Position
from ..engine_core.validation import find_invariant_violations
from ..games.mythic import STARTER_DECK_A, STARTER_DECK_B


def _new_game(catalog, **kwargs):
    return initialize(STARTER_DECK_A, STARTER_DECK_B, "p1", "p2", catalog, **kwargs)


class TestInitialize:

    def test_same_seed_same_game(self, mythic_catalog):
        """Setup is deterministic for a given seed."""
        first = _new_game(mythic_catalog, seed=42)
        second = _new_game(mythic_catalog, seed=42)

        assert first == second

    def test_different_seeds_shuffle_differently(self, mythic_catalog):
        orders = {_new_game(mythic_catalog, seed=seed).player1.deck for seed in range(5)}
        assert len(orders) > 1

    def test_initial_hands(self, mythic_catalog):
        state = _new_game(mythic_catalog, seed=1)

        for player in state.players:
            assert len(player.hand) == 5
            assert len(player.deck) == 5
            assert player.score == 0
        assert state.status == GameStatus.ACTIVE
        assert state.turn_number == 1
        assert find_invariant_violations(state) == []

    def test_short_deck_deals_what_it_has(self, mythic_catalog):
        state = initialize(["thrall", "thor"], STARTER_DECK_B, "p1", "p2", mythic_catalog, seed=3)

        assert len(state.player1.hand) == 2
        assert state.player1.deck == ()

    def test_initial_draw_follows_config(self, mythic_catalog):
        config = EngineConfig(initial_draw_count=3)
        state = _new_game(mythic_catalog, seed=1, config=config)

        assert len(state.player1.hand) == 3
        assert state.initial_draw_count == 3

    def test_every_card_is_cached(self, mythic_catalog):
        state = _new_game(mythic_catalog, seed=9)

        assert len(state.catalog_cache) == len(STARTER_DECK_A) + len(STARTER_DECK_B)
        thor = state.catalog_cache[instance_id_for("p1", 8, "thor")]
        assert thor.owner == "p1"
        assert thor.base_card_id == "thor"

    def test_starting_player(self, mythic_catalog):
        assert _new_game(mythic_catalog, starting_player_id="p2").current_player_id == "p2"
        assert _new_game(mythic_catalog, seed=5).current_player_id in ("p1", "p2")

    def test_disabled_positions(self, mythic_catalog):
        state = _new_game(mythic_catalog, seed=1, disabled_positions=[Position(0, 0)])

        assert not state.is_enabled(Position(0, 0))
        assert state.is_playable(Position(1, 0))


class TestInitializeErrors:

    def test_same_player_ids(self, mythic_catalog):
        with pytest.raises(ValueError):
            initialize(STARTER_DECK_A, STARTER_DECK_B, "p1", "p1", mythic_catalog)

    def test_unknown_starting_player(self, mythic_catalog):
        with pytest.raises(ValueError):
            _new_game(mythic_catalog, starting_player_id="p3")

    def test_off_board_disabled_position(self, mythic_catalog):
        with pytest.raises(ValueError):
            _new_game(mythic_catalog, disabled_positions=[Position(4, 4)])

    def test_unknown_card(self, mythic_catalog):
        with pytest.raises(CatalogError):
            initialize(["thrall", "no_such_card"], STARTER_DECK_B, "p1", "p2", mythic_catalog)

    def test_ability_id_is_not_a_card(self, mythic_catalog):
        with pytest.raises(CatalogError):
            initialize(["foresight"], STARTER_DECK_B, "p1", "p2", mythic_catalog)


class TestStartEvents:

    def test_deal_is_described(self, mythic_catalog):
        state = _new_game(mythic_catalog, seed=2, starting_player_id="p1")

        events = start_events(state)

        assert events[0] == GameStarted(player1_id="p1", player2_id="p2", starting_player_id="p1")
        drawn = [e for e in events if isinstance(e, CardDrawn)]
        assert len(drawn) == 10
        assert [e.instance_id for e in drawn[:5]] == list(state.player1.hand)
