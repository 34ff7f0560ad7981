"""
Tests for redaction and catalog validation.
"""

import json

import pytest

from ..catalog_schema import (
    CatalogValidationError,
    build_catalog,
    load_catalog,
    parse_catalog,
    validate_catalog,
)
from ..engine_core.catalog import CatalogError
from ..engine_core.redaction import is_hidden, redact_for_viewer
from ..engine_core.reducer import place_card
from ..engine_core.setup import initialize
from ..engine_core.state import Position
from ..games.mythic import STARTER_DECK_A, STARTER_DECK_B


@pytest.fixture
def game(mythic_catalog):
    return initialize(STARTER_DECK_A, STARTER_DECK_B, "p1", "p2", mythic_catalog, seed=8)


def _document(**overrides):
    document = {
        "name": "test",
        "abilities": [{
            "ability_id": "rally",
            "name": "Rally",
            "trigger_moments": ["on_place"],
            "parameters": {"effect": "buff_allies", "amount": 1, "scope": "adjacent"},
        }],
        "cards": [
            {"card_id": "captain", "name": "Captain",
             "power": {"top": 5, "right": 4, "bottom": 3, "left": 6}, "ability_id": "rally"},
            {"card_id": "soldier", "name": "Soldier",
             "power": {"top": 2, "right": 2, "bottom": 2, "left": 2}},
        ],
    }
    document.update(overrides)
    return document


class TestRedaction:

    def test_player_sees_own_hand_only(self, game):
        view = redact_for_viewer(game, "p1")

        assert view.player1.hand == game.player1.hand
        assert len(view.player2.hand) == len(game.player2.hand)
        assert all(is_hidden(i) for i in view.player2.hand)
        for instance_id in game.player2.hand:
            assert instance_id not in view.catalog_cache

    def test_decks_always_hidden(self, game):
        view = redact_for_viewer(game, "p1")

        for player, original in zip(view.players, game.players):
            assert len(player.deck) == len(original.deck)
            assert all(is_hidden(i) for i in player.deck)
            for instance_id in original.deck:
                assert instance_id not in view.catalog_cache

    def test_spectator_sees_no_hands(self, game):
        view = redact_for_viewer(game, None)

        assert all(is_hidden(i) for p in view.players for i in p.hand)

    def test_board_stays_visible(self, game, mythic_registry):
        player_id = game.current_player_id
        card_id = game.get_player(player_id).hand[0]
        placed = place_card(game, player_id, card_id, Position(0, 0), mythic_registry).new_state

        view = redact_for_viewer(placed, None)

        assert view.card_at(Position(0, 0)).instance_id == card_id
        assert card_id in view.catalog_cache

    def test_original_state_untouched(self, game):
        redact_for_viewer(game, None)

        assert not any(is_hidden(i) for p in game.players for i in p.hand)


class TestCatalogValidation:

    def test_valid_document(self):
        result = validate_catalog(parse_catalog(_document()))

        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_duplicate_card(self):
        document = _document()
        document["cards"].append(dict(document["cards"][1]))

        result = validate_catalog(parse_catalog(document))

        assert not result.valid
        assert any("Duplicate card id: soldier" in e for e in result.errors)

    def test_card_collides_with_ability(self):
        document = _document()
        document["cards"][1]["card_id"] = "rally"

        result = validate_catalog(parse_catalog(document))

        assert any("collides" in e for e in result.errors)

    def test_unknown_ability_reference(self):
        document = _document()
        document["cards"][1]["ability_id"] = "missing"

        result = validate_catalog(parse_catalog(document))

        assert any("unknown ability missing" in e for e in result.errors)

    def test_bad_effect_parameters(self):
        document = _document()
        document["abilities"][0]["parameters"] = {"effect": "explode"}

        result = validate_catalog(parse_catalog(document))

        assert not result.valid
        assert any(e.startswith("Ability rally") for e in result.errors)

    def test_warnings(self):
        result = validate_catalog(parse_catalog(_document(cards=[])))

        assert result.valid
        assert "Ability rally is not used by any card" in result.warnings
        assert "Catalog has no cards" in result.warnings

    def test_malformed_shape(self):
        document = _document()
        document["cards"][0]["power"]["top"] = -1

        with pytest.raises(CatalogError):
            parse_catalog(document)

    def test_build_rejects_invalid(self):
        document = _document()
        document["cards"][1]["ability_id"] = "missing"

        with pytest.raises(CatalogValidationError) as exc_info:
            build_catalog(parse_catalog(document))
        assert exc_info.value.errors

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(_document()), encoding="utf-8")

        catalog = load_catalog(path)

        assert len(catalog) == 2
        assert catalog.card("captain").ability_id == "rally"
        assert catalog.ability("rally").parameters["amount"] == 1

    def test_loaded_catalog_plays(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(_document()), encoding="utf-8")

        state = initialize(["captain", "soldier"], ["soldier"], "a", "b", load_catalog(path), seed=1)

        assert len(state.catalog_cache) == 3
