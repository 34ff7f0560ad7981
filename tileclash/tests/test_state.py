"""
Tests for the board and state model.

Tests:
- Positions, directions and power profiles
- Derived current power and effect aging
- Immutable updates
- Scores and completion helpers
"""

import pytest

from ..engine_core.state import (
    Direction,
    EffectKind,
    Player,
    Position,
    PowerProfile,
    TemporaryEffect,
    TileEffect,
    TileStatus,
    PERMANENT_DURATION,
    all_positions,
)


class TestPosition:
    """Tests for board coordinates."""

    def test_corner_has_two_neighbors(self):
        """A corner only touches two cells."""
        neighbors = Position(0, 0).neighbors()
        assert [d for d, _ in neighbors] == [Direction.RIGHT, Direction.BOTTOM]

    def test_center_has_four_neighbors(self):
        assert len(Position(1, 1).neighbors()) == 4

    def test_validity(self):
        assert Position(3, 3).is_valid
        assert not Position(4, 0).is_valid
        assert not Position(0, -1).is_valid

    def test_opposites(self):
        assert Direction.TOP.opposite == Direction.BOTTOM
        assert Direction.LEFT.opposite == Direction.RIGHT

    def test_all_positions_row_major(self):
        positions = list(all_positions())
        assert len(positions) == 16
        assert positions[0] == Position(0, 0)
        assert positions[1] == Position(1, 0)
        assert positions[4] == Position(0, 1)


class TestPower:
    """Tests for directional power and derived current power."""

    def test_facing(self):
        power = PowerProfile(top=1, right=2, bottom=3, left=4)
        assert power.facing(Direction.RIGHT) == 2
        assert power.facing(Direction.LEFT) == 4

    def test_current_power_sums_modifiers(self, make_card):
        """current_power is base + enhancements + every effect delta."""
        card = make_card("a", power=5)
        card = card.with_enhancement(PowerProfile(top=1))
        card = card.with_effect(TemporaryEffect(PowerProfile.uniform(2), duration=3))
        card = card.with_effect(TemporaryEffect(PowerProfile(left=-1), duration=3, kind=EffectKind.DEBUFF))

        assert card.current_power == PowerProfile(top=8, right=7, bottom=7, left=6)
        assert card.base_power == PowerProfile.uniform(5)

    def test_protection_flag(self, make_card):
        card = make_card("a").with_effect(
            TemporaryEffect(PowerProfile(), duration=1, kind=EffectKind.BLOCK_DEFEAT)
        )
        assert card.is_protected
        assert not card.ignores_debuffs


class TestEffectAging:
    """Tests for temporary and tile effect expiry."""

    def test_effect_expires_at_zero(self):
        effect = TemporaryEffect(PowerProfile.uniform(1), duration=2)
        older = effect.tick()
        assert older.duration == 1
        assert older.tick() is None

    def test_permanent_effect_never_ticks(self):
        effect = TemporaryEffect(PowerProfile.uniform(1), duration=PERMANENT_DURATION)
        assert effect.is_permanent
        assert not effect.ticks_for("p1")

    def test_scoped_effect_ticks_for_owner_only(self):
        effect = TemporaryEffect(PowerProfile(), duration=1, applies_to="p1")
        assert effect.ticks_for("p1")
        assert not effect.ticks_for("p2")

    def test_tile_effect_tick(self):
        tile = TileEffect(TileStatus.BLOCKED, turns_left=1)
        assert tile.blocks_placement
        assert tile.tick() is None


class TestPlayer:

    def test_draw_takes_front_of_deck(self):
        player = Player(user_id="p1", hand=("a",), deck=("b", "c"))
        drawn, player = player.draw()
        assert drawn == "b"
        assert player.hand == ("a", "b")
        assert player.deck == ("c",)

    def test_draw_from_empty_deck(self):
        player = Player(user_id="p1")
        drawn, same = player.draw()
        assert drawn is None
        assert same is player


class TestGameState:
    """Tests for GameState accessors and immutable updates."""

    def test_with_card_returns_new_state(self, make_state, make_card):
        """Updates never modify the original state."""
        state = make_state()
        card = make_card("a")
        updated = state.with_card(Position(1, 1), card)

        assert updated.card_at(Position(1, 1)) == card
        assert state.card_at(Position(1, 1)) is None

    def test_card_at_off_board(self, make_state):
        assert make_state().card_at(Position(5, 5)) is None

    def test_scores_count_owned_cells(self, make_state, make_card):
        state = make_state(board={
            Position(0, 0): make_card("a", "p1"),
            Position(1, 0): make_card("b", "p1"),
            Position(3, 3): make_card("c", "p2"),
        })
        assert state.calculate_scores() == {"p1": 2, "p2": 1}
        assert state.player1.score == 2
        assert state.player2.score == 1

    def test_opponent_of_unknown_player(self, make_state):
        with pytest.raises(KeyError):
            make_state().opponent_id("nobody")

    def test_disabled_cells_do_not_count_as_open(self, make_state, make_card):
        """With 15 cards and one disabled cell there is nowhere left to play."""
        disabled = Position(3, 3)
        board = {
            p: make_card(f"c{p.x}{p.y}", "p1")
            for p in (Position(x, y) for y in range(4) for x in range(4))
            if p != disabled
        }
        state = make_state(board=board, disabled=[disabled])

        assert not state.has_open_cells()
        assert not state.is_board_full()
        assert not state.is_playable(disabled)

    def test_blocked_tile_is_not_enabled_but_open(self, make_state):
        position = Position(2, 2)
        state = make_state(tiles={position: TileEffect(TileStatus.BLOCKED, turns_left=2)})

        assert not state.is_enabled(position)
        assert not state.is_playable(position)
        assert state.has_open_cells()

    def test_out_of_cards(self, make_state, make_card):
        assert make_state().is_out_of_cards()
        assert not make_state(decks={"p2": [make_card("x")]}).is_out_of_cards()
