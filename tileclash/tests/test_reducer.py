"""
Tests for the reducer (turn state machine).

Tests:
- Action validation and error codes
- Placement bookkeeping (hand, draw, scores, tiles)
- Turn switching and effect expiry
- Completion by full board, surrender and exhausted cards
- Structural invariant enforcement
"""

import pytest

from ..config import EngineConfig
from ..engine_core.state import (
    EffectKind,
    GameStatus,
    Position,
    PowerProfile,
    TemporaryEffect,
    TileEffect,
    TileStatus,
)
from ..engine_core.action import Action, ActionError
from ..engine_core.events import (
    CardDrawn,
    CardFlipped,
    CardPlaced,
    CardPowerChanged,
    GameOver,
    ScoreUpdated,
    TileStateChanged,
    TurnEnded,
    TurnStarted,
)
from ..engine_core.reducer import Reducer, apply_action, end_turn, place_card, surrender
from ..engine_core.validation import StateInvariantError


@pytest.fixture
def ready_state(make_state, make_card):
    """p1 to move holding a and b, with one card in each deck."""
    return make_state(
        hands={
            "p1": [make_card("a", power=5), make_card("b", power=4)],
            "p2": [make_card("x", power=5)],
        },
        decks={"p1": [make_card("d1", power=3)], "p2": [make_card("d2", power=3)]},
    )


class TestPlaceCardValidation:
    """Rejected placements return a code and change nothing."""

    def test_not_your_turn(self, ready_state):
        result = place_card(ready_state, "p2", "x", Position(0, 0))
        assert not result.success
        assert result.error_code == ActionError.NOT_YOUR_TURN
        assert result.new_state is None
        assert result.events == []

    def test_position_out_of_range(self, ready_state):
        result = place_card(ready_state, "p1", "a", Position(4, 0))
        assert result.error_code == ActionError.POSITION_OUT_OF_RANGE

    def test_position_disabled(self, make_state, make_card):
        state = make_state(hands={"p1": [make_card("a")]}, disabled=[Position(0, 0)])
        result = place_card(state, "p1", "a", Position(0, 0))
        assert result.error_code == ActionError.POSITION_DISABLED

    def test_blocked_tile_is_disabled(self, make_state, make_card):
        state = make_state(
            hands={"p1": [make_card("a")]},
            tiles={Position(0, 0): TileEffect(TileStatus.BLOCKED, turns_left=2)},
        )
        result = place_card(state, "p1", "a", Position(0, 0))
        assert result.error_code == ActionError.POSITION_DISABLED

    def test_position_occupied(self, make_state, make_card):
        state = make_state(
            board={Position(0, 0): make_card("z", "p2")},
            hands={"p1": [make_card("a")]},
        )
        result = place_card(state, "p1", "a", Position(0, 0))
        assert result.error_code == ActionError.POSITION_OCCUPIED

    def test_card_not_in_hand(self, ready_state):
        result = place_card(ready_state, "p1", "x", Position(0, 0))
        assert result.error_code == ActionError.CARD_NOT_IN_HAND

    def test_unknown_player(self, ready_state):
        result = place_card(ready_state, "ghost", "a", Position(0, 0))
        assert result.error_code == ActionError.UNKNOWN_PLAYER

    def test_completed_game_rejects_everything(self, ready_state):
        finished = surrender(ready_state, "p2").new_state

        assert place_card(finished, "p1", "a", Position(0, 0)).error_code == ActionError.GAME_COMPLETED
        assert end_turn(finished, "p1").error_code == ActionError.GAME_COMPLETED
        assert surrender(finished, "p1").error_code == ActionError.GAME_COMPLETED

    def test_rejection_leaves_state_untouched(self, ready_state):
        before = ready_state
        place_card(ready_state, "p1", "a", Position(9, 9))
        assert ready_state == before
        assert ready_state.player1.hand == ("a", "b")


class TestPlaceCard:
    """Successful placements."""

    def test_card_moves_from_hand_to_board(self, ready_state):
        result = place_card(ready_state, "p1", "a", Position(2, 2))

        state = result.new_state
        assert state.card_at(Position(2, 2)).instance_id == "a"
        assert state.card_at(Position(2, 2)).owner == "p1"
        assert "a" not in state.player1.hand
        assert state.current_player_id == "p1"

    def test_placement_draws_a_card(self, ready_state):
        result = place_card(ready_state, "p1", "a", Position(2, 2))

        assert result.new_state.player1.hand == ("b", "d1")
        assert result.new_state.player1.deck == ()
        assert isinstance(result.events[-1], CardDrawn)

    def test_event_order(self, make_state, make_card):
        """Placed, flipped, scored, drawn."""
        state = make_state(
            board={Position(0, 0): make_card("enemy", "p2", 1)},
            hands={"p1": [make_card("a", power=5)], "p2": [make_card("x")]},
            decks={"p1": [make_card("d1")]},
        )

        result = place_card(state, "p1", "a", Position(1, 0))

        kinds = [type(e) for e in result.events]
        assert kinds == [CardPlaced, CardFlipped, ScoreUpdated, CardDrawn]
        assert result.events[2].score_of("p1") == 2

    def test_second_placement_in_a_turn_is_rejected(self, ready_state):
        state = place_card(ready_state, "p1", "a", Position(0, 0)).new_state
        assert state.placed_this_turn
        assert state.current_player_id == "p1"

        result = place_card(state, "p1", "b", Position(3, 3))

        assert not result.success
        assert result.error_code == ActionError.ALREADY_PLACED
        assert state.card_at(Position(3, 3)) is None
        assert state.player1.score == 1

    def test_placing_again_after_the_turn_comes_back(self, ready_state):
        state = place_card(ready_state, "p1", "a", Position(0, 0)).new_state
        state = end_turn(state, "p1").new_state
        assert not state.placed_this_turn
        state = place_card(state, "p2", "x", Position(3, 3)).new_state
        state = end_turn(state, "p2").new_state

        result = place_card(state, "p1", "b", Position(1, 1))

        assert result.success
        assert result.new_state.player1.score == 2

    def test_auto_end_turn(self, ready_state):
        config = EngineConfig(auto_end_turn=True)
        result = place_card(ready_state, "p1", "a", Position(0, 0), config=config)

        assert result.new_state.current_player_id == "p2"
        assert result.new_state.turn_number == 2
        assert not result.new_state.placed_this_turn
        assert any(isinstance(e, TurnEnded) for e in result.events)

        again = place_card(result.new_state, "p1", "b", Position(3, 3), config=config)
        assert again.error_code == ActionError.NOT_YOUR_TURN


class TestTileTransfer:
    """Tile effects are consumed by the next placement."""

    def test_boost_transfers_to_scoped_player(self, make_state, make_card):
        tile = TileEffect(TileStatus.BOOSTED, turns_left=3, power=PowerProfile.uniform(1), applies_to="p1")
        state = make_state(hands={"p1": [make_card("a", power=5)]}, tiles={Position(0, 0): tile})

        result = place_card(state, "p1", "a", Position(0, 0))

        placed = result.new_state.card_at(Position(0, 0))
        assert placed.current_power == PowerProfile.uniform(6)
        assert result.new_state.cell_at(Position(0, 0)).tile_effect is None
        assert TileStateChanged(position=Position(0, 0), status=TileStatus.NORMAL) in result.events

    def test_boost_for_other_player_is_wasted(self, make_state, make_card):
        tile = TileEffect(TileStatus.BOOSTED, turns_left=3, power=PowerProfile.uniform(1), applies_to="p2")
        state = make_state(hands={"p1": [make_card("a", power=5)]}, tiles={Position(0, 0): tile})

        result = place_card(state, "p1", "a", Position(0, 0))

        assert result.new_state.card_at(Position(0, 0)).current_power == PowerProfile.uniform(5)
        assert result.new_state.cell_at(Position(0, 0)).tile_effect is None

    def test_curse_weakens_placed_card(self, make_state, make_card):
        tile = TileEffect(TileStatus.CURSED, turns_left=2, power=PowerProfile.uniform(-2))
        state = make_state(hands={"p1": [make_card("a", power=5)]}, tiles={Position(1, 1): tile})

        result = place_card(state, "p1", "a", Position(1, 1))

        assert result.new_state.card_at(Position(1, 1)).current_power == PowerProfile.uniform(3)


class TestEndTurn:
    """Turn switching and effect expiry."""

    def test_switches_player(self, ready_state):
        result = end_turn(ready_state, "p1")

        state = result.new_state
        assert state.current_player_id == "p2"
        assert state.turn_number == 2
        assert TurnEnded(player_id="p1", turn_number=1) in result.events
        assert TurnStarted(player_id="p2", turn_number=2) in result.events

    def test_end_turn_out_of_turn(self, ready_state):
        assert end_turn(ready_state, "p2").error_code == ActionError.NOT_YOUR_TURN

    def test_buff_expires(self, make_state, make_card, spare_cards):
        buff = TemporaryEffect(PowerProfile.uniform(2), duration=1)
        state = make_state(
            board={Position(0, 0): make_card("a", "p1", 5).with_effect(buff)},
            hands=spare_cards,
        )

        result = end_turn(state, "p1")

        card = result.new_state.card_at(Position(0, 0))
        assert card.temporary_effects == ()
        assert card.current_power == PowerProfile.uniform(5)
        changed = [e for e in result.events if isinstance(e, CardPowerChanged)]
        assert changed[0].source == "expired"

    def test_permanent_buff_survives(self, make_state, make_card, spare_cards):
        buff = TemporaryEffect(PowerProfile.uniform(2), duration=1000)
        state = make_state(
            board={Position(0, 0): make_card("a", "p1", 5).with_effect(buff)},
            hands=spare_cards,
        )

        state = end_turn(state, "p1").new_state
        state = end_turn(state, "p2").new_state

        assert state.card_at(Position(0, 0)).current_power == PowerProfile.uniform(7)

    def test_protection_lasts_through_opponent_turn(self, make_state, make_card, spare_cards):
        """A shield scoped to its owner only ages when the owner's turn begins."""
        shield = TemporaryEffect(PowerProfile(), duration=1, applies_to="p1", kind=EffectKind.BLOCK_DEFEAT)
        state = make_state(
            board={Position(0, 0): make_card("a", "p1").with_effect(shield)},
            hands=spare_cards,
        )

        state = end_turn(state, "p1").new_state
        assert state.current_player_id == "p2"
        assert state.card_at(Position(0, 0)).is_protected

        state = end_turn(state, "p2").new_state
        assert not state.card_at(Position(0, 0)).is_protected

    def test_tile_effect_expires(self, make_state, spare_cards):
        tile = TileEffect(TileStatus.BLOCKED, turns_left=2)
        state = make_state(hands=spare_cards, tiles={Position(2, 2): tile})

        state = end_turn(state, "p1").new_state
        assert state.cell_at(Position(2, 2)).tile_effect.turns_left == 1

        result = end_turn(state, "p2")
        assert result.new_state.cell_at(Position(2, 2)).tile_effect is None
        assert result.new_state.is_playable(Position(2, 2))
        assert TileStateChanged(position=Position(2, 2), status=TileStatus.NORMAL) in result.events


class TestCompletion:
    """The three ways a game ends."""

    def test_full_board_completes(self, make_state, make_card):
        """Filling the last cell with a 9/7 split ends the game for the 9."""
        cells = [Position(x, y) for y in range(4) for x in range(4)]
        last = cells[-1]
        board = {}
        for i, position in enumerate(cells[:-1]):
            owner = "p1" if i < 8 else "p2"
            board[position] = make_card(f"{owner}:{i}", owner, 5)
        state = make_state(board=board, hands={"p1": [make_card("final", power=5)]})
        assert state.calculate_scores() == {"p1": 8, "p2": 7}

        result = place_card(state, "p1", "final", last)

        final = result.new_state
        assert final.status == GameStatus.COMPLETED
        assert final.winner == "p1"
        assert final.player1.score == 9
        assert final.player2.score == 7
        game_over = result.events[-1]
        assert isinstance(game_over, GameOver)
        assert game_over.reason == "board_full"

    def test_full_board_draw(self, make_state, make_card):
        cells = [Position(x, y) for y in range(4) for x in range(4)]
        board = {}
        for i, position in enumerate(cells[:-1]):
            owner = "p1" if i < 7 else "p2"
            board[position] = make_card(f"{owner}:{i}", owner, 5)
        state = make_state(board=board, hands={"p1": [make_card("final", power=5)]})

        final = place_card(state, "p1", "final", cells[-1]).new_state

        assert final.status == GameStatus.COMPLETED
        assert final.winner is None

    def test_surrender_out_of_turn(self, ready_state):
        """p2 may surrender during p1's turn; p1 wins immediately."""
        result = surrender(ready_state, "p2")

        assert result.success
        assert result.new_state.status == GameStatus.COMPLETED
        assert result.new_state.winner == "p1"
        assert result.events[-1].reason == "surrender"

    def test_surrender_on_own_turn(self, ready_state):
        result = apply_action(ready_state, Action.surrender("p1"))
        assert result.new_state.winner == "p2"

    def test_out_of_cards(self, make_state, make_card):
        """Nothing left to place anywhere ends the game at the turn boundary."""
        state = make_state(board={
            Position(0, 0): make_card("a", "p1"),
            Position(3, 3): make_card("b", "p1"),
            Position(1, 3): make_card("c", "p2"),
        })

        result = end_turn(state, "p1")

        assert result.new_state.is_completed
        assert result.new_state.winner == "p1"
        assert result.events[-1].reason == "out_of_cards"


class TestInvariants:
    """Broken input states are fatal."""

    def test_mismatched_score_raises(self, ready_state):
        broken = ready_state._copy_with(player1=ready_state.player1._copy_with(score=5))

        with pytest.raises(StateInvariantError):
            place_card(broken, "p1", "a", Position(0, 0))

    def test_duplicate_instance_raises(self, ready_state):
        broken = ready_state._copy_with(
            player2=ready_state.player2._copy_with(hand=("x", "a"))
        )

        with pytest.raises(StateInvariantError) as excinfo:
            end_turn(broken, "p1")
        assert any("more than one zone" in e for e in excinfo.value.errors)

    def test_validation_can_be_disabled(self, ready_state):
        broken = ready_state._copy_with(player1=ready_state.player1._copy_with(score=5))
        reducer = Reducer(config=EngineConfig(validate_states=False))

        result = reducer.apply(broken, Action.end_turn("p1"))

        assert result.success
        assert result.new_state.player1.score == 0
