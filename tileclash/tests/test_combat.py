"""
Tests for combat resolution.

Tests:
- Strictly greater facing power flips, equal never does
- Own cards are never attacked
- Protected cards and every failed attack defend
- Chain flips only when enabled
"""

from ..engine_core.state import EffectKind, Position, PowerProfile, TemporaryEffect
from ..engine_core.combat import resolve_combat
from ..engine_core.events import CardDefended, CardFlipped
from ..engine_core.reducer import place_card


class TestBasicCombat:
    """Placement scenarios on a mostly empty board."""

    def test_lone_card_scores_one(self, make_state, make_card, spare_cards):
        """A card with no neighbours flips nothing and scores 1."""
        state = make_state(hands={"p1": [make_card("a", power=5)], "p2": spare_cards["p2"]})

        result = place_card(state, "p1", "a", Position(1, 1))

        assert result.success
        assert not any(isinstance(e, CardFlipped) for e in result.events)
        assert result.new_state.player1.score == 1
        assert result.new_state.player2.score == 0

    def test_greater_power_flips(self, make_state, make_card, spare_cards):
        """Left-facing 6 beats right-facing 3."""
        state = make_state(
            board={Position(0, 0): make_card("enemy", "p2", 3)},
            hands={"p1": [make_card("ally", power=6)], "p2": spare_cards["p2"]},
        )
        assert state.player2.score == 1

        result = place_card(state, "p1", "ally", Position(1, 0))

        new_state = result.new_state
        assert new_state.card_at(Position(0, 0)).owner == "p1"
        assert new_state.player1.score == 2
        assert new_state.player2.score == 0
        flips = [e for e in result.events if isinstance(e, CardFlipped)]
        assert len(flips) == 1
        assert flips[0].from_player_id == "p2"
        assert flips[0].attacker_instance_id == "ally"

    def test_equal_power_does_not_flip(self, make_state, make_card, spare_cards):
        """3 against 3 is not enough."""
        state = make_state(
            board={Position(0, 0): make_card("enemy", "p2", 3)},
            hands={"p1": [make_card("ally", power=(6, 6, 6, 3))], "p2": spare_cards["p2"]},
        )

        result = place_card(state, "p1", "ally", Position(1, 0))

        assert result.new_state.card_at(Position(0, 0)).owner == "p2"
        assert result.new_state.player2.score == 1

    def test_only_facing_sides_compare(self, make_state, make_card):
        """The attacker's right side fights the defender's left side."""
        state = make_state(board={
            Position(1, 0): make_card("attacker", "p1", (1, 4, 1, 1)),
            Position(2, 0): make_card("defender", "p2", (9, 9, 9, 3)),
        })

        outcome = resolve_combat(state, Position(1, 0))

        assert outcome.flipped == [Position(2, 0)]
        assert outcome.flip_count == 1
        assert outcome.state.card_at(Position(2, 0)).owner == "p1"

    def test_own_cards_are_ignored(self, make_state, make_card):
        state = make_state(board={
            Position(1, 1): make_card("a", "p1", 9),
            Position(1, 0): make_card("b", "p1", 1),
        })

        outcome = resolve_combat(state, Position(1, 1))

        assert outcome.flipped == []
        assert outcome.events == []

    def test_protected_card_defends(self, make_state, make_card):
        shield = TemporaryEffect(PowerProfile(), duration=1, applies_to="p2", kind=EffectKind.BLOCK_DEFEAT)
        state = make_state(board={
            Position(1, 1): make_card("a", "p1", 9),
            Position(1, 0): make_card("b", "p2", 1).with_effect(shield),
        })

        outcome = resolve_combat(state, Position(1, 1))

        assert outcome.flipped == []
        assert outcome.state.card_at(Position(1, 0)).owner == "p2"
        assert isinstance(outcome.events[0], CardDefended)

    def test_every_failed_attack_is_defended(self, make_state, make_card):
        """Equal and stronger faces both hold; the weaker one flips."""
        state = make_state(board={
            Position(1, 1): make_card("a", "p1", 5),
            Position(1, 0): make_card("equal", "p2", 5),
            Position(0, 1): make_card("strong", "p2", 9),
            Position(2, 1): make_card("weak", "p2", 1),
        })

        outcome = resolve_combat(state, Position(1, 1))

        assert outcome.flipped == [Position(2, 1)]
        assert sorted(d.instance_id for d in outcome.defences) == ["equal", "strong"]
        assert all(d.attacker_instance_id == "a" for d in outcome.defences)

    def test_combat_uses_current_power(self, make_state, make_card):
        """A debuffed defender loses where its base power would have held."""
        debuff = TemporaryEffect(PowerProfile.uniform(-3), duration=2, kind=EffectKind.DEBUFF)
        state = make_state(board={
            Position(1, 1): make_card("a", "p1", 5),
            Position(2, 1): make_card("b", "p2", 6).with_effect(debuff),
        })

        outcome = resolve_combat(state, Position(1, 1))

        assert outcome.flipped == [Position(2, 1)]


class TestChainCombat:
    """Cascading flips are opt-in."""

    def _state(self, make_state, make_card):
        return make_state(board={
            Position(1, 1): make_card("placed", "p1", 9),
            Position(1, 0): make_card("middle", "p2", (1, 1, 1, 9)),
            Position(0, 0): make_card("far", "p2", 1),
        })

    def test_no_cascade_by_default(self, make_state, make_card):
        outcome = resolve_combat(self._state(make_state, make_card), Position(1, 1))

        assert outcome.flipped == [Position(1, 0)]
        assert outcome.state.card_at(Position(0, 0)).owner == "p2"

    def test_cascade_when_enabled(self, make_state, make_card):
        """The flipped card attacks its own enemy neighbours."""
        outcome = resolve_combat(self._state(make_state, make_card), Position(1, 1), chain=True)

        assert outcome.flipped == [Position(1, 0), Position(0, 0)]
        assert outcome.state.card_at(Position(0, 0)).owner == "p1"
