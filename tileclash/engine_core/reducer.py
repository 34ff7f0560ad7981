"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action() or one of the
place_card / end_turn / surrender entry points.

Design principles:
- Pure function: (state, action) -> (new_state, events)
- Validates before applying; a rejected action changes nothing
- Returns ActionResult with success/failure and an ordered event log
- Delegates flips to the combat resolver and abilities to EffectResolver
- One placement per turn: a second one is rejected until the turn ends
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .state import GameState, Position, TileStatus
from .action import Action, ActionError, ActionResult, ActionType
from .combat import resolve_combat
from .effects import TriggerMoment
from .effect_resolver import AbilityRegistry, EffectResolver
from .events import (
    CardPlaced,
    CardPowerChanged,
    GameEvent,
    TileStateChanged,
    TurnEnded,
    TurnStarted,
    score_event,
)
from .validation import check_invariants
from . import rules
from ..config import EngineConfig, DEFAULT_CONFIG


logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    A reducer without a registry resolves combat only and ignores abilities.
    """
    registry: AbilityRegistry | None = None
    config: EngineConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    @property
    def resolver(self) -> EffectResolver | None:
        return EffectResolver(self.registry) if self.registry is not None else None

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        Raises StateInvariantError if the incoming state is structurally broken.
        """
        if self.config.validate_states:
            check_invariants(state)

        validation_error = self._validate_action(state, action)
        if validation_error:
            message, code = validation_error
            logger.debug("Rejected %s: %s", action, message)
            return ActionResult.failure(message, error_code=code)

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ActionError.UNKNOWN_ACTION,
            )

        result = handler(state, action)
        if result.success:
            logger.debug("Applied %s (%d events)", action, len(result.events))
        return result

    def _validate_action(self, state: GameState, action: Action) -> tuple[str, ActionError] | None:
        """
        Validate that an action is legal in the current state.

        Returns (message, code) if invalid, None if valid.
        """
        if not isinstance(action.action_type, ActionType):
            return f"Unknown action type: {action.action_type}", ActionError.UNKNOWN_ACTION

        player_id = action.payload.player_id
        if state.get_player(player_id) is None:
            return f"Player {player_id} is not in this game", ActionError.UNKNOWN_PLAYER

        if state.is_completed:
            return "Game is over - no actions allowed", ActionError.GAME_COMPLETED

        # Surrender is the one action not gated by turn ownership
        if action.action_type == ActionType.SURRENDER:
            return None

        if player_id != state.current_player_id:
            return f"Not {player_id}'s turn", ActionError.NOT_YOUR_TURN

        if action.action_type == ActionType.PLACE_CARD:
            if state.placed_this_turn:
                return f"{player_id} has already placed a card this turn", ActionError.ALREADY_PLACED
            return self._validate_placement(state, action)
        return None

    def _validate_placement(self, state: GameState, action: Action) -> tuple[str, ActionError] | None:
        position = action.payload.position
        instance_id = action.payload.card_instance_id

        if position is None or not state.is_valid_position(position):
            return f"Position {position} is off the board", ActionError.POSITION_OUT_OF_RANGE
        if not state.is_enabled(position):
            return f"Position {position} is disabled", ActionError.POSITION_DISABLED
        if not state.is_empty(position):
            return f"Position {position} is occupied", ActionError.POSITION_OCCUPIED
        if instance_id is None or not state.card_in_hand(action.payload.player_id, instance_id):
            return f"Card {instance_id} is not in hand", ActionError.CARD_NOT_IN_HAND
        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLACE_CARD: self._handle_place_card,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.SURRENDER: self._handle_surrender,
        }
        return handlers.get(action_type)

    def _handle_place_card(self, state: GameState, action: Action) -> ActionResult:
        """Handle place-card action."""
        player_id = action.payload.player_id
        instance_id = action.payload.card_instance_id
        position = action.payload.position
        resolver = self.resolver
        events: list[GameEvent] = []

        player = state.get_player(player_id)
        state = state.with_player(player.without_in_hand(instance_id))
        card = state.hydrate(instance_id, player_id)

        # Tile effect is consumed by the placement; it transfers only if scoped to this player
        cell = state.cell_at(position)
        tile = cell.tile_effect
        if tile is not None:
            card = rules.absorb_tile(card, tile)
            cell = cell._copy_with(tile_effect=None)
            events.append(TileStateChanged(position=position, status=TileStatus.NORMAL))

        state = state.with_cell(position, cell._copy_with(card=card))
        state = state._copy_with(placed_this_turn=True)
        events.append(CardPlaced(player_id=player_id, instance_id=instance_id, position=position))

        if resolver:
            state, new_events = resolver.trigger(state, position, TriggerMoment.ON_PLACE)
            events.extend(new_events)
            state, new_events = resolver.trigger_instances(state, [instance_id], TriggerMoment.BEFORE_COMBAT)
            events.extend(new_events)

        state, new_events = self._combat(state, position)
        events.extend(new_events)

        if resolver:
            state, new_events = resolver.trigger_instances(state, [instance_id], TriggerMoment.AFTER_COMBAT)
            events.extend(new_events)

        state = state.with_scores()
        events.append(score_event(state.calculate_scores()))

        state, drawn = rules.draw_card(state, player_id)
        if drawn:
            events.append(drawn)

        if not state.has_open_cells():
            state, game_over = self._complete(state, "board_full")
            events.append(game_over)
            return ActionResult.success_with_state(state, events)

        if self.config.auto_end_turn:
            state, turn_events = self._end_turn(state, player_id)
            events.extend(turn_events)

        return ActionResult.success_with_state(state, events)

    def _combat(self, state: GameState, position: Position) -> tuple[GameState, list[GameEvent]]:
        """Resolve combat for the card at `position`, then its flip and defend triggers."""
        resolver = self.resolver
        outcome = resolve_combat(state, position, chain=self.config.chain_flips)
        state = outcome.state
        events: list[GameEvent] = list(outcome.events)
        if resolver is None:
            return state, events

        flipped_ids = [state.card_at(p).instance_id for p in outcome.flipped]
        if flipped_ids:
            state, new_events = resolver.trigger_flips(state, flipped_ids)
            events.extend(new_events)
        if outcome.defences:
            state, new_events = resolver.trigger_defends(state, outcome.defences)
            events.extend(new_events)
        return state, events

    def _handle_end_turn(self, state: GameState, action: Action) -> ActionResult:
        """Handle end-turn action."""
        state, events = self._end_turn(state, action.payload.player_id)
        return ActionResult.success_with_state(state, events)

    def _end_turn(self, state: GameState, player_id: str) -> tuple[GameState, list[GameEvent]]:
        resolver = self.resolver
        events: list[GameEvent] = []

        if resolver:
            state, new_events = resolver.trigger_for_owner(state, player_id, TriggerMoment.ON_TURN_END)
            events.extend(new_events)

        next_player = state.opponent_id(player_id)
        state, tick_events = self._tick_effects(state, next_player)
        events.extend(tick_events)

        events.append(TurnEnded(player_id=player_id, turn_number=state.turn_number))
        state = state._copy_with(
            current_player_id=next_player,
            turn_number=state.turn_number + 1,
            placed_this_turn=False,
        )
        events.append(TurnStarted(player_id=next_player, turn_number=state.turn_number))

        if resolver:
            state, new_events = resolver.trigger_for_owner(state, next_player, TriggerMoment.ON_TURN_START)
            events.extend(new_events)

        state = state.with_scores()
        events.append(score_event(state.calculate_scores()))

        if state.is_out_of_cards():
            state, game_over = self._complete(state, "out_of_cards")
            events.append(game_over)
        return state, events

    def _complete(self, state: GameState, reason: str) -> tuple[GameState, GameEvent]:
        state, game_over = rules.complete_game(state, rules.winner_by_score(state), reason)
        logger.info("Game %s over (%s): winner=%s", state.game_id or "-", reason, state.winner)
        return state, game_over

    def _tick_effects(self, state: GameState, next_player_id: str) -> tuple[GameState, list[GameEvent]]:
        """
        Age effects at a turn boundary.

        Unscoped card effects and tile effects age every boundary; effects
        scoped to a player age when that player's turn begins.
        """
        events: list[GameEvent] = []
        for position, card in state.cards_on_board():
            if not any(e.ticks_for(next_player_id) for e in card.temporary_effects):
                continue
            remaining = []
            for effect in card.temporary_effects:
                aged = effect.tick() if effect.ticks_for(next_player_id) else effect
                if aged is not None:
                    remaining.append(aged)
            updated = card._copy_with(temporary_effects=tuple(remaining))
            state = state.with_card(position, updated)
            if updated.current_power != card.current_power:
                events.append(CardPowerChanged(
                    instance_id=card.instance_id,
                    position=position,
                    old_power=card.current_power,
                    new_power=updated.current_power,
                    source="expired",
                ))

        for y, row in enumerate(state.board):
            for x, cell in enumerate(row):
                if cell.tile_effect is None:
                    continue
                aged = cell.tile_effect.tick()
                state, event = rules.set_tile_effect(state, Position(x, y), aged)
                if aged is None:
                    events.append(event)
        return state, events

    def _handle_surrender(self, state: GameState, action: Action) -> ActionResult:
        """Handle surrender action."""
        winner = state.opponent_id(action.payload.player_id)
        state, game_over = rules.complete_game(state, winner, "surrender")
        logger.info("%s surrendered; %s wins", action.payload.player_id, winner)
        return ActionResult.success_with_state(state, [game_over])


def apply_action(
    state: GameState,
    action: Action,
    registry: AbilityRegistry | None = None,
    config: EngineConfig | None = None,
) -> ActionResult:
    """Convenience function to apply an action."""
    reducer = Reducer(registry=registry, config=config or DEFAULT_CONFIG)
    return reducer.apply(state, action)


def place_card(
    state: GameState,
    player_id: str,
    card_instance_id: str,
    position: Position,
    registry: AbilityRegistry | None = None,
    config: EngineConfig | None = None,
) -> ActionResult:
    return apply_action(state, Action.place_card(player_id, card_instance_id, position), registry, config)


def end_turn(
    state: GameState,
    player_id: str,
    registry: AbilityRegistry | None = None,
    config: EngineConfig | None = None,
) -> ActionResult:
    return apply_action(state, Action.end_turn(player_id), registry, config)


def surrender(
    state: GameState,
    player_id: str,
    config: EngineConfig | None = None,
) -> ActionResult:
    return apply_action(state, Action.surrender(player_id), None, config)
