"""
Action System - Actions, payloads, and results.

Actions represent the three ways a player can change a game:
1. Place a card from hand onto the board
2. End the turn
3. Surrender

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Position


class ActionType(Enum):
    """Types of actions in the system."""
    PLACE_CARD = "place_card"
    END_TURN = "end_turn"
    SURRENDER = "surrender"


class ActionError(Enum):
    """Machine-readable reasons an action was rejected."""
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    POSITION_OUT_OF_RANGE = "POSITION_OUT_OF_RANGE"
    POSITION_DISABLED = "POSITION_DISABLED"
    POSITION_OCCUPIED = "POSITION_OCCUPIED"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    GAME_COMPLETED = "GAME_COMPLETED"
    ALREADY_PLACED = "ALREADY_PLACED"  # one placement per turn


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Only PLACE_CARD uses card_instance_id and position.
    """
    player_id: str
    card_instance_id: str | None = None
    position: Position | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    Actions are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload

    @property
    def player_id(self) -> str:
        return self.payload.player_id

    @classmethod
    def place_card(cls, player_id: str, card_instance_id: str, position: Position) -> Action:
        """Factory for place-card action."""
        return cls(
            action_type=ActionType.PLACE_CARD,
            payload=ActionPayload(
                player_id=player_id,
                card_instance_id=card_instance_id,
                position=position,
            ),
        )

    @classmethod
    def end_turn(cls, player_id: str) -> Action:
        """Factory for end-turn action."""
        return cls(action_type=ActionType.END_TURN, payload=ActionPayload(player_id=player_id))

    @classmethod
    def surrender(cls, player_id: str) -> Action:
        """Factory for surrender action."""
        return cls(action_type=ActionType.SURRENDER, payload=ActionPayload(player_id=player_id))

    def __str__(self) -> str:
        if self.action_type == ActionType.PLACE_CARD:
            return f"{self.player_id} places {self.payload.card_instance_id} at {self.payload.position}"
        return f"{self.player_id} {self.action_type.value.replace('_', ' ')}"


@dataclass(frozen=True)
class Move:
    """A candidate placement produced by move search."""
    card_instance_id: str
    position: Position

    def to_action(self, player_id: str) -> Action:
        return Action.place_card(player_id, self.card_instance_id, self.position)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Ordered events (if succeeded)
    - Error message and code (if failed)
    """
    success: bool
    new_state: Any | None = None  # GameState
    events: list[Any] = field(default_factory=list)  # GameEvent
    error: str | None = None
    error_code: ActionError | None = None

    @classmethod
    def failure(cls, error: str, error_code: ActionError) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(cls, state: Any, events: list[Any] | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, events=events or [])
