"""
Pydantic Schemas - Snapshot, event and error models for callers of the engine.

These models define the shape a transport or persistence layer sees.
They do not pick a wire encoding: call model_dump() / model_dump_json()
and ship the result however the caller likes.

Round trip:
    snapshot = GameStateSnapshot.from_state(state)
    assert snapshot.to_state() == state

Error Codes:
- NOT_YOUR_TURN, POSITION_*, CARD_NOT_IN_HAND, ...: rejected actions (see ActionError)
- CATALOG_ERROR: A deck or catalog referenced something unknown
- INVALID_REQUEST: Malformed setup parameters
- INVALID_STATE: A submitted snapshot breaks structural invariants
"""

from __future__ import annotations
from dataclasses import fields, is_dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..engine_core.state import (
    BoardCell,
    EffectKind,
    GameState,
    GameStatus,
    InGameCard,
    Player,
    Position,
    PowerProfile,
    TemporaryEffect,
    TileEffect,
    TileStatus,
    PERMANENT_DURATION,
)
from ..engine_core.action import ActionError, ActionResult, Move
from ..engine_core.catalog import SpecialAbility
from ..engine_core.effects import TriggerMoment


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    POSITION_OUT_OF_RANGE = "POSITION_OUT_OF_RANGE"
    POSITION_DISABLED = "POSITION_DISABLED"
    POSITION_OCCUPIED = "POSITION_OCCUPIED"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    GAME_COMPLETED = "GAME_COMPLETED"
    ALREADY_PLACED = "ALREADY_PLACED"
    CATALOG_ERROR = "CATALOG_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_STATE = "INVALID_STATE"

    @classmethod
    def from_action_error(cls, error: ActionError) -> ErrorCode:
        return cls(error.value)


# =============================================================================
# Shared Models
# =============================================================================

class PositionModel(BaseModel):
    x: int
    y: int

    model_config = {"from_attributes": True}

    def to_position(self) -> Position:
        return Position(self.x, self.y)


class PowerSnapshot(BaseModel):
    """Directional values. Deltas may be negative."""
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    model_config = {"from_attributes": True}

    def to_profile(self) -> PowerProfile:
        return PowerProfile(top=self.top, right=self.right, bottom=self.bottom, left=self.left)


class AbilitySnapshot(BaseModel):
    ability_id: str
    trigger_moments: list[TriggerMoment]
    parameters: dict[str, Any] = Field(default_factory=dict)
    name: str = ""
    description: str = ""

    @classmethod
    def from_ability(cls, ability: SpecialAbility) -> AbilitySnapshot:
        return cls(
            ability_id=ability.ability_id,
            trigger_moments=sorted(ability.trigger_moments, key=lambda m: m.value),
            parameters=dict(ability.parameters),
            name=ability.name,
            description=ability.description,
        )

    def to_ability(self) -> SpecialAbility:
        return SpecialAbility(
            ability_id=self.ability_id,
            trigger_moments=frozenset(self.trigger_moments),
            parameters=dict(self.parameters),
            name=self.name,
            description=self.description,
        )


class TemporaryEffectSnapshot(BaseModel):
    delta_power: PowerSnapshot
    duration: int
    applies_to: Optional[str] = None
    kind: EffectKind = EffectKind.BUFF
    name: str = ""

    model_config = {"from_attributes": True}

    def to_effect(self) -> TemporaryEffect:
        return TemporaryEffect(
            delta_power=self.delta_power.to_profile(),
            duration=self.duration,
            applies_to=self.applies_to,
            kind=self.kind,
            name=self.name,
        )


class TileEffectSnapshot(BaseModel):
    status: TileStatus
    turns_left: int
    power: PowerSnapshot = Field(default_factory=PowerSnapshot)
    applies_to: Optional[str] = None
    effect_duration: int = PERMANENT_DURATION
    name: str = ""

    model_config = {"from_attributes": True}

    def to_effect(self) -> TileEffect:
        return TileEffect(
            status=self.status,
            turns_left=self.turns_left,
            power=self.power.to_profile(),
            applies_to=self.applies_to,
            effect_duration=self.effect_duration,
            name=self.name,
        )


class CardSnapshot(BaseModel):
    """A card instance, including its resolved ability."""
    instance_id: str
    base_card_id: str
    owner: str
    base_power: PowerSnapshot
    name: str = ""
    power_enhancements: PowerSnapshot = Field(default_factory=PowerSnapshot)
    temporary_effects: list[TemporaryEffectSnapshot] = Field(default_factory=list)
    special_ability: Optional[AbilitySnapshot] = None
    level: int = 1
    tags: list[str] = Field(default_factory=list)
    current_power: Optional[PowerSnapshot] = Field(
        None, description="Derived; ignored by to_card()"
    )

    @classmethod
    def from_card(cls, card: InGameCard) -> CardSnapshot:
        return cls(
            instance_id=card.instance_id,
            base_card_id=card.base_card_id,
            owner=card.owner,
            base_power=PowerSnapshot.model_validate(card.base_power),
            name=card.name,
            power_enhancements=PowerSnapshot.model_validate(card.power_enhancements),
            temporary_effects=[
                TemporaryEffectSnapshot.model_validate(e) for e in card.temporary_effects
            ],
            special_ability=(
                AbilitySnapshot.from_ability(card.special_ability)
                if card.special_ability else None
            ),
            level=card.level,
            tags=list(card.tags),
            current_power=PowerSnapshot.model_validate(card.current_power),
        )

    def to_card(self) -> InGameCard:
        return InGameCard(
            instance_id=self.instance_id,
            base_card_id=self.base_card_id,
            owner=self.owner,
            base_power=self.base_power.to_profile(),
            name=self.name,
            power_enhancements=self.power_enhancements.to_profile(),
            temporary_effects=tuple(e.to_effect() for e in self.temporary_effects),
            special_ability=self.special_ability.to_ability() if self.special_ability else None,
            level=self.level,
            tags=tuple(self.tags),
        )


class CellSnapshot(BaseModel):
    card: Optional[CardSnapshot] = None
    tile_enabled: bool = True
    tile_effect: Optional[TileEffectSnapshot] = None

    @classmethod
    def from_cell(cls, cell: BoardCell) -> CellSnapshot:
        return cls(
            card=CardSnapshot.from_card(cell.card) if cell.card else None,
            tile_enabled=cell.tile_enabled,
            tile_effect=(
                TileEffectSnapshot.model_validate(cell.tile_effect)
                if cell.tile_effect else None
            ),
        )

    def to_cell(self) -> BoardCell:
        return BoardCell(
            card=self.card.to_card() if self.card else None,
            tile_enabled=self.tile_enabled,
            tile_effect=self.tile_effect.to_effect() if self.tile_effect else None,
        )


class PlayerSnapshot(BaseModel):
    user_id: str
    hand: list[str] = Field(default_factory=list)
    deck: list[str] = Field(default_factory=list)
    discard_pile: list[str] = Field(default_factory=list)
    score: int = 0

    model_config = {"from_attributes": True}

    def to_player(self) -> Player:
        return Player(
            user_id=self.user_id,
            hand=tuple(self.hand),
            deck=tuple(self.deck),
            discard_pile=tuple(self.discard_pile),
            score=self.score,
        )


class GameStateSnapshot(BaseModel):
    """Serializable form of a GameState. board is indexed board[y][x]."""
    board: list[list[CellSnapshot]]
    player1: PlayerSnapshot
    player2: PlayerSnapshot
    current_player_id: str
    turn_number: int = 1
    placed_this_turn: bool = False
    status: GameStatus = GameStatus.ACTIVE
    max_cards_in_hand: int = 10
    initial_draw_count: int = 5
    winner: Optional[str] = None
    catalog_cache: dict[str, CardSnapshot] = Field(default_factory=dict)
    game_id: Optional[str] = None

    @classmethod
    def from_state(cls, state: GameState) -> GameStateSnapshot:
        return cls(
            board=[[CellSnapshot.from_cell(cell) for cell in row] for row in state.board],
            player1=PlayerSnapshot.model_validate(state.player1),
            player2=PlayerSnapshot.model_validate(state.player2),
            current_player_id=state.current_player_id,
            turn_number=state.turn_number,
            placed_this_turn=state.placed_this_turn,
            status=state.status,
            max_cards_in_hand=state.max_cards_in_hand,
            initial_draw_count=state.initial_draw_count,
            winner=state.winner,
            catalog_cache={
                instance_id: CardSnapshot.from_card(card)
                for instance_id, card in state.catalog_cache.items()
            },
            game_id=state.game_id,
        )

    def to_state(self) -> GameState:
        return GameState(
            board=tuple(tuple(cell.to_cell() for cell in row) for row in self.board),
            player1=self.player1.to_player(),
            player2=self.player2.to_player(),
            current_player_id=self.current_player_id,
            turn_number=self.turn_number,
            placed_this_turn=self.placed_this_turn,
            status=self.status,
            max_cards_in_hand=self.max_cards_in_hand,
            initial_draw_count=self.initial_draw_count,
            winner=self.winner,
            catalog_cache=MappingProxyType({
                instance_id: card.to_card()
                for instance_id, card in self.catalog_cache.items()
            }),
            game_id=self.game_id,
        )


def _plain(value: Any) -> Any:
    """Convert engine values (dataclasses, enums, tuples) into JSON-friendly data."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


class EventRecord(BaseModel):
    """One engine event, tagged with its type."""
    event_type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_event(cls, event: Any) -> EventRecord:
        return cls(event_type=event.event_type.value, data=_plain(event))


class MoveModel(BaseModel):
    card_instance_id: str
    position: PositionModel

    @classmethod
    def from_move(cls, move: Move) -> MoveModel:
        return cls(
            card_instance_id=move.card_instance_id,
            position=PositionModel.model_validate(move.position),
        )

    def to_move(self) -> Move:
        return Move(card_instance_id=self.card_instance_id, position=self.position.to_position())


# =============================================================================
# Request Models
# =============================================================================

class NewGameRequest(BaseModel):
    """Request to start a game from two decks of catalog card ids."""
    player1_id: str = Field(..., min_length=1)
    player2_id: str = Field(..., min_length=1)
    player1_deck: list[str] = Field(..., description="Card ids from the catalog")
    player2_deck: list[str] = Field(..., description="Card ids from the catalog")
    seed: Optional[int] = Field(None, description="Seed for reproducible shuffles")
    starting_player_id: Optional[str] = None
    disabled_positions: list[PositionModel] = Field(default_factory=list)
    game_id: Optional[str] = None


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")

    @classmethod
    def from_result(cls, result: ActionResult) -> ErrorResponse:
        return cls(
            error=result.error or "Action rejected",
            error_code=ErrorCode.from_action_error(result.error_code),
        )


class ActionResponse(BaseModel):
    """Outcome of one engine call."""
    success: bool
    state: Optional[GameStateSnapshot] = None
    events: list[EventRecord] = Field(default_factory=list)
    error: Optional[ErrorResponse] = None

    @classmethod
    def from_result(cls, result: ActionResult) -> ActionResponse:
        if not result.success:
            return cls(success=False, error=ErrorResponse.from_result(result))
        return cls(
            success=True,
            state=GameStateSnapshot.from_state(result.new_state),
            events=[EventRecord.from_event(e) for e in result.events],
        )

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode, **details: Any) -> ActionResponse:
        return cls(
            success=False,
            error=ErrorResponse(error=error, error_code=error_code, details=details or None),
        )
