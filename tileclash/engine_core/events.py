"""
Event types for the game engine.

Events form a typed, ordered log of everything the engine did during
one action. They carry the minimal data needed to replay or display the
action and are consumed by UI layers and game-record services.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .state import Position, PowerProfile, TileStatus


class EventType(Enum):
    """Tag carried by every event."""
    GAME_STARTED = "game_started"
    TURN_STARTED = "turn_started"
    TURN_ENDED = "turn_ended"
    CARD_DRAWN = "card_drawn"
    CARD_PLACED = "card_placed"
    CARD_FLIPPED = "card_flipped"
    CARD_DEFENDED = "card_defended"
    ABILITY_TRIGGERED = "ability_triggered"
    CARD_POWER_CHANGED = "card_power_changed"
    CARD_MOVED = "card_moved"
    CARD_REMOVED_FROM_BOARD = "card_removed_from_board"
    TILE_STATE_CHANGED = "tile_state_changed"
    SCORE_UPDATED = "score_updated"
    GAME_OVER = "game_over"


# =============================================================================
# Turn Events
# =============================================================================


@dataclass(frozen=True)
class GameStarted:
    """A game was initialized."""
    player1_id: str
    player2_id: str
    starting_player_id: str

    @property
    def event_type(self) -> EventType:
        return EventType.GAME_STARTED


@dataclass(frozen=True)
class TurnStarted:
    player_id: str
    turn_number: int

    @property
    def event_type(self) -> EventType:
        return EventType.TURN_STARTED


@dataclass(frozen=True)
class TurnEnded:
    player_id: str
    turn_number: int

    @property
    def event_type(self) -> EventType:
        return EventType.TURN_ENDED


# =============================================================================
# Card Events
# =============================================================================


@dataclass(frozen=True)
class CardDrawn:
    """A card moved from a deck into a hand."""
    player_id: str
    instance_id: str

    @property
    def event_type(self) -> EventType:
        return EventType.CARD_DRAWN


@dataclass(frozen=True)
class CardPlaced:
    player_id: str
    instance_id: str
    position: Position

    @property
    def event_type(self) -> EventType:
        return EventType.CARD_PLACED


@dataclass(frozen=True)
class CardFlipped:
    """Ownership of a board card changed."""
    instance_id: str
    position: Position
    from_player_id: str
    to_player_id: str
    attacker_instance_id: str | None = None

    @property
    def event_type(self) -> EventType:
        return EventType.CARD_FLIPPED


@dataclass(frozen=True)
class CardDefended:
    """A protected card resisted a flip or a defeat."""
    instance_id: str
    position: Position
    attacker_instance_id: str | None = None

    @property
    def event_type(self) -> EventType:
        return EventType.CARD_DEFENDED


@dataclass(frozen=True)
class CardPowerChanged:
    instance_id: str
    position: Position
    old_power: PowerProfile
    new_power: PowerProfile
    source: str = ""

    @property
    def event_type(self) -> EventType:
        return EventType.CARD_POWER_CHANGED


@dataclass(frozen=True)
class CardMoved:
    instance_id: str
    from_position: Position
    to_position: Position

    @property
    def event_type(self) -> EventType:
        return EventType.CARD_MOVED


@dataclass(frozen=True)
class CardRemovedFromBoard:
    """A card left the board for its owner's discard pile."""
    instance_id: str
    position: Position
    owner_id: str
    source: str = ""

    @property
    def event_type(self) -> EventType:
        return EventType.CARD_REMOVED_FROM_BOARD


# =============================================================================
# Ability / Tile Events
# =============================================================================


@dataclass(frozen=True)
class AbilityTriggered:
    ability_id: str
    moment: str
    instance_id: str
    position: Position
    player_id: str

    @property
    def event_type(self) -> EventType:
        return EventType.ABILITY_TRIGGERED


@dataclass(frozen=True)
class TileStateChanged:
    position: Position
    status: TileStatus
    turns_left: int = 0
    applies_to: str | None = None

    @property
    def event_type(self) -> EventType:
        return EventType.TILE_STATE_CHANGED


# =============================================================================
# Game Result Events
# =============================================================================


@dataclass(frozen=True)
class ScoreUpdated:
    scores: tuple[tuple[str, int], ...]

    @property
    def event_type(self) -> EventType:
        return EventType.SCORE_UPDATED

    def score_of(self, player_id: str) -> int:
        return dict(self.scores).get(player_id, 0)


@dataclass(frozen=True)
class GameOver:
    """The game reached COMPLETED. winner is None on a draw."""
    winner: str | None
    reason: str
    scores: tuple[tuple[str, int], ...] = ()

    @property
    def event_type(self) -> EventType:
        return EventType.GAME_OVER


GameEvent = (
    GameStarted
    | TurnStarted
    | TurnEnded
    | CardDrawn
    | CardPlaced
    | CardFlipped
    | CardDefended
    | CardPowerChanged
    | CardMoved
    | CardRemovedFromBoard
    | AbilityTriggered
    | TileStateChanged
    | ScoreUpdated
    | GameOver
)


def score_event(scores: dict[str, int]) -> ScoreUpdated:
    return ScoreUpdated(scores=tuple(scores.items()))
