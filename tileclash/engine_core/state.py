"""
Game State - Immutable board, player and card values.

Design principles:
- Value semantics: every mutation returns a new state, nothing is edited in place
- Derived, never stored: current power and scores are computed from their inputs
- Serializable: plain dataclasses of tuples, enums and ints
- Pure accessors: validity, occupancy and ownership questions have no side effects

The board is indexed board[y][x] with y = 0 as the top row.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Mapping

if TYPE_CHECKING:
    from .catalog import SpecialAbility


BOARD_SIZE = 4
BOARD_CELLS = BOARD_SIZE * BOARD_SIZE

# Effects at or above this duration never expire.
PERMANENT_DURATION = 1000


class Direction(Enum):
    """Orthogonal directions, named after the card side that faces them."""
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]


_DELTAS = {
    Direction.TOP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.BOTTOM: (0, 1),
    Direction.LEFT: (-1, 0),
}

_OPPOSITES = {
    Direction.TOP: Direction.BOTTOM,
    Direction.RIGHT: Direction.LEFT,
    Direction.BOTTOM: Direction.TOP,
    Direction.LEFT: Direction.RIGHT,
}

DIRECTIONS = (Direction.TOP, Direction.RIGHT, Direction.BOTTOM, Direction.LEFT)


class GameStatus(Enum):
    """Lifecycle of a game."""
    ACTIVE = "active"
    COMPLETED = "completed"


class EffectKind(Enum):
    """What a temporary effect does to its card."""
    BUFF = "buff"
    DEBUFF = "debuff"
    BLOCK_DEFEAT = "block_defeat"  # cannot be flipped or defeated
    BLOCK_DEBUFF = "block_debuff"  # ignores new debuffs


class TileStatus(Enum):
    """Visible state of a board tile."""
    NORMAL = "normal"
    BLOCKED = "blocked"
    BOOSTED = "boosted"
    CURSED = "cursed"


@dataclass(frozen=True)
class Position:
    """A board coordinate."""
    x: int
    y: int

    @property
    def is_valid(self) -> bool:
        return 0 <= self.x < BOARD_SIZE and 0 <= self.y < BOARD_SIZE

    def step(self, direction: Direction, distance: int = 1) -> Position:
        """Position reached by moving `distance` cells toward `direction`."""
        dx, dy = direction.delta
        return Position(self.x + dx * distance, self.y + dy * distance)

    def neighbors(self) -> list[tuple[Direction, Position]]:
        """Orthogonal neighbours that lie on the board."""
        result = []
        for direction in DIRECTIONS:
            target = self.step(direction)
            if target.is_valid:
                result.append((direction, target))
        return result

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


def all_positions() -> Iterator[Position]:
    """Every board position in row-major order."""
    for y in range(BOARD_SIZE):
        for x in range(BOARD_SIZE):
            yield Position(x, y)


@dataclass(frozen=True)
class PowerProfile:
    """
    Four directional power values.

    Also used as a per-direction delta, so values may be negative.
    """
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    @classmethod
    def uniform(cls, value: int) -> PowerProfile:
        return cls(top=value, right=value, bottom=value, left=value)

    def facing(self, direction: Direction) -> int:
        """The value on the side that faces `direction`."""
        return getattr(self, direction.value)

    def scaled(self, factor: int) -> PowerProfile:
        return PowerProfile(
            top=self.top * factor,
            right=self.right * factor,
            bottom=self.bottom * factor,
            left=self.left * factor,
        )

    @property
    def total(self) -> int:
        return self.top + self.right + self.bottom + self.left

    @property
    def is_zero(self) -> bool:
        return self.top == 0 and self.right == 0 and self.bottom == 0 and self.left == 0

    def __add__(self, other: PowerProfile) -> PowerProfile:
        return PowerProfile(
            top=self.top + other.top,
            right=self.right + other.right,
            bottom=self.bottom + other.bottom,
            left=self.left + other.left,
        )


ZERO_POWER = PowerProfile()


@dataclass(frozen=True)
class TemporaryEffect:
    """
    A power modifier or status attached to one card.

    applies_to=None ticks at every turn boundary; otherwise only when
    that player's turn begins.
    """
    delta_power: PowerProfile
    duration: int
    applies_to: str | None = None
    kind: EffectKind = EffectKind.BUFF
    name: str = ""

    @property
    def is_permanent(self) -> bool:
        return self.duration >= PERMANENT_DURATION

    def ticks_for(self, player_id: str) -> bool:
        if self.is_permanent:
            return False
        return self.applies_to is None or self.applies_to == player_id

    def tick(self) -> TemporaryEffect | None:
        """Return the effect one turn older, or None once it expires."""
        remaining = self.duration - 1
        if remaining <= 0:
            return None
        return replace(self, duration=remaining)


@dataclass(frozen=True)
class TileEffect:
    """
    A pending environmental modifier on a tile.

    The power delta transfers to the next card placed on the tile when
    applies_to is None or matches that card's owner.
    """
    status: TileStatus
    turns_left: int
    power: PowerProfile = ZERO_POWER
    applies_to: str | None = None
    effect_duration: int = PERMANENT_DURATION
    name: str = ""

    @property
    def blocks_placement(self) -> bool:
        return self.status == TileStatus.BLOCKED

    def applies_to_player(self, player_id: str) -> bool:
        return self.applies_to is None or self.applies_to == player_id

    def tick(self) -> TileEffect | None:
        remaining = self.turns_left - 1
        if remaining <= 0:
            return None
        return replace(self, turns_left=remaining)


@dataclass(frozen=True)
class InGameCard:
    """
    A card instance in play.

    Note: base_power and special_ability come from the catalog and never
    change. Ownership and modifiers change through _copy_with.
    """
    instance_id: str
    base_card_id: str
    owner: str
    base_power: PowerProfile
    name: str = ""
    power_enhancements: PowerProfile = ZERO_POWER
    temporary_effects: tuple[TemporaryEffect, ...] = ()
    special_ability: SpecialAbility | None = None
    level: int = 1
    tags: tuple[str, ...] = ()

    @property
    def current_power(self) -> PowerProfile:
        power = self.base_power + self.power_enhancements
        for effect in self.temporary_effects:
            power = power + effect.delta_power
        return power

    @property
    def ability_id(self) -> str | None:
        return self.special_ability.ability_id if self.special_ability else None

    def has_effect(self, kind: EffectKind) -> bool:
        return any(effect.kind == kind for effect in self.temporary_effects)

    @property
    def is_protected(self) -> bool:
        return self.has_effect(EffectKind.BLOCK_DEFEAT)

    @property
    def ignores_debuffs(self) -> bool:
        return self.has_effect(EffectKind.BLOCK_DEBUFF)

    def has_tag(self, tag: str) -> bool:
        return tag.lower() in (t.lower() for t in self.tags)

    def with_owner(self, owner: str) -> InGameCard:
        return self._copy_with(owner=owner)

    def with_effect(self, effect: TemporaryEffect) -> InGameCard:
        return self._copy_with(temporary_effects=self.temporary_effects + (effect,))

    def with_enhancement(self, delta: PowerProfile) -> InGameCard:
        return self._copy_with(power_enhancements=self.power_enhancements + delta)

    def _copy_with(self, **kwargs) -> InGameCard:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class BoardCell:
    """One of the 16 board cells."""
    card: InGameCard | None = None
    tile_enabled: bool = True
    tile_effect: TileEffect | None = None

    @property
    def occupied(self) -> bool:
        return self.card is not None

    @property
    def is_playable(self) -> bool:
        if not self.tile_enabled or self.occupied:
            return False
        return not (self.tile_effect and self.tile_effect.blocks_placement)

    def _copy_with(self, **kwargs) -> BoardCell:
        return replace(self, **kwargs)


Board = tuple[tuple[BoardCell, ...], ...]


def empty_board(disabled: tuple[Position, ...] | list[Position] = ()) -> Board:
    """A fresh board, with any `disabled` cells permanently unplayable."""
    disabled_set = set(disabled)
    return tuple(
        tuple(
            BoardCell(tile_enabled=Position(x, y) not in disabled_set)
            for x in range(BOARD_SIZE)
        )
        for y in range(BOARD_SIZE)
    )


@dataclass(frozen=True)
class Player:
    """A player's private zones and derived score."""
    user_id: str
    hand: tuple[str, ...] = ()
    deck: tuple[str, ...] = ()
    discard_pile: tuple[str, ...] = ()
    score: int = 0

    def has_in_hand(self, instance_id: str) -> bool:
        return instance_id in self.hand

    def without_in_hand(self, instance_id: str) -> Player:
        hand = list(self.hand)
        hand.remove(instance_id)
        return self._copy_with(hand=tuple(hand))

    def draw(self) -> tuple[str | None, Player]:
        """Move the front card of the deck into the hand."""
        if not self.deck:
            return None, self
        card_id = self.deck[0]
        return card_id, self._copy_with(hand=self.hand + (card_id,), deck=self.deck[1:])

    def _copy_with(self, **kwargs) -> Player:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class GameState:
    """
    The single authoritative value for one game.

    catalog_cache maps every instance id in the game to its hydrated
    card. It is built once at initialization and shared by every
    derived state; nothing writes to it afterwards.
    """
    board: Board
    player1: Player
    player2: Player
    current_player_id: str
    turn_number: int = 1
    placed_this_turn: bool = False  # one placement per turn
    status: GameStatus = GameStatus.ACTIVE
    max_cards_in_hand: int = 10
    initial_draw_count: int = 5
    winner: str | None = None
    catalog_cache: Mapping[str, InGameCard] = field(default_factory=dict)
    game_id: str | None = None

    # Players

    @property
    def players(self) -> tuple[Player, Player]:
        return (self.player1, self.player2)

    @property
    def current_player(self) -> Player:
        player = self.get_player(self.current_player_id)
        if player is None:
            raise KeyError(f"Current player {self.current_player_id} is not in this game")
        return player

    def get_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.user_id == player_id:
                return player
        return None

    def opponent_id(self, player_id: str) -> str:
        if player_id == self.player1.user_id:
            return self.player2.user_id
        if player_id == self.player2.user_id:
            return self.player1.user_id
        raise KeyError(f"Player {player_id} is not in this game")

    def card_in_hand(self, player_id: str, instance_id: str) -> bool:
        player = self.get_player(player_id)
        return player is not None and player.has_in_hand(instance_id)

    @property
    def is_completed(self) -> bool:
        return self.status == GameStatus.COMPLETED

    # Board

    def is_valid_position(self, position: Position) -> bool:
        return position.is_valid

    def cell_at(self, position: Position) -> BoardCell:
        return self.board[position.y][position.x]

    def card_at(self, position: Position) -> InGameCard | None:
        if not position.is_valid:
            return None
        return self.cell_at(position).card

    def is_empty(self, position: Position) -> bool:
        return position.is_valid and not self.cell_at(position).occupied

    def is_enabled(self, position: Position) -> bool:
        """Tile is enabled and not blocked by a tile effect."""
        if not position.is_valid:
            return False
        cell = self.cell_at(position)
        if not cell.tile_enabled:
            return False
        return not (cell.tile_effect and cell.tile_effect.blocks_placement)

    def is_playable(self, position: Position) -> bool:
        return position.is_valid and self.cell_at(position).is_playable

    def cards_on_board(self) -> list[tuple[Position, InGameCard]]:
        """Occupied cells in row-major order."""
        result = []
        for position in all_positions():
            card = self.cell_at(position).card
            if card is not None:
                result.append((position, card))
        return result

    def find_card(self, instance_id: str) -> Position | None:
        for position, card in self.cards_on_board():
            if card.instance_id == instance_id:
                return position
        return None

    def occupied_count(self) -> int:
        return len(self.cards_on_board())

    def is_board_full(self) -> bool:
        """True when every cell holds a card."""
        return self.occupied_count() == BOARD_CELLS

    def has_open_cells(self) -> bool:
        """
        True while some enabled cell is still empty.

        Temporarily blocked tiles count as open. Without disabled cells
        this is exactly `not is_board_full()`.
        """
        return any(
            cell.tile_enabled and not cell.occupied
            for row in self.board
            for cell in row
        )

    def is_out_of_cards(self) -> bool:
        """Neither player has anything left to place."""
        return all(not p.hand and not p.deck for p in self.players)

    def calculate_scores(self) -> dict[str, int]:
        """Count of board cells owned by each player."""
        scores = {self.player1.user_id: 0, self.player2.user_id: 0}
        for _, card in self.cards_on_board():
            if card.owner in scores:
                scores[card.owner] += 1
        return scores

    def hydrate(self, instance_id: str, owner: str) -> InGameCard:
        """Look up an instance in the catalog cache and stamp its owner."""
        return self.catalog_cache[instance_id].with_owner(owner)

    # Immutable updates

    def with_cell(self, position: Position, cell: BoardCell) -> GameState:
        rows = list(self.board)
        row = list(rows[position.y])
        row[position.x] = cell
        rows[position.y] = tuple(row)
        return self._copy_with(board=tuple(rows))

    def with_card(self, position: Position, card: InGameCard | None) -> GameState:
        return self.with_cell(position, self.cell_at(position)._copy_with(card=card))

    def with_player(self, player: Player) -> GameState:
        if player.user_id == self.player1.user_id:
            return self._copy_with(player1=player)
        if player.user_id == self.player2.user_id:
            return self._copy_with(player2=player)
        raise KeyError(f"Player {player.user_id} is not in this game")

    def with_scores(self) -> GameState:
        """Return a state whose player scores match board ownership."""
        scores = self.calculate_scores()
        return self._copy_with(
            player1=self.player1._copy_with(score=scores[self.player1.user_id]),
            player2=self.player2._copy_with(score=scores[self.player2.user_id]),
        )

    def _copy_with(self, **kwargs) -> GameState:
        return replace(self, **kwargs)
