"""
Ability Effects - Typed effect variants for special abilities.

Each catalog ability carries a `parameters` mapping whose "effect" key
names one of the variants below. The mapping is parsed once, when the
ability registry is built, into a frozen dataclass with typed fields.

Effects are:
- Closed: the set of kinds is fixed by EFFECT_PARSERS
- Typed: each variant validates its own parameters
- Pure: apply(ctx) returns (new_state, events) and never touches the catalog

Malformed parameters raise AbilityParameterError.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Union

from .state import (
    GameState,
    InGameCard,
    Position,
    PowerProfile,
    TemporaryEffect,
    TileEffect,
    TileStatus,
    EffectKind,
    ZERO_POWER,
    PERMANENT_DURATION,
    DIRECTIONS,
)
from .events import CardDefended, GameEvent
from . import rules


EffectOutcome = tuple[GameState, list[GameEvent]]


class AbilityParameterError(ValueError):
    """Raised when ability parameters do not describe a valid effect."""


class TriggerMoment(Enum):
    """Named points in the turn lifecycle where abilities fire."""
    ON_PLACE = "on_place"
    ON_FLIP = "on_flip"  # this card was flipped (gained or lost)
    ON_TURN_START = "on_turn_start"  # start of the card owner's turn
    ON_TURN_END = "on_turn_end"  # end of the card owner's turn
    ANY_ON_FLIP = "any_on_flip"  # another card on the board was flipped
    BEFORE_COMBAT = "before_combat"  # this card was placed, before it attacks
    AFTER_COMBAT = "after_combat"  # this card was placed, after its attacks resolved
    ON_DEFEND = "on_defend"  # this card was attacked and not flipped
    ANY_ON_DEFEND = "any_on_defend"  # an allied card was attacked and not flipped


class TargetScope(Enum):
    """Which board cells an effect looks at, relative to its source card."""
    ALL = "all"
    ADJACENT = "adjacent"
    ROW = "row"
    COLUMN = "column"
    LINE = "line"  # row and column
    STRONGEST_ADJACENT = "strongest_adjacent"


@dataclass(frozen=True)
class EffectContext:
    """
    Everything an effect needs to resolve.

    card is the ability's card as it sits on the board when the trigger
    fires; acting_player_id is that card's owner at that moment.
    """
    state: GameState
    position: Position
    card: InGameCard
    acting_player_id: str
    moment: TriggerMoment
    ability_id: str
    trigger_card: InGameCard | None = None  # flipped, defending or attacking card


# =============================================================================
# Parameter parsing
# =============================================================================


def _require_int(params: Mapping[str, Any], key: str, default: int | None = None, minimum: int | None = None) -> int:
    value = params.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise AbilityParameterError(f"'{key}' must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise AbilityParameterError(f"'{key}' must be >= {minimum}, got {value}")
    return value


def _parse_scope(params: Mapping[str, Any], default: str, allowed: set[TargetScope]) -> TargetScope:
    raw = params.get("scope", default)
    try:
        scope = TargetScope(raw)
    except ValueError:
        raise AbilityParameterError(f"Unknown scope {raw!r}") from None
    if scope not in allowed:
        raise AbilityParameterError(f"Scope {raw!r} is not valid for this effect")
    return scope


def _parse_delta(params: Mapping[str, Any]) -> PowerProfile:
    """Read either `amount` (all sides) or `power` (partial per side)."""
    if "power" in params:
        power = params["power"]
        if not isinstance(power, Mapping):
            raise AbilityParameterError(f"'power' must be a mapping, got {power!r}")
        unknown = set(power) - {d.value for d in DIRECTIONS}
        if unknown:
            raise AbilityParameterError(f"Unknown power sides: {sorted(unknown)}")
        values = {}
        for side, value in power.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise AbilityParameterError(f"Power side '{side}' must be an integer")
            values[side] = value
        return PowerProfile(**values)
    if "amount" in params:
        return PowerProfile.uniform(_require_int(params, "amount"))
    raise AbilityParameterError("Effect needs 'amount' or 'power'")


def _parse_bool(params: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = params.get(key, default)
    if not isinstance(value, bool):
        raise AbilityParameterError(f"'{key}' must be a boolean, got {value!r}")
    return value


# =============================================================================
# Target resolution
# =============================================================================


def _cards_in_scope(
    state: GameState,
    origin: Position,
    scope: TargetScope,
) -> list[tuple[Position, InGameCard]]:
    """Board cards in scope, excluding the origin cell, in row-major order."""
    match scope:
        case TargetScope.ALL:
            return [(p, c) for p, c in state.cards_on_board() if p != origin]
        case TargetScope.ADJACENT | TargetScope.STRONGEST_ADJACENT:
            adjacent = {p for _, p in origin.neighbors()}
            return [(p, c) for p, c in state.cards_on_board() if p in adjacent]
        case TargetScope.ROW:
            return [(p, c) for p, c in state.cards_on_board() if p.y == origin.y and p != origin]
        case TargetScope.COLUMN:
            return [(p, c) for p, c in state.cards_on_board() if p.x == origin.x and p != origin]
        case TargetScope.LINE:
            return [
                (p, c) for p, c in state.cards_on_board()
                if (p.x == origin.x or p.y == origin.y) and p != origin
            ]
    raise AbilityParameterError(f"Unhandled scope {scope}")


def _allies(cards: list[tuple[Position, InGameCard]], owner: str) -> list[tuple[Position, InGameCard]]:
    return [(p, c) for p, c in cards if c.owner == owner]


def _enemies(cards: list[tuple[Position, InGameCard]], owner: str) -> list[tuple[Position, InGameCard]]:
    return [(p, c) for p, c in cards if c.owner != owner]


def _apply_to_all(
    state: GameState,
    targets: list[tuple[Position, InGameCard]],
    effect: TemporaryEffect,
    source: str,
) -> EffectOutcome:
    events: list[GameEvent] = []
    for position, _ in targets:
        state, event = rules.apply_temporary_effect(state, position, effect, source=source)
        if event:
            events.append(event)
    return state, events


# =============================================================================
# Effect variants
# =============================================================================


@dataclass(frozen=True)
class BuffAllies:
    """Directional power buff to allied cards in scope."""
    delta: PowerProfile
    scope: TargetScope = TargetScope.ALL
    duration: int = PERMANENT_DURATION
    include_self: bool = False

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> BuffAllies:
        return cls(
            delta=_parse_delta(params),
            scope=_parse_scope(params, "all", {
                TargetScope.ALL, TargetScope.ADJACENT, TargetScope.ROW,
                TargetScope.COLUMN, TargetScope.LINE,
            }),
            duration=_require_int(params, "duration", PERMANENT_DURATION, minimum=1),
            include_self=_parse_bool(params, "include_self"),
        )

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        targets = _allies(_cards_in_scope(ctx.state, ctx.position, self.scope), ctx.acting_player_id)
        if self.include_self:
            targets = [(ctx.position, ctx.card)] + targets
        effect = TemporaryEffect(
            delta_power=self.delta,
            duration=self.duration,
            kind=EffectKind.BUFF,
            name=ctx.ability_id,
        )
        return _apply_to_all(ctx.state, targets, effect, ctx.ability_id)


class SelfBuffCondition(Enum):
    ALWAYS = "always"
    NO_ADJACENT_CARDS = "no_adjacent_cards"
    NO_ADJACENT_ENEMIES = "no_adjacent_enemies"
    PER_ADJACENT_ENEMY = "per_adjacent_enemy"
    PER_STRONGER_ADJACENT = "per_stronger_adjacent"
    ADJACENT_TAG = "adjacent_tag"


@dataclass(frozen=True)
class SelfBuff:
    """Buff the ability's own card, scaled by a board condition."""
    delta: PowerProfile
    condition: SelfBuffCondition = SelfBuffCondition.ALWAYS
    tag: str | None = None
    duration: int = PERMANENT_DURATION

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> SelfBuff:
        raw = params.get("condition", "always")
        try:
            condition = SelfBuffCondition(raw)
        except ValueError:
            raise AbilityParameterError(f"Unknown condition {raw!r}") from None
        tag = params.get("tag")
        if condition == SelfBuffCondition.ADJACENT_TAG and not isinstance(tag, str):
            raise AbilityParameterError("adjacent_tag condition needs a 'tag' string")
        return cls(
            delta=_parse_delta(params),
            condition=condition,
            tag=tag,
            duration=_require_int(params, "duration", PERMANENT_DURATION, minimum=1),
        )

    def multiplier(self, ctx: EffectContext) -> int:
        adjacent = _cards_in_scope(ctx.state, ctx.position, TargetScope.ADJACENT)
        enemies = _enemies(adjacent, ctx.acting_player_id)
        match self.condition:
            case SelfBuffCondition.ALWAYS:
                return 1
            case SelfBuffCondition.NO_ADJACENT_CARDS:
                return 0 if adjacent else 1
            case SelfBuffCondition.NO_ADJACENT_ENEMIES:
                return 0 if enemies else 1
            case SelfBuffCondition.PER_ADJACENT_ENEMY:
                return len(enemies)
            case SelfBuffCondition.PER_STRONGER_ADJACENT:
                own = ctx.card.current_power.total
                return sum(1 for _, c in adjacent if c.current_power.total > own)
            case SelfBuffCondition.ADJACENT_TAG:
                return 1 if any(c.has_tag(self.tag or "") for _, c in adjacent) else 0
        raise AbilityParameterError(f"Unhandled condition {self.condition}")

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        times = self.multiplier(ctx)
        if times <= 0:
            return ctx.state, []
        effect = TemporaryEffect(
            delta_power=self.delta.scaled(times),
            duration=self.duration,
            kind=EffectKind.BUFF,
            name=ctx.ability_id,
        )
        state, event = rules.apply_temporary_effect(ctx.state, ctx.position, effect, source=ctx.ability_id)
        return state, [event] if event else []


@dataclass(frozen=True)
class DebuffEnemies:
    """Reduce the power of enemy cards in scope. `amount`/`power` are magnitudes."""
    delta: PowerProfile
    scope: TargetScope = TargetScope.STRONGEST_ADJACENT
    duration: int = PERMANENT_DURATION

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> DebuffEnemies:
        magnitude = _parse_delta(params)
        if any(magnitude.facing(d) < 0 for d in DIRECTIONS):
            raise AbilityParameterError("Debuff magnitudes must be non-negative")
        return cls(
            delta=magnitude.scaled(-1),
            scope=_parse_scope(params, "strongest_adjacent", set(TargetScope)),
            duration=_require_int(params, "duration", PERMANENT_DURATION, minimum=1),
        )

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        targets = _enemies(_cards_in_scope(ctx.state, ctx.position, self.scope), ctx.acting_player_id)
        if self.scope == TargetScope.STRONGEST_ADJACENT:
            best = rules.strongest(targets)
            targets = [best] if best else []
        effect = TemporaryEffect(
            delta_power=self.delta,
            duration=self.duration,
            kind=EffectKind.DEBUFF,
            name=ctx.ability_id,
        )
        return _apply_to_all(ctx.state, targets, effect, ctx.ability_id)


class RepositionMode(Enum):
    PUSH = "push"
    PULL = "pull"


@dataclass(frozen=True)
class Reposition:
    """
    Force enemy cards to move.

    push: each adjacent enemy slides one cell further away.
    pull: an enemy two cells away in a straight line slides next to the source.
    A move only happens onto an empty, enabled cell.
    """
    mode: RepositionMode

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> Reposition:
        raw = params.get("mode")
        try:
            return cls(mode=RepositionMode(raw))
        except ValueError:
            raise AbilityParameterError(f"Unknown reposition mode {raw!r}") from None

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        state = ctx.state
        events: list[GameEvent] = []
        for direction in DIRECTIONS:
            near = ctx.position.step(direction)
            far = ctx.position.step(direction, 2)
            if self.mode == RepositionMode.PUSH:
                source, destination = near, far
            else:
                source, destination = far, near
            card = state.card_at(source)
            if card is None or card.owner == ctx.acting_player_id:
                continue
            state, moved = rules.move_card(state, source, destination)
            events.extend(moved)
        return state, events


@dataclass(frozen=True)
class DefeatStrongest:
    """Remove the strongest enemy in scope, regardless of power comparison."""
    scope: TargetScope = TargetScope.LINE

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> DefeatStrongest:
        return cls(scope=_parse_scope(params, "line", {
            TargetScope.ALL, TargetScope.ADJACENT, TargetScope.ROW,
            TargetScope.COLUMN, TargetScope.LINE,
        }))

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        targets = _enemies(_cards_in_scope(ctx.state, ctx.position, self.scope), ctx.acting_player_id)
        best = rules.strongest(targets)
        if best is None:
            return ctx.state, []
        position, card = best
        if card.is_protected:
            return ctx.state, [CardDefended(
                instance_id=card.instance_id,
                position=position,
                attacker_instance_id=ctx.card.instance_id,
            )]
        state, event = rules.remove_from_board(ctx.state, position, source=ctx.ability_id)
        return state, [event] if event else []


@dataclass(frozen=True)
class DrawCards:
    """The card's owner draws extra cards, limited by hand size and deck."""
    count: int = 1

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> DrawCards:
        return cls(count=_require_int(params, "count", 1, minimum=1))

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        state = ctx.state
        events: list[GameEvent] = []
        for _ in range(self.count):
            state, event = rules.draw_card(state, ctx.acting_player_id)
            if event is None:
                break
            events.append(event)
        return state, events


class TileScope(Enum):
    ALLIES = "allies"
    ENEMIES = "enemies"
    ANY = "any"


@dataclass(frozen=True)
class PlaceTileEffect:
    """Put a tile effect on every empty, enabled tile adjacent to the source."""
    status: TileStatus
    turns: int
    delta: PowerProfile = ZERO_POWER
    scope: TileScope = TileScope.ANY
    effect_duration: int = PERMANENT_DURATION

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> PlaceTileEffect:
        raw_status = params.get("status")
        try:
            status = TileStatus(raw_status)
        except ValueError:
            raise AbilityParameterError(f"Unknown tile status {raw_status!r}") from None
        if status == TileStatus.NORMAL:
            raise AbilityParameterError("Tile effects cannot set status 'normal'")
        raw_scope = params.get("scope", "any")
        try:
            scope = TileScope(raw_scope)
        except ValueError:
            raise AbilityParameterError(f"Unknown tile scope {raw_scope!r}") from None
        delta = ZERO_POWER if status == TileStatus.BLOCKED else _parse_delta(params)
        return cls(
            status=status,
            turns=_require_int(params, "turns", minimum=1),
            delta=delta,
            scope=scope,
            effect_duration=_require_int(params, "effect_duration", PERMANENT_DURATION, minimum=1),
        )

    def _applies_to(self, ctx: EffectContext) -> str | None:
        match self.scope:
            case TileScope.ALLIES:
                return ctx.acting_player_id
            case TileScope.ENEMIES:
                return ctx.state.opponent_id(ctx.acting_player_id)
        return None

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        state = ctx.state
        events: list[GameEvent] = []
        tile = TileEffect(
            status=self.status,
            turns_left=self.turns,
            power=self.delta,
            applies_to=self._applies_to(ctx),
            effect_duration=self.effect_duration,
            name=ctx.ability_id,
        )
        for _, position in ctx.position.neighbors():
            if not state.is_playable(position):
                continue
            state, event = rules.set_tile_effect(state, position, tile)
            events.append(event)
        return state, events


@dataclass(frozen=True)
class ProtectAllies:
    """
    Shield adjacent allies from flips and defeat.

    The shield ages only when its owner's turn begins, so a duration
    of 1 lasts through the opponent's next turn.
    """
    duration: int = 1
    include_self: bool = False

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> ProtectAllies:
        return cls(
            duration=_require_int(params, "duration", 1, minimum=1),
            include_self=_parse_bool(params, "include_self"),
        )

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        targets = _allies(_cards_in_scope(ctx.state, ctx.position, TargetScope.ADJACENT), ctx.acting_player_id)
        if self.include_self:
            targets = [(ctx.position, ctx.card)] + targets
        shield = TemporaryEffect(
            delta_power=ZERO_POWER,
            duration=self.duration,
            applies_to=ctx.acting_player_id,
            kind=EffectKind.BLOCK_DEFEAT,
            name=ctx.ability_id,
        )
        state = ctx.state
        for position, _ in targets:
            # Zero-delta effects never produce a power event.
            state, _ = rules.apply_temporary_effect(state, position, shield, source=ctx.ability_id)
        return state, []


@dataclass(frozen=True)
class InvalidEffect:
    """Stands in for an ability whose parameters failed to parse."""
    reason: str

    def apply(self, ctx: EffectContext) -> EffectOutcome:
        raise AbilityParameterError(self.reason)


Effect = Union[
    BuffAllies,
    SelfBuff,
    DebuffEnemies,
    Reposition,
    DefeatStrongest,
    DrawCards,
    PlaceTileEffect,
    ProtectAllies,
    InvalidEffect,
]


EFFECT_PARSERS: dict[str, Callable[[Mapping[str, Any]], Effect]] = {
    "buff_allies": BuffAllies.from_parameters,
    "self_buff": SelfBuff.from_parameters,
    "debuff_enemies": DebuffEnemies.from_parameters,
    "reposition": Reposition.from_parameters,
    "defeat_strongest": DefeatStrongest.from_parameters,
    "draw_cards": DrawCards.from_parameters,
    "tile_effect": PlaceTileEffect.from_parameters,
    "protect_allies": ProtectAllies.from_parameters,
}


def parse_effect(parameters: Mapping[str, Any]) -> Effect:
    """
    Parse an ability's parameters into its effect variant.

    Raises AbilityParameterError if the kind is unknown or its
    parameters are malformed.
    """
    kind = parameters.get("effect")
    parser = EFFECT_PARSERS.get(kind) if isinstance(kind, str) else None
    if parser is None:
        raise AbilityParameterError(f"Unknown effect kind {kind!r}")
    return parser(parameters)
