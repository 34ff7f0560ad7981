"""
Combat Resolver - Adjacency flips after a card is placed.

For each orthogonal neighbour holding an enemy card, the placed card's
value facing that neighbour is compared with the neighbour's value
facing back. Only a strictly greater value flips the neighbour; equal
values never flip. Every attack that does not flip, whether too weak or
blocked by protection (BLOCK_DEFEAT), is recorded as defended.

Resolution is non-cascading unless chain=True, in which case every
freshly flipped card fights its own enemy neighbours, breadth-first.
Scores are not touched here; the caller recomputes them.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field

from .state import GameState, Position
from .events import CardDefended, CardFlipped, GameEvent


@dataclass(frozen=True)
class CombatOutcome:
    state: GameState
    flipped: list[Position] = field(default_factory=list)
    events: list[GameEvent] = field(default_factory=list)

    @property
    def defences(self) -> list[CardDefended]:
        return [e for e in self.events if isinstance(e, CardDefended)]

    @property
    def flip_count(self) -> int:
        return len(self.flipped)


def _fight(state: GameState, attacker_position: Position) -> tuple[GameState, list[Position], list[GameEvent]]:
    attacker = state.card_at(attacker_position)
    if attacker is None:
        return state, [], []

    flipped: list[Position] = []
    events: list[GameEvent] = []
    attack = attacker.current_power
    for direction, target in attacker_position.neighbors():
        defender = state.card_at(target)
        if defender is None or defender.owner == attacker.owner:
            continue
        beaten = attack.facing(direction) > defender.current_power.facing(direction.opposite)
        if not beaten or defender.is_protected:
            events.append(CardDefended(
                instance_id=defender.instance_id,
                position=target,
                attacker_instance_id=attacker.instance_id,
            ))
            continue
        state = state.with_card(target, defender.with_owner(attacker.owner))
        flipped.append(target)
        events.append(CardFlipped(
            instance_id=defender.instance_id,
            position=target,
            from_player_id=defender.owner,
            to_player_id=attacker.owner,
            attacker_instance_id=attacker.instance_id,
        ))
    return state, flipped, events


def resolve_combat(state: GameState, position: Position, chain: bool = False) -> CombatOutcome:
    """
    Resolve combat for the card just placed at `position`.

    Returns the state with flipped ownership plus the flipped positions
    in resolution order.
    """
    state, flipped, events = _fight(state, position)
    if not chain:
        return CombatOutcome(state=state, flipped=flipped, events=events)

    all_flipped = list(flipped)
    queue = deque(flipped)
    while queue:
        state, more, more_events = _fight(state, queue.popleft())
        all_flipped.extend(more)
        events.extend(more_events)
        queue.extend(more)
    return CombatOutcome(state=state, flipped=all_flipped, events=events)
