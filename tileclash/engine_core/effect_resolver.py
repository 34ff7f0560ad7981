"""
Effect Resolver - Dispatches ability effects at trigger moments.

This module holds:
- AbilityRegistry: ability id -> parsed effect, built once from the catalog
- EffectResolver: fires the effect of a board card at a trigger moment,
  and fans flips and defences out to their listeners

The registry is an explicit value. It is built at process start, passed
by reference into the reducer, and never modified afterwards, so tests
can swap in fixture registries freely.

Failure semantics: a handler that raises is caught here, logged with the
ability id and trigger moment, and treated as a no-op. The state from
before the effect is returned unchanged.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping
import logging

from .state import GameState, InGameCard, Position
from .events import AbilityTriggered, CardDefended, GameEvent
from .effects import (
    AbilityParameterError,
    Effect,
    EffectContext,
    EffectOutcome,
    InvalidEffect,
    TriggerMoment,
    parse_effect,
)
from .catalog import SpecialAbility


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredAbility:
    ability: SpecialAbility
    effect: Effect


class AbilityRegistry:
    """
    Read-only lookup table from ability id to its parsed effect.

    Usage:
        registry = AbilityRegistry.from_catalog(catalog)
        reducer = Reducer(registry=registry)
    """

    def __init__(self, entries: Mapping[str, RegisteredAbility] | None = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def from_abilities(cls, abilities: Iterable[SpecialAbility]) -> AbilityRegistry:
        entries: dict[str, RegisteredAbility] = {}
        for ability in abilities:
            try:
                effect = parse_effect(ability.parameters)
            except AbilityParameterError as e:
                logger.warning("Ability %s has malformed parameters: %s", ability.ability_id, e)
                effect = InvalidEffect(reason=str(e))
            entries[ability.ability_id] = RegisteredAbility(ability=ability, effect=effect)
        logger.debug("Ability registry built with %d abilities", len(entries))
        return cls(entries)

    @classmethod
    def from_catalog(cls, catalog) -> AbilityRegistry:
        """Build from any catalog exposing abilities()."""
        return cls.from_abilities(catalog.abilities())

    def get(self, ability_id: str) -> RegisteredAbility | None:
        return self._entries.get(ability_id)

    @property
    def ability_ids(self) -> list[str]:
        return list(self._entries)

    def invalid_abilities(self) -> list[str]:
        """Ids whose parameters failed to parse."""
        return [
            ability_id for ability_id, entry in self._entries.items()
            if isinstance(entry.effect, InvalidEffect)
        ]

    def __contains__(self, ability_id: str) -> bool:
        return ability_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class EffectResolver:
    """
    Fires ability effects for cards on the board.

    Stateless - all state is in GameState, all effects in the registry.
    """
    registry: AbilityRegistry

    def trigger(
        self,
        state: GameState,
        position: Position,
        moment: TriggerMoment,
        trigger_card: InGameCard | None = None,
    ) -> EffectOutcome:
        """Fire the ability of the card at `position` if it listens to `moment`."""
        card = state.card_at(position)
        if card is None or card.special_ability is None:
            return state, []
        if not card.special_ability.triggers_on(moment):
            return state, []

        ability_id = card.special_ability.ability_id
        entry = self.registry.get(ability_id)
        if entry is None:
            logger.warning(
                "No effect registered for ability %s at %s; skipped",
                ability_id, moment.value,
            )
            return state, []

        ctx = EffectContext(
            state=state,
            position=position,
            card=card,
            acting_player_id=card.owner,
            moment=moment,
            ability_id=ability_id,
            trigger_card=trigger_card,
        )
        try:
            new_state, effect_events = entry.effect.apply(ctx)
        except Exception:
            logger.warning(
                "Ability %s failed at %s for card %s; effect skipped",
                ability_id, moment.value, card.instance_id,
                exc_info=True,
            )
            return state, []

        triggered = AbilityTriggered(
            ability_id=ability_id,
            moment=moment.value,
            instance_id=card.instance_id,
            position=position,
            player_id=card.owner,
        )
        return new_state, [triggered, *effect_events]

    def trigger_instances(
        self,
        state: GameState,
        instance_ids: list[str],
        moment: TriggerMoment,
        trigger_card: InGameCard | None = None,
    ) -> EffectOutcome:
        """
        Fire `moment` for each listed card, in order.

        Cards are located by instance id before each trigger, since an
        earlier effect may have moved or removed them.
        """
        events: list[GameEvent] = []
        for instance_id in instance_ids:
            position = state.find_card(instance_id)
            if position is None:
                continue
            state, new_events = self.trigger(state, position, moment, trigger_card)
            events.extend(new_events)
        return state, events

    def trigger_for_owner(
        self,
        state: GameState,
        player_id: str,
        moment: TriggerMoment,
    ) -> EffectOutcome:
        """Fire `moment` for every board card owned by `player_id`."""
        owned = [
            card.instance_id for _, card in state.cards_on_board()
            if card.owner == player_id and card.special_ability is not None
        ]
        events: list[GameEvent] = []
        for instance_id in owned:
            position = state.find_card(instance_id)
            if position is None or state.cell_at(position).card.owner != player_id:
                continue
            state, new_events = self.trigger(state, position, moment)
            events.extend(new_events)
        return state, events

    def trigger_flips(self, state: GameState, flipped: list[str]) -> EffectOutcome:
        """
        Fire ON_FLIP for each flipped card, then ANY_ON_FLIP for every
        other board card once per flip.
        """
        events: list[GameEvent] = []
        state, new_events = self.trigger_instances(state, flipped, TriggerMoment.ON_FLIP)
        events.extend(new_events)

        for flipped_id in flipped:
            flipped_position = state.find_card(flipped_id)
            flipped_card = state.card_at(flipped_position) if flipped_position else None
            listeners = [
                card.instance_id for _, card in state.cards_on_board()
                if card.instance_id != flipped_id
                and card.special_ability is not None
                and card.special_ability.triggers_on(TriggerMoment.ANY_ON_FLIP)
            ]
            state, new_events = self.trigger_instances(
                state, listeners, TriggerMoment.ANY_ON_FLIP, trigger_card=flipped_card,
            )
            events.extend(new_events)
        return state, events

    def trigger_defends(self, state: GameState, defences: list[CardDefended]) -> EffectOutcome:
        """
        Fire ON_DEFEND for each defending card, with its attacker as the
        trigger card, then ANY_ON_DEFEND for the defender's allies.
        """
        events: list[GameEvent] = []
        for defence in defences:
            attacker_position = (
                state.find_card(defence.attacker_instance_id)
                if defence.attacker_instance_id else None
            )
            attacker = state.card_at(attacker_position) if attacker_position else None
            state, new_events = self.trigger_instances(
                state, [defence.instance_id], TriggerMoment.ON_DEFEND, trigger_card=attacker,
            )
            events.extend(new_events)

            defender_position = state.find_card(defence.instance_id)
            if defender_position is None:
                continue
            defender = state.card_at(defender_position)
            listeners = [
                card.instance_id for _, card in state.cards_on_board()
                if card.instance_id != defender.instance_id
                and card.owner == defender.owner
                and card.special_ability is not None
                and card.special_ability.triggers_on(TriggerMoment.ANY_ON_DEFEND)
            ]
            state, new_events = self.trigger_instances(
                state, listeners, TriggerMoment.ANY_ON_DEFEND, trigger_card=defender,
            )
            events.extend(new_events)
        return state, events
