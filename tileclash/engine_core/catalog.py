"""
Card Catalog - Immutable card and ability definitions.

The catalog is owned by the surrounding system; the engine only reads
it. Anything with a `resolve(identifier)` method works as a catalog.
InMemoryCatalog is the implementation used by the bundled card sets and
by catalogs loaded from JSON (see catalog_schema).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol, Union

from .state import InGameCard, PowerProfile
from .effects import TriggerMoment


class CatalogError(LookupError):
    """Raised when an identifier cannot be resolved or a catalog is inconsistent."""


@dataclass(frozen=True)
class SpecialAbility:
    """An ability definition: when it fires and what its effect parameters are."""
    ability_id: str
    trigger_moments: frozenset[TriggerMoment]
    parameters: Mapping[str, Any] = field(default_factory=dict)
    name: str = ""
    description: str = ""

    def triggers_on(self, moment: TriggerMoment) -> bool:
        return moment in self.trigger_moments


@dataclass(frozen=True)
class CardDefinition:
    """A card definition. Instances in a game are built from it by hydrate()."""
    card_id: str
    name: str
    power: PowerProfile
    ability_id: str | None = None
    level: int = 1
    tags: tuple[str, ...] = ()
    rarity: str = "common"


Definition = Union[CardDefinition, SpecialAbility]


class Catalog(Protocol):
    """Read-only lookup consumed by the engine."""

    def resolve(self, identifier: str) -> Definition:
        ...


class InMemoryCatalog:
    """
    A catalog held in memory.

    Card and ability ids share one namespace for resolve(); a clash is
    rejected at construction.
    """

    def __init__(
        self,
        cards: Iterable[CardDefinition],
        abilities: Iterable[SpecialAbility] = (),
    ):
        self._cards: dict[str, CardDefinition] = {}
        self._abilities: dict[str, SpecialAbility] = {}
        for ability in abilities:
            if ability.ability_id in self._abilities:
                raise CatalogError(f"Duplicate ability id: {ability.ability_id}")
            self._abilities[ability.ability_id] = ability
        for card in cards:
            if card.card_id in self._cards or card.card_id in self._abilities:
                raise CatalogError(f"Duplicate catalog id: {card.card_id}")
            self._cards[card.card_id] = card

    def resolve(self, identifier: str) -> Definition:
        if identifier in self._cards:
            return self._cards[identifier]
        if identifier in self._abilities:
            return self._abilities[identifier]
        raise CatalogError(f"Unknown catalog id: {identifier}")

    def card(self, card_id: str) -> CardDefinition:
        definition = self.resolve(card_id)
        if not isinstance(definition, CardDefinition):
            raise CatalogError(f"{card_id} is not a card")
        return definition

    def ability(self, ability_id: str) -> SpecialAbility:
        definition = self.resolve(ability_id)
        if not isinstance(definition, SpecialAbility):
            raise CatalogError(f"{ability_id} is not an ability")
        return definition

    def cards(self) -> list[CardDefinition]:
        return list(self._cards.values())

    def abilities(self) -> list[SpecialAbility]:
        return list(self._abilities.values())

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._cards or identifier in self._abilities

    def __len__(self) -> int:
        return len(self._cards)


def hydrate(catalog: Catalog, card_id: str, instance_id: str, owner: str) -> InGameCard:
    """Build a fresh in-game card from its catalog definition."""
    definition = catalog.resolve(card_id)
    if not isinstance(definition, CardDefinition):
        raise CatalogError(f"{card_id} is not a card")
    ability = None
    if definition.ability_id:
        ability = catalog.resolve(definition.ability_id)
        if not isinstance(ability, SpecialAbility):
            raise CatalogError(f"{definition.ability_id} is not an ability")
    return InGameCard(
        instance_id=instance_id,
        base_card_id=definition.card_id,
        owner=owner,
        base_power=definition.power,
        name=definition.name,
        special_ability=ability,
        level=definition.level,
        tags=definition.tags,
    )
