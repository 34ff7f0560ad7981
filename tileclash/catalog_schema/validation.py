"""
Catalog Validation - Reference and effect checks for card catalogs.

Validates that:
1. Card and ability ids are unique (and do not collide with each other)
2. Every card's ability_id refers to a declared ability
3. Every ability's parameters parse into a known effect
4. Unused abilities are reported as warnings
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from ..engine_core.catalog import CatalogError, InMemoryCatalog
from ..engine_core.effects import AbilityParameterError, parse_effect
from .models import CatalogFile, read_catalog_file


class CatalogValidationError(CatalogError):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: CatalogFile) -> ValidationResult:
    """
    Validate a parsed catalog document.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    ability_ids = Counter(a.ability_id for a in catalog.abilities)
    card_ids = Counter(c.card_id for c in catalog.cards)

    for ability_id, count in ability_ids.items():
        if count > 1:
            errors.append(f"Duplicate ability id: {ability_id}")
    for card_id, count in card_ids.items():
        if count > 1:
            errors.append(f"Duplicate card id: {card_id}")
        if card_id in ability_ids:
            errors.append(f"Card id {card_id} collides with an ability id")

    for ability in catalog.abilities:
        try:
            parse_effect(ability.parameters)
        except AbilityParameterError as e:
            errors.append(f"Ability {ability.ability_id}: {e}")

    used = set()
    for card in catalog.cards:
        if card.ability_id is None:
            continue
        used.add(card.ability_id)
        if card.ability_id not in ability_ids:
            errors.append(f"Card {card.card_id} references unknown ability {card.ability_id}")

    for ability_id in ability_ids:
        if ability_id not in used:
            warnings.append(f"Ability {ability_id} is not used by any card")

    if not catalog.cards:
        warnings.append("Catalog has no cards")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def build_catalog(catalog: CatalogFile) -> InMemoryCatalog:
    """Validate a parsed document and build an InMemoryCatalog from it."""
    result = validate_catalog(catalog)
    if not result.valid:
        raise CatalogValidationError(result.errors)
    return InMemoryCatalog(
        cards=[c.to_definition() for c in catalog.cards],
        abilities=[a.to_definition() for a in catalog.abilities],
    )


def load_catalog(path: str | Path) -> InMemoryCatalog:
    """Read, validate and build a catalog from a JSON file."""
    return build_catalog(read_catalog_file(path))
