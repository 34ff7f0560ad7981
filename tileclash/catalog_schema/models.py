"""
Catalog Schema - Pydantic models for card catalogs stored as JSON.

A catalog file looks like:

    {
      "name": "mythic",
      "abilities": [
        {"ability_id": "foresight", "name": "Foresight",
         "trigger_moments": ["on_place"],
         "parameters": {"effect": "buff_allies", "amount": 1}}
      ],
      "cards": [
        {"card_id": "huginn", "name": "Huginn",
         "power": {"top": 5, "right": 6, "bottom": 4, "left": 5},
         "ability_id": "foresight", "tags": ["beast"]}
      ]
    }

Models only check shape. Cross references and effect parameters are
checked by validation.validate_catalog().
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from ..engine_core.state import PowerProfile
from ..engine_core.catalog import CardDefinition, SpecialAbility, CatalogError
from ..engine_core.effects import TriggerMoment


class PowerModel(BaseModel):
    """Four directional power values."""
    top: int = Field(ge=0)
    right: int = Field(ge=0)
    bottom: int = Field(ge=0)
    left: int = Field(ge=0)

    model_config = {"from_attributes": True}

    def to_profile(self) -> PowerProfile:
        return PowerProfile(top=self.top, right=self.right, bottom=self.bottom, left=self.left)


class AbilityModel(BaseModel):
    ability_id: str = Field(min_length=1)
    name: str = ""
    description: str = ""
    trigger_moments: list[TriggerMoment] = Field(min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict)

    def to_definition(self) -> SpecialAbility:
        return SpecialAbility(
            ability_id=self.ability_id,
            name=self.name,
            description=self.description,
            trigger_moments=frozenset(self.trigger_moments),
            parameters=dict(self.parameters),
        )


class CardModel(BaseModel):
    card_id: str = Field(min_length=1)
    name: str
    power: PowerModel
    ability_id: Optional[str] = None
    level: int = Field(default=1, ge=1)
    tags: list[str] = Field(default_factory=list)
    rarity: str = "common"

    def to_definition(self) -> CardDefinition:
        return CardDefinition(
            card_id=self.card_id,
            name=self.name,
            power=self.power.to_profile(),
            ability_id=self.ability_id,
            level=self.level,
            tags=tuple(self.tags),
            rarity=self.rarity,
        )


class CatalogFile(BaseModel):
    """Top-level catalog document."""
    name: str = "catalog"
    abilities: list[AbilityModel] = Field(default_factory=list)
    cards: list[CardModel] = Field(default_factory=list)


def parse_catalog(data: dict[str, Any]) -> CatalogFile:
    """Validate a decoded catalog document. Raises CatalogError on bad shape."""
    try:
        return CatalogFile.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Catalog document is malformed: {e}") from e


def read_catalog_file(path: str | Path) -> CatalogFile:
    """Read and shape-check a JSON catalog file."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        return CatalogFile.model_validate_json(text)
    except ValidationError as e:
        raise CatalogError(f"Catalog file {path} is malformed: {e}") from e
