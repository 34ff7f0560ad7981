"""
Mythic Cards - Bundled card set for simulations and tests.

Card structure:
- Power (top, right, bottom, left)
- Tags (beast, human, sea, god, ...)
- Optional special ability, referenced by id

Abilities are declared with their trigger moments and effect
parameters; AbilityRegistry.from_catalog turns them into effects.
"""

from ...engine_core.state import PowerProfile
from ...engine_core.catalog import CardDefinition, SpecialAbility, InMemoryCatalog
from ...engine_core.effects import TriggerMoment


def _power(top: int, right: int, bottom: int, left: int) -> PowerProfile:
    return PowerProfile(top=top, right=right, bottom=bottom, left=left)


def _ability(ability_id: str, name: str, description: str, moments, **parameters) -> SpecialAbility:
    return SpecialAbility(
        ability_id=ability_id,
        name=name,
        description=description,
        trigger_moments=frozenset(moments),
        parameters=parameters,
    )


ON_PLACE = (TriggerMoment.ON_PLACE,)


# =============================================================================
# Abilities
# =============================================================================

FORESIGHT = _ability(
    "foresight", "Foresight", "Grant +1 to all allies on the board.",
    ON_PLACE, effect="buff_allies", amount=1, scope="all",
)

MOTHERS_BLESSING = _ability(
    "mothers_blessing", "Mother's Blessing", "Adjacent allies gain +1.",
    ON_PLACE, effect="buff_allies", amount=1, scope="adjacent",
)

WARRIORS_BLESSING = _ability(
    "warriors_blessing", "Warrior's Blessing", "Adjacent allies gain +2 for 2 turns.",
    ON_PLACE, effect="buff_allies", amount=2, scope="adjacent", duration=2,
)

WAR_STANCE = _ability(
    "war_stance", "War Stance", "Allies in the same row gain +1 top.",
    ON_PLACE, effect="buff_allies", power={"top": 1}, scope="row",
)

SEAS_PROTECTION = _ability(
    "seas_protection", "Sea's Protection", "Gain +3 if adjacent to a sea card.",
    ON_PLACE, effect="self_buff", amount=3, condition="adjacent_tag", tag="sea",
)

PRIMORDIAL_FORCE = _ability(
    "primordial_force", "Primordial Force", "Gain +2 if no cards are adjacent.",
    ON_PLACE, effect="self_buff", amount=2, condition="no_adjacent_cards",
)

DEVOURERS_SURGE = _ability(
    "devourers_surge", "Devourer's Surge", "Gain +1 for each adjacent enemy.",
    ON_PLACE, effect="self_buff", amount=1, condition="per_adjacent_enemy",
)

DEMON_BANE = _ability(
    "demon_bane", "Demon Bane", "Gain +1 whenever any card is flipped.",
    (TriggerMoment.ANY_ON_FLIP,), effect="self_buff", amount=1,
)

SUN_WORSHIP = _ability(
    "sun_worship", "Sun Worship", "Gain +1 at the start of each of your turns.",
    (TriggerMoment.ON_TURN_START,), effect="self_buff", amount=1,
)

VENOMOUS_PRESENCE = _ability(
    "venomous_presence", "Venomous Presence", "The strongest adjacent enemy loses 1.",
    ON_PLACE, effect="debuff_enemies", amount=1, scope="strongest_adjacent",
)

PIERCING_SHOT = _ability(
    "piercing_shot", "Piercing Shot", "Enemies in the same column lose 1.",
    ON_PLACE, effect="debuff_enemies", amount=1, scope="column",
)

THUNDEROUS_PUSH = _ability(
    "thunderous_push", "Thunderous Push", "Push adjacent enemies one tile away.",
    ON_PLACE, effect="reposition", mode="push",
)

DROWNING_NET = _ability(
    "drowning_net", "Drowning Net", "Pull enemies two tiles away next to this card.",
    ON_PLACE, effect="reposition", mode="pull",
)

HEAVENS_WRATH = _ability(
    "heavens_wrath", "Heaven's Wrath", "Defeat the strongest enemy in this row or column.",
    ON_PLACE, effect="defeat_strongest", scope="line",
)

FATED_DRAW = _ability(
    "fated_draw", "Fated Draw", "Draw 1 card.",
    ON_PLACE, effect="draw_cards", count=1,
)

SWIFT_MESSENGER = _ability(
    "swift_messenger", "Swift Messenger", "Draw 2 cards.",
    ON_PLACE, effect="draw_cards", count=2,
)

WATCHMANS_GATE = _ability(
    "watchmans_gate", "Watchman's Gate", "Block adjacent empty tiles for 2 turns.",
    ON_PLACE, effect="tile_effect", status="blocked", turns=2,
)

FERTILE_GROUND = _ability(
    "fertile_ground", "Fertile Ground", "Bless adjacent empty tiles with +1 for allies.",
    ON_PLACE, effect="tile_effect", status="boosted", amount=1, turns=3, scope="allies",
)

HARBOR_GUARDIAN = _ability(
    "harbor_guardian", "Harbor Guardian", "Adjacent allies cannot be defeated for 1 turn.",
    ON_PLACE, effect="protect_allies", duration=1,
)

VENGEFUL_SPIRIT = _ability(
    "vengeful_spirit", "Vengeful Spirit", "When flipped, the strongest adjacent enemy loses 2.",
    (TriggerMoment.ON_FLIP,), effect="debuff_enemies", amount=2, scope="strongest_adjacent",
)

MYTHIC_ABILITIES: list[SpecialAbility] = [
    FORESIGHT,
    MOTHERS_BLESSING,
    WARRIORS_BLESSING,
    WAR_STANCE,
    SEAS_PROTECTION,
    PRIMORDIAL_FORCE,
    DEVOURERS_SURGE,
    DEMON_BANE,
    SUN_WORSHIP,
    VENOMOUS_PRESENCE,
    PIERCING_SHOT,
    THUNDEROUS_PUSH,
    DROWNING_NET,
    HEAVENS_WRATH,
    FATED_DRAW,
    SWIFT_MESSENGER,
    WATCHMANS_GATE,
    FERTILE_GROUND,
    HARBOR_GUARDIAN,
    VENGEFUL_SPIRIT,
]


# =============================================================================
# Cards
# =============================================================================

MYTHIC_CARDS: list[CardDefinition] = [
    CardDefinition("thrall", "Thrall", _power(3, 4, 3, 4), tags=("human",)),
    CardDefinition("shield_maiden", "Shield Maiden", _power(5, 6, 6, 5), "harbor_guardian", tags=("human",)),
    CardDefinition("wolf_pup", "Wolf Pup", _power(4, 8, 2, 6), tags=("beast",)),
    CardDefinition("drengr", "Drengr", _power(6, 5, 7, 3), tags=("warrior", "human")),
    CardDefinition("boar_of_the_hunt", "Boar of the Hunt", _power(7, 2, 6, 3), "devourers_surge", tags=("beast",)),
    CardDefinition("peasant_archer", "Peasant Archer", _power(4, 5, 5, 6), "piercing_shot", tags=("warrior", "human")),
    CardDefinition("fisherman", "Fisherman", _power(3, 3, 6, 7), "drowning_net", tags=("human", "sea")),
    CardDefinition("skald", "Skald", _power(3, 4, 5, 6), "warriors_blessing", tags=("human", "musical")),
    CardDefinition("goat_of_heidrun", "Goat of Heidrun", _power(6, 3, 4, 6), "mothers_blessing", tags=("beast",)),
    CardDefinition("raven_scout", "Raven Scout", _power(4, 8, 3, 6), "fated_draw", tags=("beast",)),
    CardDefinition("sea_serpent", "Sea Serpent", _power(5, 4, 5, 4), "seas_protection", rarity="uncommon", tags=("sea", "beast")),
    CardDefinition("frost_giant", "Frost Giant", _power(7, 5, 5, 6), "primordial_force", rarity="uncommon", tags=("giant",)),
    CardDefinition("huginn", "Huginn", _power(5, 6, 4, 5), "foresight", rarity="rare", tags=("beast", "divine")),
    CardDefinition("einherjar", "Einherjar", _power(6, 6, 5, 5), "war_stance", rarity="uncommon", tags=("warrior",)),
    CardDefinition("thor", "Thor", _power(8, 6, 7, 6), "thunderous_push", level=3, rarity="legendary", tags=("god",)),
    CardDefinition("odin", "Odin", _power(7, 7, 7, 7), "heavens_wrath", level=3, rarity="legendary", tags=("god",)),
    CardDefinition("hermod", "Hermod", _power(5, 5, 4, 6), "swift_messenger", rarity="rare", tags=("god",)),
    CardDefinition("heimdall", "Heimdall", _power(6, 7, 6, 5), "watchmans_gate", level=2, rarity="epic", tags=("god",)),
    CardDefinition("freyr", "Freyr", _power(5, 6, 6, 5), "fertile_ground", level=2, rarity="epic", tags=("god",)),
    CardDefinition("sol", "Sol", _power(4, 4, 4, 4), "sun_worship", rarity="rare", tags=("divine",)),
    CardDefinition("hel", "Hel", _power(6, 4, 6, 4), "demon_bane", rarity="epic", tags=("god", "demon")),
    CardDefinition("nidhogg", "Nidhogg", _power(6, 5, 6, 7), "venomous_presence", rarity="rare", tags=("dragon",)),
    CardDefinition("draugr", "Draugr", _power(4, 5, 4, 5), "vengeful_spirit", tags=("undead",)),
]


# Ten-card starter decks
STARTER_DECK_A = [
    "thrall", "shield_maiden", "wolf_pup", "drengr", "boar_of_the_hunt",
    "skald", "raven_scout", "frost_giant", "thor", "nidhogg",
]

STARTER_DECK_B = [
    "peasant_archer", "fisherman", "goat_of_heidrun", "sea_serpent", "huginn",
    "einherjar", "hermod", "heimdall", "sol", "draugr",
]


def create_mythic_catalog() -> InMemoryCatalog:
    """The bundled catalog: every mythic card and ability."""
    return InMemoryCatalog(cards=MYTHIC_CARDS, abilities=MYTHIC_ABILITIES)


def get_card_by_id(card_id: str) -> CardDefinition | None:
    for card in MYTHIC_CARDS:
        if card.card_id == card_id:
            return card
    return None
