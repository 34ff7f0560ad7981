"""
Mythic - The bundled card set

Cards drawn from Norse myth, covering every effect family:
- Ally buffs (board-wide, adjacent, per row)
- Conditional self buffs
- Enemy debuffs, pushes and pulls
- Forced defeat, bonus draws, tile effects and protection
"""

from .cards import (
    MYTHIC_CARDS,
    MYTHIC_ABILITIES,
    STARTER_DECK_A,
    STARTER_DECK_B,
    create_mythic_catalog,
    get_card_by_id,
)

__all__ = [
    "MYTHIC_CARDS",
    "MYTHIC_ABILITIES",
    "STARTER_DECK_A",
    "STARTER_DECK_B",
    "create_mythic_catalog",
    "get_card_by_id",
]
