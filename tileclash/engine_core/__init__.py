"""
Engine Core - Deterministic board state, combat and ability resolution.

The engine is the runtime that:
1. Builds a GameState from two decks and a catalog
2. Generates legal actions
3. Applies actions via the reducer
4. Resolves combat and ability effects
5. Reports everything it did as an ordered event log
"""

from .state import (
    GameState,
    GameStatus,
    Player,
    BoardCell,
    InGameCard,
    Position,
    PowerProfile,
    Direction,
    TemporaryEffect,
    TileEffect,
    TileStatus,
    EffectKind,
    BOARD_SIZE,
    PERMANENT_DURATION,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ActionError, Move
from .catalog import CardDefinition, SpecialAbility, InMemoryCatalog, CatalogError
from .effects import TriggerMoment, AbilityParameterError
from .effect_resolver import AbilityRegistry, EffectResolver
from .combat import resolve_combat, CombatOutcome
from .reducer import Reducer, apply_action, place_card, end_turn, surrender
from .setup import initialize, start_events
from .action_generator import ActionGenerator, legal_actions, legal_placements
from .validation import StateInvariantError, check_invariants
from .redaction import redact_for_viewer

__all__ = [
    "GameState",
    "GameStatus",
    "Player",
    "BoardCell",
    "InGameCard",
    "Position",
    "PowerProfile",
    "Direction",
    "TemporaryEffect",
    "TileEffect",
    "TileStatus",
    "EffectKind",
    "BOARD_SIZE",
    "PERMANENT_DURATION",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ActionError",
    "Move",
    "CardDefinition",
    "SpecialAbility",
    "InMemoryCatalog",
    "CatalogError",
    "TriggerMoment",
    "AbilityParameterError",
    "AbilityRegistry",
    "EffectResolver",
    "resolve_combat",
    "CombatOutcome",
    "Reducer",
    "apply_action",
    "place_card",
    "end_turn",
    "surrender",
    "initialize",
    "start_events",
    "ActionGenerator",
    "legal_actions",
    "legal_placements",
    "StateInvariantError",
    "check_invariants",
    "redact_for_viewer",
]
