"""
API Module - Caller-facing models and the engine service.

Exposes the engine to whatever carries games between players:
1. Start a game from two decks
2. Submit placements, end turns and surrenders against a snapshot
3. Ask the AI for a move
4. Render a redacted view for a player or spectator

The module defines shapes only. Transport and storage belong to the caller.
"""

from .schemas import (
    # Shared
    PositionModel,
    PowerSnapshot,
    CardSnapshot,
    CellSnapshot,
    PlayerSnapshot,
    GameStateSnapshot,
    EventRecord,
    MoveModel,
    # Requests
    NewGameRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
)
from .service import GameService

__all__ = [
    # Shared
    "PositionModel",
    "PowerSnapshot",
    "CardSnapshot",
    "CellSnapshot",
    "PlayerSnapshot",
    "GameStateSnapshot",
    "EventRecord",
    "MoveModel",
    # Requests
    "NewGameRequest",
    # Responses
    "ActionResponse",
    "ErrorResponse",
    # Enums
    "ErrorCode",
    # Service
    "GameService",
]
