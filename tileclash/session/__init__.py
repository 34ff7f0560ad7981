"""
Session Module - Keeps games alive between actions.

A session represents one game in progress:
- Created from an initialized GameState
- Applies actions one at a time, rejecting stale submissions
- Kept in memory only

GameLoop plays whole matches between policies.
"""

from .manager import (
    SessionManager,
    Session,
    SessionState,
    SessionNotFoundError,
    StaleStateError,
)
from .game_loop import GameLoop, MatchResult, play_match

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "SessionNotFoundError",
    "StaleStateError",
    "GameLoop",
    "MatchResult",
    "play_match",
]
