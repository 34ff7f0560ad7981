"""
Session Manager - Holds games between actions.

The engine is pure: it never stores a game. Something has to keep the
latest GameState while players think, and serialize their actions so
two submissions never race on the same state. This module is that
caller-side holder, kept in memory only.

LIFECYCLE:
1. create_session(state) stores a freshly initialized game
2. submit(session_id, action, expected_turn_number) applies one action
   - the caller states which turn it believes it is acting on
   - a mismatch raises StaleStateError and nothing is applied
3. The session stays readable after the game completes
4. end_session() drops it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time
import uuid

from ..config import EngineConfig, DEFAULT_CONFIG
from ..engine_core.state import GameState
from ..engine_core.action import Action, ActionResult
from ..engine_core.effect_resolver import AbilityRegistry
from ..engine_core.reducer import Reducer
from ..bots import BotPolicy


logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised for an unknown or already ended session id."""


class StaleStateError(RuntimeError):
    """Raised when an action was prepared against an older turn."""

    def __init__(self, session_id: str, expected: int, actual: int):
        self.session_id = session_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Session {session_id} is on turn {actual}, action was prepared for turn {expected}"
        )


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # Ended before completion


@dataclass
class Session:
    """
    An in-memory game session.

    Contains:
    - The current authoritative GameState
    - Optional bots, keyed by player id
    - The full event log of every applied action
    """
    session_id: str
    game_state: GameState
    created_at: float
    state: SessionState = SessionState.ACTIVE
    bots: dict[str, BotPolicy] = field(default_factory=dict)
    events: list[Any] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def turn_number(self) -> int:
        return self.game_state.turn_number

    def is_bot_turn(self) -> bool:
        return self.game_state.current_player_id in self.bots


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Store sessions by id
    - Apply actions with an optimistic turn-number check
    - Clean up ended sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        registry: AbilityRegistry | None = None,
        config: EngineConfig | None = None,
    ):
        self._sessions: dict[str, Session] = {}
        self.reducer = Reducer(registry=registry, config=config or DEFAULT_CONFIG)

    def create_session(
        self,
        game_state: GameState,
        bots: dict[str, BotPolicy] | None = None,
        session_id: str | None = None,
    ) -> Session:
        """
        Store a new game.

        Args:
            game_state: An initialized game
            bots: Optional policies for players the server plays itself
            session_id: Defaults to the game's id, then a fresh uuid
        """
        session_id = session_id or game_state.game_id or str(uuid.uuid4())
        if session_id in self._sessions:
            raise ValueError(f"Session {session_id} already exists")

        session = Session(
            session_id=session_id,
            game_state=game_state,
            created_at=time.time(),
            bots=dict(bots or {}),
        )
        self._sessions[session_id] = session
        logger.debug("Created session %s", session_id)
        return session

    def get_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def submit(self, session_id: str, action: Action, expected_turn_number: int) -> ActionResult:
        """
        Apply one action to a session's game.

        Raises SessionNotFoundError and StaleStateError. Rule violations
        come back as a failed ActionResult and leave the session untouched.
        """
        session = self.get_session(session_id)
        if session.turn_number != expected_turn_number:
            raise StaleStateError(session_id, expected_turn_number, session.turn_number)

        result = self.reducer.apply(session.game_state, action)
        if not result.success:
            logger.debug("Session %s rejected %s: %s", session_id, action, result.error)
            return result

        session.game_state = result.new_state
        session.events.extend(result.events)
        session.actions.append(str(action))
        if session.game_state.is_completed:
            session.state = SessionState.GAME_OVER
            logger.info("Session %s finished, winner %s", session_id, session.game_state.winner)
        return result

    def end_session(self, session_id: str) -> None:
        """
        End a session and remove it from memory.

        A session ended before its game completed is marked ABANDONED.
        """
        session = self._sessions.pop(session_id, None)
        if session and session.is_active():
            session.state = SessionState.ABANDONED

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        Drop finished sessions older than max_age.

        Returns the removed ids.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id)
        return to_remove
