"""
Engine Service - Snapshot-level facade over the engine.

The service:
1. Turns request models and snapshots into engine values
2. Calls the pure engine entry points
3. Turns results, events and errors back into response models

This layer is transport-agnostic: it holds no games between calls and
does no I/O. A web handler, a queue worker or a test can call it the
same way.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    ActionResponse,
    ErrorCode,
    EventRecord,
    GameStateSnapshot,
    MoveModel,
    NewGameRequest,
    PositionModel,
)
from ..bots import Difficulty, ai_select_move
from ..config import EngineConfig, DEFAULT_CONFIG
from ..engine_core.action import Action
from ..engine_core.catalog import Catalog, CatalogError
from ..engine_core.effect_resolver import AbilityRegistry
from ..engine_core.reducer import Reducer
from ..engine_core.redaction import redact_for_viewer
from ..engine_core.setup import initialize, start_events
from ..engine_core.validation import StateInvariantError
from ..games.mythic import create_mythic_catalog


logger = logging.getLogger(__name__)


@dataclass
class GameService:
    """
    Snapshot-in, snapshot-out access to the engine.

    Usage:
        service = GameService()

        response = service.new_game(NewGameRequest(...))
        response = service.place_card(response.state, "p1", card_id, PositionModel(x=0, y=0))

        move = service.suggest_move(response.state, "hard")
    """
    catalog: Catalog = field(default_factory=create_mythic_catalog)
    registry: AbilityRegistry | None = None
    config: EngineConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    def __post_init__(self):
        if self.registry is None:
            self.registry = AbilityRegistry.from_catalog(self.catalog)
        self._reducer = Reducer(registry=self.registry, config=self.config)

    def new_game(self, request: NewGameRequest) -> ActionResponse:
        """Create a game. The response events describe the initial deal."""
        try:
            state = initialize(
                request.player1_deck,
                request.player2_deck,
                request.player1_id,
                request.player2_id,
                self.catalog,
                seed=request.seed,
                starting_player_id=request.starting_player_id,
                config=self.config,
                disabled_positions=[p.to_position() for p in request.disabled_positions],
                game_id=request.game_id,
            )
        except CatalogError as e:
            return ActionResponse.failure(str(e), ErrorCode.CATALOG_ERROR)
        except ValueError as e:
            return ActionResponse.failure(str(e), ErrorCode.INVALID_REQUEST)

        return ActionResponse(
            success=True,
            state=GameStateSnapshot.from_state(state),
            events=[EventRecord.from_event(e) for e in start_events(state)],
        )

    def place_card(
        self,
        snapshot: GameStateSnapshot,
        player_id: str,
        card_instance_id: str,
        position: PositionModel,
    ) -> ActionResponse:
        action = Action.place_card(player_id, card_instance_id, position.to_position())
        return self._apply(snapshot, action)

    def end_turn(self, snapshot: GameStateSnapshot, player_id: str) -> ActionResponse:
        return self._apply(snapshot, Action.end_turn(player_id))

    def surrender(self, snapshot: GameStateSnapshot, player_id: str) -> ActionResponse:
        return self._apply(snapshot, Action.surrender(player_id))

    def suggest_move(
        self,
        snapshot: GameStateSnapshot,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
    ) -> MoveModel | None:
        """AI placement for the player to move, or None when nothing can be placed."""
        move = ai_select_move(
            snapshot.to_state(),
            difficulty,
            registry=self.registry,
            config=self.config,
        )
        return MoveModel.from_move(move) if move else None

    def view(self, snapshot: GameStateSnapshot, viewer_id: str | None) -> GameStateSnapshot:
        """The snapshot as `viewer_id` may see it (None for a spectator)."""
        return GameStateSnapshot.from_state(redact_for_viewer(snapshot.to_state(), viewer_id))

    def _apply(self, snapshot: GameStateSnapshot, action: Action) -> ActionResponse:
        try:
            result = self._reducer.apply(snapshot.to_state(), action)
        except StateInvariantError as e:
            logger.error("Rejected corrupt snapshot: %s", "; ".join(e.errors))
            return ActionResponse.failure(str(e), ErrorCode.INVALID_STATE, violations=e.errors)
        return ActionResponse.from_result(result)
