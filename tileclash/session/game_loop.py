"""
Game Loop - Drives policy-vs-policy matches.

The loop:
1. Ask the current player's policy for an action
2. Apply it through the reducer
3. After a placement, end the turn for the player
4. Repeat until the game completes or the turn limit is hit

Used by the CLI simulator and by tests that need whole games.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..config import EngineConfig, DEFAULT_CONFIG
from ..engine_core.state import GameState
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions
from ..engine_core.effect_resolver import AbilityRegistry
from ..engine_core.events import GameOver
from ..engine_core.reducer import Reducer
from ..bots import BotPolicy


logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """
    Result of one full match.

    reason is the GameOver reason, "turn_limit" when max_turns ran out,
    or "aborted" when a policy produced an action the reducer rejected.
    """
    final_state: GameState
    winner: str | None
    reason: str
    turns: int
    scores: dict[str, int] = field(default_factory=dict)
    actions: list[str] = field(default_factory=list)
    events: list[Any] = field(default_factory=list)


class GameLoop:
    """
    Plays a match between two policies.

    Usage:
        loop = GameLoop({"p1": MoveSearchBot("hard", registry), "p2": RandomPolicy(7)}, registry)
        result = loop.run(state)
    """

    def __init__(
        self,
        policies: dict[str, BotPolicy],
        registry: AbilityRegistry | None = None,
        config: EngineConfig | None = None,
        max_turns: int = 200,
    ):
        self.policies = policies
        self.config = config or DEFAULT_CONFIG
        self.reducer = Reducer(registry=registry, config=self.config)
        self.max_turns = max_turns

    def run(self, state: GameState) -> MatchResult:
        missing = [p.user_id for p in state.players if p.user_id not in self.policies]
        if missing:
            raise ValueError(f"No policy for players: {', '.join(missing)}")

        actions: list[str] = []
        events: list[Any] = []
        turns = 0

        while not state.is_completed:
            if turns >= self.max_turns:
                logger.warning("Match stopped after %d turns without completing", turns)
                return self._result(state, None, "turn_limit", turns, actions, events)

            player_id = state.current_player_id
            policy = self.policies[player_id]
            decision = policy.select_action(state, legal_actions(state, player_id))
            result = self.reducer.apply(state, decision.action)
            if not result.success:
                logger.error(
                    "%s chose an illegal action %s: %s",
                    policy.get_name(), decision.action, result.error,
                )
                return self._result(state, None, "aborted", turns, actions, events)

            state = result.new_state
            events.extend(result.events)
            actions.append(str(decision.action))
            logger.debug("%s: %s", policy.get_name(), decision.explanation or decision.action)

            # auto_end_turn already closed the turn inside the reducer
            placed = decision.action.action_type == ActionType.PLACE_CARD
            if placed and not state.is_completed and not self.config.auto_end_turn:
                end_turn = Action.end_turn(player_id)
                result = self.reducer.apply(state, end_turn)
                state = result.new_state
                events.extend(result.events)
                actions.append(str(end_turn))
            turns += 1

        game_over = next((e for e in reversed(events) if isinstance(e, GameOver)), None)
        reason = game_over.reason if game_over else "completed"
        return self._result(state, state.winner, reason, turns, actions, events)

    @staticmethod
    def _result(state, winner, reason, turns, actions, events) -> MatchResult:
        return MatchResult(
            final_state=state,
            winner=winner,
            reason=reason,
            turns=turns,
            scores=state.calculate_scores(),
            actions=actions,
            events=events,
        )


def play_match(
    state: GameState,
    policies: dict[str, BotPolicy],
    registry: AbilityRegistry | None = None,
    config: EngineConfig | None = None,
    max_turns: int = 200,
) -> MatchResult:
    """Convenience function to play one match to completion."""
    return GameLoop(policies, registry=registry, config=config, max_turns=max_turns).run(state)
