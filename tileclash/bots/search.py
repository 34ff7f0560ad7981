"""
Move Search - Difficulty-tiered placement search for AI players.

The search:
- Enumerates every (hand card x playable cell) placement
- Simulates each through the reducer (abilities on for medium/hard)
- Scores flips, position and the resulting board
- Hard only: simulates the end of turn and the opponent's best reply
  over a capped set of key replies, then discounts it

The search does NOT:
- Search deeper than one reply
- Keep state between calls
- Preempt itself; caps on candidates and replies bound its cost
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging
import random
import time

from .policy import BotPolicy, BotDecision
from .evaluator import HeuristicEvaluator, is_center, is_corner
from .difficulty import Difficulty, DifficultyProfile, get_profile
from ..config import EngineConfig, DEFAULT_CONFIG
from ..engine_core.state import GameState, all_positions
from ..engine_core.action import Action, ActionType, Move
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.effect_resolver import AbilityRegistry
from ..engine_core.events import CardFlipped
from ..engine_core.reducer import Reducer


logger = logging.getLogger(__name__)


@dataclass
class ScoredMove:
    move: Move
    score: float
    flips: int = 0
    state: GameState | None = None


@dataclass
class SearchResult:
    """Outcome of one search call."""
    move: Move | None
    score: float = 0.0
    evaluated: int = 0
    elapsed_ms: float = 0.0
    ranked: list[ScoredMove] = field(default_factory=list)


def _flips_for(events: list, player_id: str) -> int:
    return sum(1 for e in events if isinstance(e, CardFlipped) and e.to_player_id == player_id)


class MoveSearch:
    """
    Scores candidate placements for the player to move.

    Usage:
        search = MoveSearch(get_profile("hard"), registry=registry)
        result = search.search(state)
        if result.move is None:
            ...  # no legal placement, end the turn instead
    """

    def __init__(
        self,
        profile: DifficultyProfile,
        registry: AbilityRegistry | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.profile = profile
        self.evaluator = HeuristicEvaluator(weights=profile.weights)
        self.rng = rng
        # Simulations skip invariant checks and never auto-end the turn
        sim_config = replace(config or DEFAULT_CONFIG, validate_states=False, auto_end_turn=False)
        self.reducer = Reducer(
            registry=registry if profile.use_abilities else None,
            config=sim_config,
        )
        self.generator = ActionGenerator()

    def search(self, state: GameState) -> SearchResult:
        started = time.perf_counter()
        if state.is_completed:
            return SearchResult(move=None)

        player_id = state.current_player_id
        candidates = self.generator.legal_placements(state, player_id)
        if not candidates:
            return SearchResult(move=None, elapsed_ms=self._elapsed(started))

        scored = [s for s in (self._score_placement(state, m, player_id) for m in candidates) if s]
        scored.sort(key=lambda s: s.score, reverse=True)
        evaluated = len(scored)

        if self.profile.lookahead:
            shortlist = scored[:self.profile.max_candidates]
            for entry in shortlist:
                best_reply, replies = self._opponent_best_reply(entry.state, player_id)
                evaluated += replies
                entry.score -= self.profile.reply_discount * best_reply
            shortlist.sort(key=lambda s: s.score, reverse=True)
            scored = shortlist + scored[self.profile.max_candidates:]

        top = scored[:max(1, self.profile.top_n)]
        rng = self.rng or random.Random(f"{state.game_id}:{state.turn_number}:{player_id}")
        chosen = rng.choice(top)

        elapsed = self._elapsed(started)
        if elapsed > self.profile.time_budget_ms:
            logger.warning(
                "%s search took %.0fms (budget %dms) over %d evaluations",
                self.profile.difficulty.value, elapsed, self.profile.time_budget_ms, evaluated,
            )
        logger.debug(
            "%s chose %s at %s (score %.1f, %d evaluated)",
            self.profile.difficulty.value, chosen.move.card_instance_id,
            chosen.move.position, chosen.score, evaluated,
        )
        return SearchResult(
            move=chosen.move,
            score=chosen.score,
            evaluated=evaluated,
            elapsed_ms=elapsed,
            ranked=scored,
        )

    def _score_placement(self, state: GameState, move: Move, player_id: str) -> ScoredMove | None:
        result = self.reducer.apply(state, move.to_action(player_id))
        if not result.success:
            return None
        after = result.new_state
        flips = _flips_for(result.events, player_id)
        card = after.card_at(move.position)
        score = self.evaluator.placement_score(flips, move.position, card)
        if self.profile.evaluate_board or after.is_completed:
            score += self.evaluator.evaluate(after, player_id).total_score
        return ScoredMove(move=move, score=score, flips=flips, state=after)

    def _opponent_best_reply(self, after: GameState | None, player_id: str) -> tuple[float, int]:
        """Best reply score from the opponent's side, and how many replies were tried."""
        if after is None or after.is_completed:
            return 0.0, 0
        ended = self.reducer.apply(after, Action.end_turn(player_id))
        if not ended.success or ended.new_state.is_completed:
            return 0.0, 0

        reply_state = ended.new_state
        opponent_id = reply_state.current_player_id
        replies = self._key_replies(reply_state, opponent_id)
        best = None
        for move in replies:
            scored = self._score_placement(reply_state, move, opponent_id)
            if scored and (best is None or scored.score > best):
                best = scored.score
        return (best if best is not None else 0.0), len(replies)

    def _key_replies(self, state: GameState, player_id: str) -> list[Move]:
        """
        Replies worth simulating, capped at max_replies.

        Key cells are open cells touching an occupied one (corners and
        center on an empty board), ranked by flips a direct comparison
        would win.
        """
        open_cells = [p for p in all_positions() if state.is_playable(p)]
        occupied = {p for p, _ in state.cards_on_board()}
        if occupied:
            keys = [p for p in open_cells if any(n in occupied for _, n in p.neighbors())]
        else:
            keys = [p for p in open_cells if is_corner(p) or is_center(p)]
        keys = keys or open_cells

        player = state.get_player(player_id)
        ranked = []
        for card_id in player.hand:
            card = state.hydrate(card_id, player_id)
            for position in keys:
                potential = self.evaluator.potential_flips(state, card, position, player_id)
                ranked.append((potential, self.evaluator.position_bonus(position), Move(card_id, position)))
        ranked.sort(key=lambda r: (r[0], r[1]), reverse=True)
        return [move for _, _, move in ranked[:self.profile.max_replies]]

    @staticmethod
    def _elapsed(started: float) -> float:
        return (time.perf_counter() - started) * 1000.0


def ai_select_move(
    state: GameState,
    difficulty: Difficulty | str | DifficultyProfile = Difficulty.MEDIUM,
    registry: AbilityRegistry | None = None,
    config: EngineConfig | None = None,
    rng: random.Random | None = None,
) -> Move | None:
    """
    Pick a placement for the player to move.

    Returns None only when no (hand card, playable cell) pair exists,
    which includes a player who has already placed this turn; the
    caller should end the turn instead.
    """
    search = MoveSearch(get_profile(difficulty), registry=registry, config=config, rng=rng)
    return search.search(state).move


@dataclass
class MoveSearchBot(BotPolicy):
    """
    AI player backed by MoveSearch.

    Usage:
        bot = MoveSearchBot(difficulty=Difficulty.HARD, registry=registry)
        decision = bot.select_action(state, legal_actions(state))
    """
    difficulty: Difficulty | str | DifficultyProfile = Difficulty.MEDIUM
    registry: AbilityRegistry | None = None
    config: EngineConfig | None = None
    seed: int | None = None

    def __post_init__(self):
        self.profile = get_profile(self.difficulty)
        self.rng = random.Random(self.seed) if self.seed is not None else None

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        search = MoveSearch(self.profile, registry=self.registry, config=self.config, rng=self.rng)
        result = search.search(state)
        details = {
            "difficulty": self.profile.difficulty.value,
            "elapsed_ms": result.elapsed_ms,
        }

        if result.move is None:
            end_turn = next(
                (a for a in legal_actions if a.action_type == ActionType.END_TURN),
                legal_actions[0],
            )
            return BotDecision(
                action=end_turn,
                explanation="No legal placement; ending turn",
                evaluated_actions=0,
                evaluation_details=details,
            )

        return BotDecision(
            action=result.move.to_action(state.current_player_id),
            explanation=(
                f"Place {result.move.card_instance_id} at {result.move.position} "
                f"(score {result.score:.1f})"
            ),
            confidence=1.0 / max(1, min(self.profile.top_n, len(result.ranked))),
            evaluated_actions=result.evaluated,
            best_score=result.score,
            evaluation_details=details,
        )

    def get_name(self) -> str:
        return f"MoveSearchBot[{self.profile.difficulty.value}]"
