"""
Bots module - AI players.

Provides:
- BotPolicy: Interface for bot decision-making
- HeuristicEvaluator: Scores placements and boards
- DifficultyProfile: Easy / medium / hard search configurations
- MoveSearch / MoveSearchBot / ai_select_move: The move-search AI
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .evaluator import HeuristicEvaluator, EvaluationWeights, TRIGGER_VALUES
from .difficulty import Difficulty, DifficultyProfile, DIFFICULTIES, get_profile
from .search import MoveSearch, MoveSearchBot, SearchResult, ai_select_move

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "HeuristicEvaluator",
    "EvaluationWeights",
    "TRIGGER_VALUES",
    "Difficulty",
    "DifficultyProfile",
    "DIFFICULTIES",
    "get_profile",
    "MoveSearch",
    "MoveSearchBot",
    "SearchResult",
    "ai_select_move",
]
