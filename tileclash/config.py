"""
Engine Configuration - Tunable rule switches and environment overrides.

Configuration is a plain value passed into the engine entry points.
Nothing in the engine reads the environment on its own; callers that
want environment-driven settings use EngineConfig.from_env().

Environment variables:
- TILECLASH_LOG_LEVEL: default log level for configure_logging()
- TILECLASH_MAX_HAND: maximum cards in hand
- TILECLASH_INITIAL_DRAW: cards dealt to each player at start
- TILECLASH_CHAIN_FLIPS: enable cascading combat ("1", "true", "yes")
- TILECLASH_AUTO_END_TURN: end the turn after each placement
- TILECLASH_VALIDATE_STATES: check structural invariants on every action
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import os


TILECLASH_LOG_LEVEL = os.getenv("TILECLASH_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass(frozen=True)
class EngineConfig:
    """
    Rule switches for one engine instance.

    chain_flips is a product decision that is still open: when enabled,
    a card flipped by combat fights its own neighbours in the same
    placement. Off by default.
    """
    max_cards_in_hand: int = 10
    initial_draw_count: int = 5
    chain_flips: bool = False
    auto_end_turn: bool = False
    validate_states: bool = True

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from TILECLASH_* environment variables."""
        defaults = cls()
        return cls(
            max_cards_in_hand=_env_int("TILECLASH_MAX_HAND", defaults.max_cards_in_hand),
            initial_draw_count=_env_int("TILECLASH_INITIAL_DRAW", defaults.initial_draw_count),
            chain_flips=_env_flag("TILECLASH_CHAIN_FLIPS", defaults.chain_flips),
            auto_end_turn=_env_flag("TILECLASH_AUTO_END_TURN", defaults.auto_end_turn),
            validate_states=_env_flag("TILECLASH_VALIDATE_STATES", defaults.validate_states),
        )


DEFAULT_CONFIG = EngineConfig()


def configure_logging(level: str | int | None = None) -> None:
    """Set up root logging for command-line use."""
    logging.basicConfig(
        level=level if level is not None else TILECLASH_LOG_LEVEL.upper(),
        format=LOG_FORMAT,
    )
