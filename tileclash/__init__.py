"""
TileClash - Tile-placement card battle engine

A deterministic engine for a two-player card battle on a 4x4 board.
It provides:
- Immutable game state and an action reducer
- Adjacency combat with directional power
- Trigger-driven special abilities
- Difficulty-scaled move search for AI opponents
"""

__version__ = "0.1.0"
