"""
Games module - Bundled card sets.

Each card set provides a catalog of card and ability definitions
and starter decks that can be passed straight to initialize().
"""
