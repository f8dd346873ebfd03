"""Core engine package for the Queens card table."""

__all__ = [
    "cards",
    "deck",
    "player",
    "errors",
    "scoring",
    "room",
    "view",
    "store",
    "reaper",
    "config",
    "service",
]
