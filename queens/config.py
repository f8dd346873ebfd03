"""Validated configuration for Queens rooms and the room reaper."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "QUEENS_"


class GameConfig(BaseModel):
    max_players: int = Field(2, description="Seats per room; only two-seat play is supported.")
    hand_size: int = Field(4, ge=1, le=13, description="Cards dealt to each player on join.")
    selection_size: int = Field(2, ge=1, description="Cards each player reveals to themselves during setup.")
    inactivity_timeout: float = Field(120.0, gt=0, description="Seconds of inactivity before a room is reaped.")
    sweep_interval: float = Field(30.0, gt=0, description="Seconds between reaper sweeps.")

    @field_validator("max_players")
    @classmethod
    def ensure_two_seats(cls, value: int) -> int:
        if value != 2:
            raise ValueError("Queens rooms support exactly two seats.")
        return value

    @field_validator("selection_size")
    @classmethod
    def ensure_selection_fits_hand(cls, value: int, info) -> int:
        hand_size = info.data.get("hand_size")
        if hand_size is not None and value > hand_size:
            raise ValueError("Selection size cannot exceed the hand size.")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Build a config from ``QUEENS_*`` environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        overrides = {}
        for name in ("hand_size", "inactivity_timeout", "sweep_interval"):
            raw = env.get(ENV_PREFIX + name.upper())
            if raw:
                overrides[name] = raw
        return cls(**overrides)
