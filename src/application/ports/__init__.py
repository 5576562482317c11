"""Application ports (interfaces)."""

from .player_stats import PlayerStatsPort

__all__ = [
    "PlayerStatsPort",
]
