"""Infrastructure adapters."""

from .w3c_stats_adapter import W3CStatsAdapter

__all__ = [
    "W3CStatsAdapter",
]
