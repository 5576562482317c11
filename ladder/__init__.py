"""W3Champions ladder ranking and head-to-head analytics package."""

__all__ = [
    "config",
    "types",
    "cache",
    "w3c_client",
    "records",
    "gateway",
    "resolver",
    "engine",
    "sos",
    "normalize",
    "ladder_service",
    "analytics",
    "vs_player",
    "rank",
    "maps",
    "render",
    "cli",
]
