from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple


DEFAULT_API_BASE = "https://website-backend.w3champions.com/api"

GAME_MODE_1V1 = 1
DEFAULT_SEASON = 24
DEFAULT_GATEWAY = 20
DEFAULT_ANALYTICS_SEASONS: Tuple[int, ...] = (22, 23, 24)

MIN_DURATION_SECONDS = 120
MIN_LADDER_GAMES = 5

SEARCH_PAGE_SIZE = 20
MATCHES_PAGE_SIZE = 100

# 5 minutes for both process-wide caches
SEARCH_CACHE_TTL_S = 5 * 60
LEAGUE_CACHE_TTL_S = 5 * 60


@dataclass(frozen=True)
class W3CSettings:
    api_base: str
    timeout_s: int
    season: int
    gateway: int
    game_mode: int
    analytics_seasons: Tuple[int, ...]
    max_workers: int


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _seasons_env(name: str, default: Tuple[int, ...]) -> Tuple[int, ...]:
    raw = os.environ.get(name)
    if not raw:
        return default
    seasons = tuple(int(s) for s in raw.split(",") if s.strip().isdigit())
    return seasons or default


def settings_from_env() -> W3CSettings:
    return W3CSettings(
        api_base=os.environ.get("W3C_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        timeout_s=_int_env("W3C_TIMEOUT_S", 20),
        season=_int_env("W3C_SEASON", DEFAULT_SEASON),
        gateway=_int_env("W3C_GATEWAY", DEFAULT_GATEWAY),
        game_mode=GAME_MODE_1V1,
        analytics_seasons=_seasons_env("W3C_ANALYTICS_SEASONS", DEFAULT_ANALYTICS_SEASONS),
        max_workers=_int_env("W3C_MAX_WORKERS", 32),
    )
