"""Battletag resolution against the upstream player directory.

The backend's casing is authoritative: a resolved battletag is returned
exactly as the directory spells it and no caller should upper/lower-case it.
Comparisons elsewhere lowercase both sides at compare time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Tuple
from urllib.parse import unquote

from .cache import TTLCache
from .config import SEARCH_CACHE_TTL_S
from .records import SearchResult

logger = logging.getLogger(__name__)

SearchFn = Callable[[str], Awaitable[Optional[List[SearchResult]]]]

# name -> search results (or None), shared across requests
SEARCH_CACHE: TTLCache[str, Optional[List[SearchResult]]] = TTLCache("search")


@dataclass(frozen=True)
class ResolvedPlayer:
    battle_tag: str
    player_id: Optional[str]


def decode_input(value: Any) -> str:
    raw = str(value if value is not None else "").strip()
    try:
        return unquote(raw, errors="strict").strip()
    except UnicodeDecodeError:
        return raw


def parse_battle_tag(raw: str) -> Optional[Tuple[str, str]]:
    if "#" not in raw:
        return None
    parts = raw.split("#")
    name, discriminator = parts[0], parts[1]
    if not name or not discriminator:
        return None
    return name, discriminator


class TagResolver:
    def __init__(
        self,
        search: SearchFn,
        cache: Optional[TTLCache] = None,
        ttl_s: float = SEARCH_CACHE_TTL_S,
    ):
        self._search = search
        self._cache = cache if cache is not None else SEARCH_CACHE
        self._ttl_s = ttl_s

    async def _search_by_name(self, name: str) -> Optional[List[SearchResult]]:
        return await self._cache.get_or_fetch(name, self._ttl_s, lambda: self._search(name))

    async def _best_match(self, value: Any) -> Optional[SearchResult]:
        parsed = parse_battle_tag(decode_input(value))
        if not parsed:
            return None
        name, discriminator = parsed

        results = await self._search_by_name(name)
        if not results:
            logger.debug(f"[resolve] no search results for '{name}'")
            return None

        suffix = f"#{discriminator}".lower()
        matches = [r for r in results if r.battle_tag.lower().endswith(suffix)]
        if not matches:
            logger.debug(f"[resolve] no result for '{name}' ends with '{suffix}'")
            return None

        matches.sort(key=lambda r: r.season_count, reverse=True)
        return matches[0]

    async def resolve(self, value: Any) -> Optional[str]:
        best = await self._best_match(value)
        return best.battle_tag if best else None

    async def resolve_with_player_id(self, value: Any) -> Optional[ResolvedPlayer]:
        best = await self._best_match(value)
        if best is None:
            return None
        return ResolvedPlayer(battle_tag=best.battle_tag, player_id=best.relevance_id)
