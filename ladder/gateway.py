"""Async fetch layer the analytics core awaits on.

Wraps the blocking :class:`W3ChampionsClient` in a thread pool so the event
loop can fan out requests, decodes every payload into typed records and turns
upstream failures into empty results for that unit of work.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

from .cache import TTLCache
from .config import LEAGUE_CACHE_TTL_S, W3CSettings
from .records import (
    PlayerProfile,
    RawLeagueRow,
    RawMatch,
    SearchResult,
    decode_league_rows,
    decode_match_detail,
    decode_match_list,
    decode_profile,
    decode_search_results,
)
from .w3c_client import W3ChampionsClient, W3CRequestError

logger = logging.getLogger(__name__)

# league pages are shared by every request in the process
LEAGUE_PAGE_CACHE: TTLCache[tuple, Dict[int, List[RawLeagueRow]]] = TTLCache("league-pages")


class W3CGateway:
    def __init__(
        self,
        client: Optional[W3ChampionsClient] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        league_cache: Optional[TTLCache] = None,
    ):
        self._client = client or W3ChampionsClient()
        self.settings: W3CSettings = self._client.settings  # type: ignore[assignment]
        self._executor = executor or ThreadPoolExecutor(max_workers=self.settings.max_workers)
        self._league_cache = league_cache if league_cache is not None else LEAGUE_PAGE_CACHE

    async def _call(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    async def search_players(self, name: str) -> Optional[List[SearchResult]]:
        try:
            payload = await self._call(self._client.global_search, name)
        except W3CRequestError as exc:
            logger.warning(f"[search] '{name}' failed: {exc}")
            return None
        return decode_search_results(payload)

    async def fetch_league_page(self, league: int) -> List[RawLeagueRow]:
        s = self.settings
        try:
            payload = await self._call(self._client.ladder_page, league, s.gateway, s.game_mode, s.season)
        except W3CRequestError as exc:
            logger.warning(f"[ladder] league {league} failed: {exc}")
            return []
        return decode_league_rows(payload)

    async def fetch_league_pages(self, leagues: Sequence[int]) -> Dict[int, List[RawLeagueRow]]:
        """All requested league pages, fetched in parallel and cached process-wide."""
        s = self.settings
        key = (s.season, s.gateway, s.game_mode, tuple(leagues))

        async def load() -> Dict[int, List[RawLeagueRow]]:
            pages = await asyncio.gather(*(self.fetch_league_page(league) for league in leagues))
            logger.debug(f"[ladder] fetched {len(pages)} league pages, rows={sum(len(p) for p in pages)}")
            return dict(zip(leagues, pages))

        return await self._league_cache.get_or_fetch(key, LEAGUE_CACHE_TTL_S, load)

    async def fetch_country_ladder(self, country_code: str) -> List[RawLeagueRow]:
        s = self.settings
        try:
            payload = await self._call(
                self._client.country_ladder, country_code, s.gateway, s.game_mode, s.season
            )
        except W3CRequestError as exc:
            logger.warning(f"[ladder] country {country_code} failed: {exc}")
            return []
        return decode_league_rows(payload)

    async def fetch_player_profile(self, battle_tag: str) -> PlayerProfile:
        try:
            payload = await self._call(self._client.player_profile, battle_tag)
        except W3CRequestError as exc:
            logger.warning(f"[profile] {battle_tag} failed: {exc}")
            return PlayerProfile()
        return decode_profile(payload)

    async def fetch_matches(self, battle_tag: str, seasons: Sequence[int]) -> List[RawMatch]:
        """Every match of ``battle_tag`` across ``seasons``; a failed season contributes nothing."""

        async def one_season(season: int) -> List[RawMatch]:
            try:
                payload = await self._call(
                    self._client.all_matches, battle_tag, self.settings.gateway, season
                )
            except W3CRequestError as exc:
                logger.warning(f"[matches] {battle_tag} season {season} failed: {exc}")
                return []
            return decode_match_list(payload)

        per_season = await asyncio.gather(*(one_season(s) for s in seasons))
        return [m for matches in per_season for m in matches]

    async def fetch_match_detail(self, match_id: str) -> Optional[RawMatch]:
        try:
            payload = await self._call(self._client.match_detail, match_id)
        except W3CRequestError as exc:
            logger.warning(f"[detail] {match_id} failed: {exc}")
            return None
        return decode_match_detail(payload)
