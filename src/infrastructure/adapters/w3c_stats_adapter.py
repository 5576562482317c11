"""Adapter wrapping the W3Champions ladder package."""

from __future__ import annotations

from typing import Optional

from ladder.analytics import PlayerAnalytics, get_match_analytics
from ladder.gateway import W3CGateway
from ladder.ladder_service import LadderPage, get_ladder_page, get_race_ladder_page
from ladder.maps import MapStatsResponse, get_map_stats
from ladder.rank import PlayerRankResponse, get_player_rank
from ladder.resolver import TagResolver
from ladder.vs_player import VsPlayerResponse, compare_vs_player

from ...application.ports.player_stats import PlayerStatsPort


class W3CStatsAdapter(PlayerStatsPort):
    """Adapter serving statistics from the W3Champions public API."""

    def __init__(
        self,
        gateway: Optional[W3CGateway] = None,
        resolver: Optional[TagResolver] = None,
    ):
        """Initialize with a gateway and resolver.

        Args:
            gateway: Upstream gateway. If None, one is built from the environment.
            resolver: Battletag resolver. If None, one is built over the gateway's search.
        """
        self._gateway = gateway or W3CGateway()
        self._resolver = resolver or TagResolver(self._gateway.search_players)

    async def ladder_page(
        self,
        battle_tag: Optional[str],
        race: Optional[str],
        page: int,
        page_size: int,
    ) -> LadderPage:
        if race:
            return await get_race_ladder_page(
                self._gateway, self._resolver, battle_tag, race, page=page, page_size=page_size
            )
        return await get_ladder_page(self._gateway, self._resolver, battle_tag, page=page, page_size=page_size)

    async def player_analytics(self, battle_tag: str) -> Optional[PlayerAnalytics]:
        return await get_match_analytics(self._gateway, self._resolver, battle_tag)

    async def compare_players(self, player_a: str, player_b: str) -> Optional[VsPlayerResponse]:
        return await compare_vs_player(self._gateway, self._resolver, player_a, player_b)

    async def player_rank(self, battle_tag: str) -> Optional[PlayerRankResponse]:
        return await get_player_rank(self._gateway, self._resolver, battle_tag)

    async def map_stats(self, battle_tag: str) -> Optional[MapStatsResponse]:
        return await get_map_stats(self._gateway, self._resolver, battle_tag)
