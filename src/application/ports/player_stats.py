"""Port (interface) for W3Champions player and ladder statistics."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ladder.analytics import PlayerAnalytics
from ladder.ladder_service import LadderPage
from ladder.maps import MapStatsResponse
from ladder.rank import PlayerRankResponse
from ladder.vs_player import VsPlayerResponse


class PlayerStatsPort(ABC):
    """Port for ladder pages and per-player statistics."""

    @abstractmethod
    async def ladder_page(
        self,
        battle_tag: Optional[str],
        race: Optional[str],
        page: int,
        page_size: int,
    ) -> LadderPage:
        """Fetch one ranked ladder page.

        Args:
            battle_tag: Optional player to locate on the ladder
            race: Optional race key (human, orc, elf, undead, random)
            page: 1-based page number
            page_size: Rows per page

        Returns:
            Ladder page with the requesting player's row when found

        Raises:
            ValueError: On an unknown race key or a non-positive page
        """
        ...

    @abstractmethod
    async def player_analytics(self, battle_tag: str) -> Optional[PlayerAnalytics]:
        """Normalized match corpus and rollups for one player."""
        ...

    @abstractmethod
    async def compare_players(self, player_a: str, player_b: str) -> Optional[VsPlayerResponse]:
        """Head-to-head statistics over the games two players shared."""
        ...

    @abstractmethod
    async def player_rank(self, battle_tag: str) -> Optional[PlayerRankResponse]:
        """Global and country rank per race."""
        ...

    @abstractmethod
    async def map_stats(self, battle_tag: str) -> Optional[MapStatsResponse]:
        """Per-map performance for the current season."""
        ...
