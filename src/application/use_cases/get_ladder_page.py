"""Use case for fetching a ranked ladder page."""

import logging
from dataclasses import dataclass

from ladder.ladder_service import DEFAULT_PAGE_SIZE

from ..ports.player_stats import PlayerStatsPort
from .result import UseCaseResult

logger = logging.getLogger(__name__)


@dataclass
class GetLadderPageRequest:
    """Request for one ladder page."""

    battle_tag: str | None = None
    race: str | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


class GetLadderPageUseCase:
    """Use case for the global or per-race ladder."""

    def __init__(self, stats: PlayerStatsPort):
        self._stats = stats

    async def execute(self, request: GetLadderPageRequest) -> UseCaseResult:
        """Execute the ladder page use case.

        Raises:
            ValueError: On an unknown race key or invalid paging
        """
        try:
            page = await self._stats.ladder_page(
                request.battle_tag, request.race, request.page, request.page_size
            )
        except ValueError:
            raise
        except Exception as e:
            logger.exception(f"[ladder] page {request.page} race={request.race or 'all'} failed: {e}")
            return UseCaseResult.failed("Error building ladder")

        return UseCaseResult.ok(page)
