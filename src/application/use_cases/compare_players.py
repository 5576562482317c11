"""Use case for head-to-head comparison of two players."""

import logging
from dataclasses import dataclass

from ..ports.player_stats import PlayerStatsPort
from .result import UseCaseResult

logger = logging.getLogger(__name__)


@dataclass
class ComparePlayersRequest:
    """Request to compare two players."""

    player_a: str
    player_b: str


class ComparePlayersUseCase:
    """Use case for the symmetric head-to-head view."""

    def __init__(self, stats: PlayerStatsPort):
        self._stats = stats

    async def execute(self, request: ComparePlayersRequest) -> UseCaseResult:
        if not request.player_a.strip() or not request.player_b.strip():
            raise ValueError("Both players are required")

        try:
            result = await self._stats.compare_players(request.player_a, request.player_b)
        except Exception as e:
            logger.exception(f"[vs] {request.player_a!r} vs {request.player_b!r} failed: {e}")
            return UseCaseResult.failed("Error comparing players")

        if result is None:
            return UseCaseResult.not_found(
                f"Could not resolve '{request.player_a}' and '{request.player_b}' to W3Champions players."
            )
        return UseCaseResult.ok(result)
