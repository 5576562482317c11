"""Use case for single-player reports: analytics, rank and map stats."""

import logging
from dataclasses import dataclass
from enum import Enum

from ..ports.player_stats import PlayerStatsPort
from .result import UseCaseResult

logger = logging.getLogger(__name__)


class PlayerReportKind(str, Enum):
    ANALYTICS = "analytics"
    RANK = "rank"
    MAPS = "maps"


@dataclass
class GetPlayerReportRequest:
    """Request for one kind of player report."""

    battle_tag: str
    kind: PlayerReportKind = PlayerReportKind.ANALYTICS


class GetPlayerReportUseCase:
    """Use case dispatching to the requested player report."""

    def __init__(self, stats: PlayerStatsPort):
        self._stats = stats

    async def execute(self, request: GetPlayerReportRequest) -> UseCaseResult:
        if not request.battle_tag.strip():
            raise ValueError("battletag is required")

        fetch = {
            PlayerReportKind.ANALYTICS: self._stats.player_analytics,
            PlayerReportKind.RANK: self._stats.player_rank,
            PlayerReportKind.MAPS: self._stats.map_stats,
        }[request.kind]

        try:
            report = await fetch(request.battle_tag)
        except Exception as e:
            logger.exception(f"[{request.kind.value}] {request.battle_tag!r} failed: {e}")
            return UseCaseResult.failed(f"Error building {request.kind.value} report")

        if report is None:
            return UseCaseResult.not_found(f"No {request.kind.value} data for '{request.battle_tag}'.")
        return UseCaseResult.ok(report)
