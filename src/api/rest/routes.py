"""REST API routes for ladder and player statistics."""

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ladder.ladder_service import DEFAULT_PAGE_SIZE

from ..transformers.response_transformer import transform_ladder_page, transform_result
from ...application.ports.player_stats import PlayerStatsPort
from ...application.use_cases import (
    ComparePlayersRequest,
    ComparePlayersUseCase,
    GetLadderPageRequest,
    GetLadderPageUseCase,
    GetPlayerReportRequest,
    GetPlayerReportUseCase,
    PlayerReportKind,
    UseCaseResult,
)
from ...application.use_cases.result import NOT_FOUND
from ...infrastructure.adapters.w3c_stats_adapter import W3CStatsAdapter

router = APIRouter(prefix="/api", tags=["ladder"])


class ErrorResponse(BaseModel):
    """Error response model."""

    code: str
    message: str
    details: dict = {}


@lru_cache(maxsize=1)
def get_stats_port() -> PlayerStatsPort:
    """Process-wide adapter; overridden in tests."""
    return W3CStatsAdapter()


def _error(status_code: int, code: str, message: str, details: Optional[dict] = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": ErrorResponse(code=code, message=message, details=details or {}).model_dump()},
    )


def _unwrap(result: UseCaseResult, not_found_code: str, details: dict):
    if result.success:
        return result.data
    if result.code == NOT_FOUND:
        raise _error(404, not_found_code, result.error or "No data available", details)
    raise _error(500, "INTERNAL_ERROR", result.error or "Internal error", {})


async def _ladder(
    stats: PlayerStatsPort,
    battletag: Optional[str],
    race: Optional[str],
    page: int,
    page_size: int,
):
    try:
        result = await GetLadderPageUseCase(stats).execute(
            GetLadderPageRequest(battle_tag=battletag, race=race, page=page, page_size=page_size)
        )
    except ValueError as e:
        raise _error(400, "INVALID_REQUEST", str(e), {"race": race} if race else {})
    return transform_ladder_page(_unwrap(result, "NO_DATA", {}))


@router.get("/ladder")
async def get_ladder(
    battletag: Optional[str] = Query(None, description="Player to locate on the ladder"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=500),
    stats: PlayerStatsPort = Depends(get_stats_port),
):
    """Get one page of the global ladder.

    Each player appears once, on their highest-rated race row. ``me`` is the
    requesting player's row when ``battletag`` resolves and is ranked.
    """
    return await _ladder(stats, battletag, None, page, page_size)


@router.get("/ladder/{race}")
async def get_race_ladder(
    race: str,
    battletag: Optional[str] = Query(None, description="Player to locate on the ladder"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=500),
    stats: PlayerStatsPort = Depends(get_stats_port),
):
    """Get one page of a race ladder (human, orc, elf, undead, random)."""
    return await _ladder(stats, battletag, race, page, page_size)


async def _player_report(stats: PlayerStatsPort, battletag: str, kind: PlayerReportKind):
    try:
        result = await GetPlayerReportUseCase(stats).execute(
            GetPlayerReportRequest(battle_tag=battletag, kind=kind)
        )
    except ValueError as e:
        raise _error(400, "INVALID_REQUEST", str(e))
    return transform_result(_unwrap(result, "PLAYER_NOT_FOUND", {"battletag": battletag}))


@router.get("/players/analytics")
async def get_player_analytics(
    battletag: str = Query(..., min_length=1),
    stats: PlayerStatsPort = Depends(get_stats_port),
):
    """Normalized 1v1 match corpus and summary for one player."""
    return await _player_report(stats, battletag, PlayerReportKind.ANALYTICS)


@router.get("/players/rank")
async def get_player_rank(
    battletag: str = Query(..., min_length=1),
    stats: PlayerStatsPort = Depends(get_stats_port),
):
    """Global and country rank of a player on each race ladder."""
    return await _player_report(stats, battletag, PlayerReportKind.RANK)


@router.get("/players/maps")
async def get_player_maps(
    battletag: str = Query(..., min_length=1),
    stats: PlayerStatsPort = Depends(get_stats_port),
):
    """Per-map performance of a player in the current season."""
    return await _player_report(stats, battletag, PlayerReportKind.MAPS)


@router.get("/vs")
async def get_vs_player(
    player_a: str = Query(..., alias="playerA", min_length=1),
    player_b: str = Query(..., alias="playerB", min_length=1),
    stats: PlayerStatsPort = Depends(get_stats_port),
):
    """Head-to-head statistics over the games two players played against each other.

    An empty intersection is not an error: the response carries zeroed
    stats and no games.
    """
    try:
        result = await ComparePlayersUseCase(stats).execute(
            ComparePlayersRequest(player_a=player_a, player_b=player_b)
        )
    except ValueError as e:
        raise _error(400, "INVALID_REQUEST", str(e))
    return transform_result(
        _unwrap(result, "PLAYER_NOT_FOUND", {"playerA": player_a, "playerB": player_b})
    )
