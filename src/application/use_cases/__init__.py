"""Application use cases."""

from .compare_players import ComparePlayersRequest, ComparePlayersUseCase
from .get_ladder_page import GetLadderPageRequest, GetLadderPageUseCase
from .get_player_report import GetPlayerReportRequest, GetPlayerReportUseCase, PlayerReportKind
from .result import UseCaseResult

__all__ = [
    "ComparePlayersRequest",
    "ComparePlayersUseCase",
    "GetLadderPageRequest",
    "GetLadderPageUseCase",
    "GetPlayerReportRequest",
    "GetPlayerReportUseCase",
    "PlayerReportKind",
    "UseCaseResult",
]
