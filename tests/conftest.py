from typing import Any, Dict, List, Optional

import pytest

from ladder.config import W3CSettings
from ladder.records import RawMatch, decode_match


def _player(tag: str, race: int, won: bool, old_mmr: Optional[float], gain: float = 8.0,
            heroes: Optional[List[Dict[str, Any]]] = None, country: Optional[str] = None) -> Dict[str, Any]:
    return {
        "battleTag": tag,
        "race": race,
        "oldMmr": old_mmr,
        "newMmr": None if old_mmr is None else old_mmr + (gain if won else -gain),
        "mmrGain": gain if won else -gain,
        "won": won,
        "heroes": heroes if heroes is not None else [{"id": 1, "name": "archmage", "level": 5}],
        "countryCode": country,
    }


def _score(tag: str, gold: float = 5000) -> Dict[str, Any]:
    return {
        "battleTag": tag,
        "unitScore": {"unitsProduced": 40, "unitsKilled": 30, "largestArmy": 60},
        "heroScore": {"heroesKilled": 2, "itemsObtained": 6, "mercsHired": 1, "expGained": 2400},
        "resourceScore": {"goldCollected": gold, "lumberCollected": 2000, "goldUpkeepLost": 300},
    }


def build_payload(
    match_id: str,
    me: str,
    opp: str,
    me_won: bool = True,
    me_race: int = 1,
    opp_race: int = 2,
    me_mmr: Optional[float] = 1800,
    opp_mmr: Optional[float] = 1700,
    duration: float = 900,
    game_mode: int = 1,
    map_name: Optional[str] = "Concealed Hill",
    start: str = "2025-03-01T12:00:00Z",
    complete: bool = True,
    me_heroes: Optional[List[Dict[str, Any]]] = None,
    me_country: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": match_id,
        "mapName": map_name,
        "map": "(2)ConcealedHill",
        "mapId": 7,
        "durationInSeconds": duration,
        "startTime": start,
        "gameMode": game_mode,
        "gateWay": 20,
        "season": 24,
        "teams": [
            {"players": [_player(me, me_race, me_won, me_mmr, heroes=me_heroes, country=me_country)]},
            {"players": [_player(opp, opp_race, not me_won, opp_mmr)]},
        ],
    }
    if complete:
        payload.update(
            {
                "endTime": "2025-03-01T12:15:00Z",
                "floMatchId": 4242,
                "original-ongoing-match-id": f"ongoing-{match_id}",
                "serverInfo": {
                    "provider": "flo",
                    "nodeId": 3,
                    "name": "EU Frankfurt",
                    "playerServerInfos": [
                        {"battleTag": me, "averagePing": 40},
                        {"battleTag": opp, "averagePing": 60},
                    ],
                },
                "playerScores": [_score(me), _score(opp, gold=4000)],
            }
        )
    return payload


@pytest.fixture
def make_match():
    """Factory building a decoded 1v1 match; keyword args override the payload builder."""

    def factory(*args: Any, **kwargs: Any) -> RawMatch:
        match = decode_match(build_payload(*args, **kwargs))
        assert match is not None
        return match

    return factory


@pytest.fixture
def settings() -> W3CSettings:
    return W3CSettings(
        api_base="http://w3c.test/api",
        timeout_s=5,
        season=24,
        gateway=20,
        game_mode=1,
        analytics_seasons=(23, 24),
        max_workers=4,
    )
