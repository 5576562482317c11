"""Typed records decoded from upstream JSON.

Every payload returned by :mod:`ladder.w3c_client` passes through one of the
``decode_*`` functions here exactly once. Fields the upstream may omit are
``Optional`` on the record; downstream code never touches raw dicts.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .types import PlayerScoreBlock, ServerInfo

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def _num(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _safe_int(value: Any) -> int:
    num = _num(value)
    return int(num) if num is not None else 0


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _str_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def parse_time(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    text = _FRACTION_RE.sub(r"\1", value.strip().replace("Z", "+00:00"))
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# --- search --------------------------------------------------------------


@dataclass(frozen=True)
class SearchResult:
    battle_tag: str
    name: str
    season_count: int
    relevance_id: Optional[str] = None


def decode_search_results(payload: Any) -> Optional[List[SearchResult]]:
    """Returns ``None`` for anything that is not a list of results."""
    if not isinstance(payload, list):
        return None
    out: List[SearchResult] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        tag = _str_or_none(item.get("battleTag"))
        if not tag:
            continue
        seasons = item.get("seasons")
        out.append(
            SearchResult(
                battle_tag=tag,
                name=str(item.get("name") or ""),
                season_count=len(seasons) if isinstance(seasons, list) else 0,
                relevance_id=_str_or_none(item.get("relevanceId")),
            )
        )
    return out


# --- ladder --------------------------------------------------------------


@dataclass(frozen=True)
class RawLeagueRow:
    battle_tag: Optional[str]
    rating: float
    wins: int
    games: int
    race: Optional[int]
    country_code: Optional[str] = None


def _league_row(item: Dict[str, Any]) -> RawLeagueRow:
    player = _as_dict(item.get("player"))
    ids = _as_list(player.get("playerIds"))
    infos = _as_list(item.get("playersInfo"))
    first_id = _as_dict(ids[0]) if ids else {}
    first_info = _as_dict(infos[0]) if infos else {}

    wins = _safe_int(player.get("wins"))
    games = player.get("games")
    if _num(games) is None:
        games = wins + _safe_int(player.get("losses"))

    race = _int_or_none(item.get("race"))
    if race is None:
        race = _int_or_none(player.get("race"))

    return RawLeagueRow(
        battle_tag=_str_or_none(first_id.get("battleTag")) or _str_or_none(first_info.get("battleTag")),
        rating=_num(player.get("mmr")) or 0.0,
        wins=wins,
        games=_safe_int(games),
        race=race,
        country_code=_str_or_none(first_info.get("countryCode")) or _str_or_none(first_info.get("location")),
    )


def decode_league_rows(payload: Any) -> List[RawLeagueRow]:
    """Flatten a league page or a country ladder (list of leagues with ``ranks``)."""
    if not isinstance(payload, list):
        return []
    rows: List[RawLeagueRow] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        ranks = item.get("ranks")
        if isinstance(ranks, list):
            rows.extend(_league_row(r) for r in ranks if isinstance(r, dict))
        else:
            rows.append(_league_row(item))
    return rows


# --- profile -------------------------------------------------------------


@dataclass(frozen=True)
class PlayerProfile:
    battle_tag: Optional[str] = None
    country_code: Optional[str] = None


def decode_profile(payload: Any) -> PlayerProfile:
    if not isinstance(payload, dict):
        return PlayerProfile()
    return PlayerProfile(
        battle_tag=_str_or_none(payload.get("battleTag")),
        country_code=_str_or_none(payload.get("countryCode")) or _str_or_none(payload.get("location")),
    )


# --- matches -------------------------------------------------------------


@dataclass(frozen=True)
class RawHero:
    hero_id: Optional[int]
    name: str
    level: int


@dataclass(frozen=True)
class RawMatchPlayer:
    battle_tag: str
    race: Optional[int]
    old_mmr: Optional[float]
    new_mmr: Optional[float]
    mmr_gain: Optional[float]
    won: bool
    heroes: Tuple[RawHero, ...] = ()
    country_code: Optional[str] = None

    @property
    def rating(self) -> float:
        """Pre-match rating, falling back to the post-match one, then 0."""
        for value in (self.old_mmr, self.new_mmr):
            if value is not None:
                return max(0.0, value)
        return 0.0


@dataclass(frozen=True)
class RawPlayerScore:
    battle_tag: str
    score: PlayerScoreBlock


@dataclass(frozen=True)
class RawServerInfo:
    server: ServerInfo
    pings: Tuple[Tuple[str, Optional[float]], ...] = ()

    def ping_for(self, battle_tag: str) -> Optional[float]:
        target = battle_tag.lower()
        for tag, ping in self.pings:
            if tag.lower() == target:
                return ping
        return None


@dataclass(frozen=True)
class MatchPairing:
    me: RawMatchPlayer
    opp: RawMatchPlayer


@dataclass(frozen=True)
class RawMatch:
    id: str
    map_name: Optional[str]
    map_code: Optional[str]
    map_id: Optional[int]
    duration_seconds: float
    start_time: datetime
    end_time: Optional[datetime]
    season: Optional[int]
    game_mode: Optional[int]
    gateway: Optional[int]
    teams: Tuple[Tuple[RawMatchPlayer, ...], ...] = ()
    server_info: Optional[RawServerInfo] = None
    player_scores: Optional[Tuple[RawPlayerScore, ...]] = None
    flo_match_id: Optional[int] = None
    original_ongoing_match_id: Optional[str] = None

    @property
    def map(self) -> str:
        return self.map_name or self.map_code or "Unknown"

    @property
    def needs_detail(self) -> bool:
        return (
            self.player_scores is None
            or self.server_info is None
            or self.end_time is None
            or self.flo_match_id is None
            or self.original_ongoing_match_id is None
        )

    def fill_from(self, detail: Optional["RawMatch"]) -> "RawMatch":
        """Fill only the fields this record is missing; present values win."""
        if detail is None:
            return self
        return replace(
            self,
            player_scores=self.player_scores if self.player_scores is not None else detail.player_scores,
            server_info=self.server_info if self.server_info is not None else detail.server_info,
            end_time=self.end_time if self.end_time is not None else detail.end_time,
            flo_match_id=self.flo_match_id if self.flo_match_id is not None else detail.flo_match_id,
            original_ongoing_match_id=(
                self.original_ongoing_match_id
                if self.original_ongoing_match_id is not None
                else detail.original_ongoing_match_id
            ),
        )

    def players(self) -> Iterable[RawMatchPlayer]:
        for team in self.teams:
            yield from team

    def pair(self, battle_tag: str) -> Optional[MatchPairing]:
        """Return (me, opponent) when ``battle_tag`` faces exactly one opponent."""
        target = battle_tag.lower()
        for idx, team in enumerate(self.teams):
            me = next((p for p in team if p.battle_tag.lower() == target), None)
            if me is None:
                continue
            opponents = [p for j, other in enumerate(self.teams) if j != idx for p in other]
            if len(opponents) != 1:
                return None
            return MatchPairing(me=me, opp=opponents[0])
        return None

    def score_for(self, battle_tag: str) -> PlayerScoreBlock:
        target = battle_tag.lower()
        for row in self.player_scores or ():
            if row.battle_tag.lower() == target:
                return row.score
        return PlayerScoreBlock()


def _decode_hero(item: Dict[str, Any]) -> RawHero:
    return RawHero(
        hero_id=_int_or_none(item.get("id")),
        name=str(item.get("name") or item.get("icon") or ""),
        level=_safe_int(item.get("level")),
    )


def _decode_player(item: Dict[str, Any]) -> Optional[RawMatchPlayer]:
    tag = _str_or_none(item.get("battleTag"))
    if not tag:
        return None
    new_mmr = _num(item.get("newMmr"))
    if new_mmr is None:
        new_mmr = _num(item.get("mmr"))
    return RawMatchPlayer(
        battle_tag=tag,
        race=_int_or_none(item.get("race")),
        old_mmr=_num(item.get("oldMmr")),
        new_mmr=new_mmr,
        mmr_gain=_num(item.get("mmrGain")),
        won=bool(item.get("won")),
        heroes=tuple(_decode_hero(h) for h in _as_list(item.get("heroes")) if isinstance(h, dict)),
        country_code=_str_or_none(item.get("countryCode")),
    )


def _decode_teams(raw: Any) -> Tuple[Tuple[RawMatchPlayer, ...], ...]:
    teams = []
    for team in raw if isinstance(raw, list) else []:
        if not isinstance(team, dict):
            continue
        players = [_decode_player(p) for p in _as_list(team.get("players")) if isinstance(p, dict)]
        teams.append(tuple(p for p in players if p is not None))
    return tuple(teams)


def _decode_scores(raw: Any) -> Optional[Tuple[RawPlayerScore, ...]]:
    if not isinstance(raw, list):
        return None
    out = []
    for row in raw:
        if not isinstance(row, dict):
            continue
        tag = _str_or_none(row.get("battleTag"))
        if not tag:
            continue
        unit = _as_dict(row.get("unitScore"))
        hero = _as_dict(row.get("heroScore"))
        resource = _as_dict(row.get("resourceScore"))
        out.append(
            RawPlayerScore(
                battle_tag=tag,
                score=PlayerScoreBlock(
                    units_produced=_num(unit.get("unitsProduced")) or 0,
                    units_killed=_num(unit.get("unitsKilled")) or 0,
                    largest_army=_num(unit.get("largestArmy")) or 0,
                    heroes_killed=_num(hero.get("heroesKilled")) or 0,
                    items_obtained=_num(hero.get("itemsObtained")) or 0,
                    mercs_hired=_num(hero.get("mercsHired")) or 0,
                    exp_gained=_num(hero.get("expGained")) or 0,
                    gold_collected=_num(resource.get("goldCollected")) or 0,
                    lumber_collected=_num(resource.get("lumberCollected")) or 0,
                    gold_upkeep_lost=_num(resource.get("goldUpkeepLost")) or 0,
                ),
            )
        )
    return tuple(out)


def _decode_server_info(raw: Any) -> Optional[RawServerInfo]:
    if not isinstance(raw, dict):
        return None
    infos = raw.get("playerServerInfos")
    pings = []
    if isinstance(infos, list):
        for row in infos:
            if isinstance(row, dict) and row.get("battleTag") is not None:
                pings.append((str(row.get("battleTag")), _num(row.get("averagePing"))))
    return RawServerInfo(
        server=ServerInfo(
            provider=_str_or_none(raw.get("provider")),
            node_id=_int_or_none(raw.get("nodeId")),
            name=_str_or_none(raw.get("name")),
        ),
        pings=tuple(pings),
    )


def decode_match(payload: Any) -> Optional[RawMatch]:
    if not isinstance(payload, dict):
        return None
    match_id = payload.get("id")
    if match_id is None or match_id == "":
        return None
    ongoing = payload.get("original-ongoing-match-id")
    if ongoing is None:
        ongoing = payload.get("originalOngoingMatchId")
    map_name = payload.get("mapName")
    return RawMatch(
        id=str(match_id),
        map_name=map_name.strip() if isinstance(map_name, str) and map_name.strip() else None,
        map_code=_str_or_none(payload.get("map")),
        map_id=_int_or_none(payload.get("mapId")),
        duration_seconds=_num(payload.get("durationInSeconds")) or 0.0,
        start_time=parse_time(payload.get("startTime")) or EPOCH,
        end_time=parse_time(payload.get("endTime")),
        season=_int_or_none(payload.get("season")),
        game_mode=_int_or_none(payload.get("gameMode")),
        gateway=_int_or_none(payload.get("gateWay")),
        teams=_decode_teams(payload.get("teams")),
        server_info=_decode_server_info(payload.get("serverInfo")),
        player_scores=_decode_scores(payload.get("playerScores")),
        flo_match_id=_int_or_none(payload.get("floMatchId")),
        original_ongoing_match_id=_str_or_none(ongoing),
    )


def decode_match_list(payload: Any) -> List[RawMatch]:
    if isinstance(payload, dict):
        payload = payload.get("matches")
    if not isinstance(payload, list):
        return []
    return [m for m in (decode_match(item) for item in payload) if m is not None]


def decode_match_detail(payload: Any) -> Optional[RawMatch]:
    """The detail endpoint wraps the match and puts scores beside it."""
    if not isinstance(payload, dict):
        return None
    inner = payload.get("match")
    if isinstance(inner, dict):
        merged: Dict[str, Any] = dict(inner)
        for key in ("playerScores", "serverInfo"):
            if merged.get(key) is None and payload.get(key) is not None:
                merged[key] = payload[key]
        return decode_match(merged)
    return decode_match(payload)

