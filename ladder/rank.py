"""Global and country rank of a player, per race, on the same scoring model."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from .config import MIN_LADDER_GAMES
from .engine import LadderInputRow, build_ladder
from .gateway import W3CGateway
from .records import PlayerProfile, RawLeagueRow, RawMatch
from .resolver import TagResolver
from .types import Race

logger = logging.getLogger(__name__)

RANK_LEAGUES: Sequence[int] = tuple(range(0, 77))
RANK_RACES: Sequence[Race] = (Race.RANDOM, Race.HUMAN, Race.ORC, Race.NIGHT_ELF, Race.UNDEAD)
NO_COUNTRY = "—"


@dataclass
class RankRow:
    race: str
    race_id: int
    global_rank: int
    global_total: int
    country_rank: Optional[int]
    country_total: Optional[int]
    mmr: float
    games: int


@dataclass
class PlayerRankResponse:
    battle_tag: str
    season: int
    country: str
    min_games: int
    as_of: str
    ranks: List[RankRow] = field(default_factory=list)


def iso2(code: Optional[str]) -> str:
    c = (code or "").upper()
    return c if len(c) == 2 else ""


def infer_country(matches: Iterable[RawMatch], battle_tag: str) -> str:
    target = battle_tag.lower()
    for m in matches:
        for p in m.players():
            if p.battle_tag.lower() == target:
                cc = iso2(p.country_code)
                if cc:
                    return cc
    return ""


def race_inputs(rows: Iterable[RawLeagueRow], race: Race) -> List[LadderInputRow]:
    return [
        LadderInputRow(battle_tag=r.battle_tag, rating=r.rating, wins=r.wins, games=r.games)
        for r in rows
        if r.battle_tag and r.race == int(race) and r.games >= MIN_LADDER_GAMES
    ]


def _position(ladder, battle_tag: str) -> Optional[int]:
    target = battle_tag.lower()
    for i, row in enumerate(ladder):
        if row.battle_tag.lower() == target:
            return i
    return None


def build_ranks(
    battle_tag: str,
    global_rows: Sequence[RawLeagueRow],
    country_rows: Sequence[RawLeagueRow],
) -> List[RankRow]:
    ranks: List[RankRow] = []
    for race in RANK_RACES:
        global_ladder = build_ladder(race_inputs(global_rows, race))
        g_idx = _position(global_ladder, battle_tag)
        if g_idx is None:
            continue

        country_rank: Optional[int] = None
        country_total: Optional[int] = None
        if country_rows:
            country_ladder = build_ladder(race_inputs(country_rows, race))
            country_total = len(country_ladder)
            c_idx = _position(country_ladder, battle_tag)
            country_rank = None if c_idx is None else c_idx + 1

        me = global_ladder[g_idx]
        ranks.append(
            RankRow(
                race=race.display_name,
                race_id=int(race),
                global_rank=g_idx + 1,
                global_total=len(global_ladder),
                country_rank=country_rank,
                country_total=country_total,
                mmr=me.rating,
                games=me.games,
            )
        )
    return ranks


async def get_player_rank(
    gateway: W3CGateway,
    resolver: TagResolver,
    battle_tag: str,
) -> Optional[PlayerRankResponse]:
    if not battle_tag:
        return None

    canonical = await resolver.resolve(battle_tag)
    if not canonical:
        return None

    season = gateway.settings.season
    profile, matches = await asyncio.gather(
        gateway.fetch_player_profile(canonical),
        gateway.fetch_matches(canonical, [season]),
    )
    profile = profile or PlayerProfile()

    country = infer_country(matches, canonical) or iso2(profile.country_code)

    async def no_country() -> List[RawLeagueRow]:
        return []

    pages, country_rows = await asyncio.gather(
        gateway.fetch_league_pages(RANK_LEAGUES),
        gateway.fetch_country_ladder(country) if country else no_country(),
    )
    global_rows = [r for league in RANK_LEAGUES for r in pages.get(league, [])]

    ranks = build_ranks(canonical, global_rows, country_rows)
    logger.debug(f"[rank] {canonical} country={country or '-'} races_ranked={len(ranks)}")

    return PlayerRankResponse(
        battle_tag=canonical,
        season=season,
        country=country or NO_COUNTRY,
        min_games=MIN_LADDER_GAMES,
        as_of=datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
        ranks=ranks,
    )
