"""Ladder pages: resolve, fetch leagues, rank, paginate, check eligibility, backfill SoS.

Eligibility and strength of schedule are only computed for the rows the
response actually shows (the page, the top slice and the requesting
player), so per-request cost does not grow with the ladder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .config import MIN_LADDER_GAMES
from .engine import LadderInputRow, LadderRow, build_ladder
from .gateway import W3CGateway
from .records import RawLeagueRow
from .resolver import TagResolver
from .sos import MatchHistoryCache, check_eligibility, compute_sos, filter_eligible
from .types import Race

logger = logging.getLogger(__name__)

LADDER_LEAGUES: Sequence[int] = tuple(range(0, 31))
TOP_SIZE = 50
DEFAULT_PAGE_SIZE = 50


@dataclass
class LadderPage:
    battle_tag: str
    race: Optional[str]
    me: Optional[LadderRow]
    top: List[LadderRow]
    pool_size: int
    full: List[LadderRow]
    updated_at_utc: str


def build_inputs(rows: Iterable[RawLeagueRow], race: Optional[Race] = None) -> List[LadderInputRow]:
    """Ladder inputs from raw league rows.

    With a race, only that race's rows are kept. Without one, each player is
    represented by their highest-rated row.
    """
    best: Dict[str, RawLeagueRow] = {}
    kept: List[RawLeagueRow] = []
    for r in rows:
        if not r.battle_tag or r.games < MIN_LADDER_GAMES or r.rating <= 0:
            continue
        if race is not None:
            if r.race == int(race):
                kept.append(r)
            continue
        key = r.battle_tag.lower()
        current = best.get(key)
        if current is None or r.rating > current.rating:
            best[key] = r

    if race is None:
        kept = list(best.values())

    return [
        LadderInputRow(battle_tag=r.battle_tag or "", rating=r.rating, wins=r.wins, games=r.games, sos=None)
        for r in kept
    ]


def find_row(ladder: Sequence[LadderRow], battle_tag: Optional[str]) -> Optional[LadderRow]:
    if not battle_tag:
        return None
    target = battle_tag.lower()
    return next((r for r in ladder if r.battle_tag.lower() == target), None)


def _unique(rows: Iterable[LadderRow]) -> List[LadderRow]:
    seen = set()
    out: List[LadderRow] = []
    for r in rows:
        if id(r) in seen:
            continue
        seen.add(id(r))
        out.append(r)
    return out


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


async def _ladder_page(
    gateway: W3CGateway,
    resolver: TagResolver,
    battle_tag: Optional[str],
    race: Optional[Race],
    page: int,
    page_size: int,
) -> LadderPage:
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be positive")

    canonical = await resolver.resolve(battle_tag) if battle_tag else None

    pages = await gateway.fetch_league_pages(LADDER_LEAGUES)
    raw_rows = [r for league in LADDER_LEAGUES for r in pages.get(league, [])]

    ladder = build_ladder(build_inputs(raw_rows, race))
    logger.debug(f"[ladder] race={race.key if race is not None else 'all'} raw={len(raw_rows)} ranked={len(ladder)}")

    season = gateway.settings.season
    game_mode = gateway.settings.game_mode
    history = MatchHistoryCache(lambda tag: gateway.fetch_matches(tag, [season]))

    start = (page - 1) * page_size
    end = start + page_size

    eligibility = await check_eligibility(ladder[start:end], race, history, game_mode=game_mode)
    eligible = filter_eligible(ladder, eligibility)

    visible = eligible[start:end]
    top = eligible[:TOP_SIZE]
    me = find_row(eligible, canonical)

    await compute_sos(_unique([*visible, *top, *([me] if me else [])]), race, history, game_mode=game_mode)

    return LadderPage(
        battle_tag=canonical or "",
        race=race.key if race is not None else None,
        me=me,
        top=top,
        pool_size=len(eligible),
        full=visible,
        updated_at_utc=_now_iso(),
    )


async def get_ladder_page(
    gateway: W3CGateway,
    resolver: TagResolver,
    battle_tag: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> LadderPage:
    return await _ladder_page(gateway, resolver, battle_tag, None, page, page_size)


async def get_race_ladder_page(
    gateway: W3CGateway,
    resolver: TagResolver,
    battle_tag: Optional[str],
    race: Union[Race, str],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> LadderPage:
    if not isinstance(race, Race):
        race = Race.from_key(race)
    return await _ladder_page(gateway, resolver, battle_tag, race, page, page_size)
