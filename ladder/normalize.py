from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from .config import GAME_MODE_1V1, MIN_DURATION_SECONDS
from .records import RawHero, RawMatch, RawMatchPlayer
from .types import PlayerScoreBlock, ServerInfo, Side, race_name

logger = logging.getLogger(__name__)

DetailFetch = Callable[[str], Awaitable[Optional[RawMatch]]]

HERO_NAMES: Dict[str, str] = {
    # human
    "archmage": "Archmage",
    "mountainking": "Mountain King",
    "paladin": "Paladin",
    "bloodmage": "Blood Mage",
    # orc
    "blademaster": "Blademaster",
    "farseer": "Far Seer",
    "taurenchieftain": "Tauren Chieftain",
    "shadowhunter": "Shadow Hunter",
    # undead
    "deathknight": "Death Knight",
    "lich": "Lich",
    "dreadlord": "Dreadlord",
    "cryptlord": "Crypt Lord",
    # night elf
    "demonhunter": "Demon Hunter",
    "keeperofthegrove": "Keeper of the Grove",
    "priestessofthemoon": "Priestess of the Moon",
    "warden": "Warden",
    # tavern
    "alchemist": "Alchemist",
    "avatarofflame": "Firelord",
    "bansheeranger": "Dark Ranger",
    "beastmaster": "Beastmaster",
    "pandarenbrewmaster": "Pandaren Brewmaster",
    "pitlord": "Pit Lord",
    "seawitch": "Naga Sea Witch",
    "tinker": "Tinker",
}


@dataclass(frozen=True)
class HeroPick:
    hero_id: Optional[int]
    name: str
    level: int


@dataclass(frozen=True)
class NormalizedSide:
    side: Side
    battle_tag: str
    race_id: Optional[int]
    race: str
    mmr_gain: float
    won: bool
    avg_ping: Optional[float]
    heroes: List[HeroPick] = field(default_factory=list)
    score: PlayerScoreBlock = field(default_factory=PlayerScoreBlock)


@dataclass(frozen=True)
class NormalizedMatch:
    id: str
    map: str
    map_id: Optional[int]
    duration_seconds: float
    start_time: datetime
    end_time: Optional[datetime]
    season: Optional[int]
    game_mode: Optional[int]
    gateway: Optional[int]
    server: ServerInfo
    me: NormalizedSide
    opp: NormalizedSide
    flo_match_id: Optional[int] = None
    original_ongoing_match_id: Optional[str] = None

    def side_of(self, battle_tag: str) -> Optional[Side]:
        target = battle_tag.lower()
        if self.me.battle_tag.lower() == target:
            return Side.SELF
        if self.opp.battle_tag.lower() == target:
            return Side.OPPONENT
        return None

    def get_side(self, side: Side) -> NormalizedSide:
        return self.me if side is Side.SELF else self.opp


def hero_display_name(raw_name: str) -> str:
    return HERO_NAMES.get(raw_name, raw_name)


def _heroes(heroes: Sequence[RawHero]) -> List[HeroPick]:
    return [HeroPick(hero_id=h.hero_id, name=hero_display_name(h.name), level=h.level) for h in heroes]


def _side(side: Side, player: RawMatchPlayer, match: RawMatch) -> NormalizedSide:
    return NormalizedSide(
        side=side,
        battle_tag=player.battle_tag,
        race_id=player.race,
        race=race_name(player.race),
        mmr_gain=player.mmr_gain or 0.0,
        won=player.won,
        avg_ping=match.server_info.ping_for(player.battle_tag) if match.server_info else None,
        heroes=_heroes(player.heroes),
        score=match.score_for(player.battle_tag),
    )


def is_tracked(match: RawMatch, battle_tag: str, game_mode: int = GAME_MODE_1V1) -> bool:
    if match.game_mode != game_mode:
        return False
    if match.duration_seconds < MIN_DURATION_SECONDS:
        return False
    return match.pair(battle_tag) is not None


def normalize_match(battle_tag: str, match: RawMatch) -> Optional[NormalizedMatch]:
    """Normalize one (already backfilled) match from ``battle_tag``'s point of view."""
    if not is_tracked(match, battle_tag):
        return None
    pair = match.pair(battle_tag)
    assert pair is not None

    return NormalizedMatch(
        id=match.id,
        map=match.map,
        map_id=match.map_id,
        duration_seconds=match.duration_seconds,
        start_time=match.start_time,
        end_time=match.end_time,
        season=match.season,
        game_mode=match.game_mode,
        gateway=match.gateway,
        server=match.server_info.server if match.server_info else ServerInfo(),
        me=_side(Side.SELF, pair.me, match),
        opp=_side(Side.OPPONENT, pair.opp, match),
        flo_match_id=match.flo_match_id,
        original_ongoing_match_id=match.original_ongoing_match_id,
    )


async def backfill_details(matches: Sequence[RawMatch], fetch_detail: DetailFetch) -> List[RawMatch]:
    """Fetch detail only for matches missing telemetry, all in parallel."""

    async def fill(m: RawMatch) -> RawMatch:
        if not m.needs_detail:
            return m
        return m.fill_from(await fetch_detail(m.id))

    filled = await asyncio.gather(*(fill(m) for m in matches))
    return list(filled)


async def normalize_matches(
    battle_tag: str,
    matches: Sequence[RawMatch],
    fetch_detail: DetailFetch,
) -> List[NormalizedMatch]:
    tracked = [m for m in matches if is_tracked(m, battle_tag)]
    needing = sum(1 for m in tracked if m.needs_detail)
    logger.debug(
        f"[normalize] {battle_tag}: raw={len(matches)} tracked={len(tracked)} detail_fetches={needing}"
    )

    filled = await backfill_details(tracked, fetch_detail)

    out: List[NormalizedMatch] = []
    for m in filled:
        normalized = normalize_match(battle_tag, m)
        if normalized is not None:
            out.append(normalized)
    return out
