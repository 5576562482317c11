"""Per-player match analytics: one normalized corpus plus its rollups."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .gateway import W3CGateway
from .normalize import NormalizedMatch, normalize_matches
from .resolver import TagResolver

logger = logging.getLogger(__name__)


def mean(values: Iterable[float]) -> float:
    xs = list(values)
    return sum(xs) / len(xs) if xs else 0.0


def mean_nullable(values: Iterable[Optional[float]]) -> Optional[float]:
    xs = [v for v in values if v is not None]
    return sum(xs) / len(xs) if xs else None


@dataclass
class AnalyticsSummary:
    games: int = 0
    wins: int = 0
    losses: int = 0
    winrate: float = 0.0
    avg_duration_sec: float = 0.0
    avg_gold: float = 0.0
    avg_lumber: float = 0.0
    avg_upkeep_loss: float = 0.0
    avg_army: float = 0.0
    avg_xp: float = 0.0


@dataclass
class MapRecord:
    map: str
    games: int
    wins: int
    winrate: float


@dataclass
class PlayerAnalytics:
    battle_tag: str
    matches: List[NormalizedMatch]
    summary: AnalyticsSummary
    hero_usage: Dict[str, int] = field(default_factory=dict)
    maps: List[MapRecord] = field(default_factory=list)


def build_player_analytics(battle_tag: str, matches: List[NormalizedMatch]) -> PlayerAnalytics:
    total = len(matches)
    wins = sum(1 for g in matches if g.me.won)

    summary = AnalyticsSummary(
        games=total,
        wins=wins,
        losses=total - wins,
        winrate=wins / total if total else 0.0,
        avg_duration_sec=mean(g.duration_seconds for g in matches),
        avg_gold=mean(g.me.score.gold_collected for g in matches),
        avg_lumber=mean(g.me.score.lumber_collected for g in matches),
        avg_upkeep_loss=mean(g.me.score.gold_upkeep_lost for g in matches),
        avg_army=mean(g.me.score.largest_army for g in matches),
        avg_xp=mean(g.me.score.exp_gained for g in matches),
    )

    hero_usage: Dict[str, int] = {}
    for g in matches:
        for h in g.me.heroes:
            hero_usage[h.name] = hero_usage.get(h.name, 0) + 1

    map_agg: Dict[str, List[int]] = {}
    for g in matches:
        agg = map_agg.setdefault(g.map, [0, 0])
        agg[0] += 1
        if g.me.won:
            agg[1] += 1

    maps = [
        MapRecord(map=name, games=games, wins=map_wins, winrate=map_wins / games)
        for name, (games, map_wins) in map_agg.items()
    ]

    return PlayerAnalytics(
        battle_tag=battle_tag,
        matches=matches,
        summary=summary,
        hero_usage=hero_usage,
        maps=maps,
    )


async def load_corpus(gateway: W3CGateway, battle_tag: str) -> List[NormalizedMatch]:
    """Fetch every analytics-season match of a resolved player and normalize it."""
    raw = await gateway.fetch_matches(battle_tag, gateway.settings.analytics_seasons)
    return await normalize_matches(battle_tag, raw, gateway.fetch_match_detail)


class CorpusCache:
    """Normalized corpora for one call, keyed by lowercased battletag."""

    def __init__(self, gateway: W3CGateway):
        self._gateway = gateway
        self._tasks: Dict[str, "asyncio.Task[List[NormalizedMatch]]"] = {}

    async def get(self, battle_tag: str) -> List[NormalizedMatch]:
        key = battle_tag.lower()
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(load_corpus(self._gateway, battle_tag))
            self._tasks[key] = task
        return await task


async def get_match_analytics(
    gateway: W3CGateway,
    resolver: TagResolver,
    battle_tag: str,
) -> Optional[PlayerAnalytics]:
    canonical = await resolver.resolve(battle_tag)
    if not canonical:
        return None

    matches = await load_corpus(gateway, canonical)
    if not matches:
        logger.info(f"[analytics] no tracked matches for {canonical}")
        return None

    return build_player_analytics(canonical, matches)
