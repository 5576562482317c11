from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .config import GAME_MODE_1V1, MIN_DURATION_SECONDS
from .gateway import W3CGateway
from .records import RawMatch
from .resolver import TagResolver

logger = logging.getLogger(__name__)

MIN_MAP_GAMES = 1

# (label, min seconds, max seconds), inclusive
DURATION_BUCKETS = [
    ("5–10 min", 300, 600),
    ("11–15 min", 601, 900),
    ("16–20 min", 901, 1200),
    ("20–25 min", 1201, 1500),
    ("26–30 min", 1501, 1800),
    ("30+ min", 1801, math.inf),
]

_MAP_PREFIX_RE = re.compile(r"^.*?(?=[A-Z])")
_MAP_VERSION_RE = re.compile(r"v\d+_.*")


@dataclass
class MapStat:
    map: str
    games: int = 0
    wins: int = 0
    losses: int = 0
    winrate: float = 0.0  # percent, 1 decimal
    avg_minutes: float = 0.0
    net_mmr: float = 0.0
    vs_higher: int = 0
    vs_lower: int = 0
    hero_avg_level: Optional[float] = None
    hero_counts: Dict[int, int] = field(default_factory=lambda: {1: 0, 2: 0, 3: 0})


@dataclass
class DurationStat:
    label: str
    wins: int = 0
    losses: int = 0
    winrate: float = 0.0


@dataclass
class LongestWin:
    map: str
    minutes: float
    opp_tag: str
    opp_mmr: float
    mmr_change: float
    secs: float


@dataclass
class MapStatsResponse:
    battle_tag: str
    seasons: List[int]
    avg_win_minutes: Optional[float]
    avg_loss_minutes: Optional[float]
    winrate_by_duration: List[DurationStat]
    top_maps: List[MapStat]
    worst_maps: List[MapStat]
    longest_win: Optional[LongestWin]
    highest_avg_hero_level: Optional[MapStat]
    lowest_avg_hero_level: Optional[MapStat]
    one_hero_map: Optional[str]
    two_hero_map: Optional[str]
    three_hero_map: Optional[str]
    most_played: Optional[MapStat]
    best_net: Optional[MapStat]
    worst_net: Optional[MapStat]
    most_vs_higher: Optional[MapStat]
    most_vs_lower: Optional[MapStat]


def resolve_map_name(match: RawMatch) -> str:
    if match.map_name:
        return match.map_name
    if match.map_code:
        name = _MAP_PREFIX_RE.sub("", match.map_code, count=1)
        return _MAP_VERSION_RE.sub("", name).strip()
    return "Unknown"


class _MapAccumulator:
    def __init__(self, name: str):
        self.stat = MapStat(map=name)
        self.total_secs = 0.0
        self.hero_avg_sum = 0.0
        self.hero_avg_games = 0

    def finish(self) -> MapStat:
        s = self.stat
        s.winrate = round(s.wins / s.games * 100, 1)
        s.avg_minutes = round(self.total_secs / s.games / 60, 1)
        if self.hero_avg_games:
            s.hero_avg_level = round(self.hero_avg_sum / self.hero_avg_games, 2)
        return s


def build_map_stats(battle_tag: str, matches: Sequence[RawMatch], seasons: List[int]) -> MapStatsResponse:
    durations = [DurationStat(label=label) for label, _, _ in DURATION_BUCKETS]
    win_time = loss_time = 0.0
    win_games = loss_games = 0
    longest_win: Optional[LongestWin] = None
    per_map: Dict[str, _MapAccumulator] = {}

    for m in matches:
        if m.game_mode != GAME_MODE_1V1:
            continue
        pair = m.pair(battle_tag)
        if pair is None:
            continue
        me, opp = pair.me, pair.opp
        dur = m.duration_seconds
        if dur < MIN_DURATION_SECONDS or me.mmr_gain is None:
            continue

        name = resolve_map_name(m)
        acc = per_map.setdefault(name, _MapAccumulator(name))
        stat = acc.stat
        stat.games += 1
        acc.total_secs += dur
        stat.net_mmr += me.mmr_gain
        if me.rating < opp.rating:
            stat.vs_higher += 1
        elif me.rating > opp.rating:
            stat.vs_lower += 1

        for bucket, (_, lo, hi) in zip(durations, DURATION_BUCKETS):
            if lo <= dur <= hi:
                if me.won:
                    bucket.wins += 1
                else:
                    bucket.losses += 1
                break

        if me.won:
            stat.wins += 1
            win_time += dur
            win_games += 1
            if longest_win is None or dur > longest_win.secs:
                longest_win = LongestWin(
                    map=name,
                    minutes=round(dur / 60, 1),
                    opp_tag=opp.battle_tag,
                    opp_mmr=opp.rating,
                    mmr_change=me.mmr_gain,
                    secs=dur,
                )
        else:
            stat.losses += 1
            loss_time += dur
            loss_games += 1

        heroes = me.heroes
        if 1 <= len(heroes) <= 3:
            stat.hero_counts[len(heroes)] += 1
        if heroes:
            acc.hero_avg_sum += sum(h.level for h in heroes) / len(heroes)
            acc.hero_avg_games += 1

    valid = [acc.finish() for acc in per_map.values() if acc.stat.games >= MIN_MAP_GAMES]
    by_winrate = sorted(valid, key=lambda s: s.winrate, reverse=True)

    for bucket in durations:
        games = bucket.wins + bucket.losses
        bucket.winrate = round(bucket.wins / games * 100, 1) if games else 0.0

    leveled = [s for s in valid if s.hero_avg_level is not None]

    def leader(count: int) -> Optional[str]:
        return max(valid, key=lambda s: s.hero_counts[count]).map if valid else None

    return MapStatsResponse(
        battle_tag=battle_tag,
        seasons=seasons,
        avg_win_minutes=round(win_time / win_games / 60, 1) if win_games else None,
        avg_loss_minutes=round(loss_time / loss_games / 60, 1) if loss_games else None,
        winrate_by_duration=durations,
        top_maps=by_winrate[:5],
        worst_maps=list(reversed(by_winrate))[:5],
        longest_win=longest_win,
        highest_avg_hero_level=max(leveled, key=lambda s: s.hero_avg_level or 0) if leveled else None,
        lowest_avg_hero_level=min(leveled, key=lambda s: s.hero_avg_level or 0) if leveled else None,
        one_hero_map=leader(1),
        two_hero_map=leader(2),
        three_hero_map=leader(3),
        most_played=max(valid, key=lambda s: s.games) if valid else None,
        best_net=max(valid, key=lambda s: s.net_mmr) if valid else None,
        worst_net=min(valid, key=lambda s: s.net_mmr) if valid else None,
        most_vs_higher=max(valid, key=lambda s: s.vs_higher) if valid else None,
        most_vs_lower=max(valid, key=lambda s: s.vs_lower) if valid else None,
    )


async def get_map_stats(
    gateway: W3CGateway,
    resolver: TagResolver,
    battle_tag: str,
) -> Optional[MapStatsResponse]:
    if not battle_tag:
        return None

    canonical = await resolver.resolve(battle_tag) or battle_tag
    seasons = [gateway.settings.season]

    matches = await gateway.fetch_matches(canonical, seasons)
    if not matches:
        logger.info(f"[maps] no matches for {canonical}")
        return None

    return build_map_stats(canonical, matches, seasons)
