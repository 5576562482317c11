"""Symmetric head-to-head comparison of two players.

The shared games are the matches present in both players' normalized
corpora in which the two players faced each other. Which recorded side
belongs to player A is decided per match from the side's battletag, never
assumed from either corpus' "me" polarity.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .analytics import CorpusCache, mean, mean_nullable
from .gateway import W3CGateway
from .normalize import NormalizedMatch, NormalizedSide
from .resolver import TagResolver
from .types import Side, UNKNOWN_RACE

logger = logging.getLogger(__name__)


@dataclass
class WinLoss:
    games: int = 0
    wins: int = 0
    losses: int = 0
    winrate: float = 0.0


def make_wl(wins: int, games: int) -> WinLoss:
    return WinLoss(games=games, wins=wins, losses=games - wins, winrate=wins / games if games else 0.0)


@dataclass
class HeroRecord:
    games: int = 0
    wins: int = 0


@dataclass
class MmrStats:
    total_mmr_gain: float = 0.0


@dataclass
class EconomyStats:
    avg_gold: float = 0.0
    avg_lumber: float = 0.0
    avg_upkeep_loss: float = 0.0


@dataclass
class UnitStats:
    avg_units_produced: float = 0.0
    avg_units_killed: float = 0.0
    avg_largest_army: float = 0.0


@dataclass
class HeroStats:
    avg_heroes_killed: float = 0.0
    avg_items_obtained: float = 0.0
    avg_mercs_hired: float = 0.0
    avg_xp: float = 0.0


@dataclass
class NetworkStats:
    avg_ping: Optional[float] = None


@dataclass
class SideStats:
    overall: WinLoss = field(default_factory=WinLoss)
    avg_duration_sec: float = 0.0
    mmr: MmrStats = field(default_factory=MmrStats)
    economy: EconomyStats = field(default_factory=EconomyStats)
    units: UnitStats = field(default_factory=UnitStats)
    hero: HeroStats = field(default_factory=HeroStats)
    network: NetworkStats = field(default_factory=NetworkStats)
    hero_usage: Dict[str, HeroRecord] = field(default_factory=dict)


@dataclass
class ServerUsage:
    provider: Optional[str]
    node_id: Optional[int]
    name: Optional[str]
    games: int
    share: float


@dataclass
class RaceBreakdownRow:
    race: str
    a_games: int
    a_wins: int
    a_losses: int
    a_winrate: float
    b_games: int
    b_wins: int
    b_losses: int
    b_winrate: float


@dataclass
class MapVsRecord:
    map: str
    games: int
    wins_a: int
    wins_b: int
    winrate_a: float
    winrate_b: float


@dataclass
class VsPlayerResponse:
    player_a: str
    player_b: str
    stats_a: SideStats
    stats_b: SideStats
    race_breakdown: List[RaceBreakdownRow] = field(default_factory=list)
    servers: List[ServerUsage] = field(default_factory=list)
    most_used_server: Optional[ServerUsage] = None
    maps: List[MapVsRecord] = field(default_factory=list)
    games: List[NormalizedMatch] = field(default_factory=list)


class _SideAccumulator:
    """Running per-metric lists for one player across the shared games."""

    def __init__(self) -> None:
        self.wins = 0
        self.mmr_gain: List[float] = []
        self.gold: List[float] = []
        self.lumber: List[float] = []
        self.upkeep: List[float] = []
        self.units_produced: List[float] = []
        self.units_killed: List[float] = []
        self.largest_army: List[float] = []
        self.heroes_killed: List[float] = []
        self.items: List[float] = []
        self.mercs: List[float] = []
        self.xp: List[float] = []
        self.ping: List[Optional[float]] = []
        self.heroes: Dict[str, HeroRecord] = {}

    def add(self, side: NormalizedSide) -> None:
        if side.won:
            self.wins += 1
        s = side.score
        self.mmr_gain.append(side.mmr_gain)
        self.gold.append(s.gold_collected)
        self.lumber.append(s.lumber_collected)
        self.upkeep.append(s.gold_upkeep_lost)
        self.units_produced.append(s.units_produced)
        self.units_killed.append(s.units_killed)
        self.largest_army.append(s.largest_army)
        self.heroes_killed.append(s.heroes_killed)
        self.items.append(s.items_obtained)
        self.mercs.append(s.mercs_hired)
        self.xp.append(s.exp_gained)
        self.ping.append(side.avg_ping)
        for h in side.heroes:
            rec = self.heroes.setdefault(h.name, HeroRecord())
            rec.games += 1
            if side.won:
                rec.wins += 1

    def build(self, games: int, durations: List[float]) -> SideStats:
        return SideStats(
            overall=make_wl(self.wins, games),
            avg_duration_sec=mean(durations),
            mmr=MmrStats(total_mmr_gain=sum(self.mmr_gain)),
            economy=EconomyStats(
                avg_gold=mean(self.gold),
                avg_lumber=mean(self.lumber),
                avg_upkeep_loss=mean(self.upkeep),
            ),
            units=UnitStats(
                avg_units_produced=mean(self.units_produced),
                avg_units_killed=mean(self.units_killed),
                avg_largest_army=mean(self.largest_army),
            ),
            hero=HeroStats(
                avg_heroes_killed=mean(self.heroes_killed),
                avg_items_obtained=mean(self.items),
                avg_mercs_hired=mean(self.mercs),
                avg_xp=mean(self.xp),
            ),
            network=NetworkStats(avg_ping=mean_nullable(self.ping)),
            hero_usage=self.heroes,
        )


def shared_matches(
    corpus_a: List[NormalizedMatch],
    corpus_b: List[NormalizedMatch],
    tag_a: str,
    tag_b: str,
) -> List[NormalizedMatch]:
    """Games in both corpora where A and B are the two sides, oldest first."""
    b_ids = {m.id for m in corpus_b}
    out = []
    for m in corpus_a:
        if m.id not in b_ids:
            continue
        side_a = m.side_of(tag_a)
        if side_a is None or m.get_side(side_a.other).battle_tag.lower() != tag_b.lower():
            continue
        out.append(m)
    out.sort(key=lambda m: m.start_time)
    return out


def aggregate_vs(tag_a: str, tag_b: str, shared: List[NormalizedMatch]) -> VsPlayerResponse:
    acc_a = _SideAccumulator()
    acc_b = _SideAccumulator()
    durations: List[float] = []

    race_agg: Dict[str, List[int]] = {}  # race -> [a_wins, a_losses, b_wins, b_losses]
    map_agg: Dict[str, List[int]] = {}  # map -> [games, wins_a, wins_b]
    server_agg: Dict[str, List] = {}  # identity -> [ServerInfo, games]

    for g in shared:
        side = g.side_of(tag_a) or Side.SELF
        side_a = g.get_side(side)
        side_b = g.get_side(side.other)

        durations.append(g.duration_seconds)
        acc_a.add(side_a)
        acc_b.add(side_b)

        race_a = race_agg.setdefault(side_a.race or UNKNOWN_RACE, [0, 0, 0, 0])
        race_a[0 if side_a.won else 1] += 1
        race_b = race_agg.setdefault(side_b.race or UNKNOWN_RACE, [0, 0, 0, 0])
        race_b[2 if side_b.won else 3] += 1

        m = map_agg.setdefault(g.map, [0, 0, 0])
        m[0] += 1
        m[1 if side_a.won else 2] += 1

        s = server_agg.setdefault(g.server.identity(), [g.server, 0])
        s[1] += 1

    total = len(shared)

    race_breakdown = []
    for race, (a_wins, a_losses, b_wins, b_losses) in race_agg.items():
        a_games = a_wins + a_losses
        b_games = b_wins + b_losses
        race_breakdown.append(
            RaceBreakdownRow(
                race=race,
                a_games=a_games,
                a_wins=a_wins,
                a_losses=a_losses,
                a_winrate=a_wins / a_games if a_games else 0.0,
                b_games=b_games,
                b_wins=b_wins,
                b_losses=b_losses,
                b_winrate=b_wins / b_games if b_games else 0.0,
            )
        )
    race_breakdown.sort(key=lambda r: r.a_games + r.b_games, reverse=True)

    servers = [
        ServerUsage(provider=info.provider, node_id=info.node_id, name=info.name, games=games, share=games / total)
        for info, games in server_agg.values()
    ]
    servers.sort(key=lambda s: s.games, reverse=True)

    maps = [
        MapVsRecord(map=name, games=games, wins_a=wins_a, wins_b=wins_b, winrate_a=wins_a / games, winrate_b=wins_b / games)
        for name, (games, wins_a, wins_b) in map_agg.items()
    ]

    return VsPlayerResponse(
        player_a=tag_a,
        player_b=tag_b,
        stats_a=acc_a.build(total, durations),
        stats_b=acc_b.build(total, durations),
        race_breakdown=race_breakdown,
        servers=servers,
        most_used_server=servers[0] if servers else None,
        maps=maps,
        games=shared,
    )


async def compare_vs_player(
    gateway: W3CGateway,
    resolver: TagResolver,
    input_a: str,
    input_b: str,
) -> Optional[VsPlayerResponse]:
    if not input_a or not input_b:
        return None

    tag_a, tag_b = await asyncio.gather(resolver.resolve(input_a), resolver.resolve(input_b))
    if not tag_a or not tag_b:
        logger.info(f"[vs] unresolved input a={input_a!r}->{tag_a!r} b={input_b!r}->{tag_b!r}")
        return None

    corpora = CorpusCache(gateway)
    corpus_a, corpus_b = await asyncio.gather(corpora.get(tag_a), corpora.get(tag_b))

    shared = shared_matches(corpus_a, corpus_b, tag_a, tag_b)
    logger.debug(f"[vs] {tag_a} vs {tag_b}: a={len(corpus_a)} b={len(corpus_b)} shared={len(shared)}")

    return aggregate_vs(tag_a, tag_b, shared)
