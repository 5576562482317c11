"""Strength of schedule and ladder eligibility from match histories."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterator, List, Optional, Sequence

from .config import GAME_MODE_1V1, MIN_DURATION_SECONDS
from .engine import LadderRow
from .records import MatchPairing, RawMatch
from .types import Race

logger = logging.getLogger(__name__)

SOS_CONCURRENCY = 25
ELIGIBILITY_MIN_GAMES = 35

HistoryFetch = Callable[[str], Awaitable[List[RawMatch]]]


class MatchHistoryCache:
    """Per-request battletag -> match history, fetched at most once per player.

    Keys are lowercased; a second request for a player whose history is
    still being fetched waits on the same task.
    """

    def __init__(self, fetch: HistoryFetch):
        self._fetch = fetch
        self._tasks: Dict[str, "asyncio.Task[List[RawMatch]]"] = {}

    async def get(self, battle_tag: str) -> List[RawMatch]:
        key = battle_tag.lower()
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(battle_tag))
            self._tasks[key] = task
        return await task

    def __contains__(self, battle_tag: str) -> bool:
        return battle_tag.lower() in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)


def match_race_filter(race: Optional[Race]) -> Optional[int]:
    """Race id a player's own race must equal, or None for no restriction.

    Random games are recorded with the race actually played, so the random
    ladder does not restrict by race.
    """
    if race is None or race is Race.RANDOM:
        return None
    return int(race)


def iter_qualifying(
    matches: Sequence[RawMatch],
    battle_tag: str,
    race_id: Optional[int],
    game_mode: int = GAME_MODE_1V1,
) -> Iterator[MatchPairing]:
    for m in matches:
        if m.game_mode != game_mode:
            continue
        if m.duration_seconds < MIN_DURATION_SECONDS:
            continue
        pair = m.pair(battle_tag)
        if pair is None:
            continue
        if race_id is not None and pair.me.race != race_id:
            continue
        yield pair


def strength_of_schedule(
    matches: Sequence[RawMatch],
    battle_tag: str,
    race_id: Optional[int],
    game_mode: int = GAME_MODE_1V1,
) -> Optional[float]:
    total = 0.0
    n = 0
    for pair in iter_qualifying(matches, battle_tag, race_id, game_mode):
        total += pair.opp.rating
        n += 1
    return total / n if n else None


def has_min_games(
    matches: Sequence[RawMatch],
    battle_tag: str,
    race_id: Optional[int],
    min_games: int = ELIGIBILITY_MIN_GAMES,
    game_mode: int = GAME_MODE_1V1,
) -> bool:
    games = 0
    for _ in iter_qualifying(matches, battle_tag, race_id, game_mode):
        games += 1
        if games >= min_games:
            return True
    return False


async def compute_sos(
    rows: Sequence[LadderRow],
    race: Optional[Race],
    history: MatchHistoryCache,
    game_mode: int = GAME_MODE_1V1,
    concurrency: int = SOS_CONCURRENCY,
) -> None:
    """Set ``row.sos`` on every row in place, ``concurrency`` histories at a time."""
    race_id = match_race_filter(race)

    async def one(row: LadderRow) -> None:
        matches = await history.get(row.battle_tag)
        row.sos = strength_of_schedule(matches, row.battle_tag, race_id, game_mode)

    for i in range(0, len(rows), concurrency):
        chunk = rows[i : i + concurrency]
        await asyncio.gather(*(one(r) for r in chunk))

    logger.debug(f"[sos] computed {len(rows)} rows, histories cached={len(history)}")


async def check_eligibility(
    rows: Sequence[LadderRow],
    race: Optional[Race],
    history: MatchHistoryCache,
    min_games: int = ELIGIBILITY_MIN_GAMES,
    game_mode: int = GAME_MODE_1V1,
    concurrency: int = SOS_CONCURRENCY,
) -> Dict[str, bool]:
    """Lowercased battletag -> whether the player has ``min_games`` qualifying games."""
    race_id = match_race_filter(race)
    out: Dict[str, bool] = {}

    async def one(row: LadderRow) -> None:
        matches = await history.get(row.battle_tag)
        out[row.battle_tag.lower()] = has_min_games(matches, row.battle_tag, race_id, min_games, game_mode)

    for i in range(0, len(rows), concurrency):
        chunk = rows[i : i + concurrency]
        await asyncio.gather(*(one(r) for r in chunk))

    return out


def filter_eligible(ladder: Sequence[LadderRow], eligibility: Dict[str, bool]) -> List[LadderRow]:
    """Unchecked players stay on the ladder."""
    return [r for r in ladder if eligibility.get(r.battle_tag.lower(), True)]
