"""Ladder scoring.

Pure and deterministic: rating, strength of schedule and activity are
blended into one score, rows are sorted by (score desc, rating desc) with a
stable sort and ranked by position.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

RATING_CEILING = 3000

W_RATING = 0.55
W_SOS = 0.40
W_ACTIVITY = 0.05

# confidence ramp constants, lower = faster full strength
RATING_CONFIDENCE_K = 1
SOS_CONFIDENCE_K = 1

SCORE_SCALE = 10

ACTIVITY_STEP = 5
ACTIVITY_MAX_GAMES = 200
ACTIVITY_MAX_SCORE = 200


@dataclass(frozen=True)
class LadderInputRow:
    battle_tag: str
    rating: float
    wins: int
    games: int
    sos: Optional[float] = None


@dataclass
class LadderRow:
    rank: int
    battle_tag: str
    rating: float
    sos: Optional[float]
    score: float
    wins: int
    losses: int
    games: int


def activity_score(games: int) -> float:
    bucket = min((games // ACTIVITY_STEP) * ACTIVITY_STEP, ACTIVITY_MAX_GAMES)
    return bucket / ACTIVITY_MAX_GAMES * ACTIVITY_MAX_SCORE


def confidence(games: int, k: float) -> float:
    return games / (games + k) if games + k else 0.0


def _round1(value: float) -> float:
    # half rounds up, not to even
    return math.floor(value * 10 + 0.5) / 10


def compute_score(rating: float, sos: Optional[float], games: int) -> float:
    sos_value = rating if sos is None else sos

    rating_eff = rating * confidence(games, RATING_CONFIDENCE_K)
    sos_eff = sos_value * confidence(games, SOS_CONFIDENCE_K)

    raw = rating_eff * W_RATING + sos_eff * W_SOS + activity_score(games) * W_ACTIVITY
    return _round1(raw / SCORE_SCALE)


def build_ladder(rows: Sequence[LadderInputRow]) -> List[LadderRow]:
    ladder = [
        LadderRow(
            rank=0,
            battle_tag=r.battle_tag,
            rating=r.rating,
            sos=r.sos,
            score=compute_score(r.rating, r.sos, r.games),
            wins=r.wins,
            losses=r.games - r.wins,
            games=r.games,
        )
        for r in rows
        if r.rating <= RATING_CEILING
    ]

    ladder.sort(key=lambda p: (-p.score, -p.rating))

    for i, row in enumerate(ladder):
        row.rank = i + 1

    return ladder
