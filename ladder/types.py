"""Value objects shared across the ladder package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional

UNKNOWN_RACE = "Unknown"


class Race(IntEnum):
    """Race ids as reported by the upstream ladder and match APIs."""

    RANDOM = 0
    HUMAN = 1
    ORC = 2
    NIGHT_ELF = 4
    UNDEAD = 8

    @property
    def display_name(self) -> str:
        return RACE_NAMES[self.value]

    @property
    def key(self) -> str:
        return next(k for k, v in RACE_KEYS.items() if v is self)

    @classmethod
    def from_key(cls, key: str) -> "Race":
        race = RACE_KEYS.get((key or "").strip().lower())
        if race is None:
            raise ValueError(f"Unknown race '{key}'. Expected one of: {', '.join(RACE_KEYS)}")
        return race


RACE_NAMES: Dict[int, str] = {
    1: "Human",
    2: "Orc",
    4: "Night Elf",
    8: "Undead",
    0: "Random",
}

RACE_KEYS: Dict[str, Race] = {
    "human": Race.HUMAN,
    "orc": Race.ORC,
    "elf": Race.NIGHT_ELF,
    "undead": Race.UNDEAD,
    "random": Race.RANDOM,
}


def race_name(race_id: Optional[int]) -> str:
    if race_id is None:
        return UNKNOWN_RACE
    return RACE_NAMES.get(race_id, UNKNOWN_RACE)


class Side(str, Enum):
    """Which participant of a match a normalized side describes."""

    SELF = "self"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Side":
        return Side.OPPONENT if self is Side.SELF else Side.SELF


@dataclass(frozen=True)
class PlayerScoreBlock:
    """End-of-game score telemetry for one player."""

    units_produced: float = 0
    units_killed: float = 0
    largest_army: float = 0

    heroes_killed: float = 0
    items_obtained: float = 0
    mercs_hired: float = 0
    exp_gained: float = 0

    gold_collected: float = 0
    lumber_collected: float = 0
    gold_upkeep_lost: float = 0


@dataclass(frozen=True)
class ServerInfo:
    provider: Optional[str] = None
    node_id: Optional[int] = None
    name: Optional[str] = None

    def identity(self) -> str:
        parts = [self.provider, self.node_id, self.name]
        return "|".join("?" if p is None else str(p) for p in parts)
