import asyncio

from ladder.normalize import hero_display_name, normalize_match, normalize_matches
from ladder.records import decode_match
from ladder.types import UNKNOWN_RACE, PlayerScoreBlock, Side

from conftest import build_payload


def _no_detail(calls):
    async def fetch(match_id):
        calls.append(match_id)
        return None

    return fetch


def test_short_and_non_1v1_games_are_dropped(make_match) -> None:
    calls = []
    matches = [
        make_match("short", "A#1", "B#2", duration=90, complete=False),
        make_match("team", "A#1", "B#2", game_mode=6, complete=False),
        make_match("ok", "A#1", "B#2"),
    ]
    out = asyncio.run(normalize_matches("A#1", matches, _no_detail(calls)))
    assert [m.id for m in out] == ["ok"]
    assert calls == []


def test_backfill_fills_only_missing_fields() -> None:
    partial = build_payload("m1", "A#1", "B#2", complete=False)
    partial["endTime"] = "2025-03-01T12:20:00Z"
    detail_payload = build_payload("m1", "A#1", "B#2")
    detail_payload["endTime"] = "2025-03-01T13:00:00Z"

    calls = []

    async def fetch(match_id):
        calls.append(match_id)
        return decode_match(detail_payload)

    out = asyncio.run(normalize_matches("A#1", [decode_match(partial)], fetch))
    assert calls == ["m1"]
    g = out[0]
    assert g.end_time.minute == 20
    assert g.flo_match_id == 4242
    assert g.me.score.gold_collected == 5000
    assert g.me.avg_ping == 40
    assert g.server.name == "EU Frankfurt"


def test_failed_detail_leaves_zero_scores(make_match) -> None:
    out = asyncio.run(
        normalize_matches("A#1", [make_match("m1", "A#1", "B#2", complete=False)], _no_detail([]))
    )
    g = out[0]
    assert g.me.score == PlayerScoreBlock()
    assert g.me.avg_ping is None
    assert g.server.provider is None


def test_sides_and_polarity(make_match) -> None:
    g = normalize_match("b#2", make_match("m1", "A#1", "B#2", me_won=True))
    assert g.me.side is Side.SELF
    assert g.me.battle_tag == "B#2"
    assert not g.me.won
    assert g.opp.won
    assert g.side_of("A#1") is Side.OPPONENT
    assert g.get_side(Side.OPPONENT).battle_tag == "A#1"


def test_unknown_race_and_hero_names(make_match) -> None:
    g = normalize_match(
        "A#1",
        make_match(
            "m1",
            "A#1",
            "B#2",
            me_race=99,
            me_heroes=[{"id": 1, "name": "archmage", "level": 6}, {"id": 2, "name": "mysteryhero", "level": 1}],
        ),
    )
    assert g.me.race == UNKNOWN_RACE
    assert [h.name for h in g.me.heroes] == ["Archmage", "mysteryhero"]
    assert hero_display_name("keeperofthegrove") == "Keeper of the Grove"
