from ladder.maps import build_map_stats, resolve_map_name
from ladder.records import decode_match

from conftest import build_payload


def _heroes(*levels):
    return [{"id": i, "name": "archmage", "level": lvl} for i, lvl in enumerate(levels)]


def test_map_name_cleanup(make_match) -> None:
    assert resolve_map_name(make_match("m1", "A#1", "B#2", map_name="Echo Isles")) == "Echo Isles"
    no_name = build_payload("m2", "A#1", "B#2", map_name=None)
    no_name["map"] = "(2)Concealedhillv1_2"
    assert resolve_map_name(decode_match(no_name)) == "Concealedhill"
    no_map = dict(no_name, map=None)
    assert resolve_map_name(decode_match(no_map)) == "Unknown"


def test_map_aggregates(make_match) -> None:
    matches = [
        make_match("m1", "A#1", "B#2", map_name="Echo Isles", duration=700, me_mmr=1800, opp_mmr=1900, me_heroes=_heroes(6)),
        make_match("m2", "A#1", "B#2", map_name="Echo Isles", duration=1300, me_mmr=1800, opp_mmr=1700, me_heroes=_heroes(5, 3)),
        make_match("m3", "A#1", "B#2", map_name="Echo Isles", me_won=False, duration=2000, me_heroes=_heroes(4, 2, 1)),
        make_match("m4", "A#1", "B#2", map_name="Terenas Stand", me_won=False, duration=500),
        make_match("short", "A#1", "B#2", map_name="Terenas Stand", duration=100),
        make_match("team", "A#1", "B#2", map_name="Terenas Stand", game_mode=2),
    ]
    stats = build_map_stats("A#1", matches, [24])

    echo = stats.top_maps[0]
    assert echo.map == "Echo Isles"
    assert (echo.games, echo.wins, echo.losses) == (3, 2, 1)
    assert echo.winrate == 66.7
    assert echo.vs_higher == 1
    assert echo.vs_lower == 2
    assert echo.hero_counts == {1: 1, 2: 1, 3: 1}
    assert echo.net_mmr == 8

    assert stats.worst_maps[0].map == "Terenas Stand"
    assert stats.most_played.map == "Echo Isles"
    assert stats.worst_net.map == "Terenas Stand"
    assert stats.one_hero_map == "Echo Isles"

    assert stats.longest_win.secs == 1300
    assert stats.longest_win.opp_tag == "B#2"
    assert stats.avg_win_minutes == round(2000 / 2 / 60, 1)

    buckets = {d.label: d for d in stats.winrate_by_duration}
    assert (buckets["11–15 min"].wins, buckets["11–15 min"].losses) == (1, 0)
    assert (buckets["5–10 min"].wins, buckets["5–10 min"].losses) == (0, 1)
    assert (buckets["30+ min"].losses) == 1


def test_no_usable_games() -> None:
    stats = build_map_stats("A#1", [], [24])
    assert stats.top_maps == []
    assert stats.longest_win is None
    assert stats.most_played is None
    assert stats.avg_win_minutes is None
