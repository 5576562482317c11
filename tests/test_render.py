from ladder.render import render_vs, to_jsonable
from ladder.maps import MapStat
from ladder.vs_player import aggregate_vs


def test_to_jsonable_renames_fields_not_data_keys() -> None:
    stat = MapStat(map="Echo Isles", games=2, hero_avg_level=4.5)
    out = to_jsonable(stat, key=lambda k: k.upper())
    assert out["MAP"] == "Echo Isles"
    assert out["HERO_AVG_LEVEL"] == 4.5
    assert out["HERO_COUNTS"] == {"1": 0, "2": 0, "3": 0}


def test_render_vs_without_games() -> None:
    text = render_vs(aggregate_vs("Alpha#1", "Bravo#2", []))
    assert "Alpha#1 vs Bravo#2" in text
    assert "Games: 0" in text
