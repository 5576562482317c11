from datetime import datetime, timezone

from ladder.records import (
    EPOCH,
    decode_league_rows,
    decode_match,
    decode_match_detail,
    decode_match_list,
    decode_search_results,
    parse_time,
)

from conftest import build_payload


def _ladder_row(tag, mmr, wins, losses, race, country=None):
    return {
        "player": {"playerIds": [{"battleTag": tag}], "mmr": mmr, "wins": wins, "losses": losses, "games": wins + losses, "race": race},
        "playersInfo": [{"battleTag": tag, "countryCode": country}],
        "race": race,
    }


def test_league_page_and_country_ladder_decode_to_same_rows() -> None:
    page = [_ladder_row("A#1", 1900, 10, 5, 1, "DE"), _ladder_row("B#2", 1800, 3, 4, 2)]
    country = [{"ranks": page[:1]}, {"ranks": page[1:]}]

    rows = decode_league_rows(page)
    assert rows == decode_league_rows(country)
    assert rows[0].battle_tag == "A#1"
    assert rows[0].games == 15
    assert rows[0].country_code == "DE"
    assert rows[1].race == 2


def test_league_row_games_fall_back_to_wins_plus_losses() -> None:
    item = _ladder_row("A#1", 1900, 10, 5, 1)
    del item["player"]["games"]
    assert decode_league_rows([item])[0].games == 15


def test_non_list_payloads() -> None:
    assert decode_search_results({"error": "x"}) is None
    assert decode_league_rows(None) == []
    assert decode_match_list("nope") == []


def test_search_results_skip_rows_without_tag() -> None:
    out = decode_search_results([{"name": "x"}, {"battleTag": "Foo#1", "seasons": [{"id": 1}, {"id": 2}]}])
    assert [(r.battle_tag, r.season_count) for r in out] == [("Foo#1", 2)]


def test_parse_time_variants() -> None:
    assert parse_time("2025-03-01T12:00:00.1234567Z") == datetime(2025, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
    assert parse_time("2025-03-01T12:00:00").tzinfo == timezone.utc
    assert parse_time("garbage") is None
    assert parse_time(None) is None


def test_decode_match_defaults() -> None:
    payload = build_payload("m1", "A#1", "B#2", complete=False)
    payload["startTime"] = "not a date"
    payload["teams"][0]["players"][0]["oldMmr"] = float("nan")
    payload["teams"][0]["players"][0]["newMmr"] = 1808
    match = decode_match(payload)

    assert match.start_time == EPOCH
    assert match.needs_detail
    assert match.player_scores is None
    me = match.pair("a#1").me
    assert me.old_mmr is None
    assert me.rating == 1808


def test_decode_match_requires_id() -> None:
    payload = build_payload("m1", "A#1", "B#2")
    payload["id"] = ""
    assert decode_match(payload) is None


def test_match_list_accepts_wrapped_and_bare() -> None:
    items = [build_payload("m1", "A#1", "B#2"), build_payload("m2", "A#1", "C#3")]
    assert [m.id for m in decode_match_list({"matches": items, "count": 2})] == ["m1", "m2"]
    assert [m.id for m in decode_match_list(items)] == ["m1", "m2"]


def test_detail_merges_top_level_scores() -> None:
    full = build_payload("m1", "A#1", "B#2")
    inner = {k: v for k, v in full.items() if k != "playerScores"}
    detail = decode_match_detail({"match": inner, "playerScores": full["playerScores"]})
    assert detail is not None
    assert detail.score_for("A#1").gold_collected == 5000
    assert detail.score_for("b#2").gold_collected == 4000


def test_pair_requires_exactly_one_opponent() -> None:
    payload = build_payload("m1", "A#1", "B#2")
    payload["teams"][1]["players"].append(dict(payload["teams"][1]["players"][0], battleTag="C#3"))
    assert decode_match(payload).pair("A#1") is None
    assert decode_match(build_payload("m2", "A#1", "B#2")).pair("Z#9") is None


def test_malformed_nested_values_decode_to_defaults() -> None:
    item = _ladder_row("A#1", 1900, 10, 5, 1, "DE")
    item["player"]["playerIds"] = {"battleTag": "A#1"}
    item["playersInfo"] = "DE"
    row = decode_league_rows([item])[0]
    assert row.battle_tag is None
    assert row.country_code is None
    assert row.rating == 1900

    payload = build_payload("m1", "A#1", "B#2")
    payload["playerScores"][0]["unitScore"] = "n/a"
    payload["playerScores"][0]["heroScore"] = 7
    payload["playerScores"][1]["resourceScore"] = ["gold"]
    payload["teams"][0]["players"][0]["heroes"] = 3
    match = decode_match(payload)
    assert match.score_for("A#1").units_produced == 0
    assert match.score_for("A#1").gold_collected == 5000
    assert match.score_for("B#2").gold_collected == 0
    assert match.pair("A#1").me.heroes == ()


def test_opponent_rating_prefers_old_then_new_mmr() -> None:
    payload = build_payload("m1", "A#1", "B#2")
    opp = payload["teams"][1]["players"][0]
    opp.update({"oldMmr": None, "newMmr": None, "mmr": 1650, "currentMmr": 1999})
    assert decode_match(payload).pair("A#1").opp.rating == 1650

    opp.update({"oldMmr": 1600, "newMmr": 1610})
    assert decode_match(payload).pair("A#1").opp.rating == 1600
