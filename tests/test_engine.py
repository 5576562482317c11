import copy

from ladder.engine import (
    RATING_CEILING,
    LadderInputRow,
    activity_score,
    build_ladder,
    compute_score,
)


def _rows():
    return [
        LadderInputRow(battle_tag="Alpha#1", rating=2100, wins=30, games=50),
        LadderInputRow(battle_tag="Bravo#2", rating=1900, wins=40, games=60, sos=2050),
        LadderInputRow(battle_tag="Cheater#3", rating=RATING_CEILING + 1, wins=90, games=100),
        LadderInputRow(battle_tag="Delta#4", rating=1900, wins=5, games=10, sos=1700),
        LadderInputRow(battle_tag="Echo#5", rating=1500, wins=0, games=0),
    ]


def test_higher_sos_ranks_higher_on_equal_rating() -> None:
    rows = [
        LadderInputRow(battle_tag="X", rating=2000, wins=10, games=20, sos=1900),
        LadderInputRow(battle_tag="Y", rating=2000, wins=10, games=20, sos=2100),
    ]
    ladder = build_ladder(rows)
    assert [r.battle_tag for r in ladder] == ["Y", "X"]
    assert ladder[0].score > ladder[1].score


def test_ceiling_filter_and_losses() -> None:
    rows = _rows()
    ladder = build_ladder(rows)
    assert len(ladder) <= len(rows)
    assert "Cheater#3" not in {r.battle_tag for r in ladder}
    for row in ladder:
        assert row.losses == row.games - row.wins


def test_build_ladder_is_pure() -> None:
    rows = _rows()
    snapshot = copy.deepcopy(rows)
    first = build_ladder(rows)
    second = build_ladder(rows)
    assert first == second
    assert rows == snapshot
    assert build_ladder(snapshot) == first


def test_ranks_are_dense_and_scores_non_increasing() -> None:
    ladder = build_ladder(_rows())
    assert [r.rank for r in ladder] == list(range(1, len(ladder) + 1))
    for prev, cur in zip(ladder, ladder[1:]):
        assert prev.score >= cur.score
        if prev.score == cur.score:
            assert prev.rating >= cur.rating


def test_ties_keep_input_order() -> None:
    rows = [
        LadderInputRow(battle_tag="First#1", rating=1800, wins=10, games=20),
        LadderInputRow(battle_tag="Second#2", rating=1800, wins=12, games=20),
    ]
    assert [r.battle_tag for r in build_ladder(rows)] == ["First#1", "Second#2"]
    assert [r.battle_tag for r in build_ladder(rows[::-1])] == ["Second#2", "First#1"]


def test_missing_sos_defaults_to_rating() -> None:
    assert compute_score(2000, None, 20) == compute_score(2000, 2000, 20)


def test_activity_is_bucketed_and_capped() -> None:
    assert activity_score(0) == 0
    assert activity_score(4) == 0
    assert activity_score(5) == activity_score(9)
    assert activity_score(200) == activity_score(1000) == 200


def test_zero_games_scores_only_activity() -> None:
    assert compute_score(2500, 2500, 0) == 0.0
