from fastapi.testclient import TestClient

from ladder.analytics import build_player_analytics
from ladder.engine import LadderRow
from ladder.ladder_service import LadderPage
from ladder.normalize import normalize_match
from ladder.types import Race
from ladder.vs_player import aggregate_vs
from src.api.rest.routes import get_stats_port
from src.application.ports.player_stats import PlayerStatsPort
from src.main import app


def _row(rank, tag):
    return LadderRow(rank=rank, battle_tag=tag, rating=2000 - rank, sos=None, score=100.0, wins=10, losses=5, games=15)


class FakeStats(PlayerStatsPort):
    def __init__(self, games=()):
        self._games = list(games)

    async def ladder_page(self, battle_tag, race, page, page_size):
        race_key = Race.from_key(race).key if race else None
        rows = [_row(1, "Alpha#1"), _row(2, "Bravo#2")]
        return LadderPage(
            battle_tag=battle_tag or "",
            race=race_key,
            me=rows[0] if battle_tag else None,
            top=rows,
            pool_size=2,
            full=rows[:page_size],
            updated_at_utc="2025-03-01T00:00:00Z",
        )

    async def player_analytics(self, battle_tag):
        if not self._games:
            return None
        return build_player_analytics("Alpha#1", [normalize_match("Alpha#1", g) for g in self._games])

    async def compare_players(self, player_a, player_b):
        if player_b == "Boom#1":
            raise RuntimeError("upstream exploded")
        return aggregate_vs("Alpha#1", "Bravo#2", [])

    async def player_rank(self, battle_tag):
        return None

    async def map_stats(self, battle_tag):
        return None


def _client(stats):
    app.dependency_overrides[get_stats_port] = lambda: stats
    return TestClient(app)


def test_ladder_is_camel_cased() -> None:
    resp = _client(FakeStats()).get("/api/ladder", params={"battletag": "Alpha#1", "pageSize": 1})
    assert resp.status_code == 200
    body = resp.json()
    assert body["battletag"] == "Alpha#1"
    assert body["poolSize"] == 2
    assert body["updatedAtUtc"] == "2025-03-01T00:00:00Z"
    assert [r["battleTag"] for r in body["full"]] == ["Alpha#1"]
    assert body["me"]["rank"] == 1


def test_unknown_race_is_bad_request() -> None:
    resp = _client(FakeStats()).get("/api/ladder/gnome")
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"]["code"] == "INVALID_REQUEST"


def test_race_ladder() -> None:
    resp = _client(FakeStats()).get("/api/ladder/elf")
    assert resp.status_code == 200
    assert resp.json()["race"] == "elf"


def test_missing_player_is_not_found() -> None:
    resp = _client(FakeStats()).get("/api/players/rank", params={"battletag": "Nobody#1"})
    assert resp.status_code == 404
    error = resp.json()["detail"]["error"]
    assert error["code"] == "PLAYER_NOT_FOUND"
    assert error["details"] == {"battletag": "Nobody#1"}


def test_analytics_payload(make_match) -> None:
    stats = FakeStats([make_match("m1", "Alpha#1", "Bravo#2")])
    resp = _client(stats).get("/api/players/analytics", params={"battletag": "Alpha#1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["games"] == 1
    assert body["matches"][0]["me"]["side"] == "self"
    assert body["matches"][0]["me"]["score"]["goldCollected"] == 5000
    assert body["heroUsage"] == {"Archmage": 1}


def test_vs_empty_and_internal_error() -> None:
    client = _client(FakeStats())
    resp = client.get("/api/vs", params={"playerA": "Alpha#1", "playerB": "Bravo#2"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["games"] == []
    assert body["statsA"]["overall"]["games"] == 0
    assert body["mostUsedServer"] is None

    resp = client.get("/api/vs", params={"playerA": "Alpha#1", "playerB": "Boom#1"})
    assert resp.status_code == 500
    error = resp.json()["detail"]["error"]
    assert error["code"] == "INTERNAL_ERROR"
    assert "exploded" not in error["message"]


def test_health() -> None:
    resp = _client(FakeStats()).get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
