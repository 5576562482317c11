from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .config import MATCHES_PAGE_SIZE, SEARCH_PAGE_SIZE, W3CSettings, settings_from_env

logger = logging.getLogger(__name__)


class W3CRequestError(RuntimeError):
    """Raised when an upstream call fails or returns something unusable."""


@dataclass
class W3ChampionsClient:
    """Blocking JSON client for the W3Champions website backend."""

    settings: Optional[W3CSettings] = None
    retries: int = 1
    backoff_s: float = 0.6

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = settings_from_env()
        self.session = requests.Session()
        self.session.headers.update({"accept": "application/json"})

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        assert self.settings is not None
        url = f"{self.settings.api_base}/{path.lstrip('/')}"

        last_err: Optional[Exception] = None
        for attempt in range(max(1, self.retries)):
            try:
                resp = self.session.get(url, params=params, timeout=self.settings.timeout_s)
                if resp.status_code in (429, 500, 502, 503, 504) and attempt < self.retries - 1:
                    time.sleep(self.backoff_s * (attempt + 1))
                    continue
                resp.raise_for_status()
                return resp.json()
            except (requests.RequestException, json.JSONDecodeError, ValueError) as exc:
                last_err = exc
                if attempt < self.retries - 1:
                    time.sleep(self.backoff_s * (attempt + 1))

        raise W3CRequestError(f"GET {url} failed: {last_err}")

    # --- endpoints -------------------------------------------------------

    def global_search(self, name: str) -> Any:
        return self.get_json(
            "players/global-search",
            {"search": name, "pageSize": SEARCH_PAGE_SIZE},
        )

    def ladder_page(self, league: int, gateway: int, game_mode: int, season: int) -> Any:
        return self.get_json(
            f"ladder/{league}",
            {"gateWay": gateway, "gameMode": game_mode, "season": season},
        )

    def country_ladder(self, country_code: str, gateway: int, game_mode: int, season: int) -> Any:
        return self.get_json(
            f"ladder/country/{quote(country_code)}",
            {"gateWay": gateway, "gameMode": game_mode, "season": season},
        )

    def player_profile(self, battle_tag: str) -> Any:
        return self.get_json(f"players/{quote(battle_tag, safe='')}")

    def match_detail(self, match_id: str) -> Any:
        return self.get_json(f"matches/{quote(match_id, safe='')}")

    def match_search_page(self, battle_tag: str, gateway: int, season: int, offset: int) -> Any:
        return self.get_json(
            "matches/search",
            {
                "playerId": battle_tag,
                "gateway": gateway,
                "offset": offset,
                "pageSize": MATCHES_PAGE_SIZE,
                "season": season,
            },
        )

    def all_matches(self, battle_tag: str, gateway: int, season: int) -> List[Dict[str, Any]]:
        """Walk the offset-paginated match search until ``count`` is reached."""
        out: List[Dict[str, Any]] = []
        offset = 0
        while True:
            body = self.match_search_page(battle_tag, gateway, season, offset)
            if not isinstance(body, dict):
                break
            page = body.get("matches") or []
            if not isinstance(page, list) or not page:
                break
            out.extend(m for m in page if isinstance(m, dict))
            offset += len(page)
            total = body.get("count")
            if not isinstance(total, int) or offset >= total:
                break
        logger.debug(f"[matches] {battle_tag} season={season} fetched={len(out)}")
        return out
