from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Callable, Optional, Tuple

from dotenv import load_dotenv

from .analytics import get_match_analytics
from .gateway import W3CGateway
from .ladder_service import DEFAULT_PAGE_SIZE, get_ladder_page, get_race_ladder_page
from .maps import get_map_stats
from .rank import get_player_rank
from .render import render_analytics, render_ladder, render_maps, render_rank, render_vs, to_jsonable
from .resolver import TagResolver
from .types import RACE_KEYS
from .vs_player import compare_vs_player


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="W3Champions ladder and head-to-head analytics")
    parser.add_argument("--output", default=None, help="Path to output JSON/text")
    parser.add_argument(
        "--output-format", choices=["json", "text"], default="text", help="Output format"
    )
    parser.add_argument("--debug", action="store_true", help="Print debug logs")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ladder", help="Ranked ladder page")
    p.add_argument("--battletag", default=None, help="Player to locate on the ladder")
    p.add_argument("--race", choices=list(RACE_KEYS), default=None, help="Race ladder")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)

    p = sub.add_parser("analytics", help="Per-player match analytics")
    p.add_argument("battletag")

    p = sub.add_parser("vs", help="Head-to-head between two players")
    p.add_argument("player_a")
    p.add_argument("player_b")

    p = sub.add_parser("rank", help="Global and country rank per race")
    p.add_argument("battletag")

    p = sub.add_parser("maps", help="Per-map statistics")
    p.add_argument("battletag")

    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> Tuple[Optional[Any], Callable[[Any], str]]:
    gateway = W3CGateway()
    resolver = TagResolver(gateway.search_players)

    if args.command == "ladder":
        if args.race:
            page = await get_race_ladder_page(
                gateway, resolver, args.battletag, args.race, page=args.page, page_size=args.page_size
            )
        else:
            page = await get_ladder_page(gateway, resolver, args.battletag, page=args.page, page_size=args.page_size)
        return page, render_ladder
    if args.command == "analytics":
        return await get_match_analytics(gateway, resolver, args.battletag), render_analytics
    if args.command == "vs":
        return await compare_vs_player(gateway, resolver, args.player_a, args.player_b), render_vs
    if args.command == "rank":
        return await get_player_rank(gateway, resolver, args.battletag), render_rank
    return await get_map_stats(gateway, resolver, args.battletag), render_maps


def main(argv=None) -> None:
    load_dotenv()
    args = _parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        result, render = asyncio.run(_run(args))
    except ValueError as e:
        raise SystemExit(str(e))

    if result is None:
        raise SystemExit("No data found for the given player(s).")

    if args.output_format == "json":
        output_text = json.dumps(to_jsonable(result), indent=2)
    else:
        output_text = render(result)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output_text)
    else:
        print(output_text)


if __name__ == "__main__":
    main()
