from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional


def to_jsonable(obj: Any, key: Callable[[str], str] = str) -> Any:
    """Plain JSON-ready structure from result dataclasses.

    ``key`` renames dataclass field names only; dict keys are data
    (hero names, map names) and are kept as they are.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {key(f.name): to_jsonable(getattr(obj, f.name), key) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v, key) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v, key) for v in obj]
    return obj


def _pct(x: Optional[float]) -> str:
    return "-" if x is None else f"{x * 100:.1f}%"


def _num(x: Optional[float], fmt: str = ".1f") -> str:
    return "-" if x is None else format(x, fmt)


def render_ladder(page: Any) -> str:
    lines: List[str] = []
    title = f"LADDER ({page.race})" if page.race else "LADDER"
    lines.append(title)
    lines.append(f"Pool: {page.pool_size} | Updated: {page.updated_at_utc}")
    if page.me:
        me = page.me
        lines.append(f"You: #{me.rank} {me.battle_tag} | rating {me.rating:.0f} | score {me.score:.1f}")
    lines.append("")
    lines.append(f"{'#':>4}  {'player':<24} {'rating':>7} {'sos':>7} {'score':>6} {'W-L':>9}")
    for r in page.full:
        lines.append(
            f"{r.rank:>4}  {r.battle_tag:<24} {r.rating:>7.0f} {_num(r.sos, '.0f'):>7} "
            f"{r.score:>6.1f} {f'{r.wins}-{r.losses}':>9}"
        )
    return "\n".join(lines)


def render_analytics(report: Any) -> str:
    s = report.summary
    lines = [
        "PLAYER ANALYTICS",
        f"Player: {report.battle_tag}",
        f"Games: {s.games} | Wins: {s.wins} | Losses: {s.losses} | Winrate: {_pct(s.winrate)}",
        f"Avg duration: {s.avg_duration_sec / 60:.1f} min | Avg XP: {s.avg_xp:.0f}",
        f"Economy: gold {s.avg_gold:.0f} | lumber {s.avg_lumber:.0f} | upkeep lost {s.avg_upkeep_loss:.0f}",
        "",
        "Heroes",
    ]
    for name, count in sorted(report.hero_usage.items(), key=lambda kv: kv[1], reverse=True)[:8]:
        lines.append(f"- {name}: {count}")
    lines.append("")
    lines.append("Maps")
    for m in sorted(report.maps, key=lambda m: m.games, reverse=True):
        lines.append(f"- {m.map}: {m.wins}/{m.games} ({_pct(m.winrate)})")
    return "\n".join(lines)


def render_vs(result: Any) -> str:
    a, b = result.stats_a, result.stats_b
    lines = [
        "HEAD TO HEAD",
        f"{result.player_a} vs {result.player_b}",
        f"Games: {a.overall.games} | {result.player_a} {a.overall.wins} - {b.overall.wins} {result.player_b}",
    ]
    if not a.overall.games:
        return "\n".join(lines)

    lines.append(f"Avg duration: {a.avg_duration_sec / 60:.1f} min")
    lines.append(f"Rating delta: {a.mmr.total_mmr_gain:+.0f} / {b.mmr.total_mmr_gain:+.0f}")
    lines.append(f"Avg ping: {_num(a.network.avg_ping, '.0f')} / {_num(b.network.avg_ping, '.0f')}")
    lines.append("")
    lines.append("Races")
    for r in result.race_breakdown:
        lines.append(f"- {r.race}: A {r.a_wins}-{r.a_losses} | B {r.b_wins}-{r.b_losses}")
    lines.append("")
    lines.append("Maps")
    for m in result.maps:
        lines.append(f"- {m.map}: {m.wins_a}-{m.wins_b}")
    if result.most_used_server:
        srv = result.most_used_server
        lines.append("")
        lines.append(f"Most used server: {srv.name or srv.provider or '?'} ({_pct(srv.share)})")
    return "\n".join(lines)


def render_rank(result: Any) -> str:
    lines = [
        "PLAYER RANK",
        f"Player: {result.battle_tag} | Season {result.season} | Country: {result.country}",
    ]
    if not result.ranks:
        lines.append("Not ranked on any race ladder.")
    for r in result.ranks:
        country = "-" if r.country_rank is None else f"{r.country_rank}/{r.country_total}"
        lines.append(
            f"- {r.race}: global {r.global_rank}/{r.global_total} | country {country} | "
            f"rating {r.mmr:.0f} | games {r.games}"
        )
    return "\n".join(lines)


def render_maps(result: Any) -> str:
    lines = [
        "MAP STATS",
        f"Player: {result.battle_tag} | Seasons: {', '.join(str(s) for s in result.seasons)}",
        f"Avg win: {_num(result.avg_win_minutes)} min | Avg loss: {_num(result.avg_loss_minutes)} min",
        "",
        "Best maps",
    ]
    for m in result.top_maps:
        lines.append(f"- {m.map}: {m.winrate:.1f}% over {m.games} games")
    lines.append("")
    lines.append("Worst maps")
    for m in result.worst_maps:
        lines.append(f"- {m.map}: {m.winrate:.1f}% over {m.games} games")
    lines.append("")
    lines.append("By duration")
    for d in result.winrate_by_duration:
        lines.append(f"- {d.label}: {d.wins}-{d.losses} ({d.winrate:.1f}%)")
    if result.longest_win:
        w = result.longest_win
        lines.append("")
        lines.append(f"Longest win: {w.minutes} min on {w.map} vs {w.opp_tag}")
    return "\n".join(lines)
