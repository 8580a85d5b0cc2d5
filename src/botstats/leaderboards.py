"""Leaderboards and grouped summaries over the in-scope population."""

import re
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence

from botstats import insights
from botstats.classify import GENERAL_CATEGORIES
from botstats.models import (
    BotRecord,
    InsightRow,
    RankDirection,
    ScoreConfig,
    SpecificBest,
    WeaponGroup,
)
from botstats.rank_change import parse_rank_change
from botstats.scoring import effectiveness_score, is_control_non_flame

TOP_N = 10


def derive_rows(
    bots: Iterable[BotRecord],
    rank_map: Mapping[str, int],
    config: ScoreConfig,
    min_fight_threshold: int,
) -> list[InsightRow]:
    """Attach E-Rank, rank change and points metrics to each bot."""
    rows = []
    for b in bots:
        e_rank = rank_map.get(b.name)
        rows.append(InsightRow(
            record=b,
            e_rank=e_rank,
            delta=(b.official_rank - e_rank) if e_rank else 0,
            rank_change=parse_rank_change(b.rank_change_raw),
            score=effectiveness_score(b, config),
            point_mods=insights.implied_point_mods(b),
            bonus_estimate=insights.estimate_bonus_from_upsets_and_finals(
                b, min_fight_threshold,
            ),
            rookie_deficit=insights.rookie_deficit(b, min_fight_threshold),
            points_per_fight=insights.points_per_fight(b),
            ko_diff_per_fight=insights.ko_diff_per_fight(b),
        ))
    return rows


def _top(
    rows: Iterable[InsightRow],
    keep: Callable[[InsightRow], bool],
    key: Callable[[InsightRow], float],
    descending: bool = True,
    limit: int = TOP_N,
) -> list[InsightRow]:
    selected = [r for r in rows if keep(r)]
    return sorted(selected, key=key, reverse=descending)[:limit]


# --- E-Rank vs official rank ---

def overperformers(rows: Sequence[InsightRow], limit: int = TOP_N) -> list[InsightRow]:
    return _top(rows, lambda r: bool(r.e_rank) and r.delta > 0,
                lambda r: r.delta, limit=limit)


def underperformers(rows: Sequence[InsightRow], limit: int = TOP_N) -> list[InsightRow]:
    return _top(rows, lambda r: bool(r.e_rank) and r.delta < 0,
                lambda r: r.delta, descending=False, limit=limit)


# --- Rank change ---

def movers_up(rows: Sequence[InsightRow], limit: int = TOP_N) -> list[InsightRow]:
    return _top(
        rows,
        lambda r: r.rank_change.direction == RankDirection.UP
        and (r.rank_change.magnitude or 0) > 0,
        lambda r: r.rank_change.magnitude,
        limit=limit,
    )


def movers_down(rows: Sequence[InsightRow], limit: int = TOP_N) -> list[InsightRow]:
    return _top(
        rows,
        lambda r: r.rank_change.direction == RankDirection.DOWN
        and (r.rank_change.magnitude or 0) > 0,
        lambda r: r.rank_change.magnitude,
        limit=limit,
    )


def rookies(rows: Sequence[InsightRow], limit: int = TOP_N) -> list[InsightRow]:
    return _top(rows, lambda r: r.rank_change.direction == RankDirection.NEW,
                lambda r: r.score, limit=limit)


def stable(rows: Sequence[InsightRow], limit: int = TOP_N) -> list[InsightRow]:
    return _top(rows, lambda r: r.rank_change.direction == RankDirection.SAME,
                lambda r: r.record.official_rank, descending=False, limit=limit)


def rank_change_coverage(rows: Iterable[InsightRow]) -> dict[str, int]:
    counts = Counter(r.rank_change.direction for r in rows)
    return {
        d: counts.get(d, 0)
        for d in (RankDirection.UP, RankDirection.DOWN, RankDirection.NEW, RankDirection.SAME)
    }


# --- Points ---

def points_per_fight_leaders(
    rows: Sequence[InsightRow], min_fights: int, limit: int = TOP_N,
) -> list[InsightRow]:
    return _top(
        rows,
        lambda r: r.points_per_fight is not None and r.record.fights >= min_fights,
        lambda r: r.points_per_fight,
        limit=limit,
    )


def bonus_heavy(
    rows: Sequence[InsightRow], min_fights: int, limit: int = TOP_N,
) -> list[InsightRow]:
    return _top(
        rows,
        lambda r: r.bonus_estimate is not None and r.record.fights >= min_fights,
        lambda r: r.bonus_estimate,
        limit=limit,
    )


def penalty_watchlist(
    rows: Sequence[InsightRow], min_fight_threshold: int, limit: int = TOP_N,
) -> list[InsightRow]:
    """Strong bots still short of the rookie fight threshold."""
    return _top(rows, lambda r: r.record.fights < min_fight_threshold,
                lambda r: r.score, limit=limit)


# --- Style and durability ---

def ko_artists(rows: Sequence[InsightRow], min_fights: int, limit: int = TOP_N) -> list[InsightRow]:
    return _top(rows, lambda r: r.record.fights >= min_fights,
                lambda r: r.record.ko_win_rate_normalized, limit=limit)


def glass_cannons(rows: Sequence[InsightRow], min_fights: int, limit: int = TOP_N) -> list[InsightRow]:
    return _top(rows, lambda r: r.record.fights >= min_fights,
                lambda r: insights.glass_cannon_score(r.record), limit=limit)


def tanks(rows: Sequence[InsightRow], min_fights: int, limit: int = TOP_N) -> list[InsightRow]:
    return _top(rows, lambda r: r.record.fights >= min_fights,
                lambda r: insights.tank_score(r.record), limit=limit)


def control_specialists(
    rows: Sequence[InsightRow], min_fights: int, limit: int = TOP_N,
) -> list[InsightRow]:
    return _top(
        rows,
        lambda r: is_control_non_flame(r.record) and r.record.fights >= min_fights,
        lambda r: r.score,
        limit=limit,
    )


def control_undervalued(rows: Sequence[InsightRow], limit: int = TOP_N) -> list[InsightRow]:
    return _top(
        rows,
        lambda r: is_control_non_flame(r.record) and bool(r.e_rank) and r.delta > 0,
        lambda r: r.delta,
        limit=limit,
    )


# --- Overview ---

def title_case(s: str) -> str:
    words = re.split(r"[\s\-]+", (s or "").lower())
    return " ".join(w[0].upper() + w[1:] for w in words if w).strip()


def common_label(
    bots: Iterable[BotRecord],
    field: str,
    normalized_value: str,
) -> str:
    """Most common original spelling of a grouped field.

    Ties go to the spelling seen first. Falls back to a title-cased form of
    the normalized key when no original text exists.
    """
    counts = Counter(getattr(b, field).strip() for b in bots)
    if counts:
        label, _count = counts.most_common(1)[0]
        if label:
            return label
    return title_case(normalized_value)


def _group(bots: Iterable[BotRecord], field: str) -> dict[str, list[BotRecord]]:
    grouped: dict[str, list[BotRecord]] = {}
    for b in bots:
        grouped.setdefault(getattr(b, field), []).append(b)
    return grouped


def weapon_type_options(bots: Sequence[BotRecord]) -> list[WeaponGroup]:
    """Distinct weapon types for the filter selector, most common first."""
    if not any(b.has_weapon for b in bots):
        return []
    groups = [
        WeaponGroup(key=k, label=common_label(items, "weapon_type_raw", k), count=len(items))
        for k, items in _group(bots, "weapon_type_normalized").items()
        if k
    ]
    return sorted(groups, key=lambda g: g.count, reverse=True)


def category_counts(bots: Iterable[BotRecord]) -> dict[str, int]:
    """Bots per general weapon category, in display order."""
    counts = Counter(b.weapon_category for b in bots)
    return {c: counts.get(c, 0) for c in GENERAL_CATEGORIES}


def specific_weapon_stats(bots: Sequence[BotRecord]) -> list[WeaponGroup]:
    if not any(b.has_weapon for b in bots):
        return []
    groups = [
        WeaponGroup(key=k, label=common_label(items, "weapon_specific_raw", k), count=len(items))
        for k, items in _group(bots, "weapon_specific_normalized").items()
        if k
    ]
    return sorted(groups, key=lambda g: g.count, reverse=True)


def best_by_specific(
    bots: Sequence[BotRecord],
    rank_map: Mapping[str, int],
) -> list[SpecificBest]:
    """Best official and best E-Rank bot for each specific weapon."""
    if not any(b.has_weapon for b in bots):
        return []
    result = []
    for k, items in _group(bots, "weapon_specific_normalized").items():
        if not k:
            continue
        result.append(SpecificBest(
            key=k,
            label=common_label(items, "weapon_specific_raw", k),
            best_official=min(items, key=lambda b: b.official_rank),
            best_effectiveness=min(
                items, key=lambda b: rank_map.get(b.name) or float("inf"),
            ),
        ))
    return sorted(result, key=lambda s: s.label.lower())


def top_by_official(bots: Sequence[BotRecord], limit: int = TOP_N) -> list[BotRecord]:
    return sorted(bots, key=lambda b: b.official_rank)[:limit]


def top_by_effectiveness(
    bots: Sequence[BotRecord],
    rank_map: Mapping[str, int],
    limit: int = TOP_N,
) -> list[BotRecord]:
    ranked = [b for b in bots if rank_map.get(b.name) is not None]
    return sorted(ranked, key=lambda b: rank_map[b.name])[:limit]


def summary_stats(bots: Sequence[BotRecord]) -> dict[str, float | int]:
    n = len(bots)
    return {
        "bot_count": n,
        "avg_win_rate_pct": (
            sum(b.win_rate_normalized for b in bots) / n * 100 if n else 0.0
        ),
        "avg_ko_rate_pct": (
            sum(b.ko_win_rate_normalized for b in bots) / n * 100 if n else 0.0
        ),
        "total_fights": sum(b.fights for b in bots),
    }
