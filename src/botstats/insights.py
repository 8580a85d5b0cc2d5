"""Per-bot metrics for leaderboards and charts.

All functions are pure and read-only. Points-derived values return None when
the bot has no Points value; callers must not treat that as zero.
"""

import math
from collections.abc import Iterable

from botstats.models import BotRecord, WinrateBucket
from botstats.util import clamp

BUCKET_WIDTH = 0.05
BUCKET_COUNT = 20

# Minimum fight count below which the points table applies a rookie
# penalty, by ranking context.
MIN_FIGHT_CONTEXTS = {
    "3lb-all": 10,
    "3lb-year": 8,
    "other": 5,
}
DEFAULT_CONTEXT = "3lb-year"


def min_fight_threshold(context: str) -> int:
    return MIN_FIGHT_CONTEXTS.get(context, MIN_FIGHT_CONTEXTS["other"])


def confidence_from_fights(fights: int, minimum: int = 5, ideal: int = 15) -> float:
    """Saturating reliability proxy: 0.1 with no fights, else in [0.2, 1]."""
    f = fights or 0
    if f <= 0:
        return 0.1
    return clamp((f - minimum) / max(1, ideal - minimum), 0.2, 1.0)


def base_points(record: BotRecord) -> int:
    return record.wins - record.losses


def implied_point_mods(record: BotRecord) -> float | None:
    """Points beyond W - L, or None when the bot has no Points value."""
    if record.points is None:
        return None
    return record.points - base_points(record)


def rookie_deficit(record: BotRecord, min_fight_threshold: int) -> int:
    """Rookie penalty magnitude in points; 0 once the threshold is met."""
    return max(0, (min_fight_threshold or 0) - record.fights)


def estimate_bonus_from_upsets_and_finals(
    record: BotRecord,
    min_fight_threshold: int,
) -> float | None:
    """Rough estimate of finals and upset bonus points.

    Heuristic only: adds the rookie penalty back onto the implied point
    modifiers. It is not a reconstruction of the official points table and
    exact values need fight-by-fight data.
    """
    mods = implied_point_mods(record)
    if mods is None:
        return None
    return mods + rookie_deficit(record, min_fight_threshold)


def points_per_fight(record: BotRecord) -> float | None:
    if record.points is None or record.fights <= 0:
        return None
    return record.points / record.fights


def ko_diff_per_fight(record: BotRecord) -> float | None:
    if record.fights <= 0:
        return None
    return (record.kos - (record.kos_against or 0)) / record.fights


def glass_cannon_score(record: BotRecord) -> float:
    """High when a bot both lands and suffers knockouts."""
    return record.ko_win_rate_normalized * 0.7 + record.ko_against_rate_normalized * 0.3


def tank_score(record: BotRecord) -> float:
    return (1 - record.ko_against_rate_normalized) * 0.7 + record.win_rate_normalized * 0.3


def _bucket_label(idx: int) -> str:
    return f"{idx * 5}-{(idx + 1) * 5}%"


def winrate_buckets5(records: Iterable[BotRecord]) -> list[WinrateBucket]:
    """Histogram of normalized win rates in 5% bins.

    Values >= 1 land in the last bin and negatives in the first. Only
    non-empty bins are returned, lowest bin first.
    """
    counts = [0] * BUCKET_COUNT
    for r in records:
        idx = math.floor(r.win_rate_normalized * BUCKET_COUNT)
        idx = int(clamp(idx, 0, BUCKET_COUNT - 1))
        counts[idx] += 1
    return [
        WinrateBucket(
            label=_bucket_label(idx),
            lower=round(idx * BUCKET_WIDTH, 2),
            upper=round((idx + 1) * BUCKET_WIDTH, 2),
            count=count,
        )
        for idx, count in enumerate(counts)
        if count > 0
    ]
