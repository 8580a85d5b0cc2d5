"""Raw CSV row -> BotRecord normalization.

Every field parse degrades to a documented default instead of raising, so
any row that carries a bot name yields a complete record.
"""

import logging
import math
import re
from collections.abc import Iterable

from botstats.classify import classify_weapon
from botstats.models import BotRecord, RawRow
from botstats.util import clamp

logger = logging.getLogger(__name__)

NAME_COLUMN = "Bot"
RANK_COLUMN = "Rank"
RANK_CHANGE_COLUMNS = ("Rank Change", "RankChange")
WINRATE_COLUMNS = ("Winrate", "%", "Percent")
KO_WINRATE_COLUMN = "KOWinrate"
KOS_AGAINST_COLUMNS = ("KO'd", "KOd")
POINTS_COLUMN = "Points"
WEAPON_TYPE_COLUMN = "WeaponType"
WEAPON_SPECIFIC_COLUMN = "WeaponType-specific"

NO_CHANGE_MARKER = "—"

# Values up to this magnitude are read as fractions; 1.0 itself means 100%.
PERCENT_THRESHOLD = 1.0001

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: object) -> str:
    """Trim, lowercase and collapse whitespace runs to a single space."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value).strip().lower())


def parse_number(value: object) -> float | None:
    """Return a finite number, or None when the value is blank or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    else:
        text = str(value).strip()
        if not _NUMBER_PATTERN.match(text):
            return None
        n = float(text)
    if not math.isfinite(n):
        return None
    return n


def parse_int(value: object, default: int = 0) -> int:
    n = parse_number(value)
    if n is None:
        return default
    return int(n)


def parse_rank(value: object) -> int | None:
    """Parse the leading integer of a rank cell ("12", "3.0", "7th").

    Returns None for missing, non-numeric or zero ranks; the caller falls
    back to the row position.
    """
    if value is None:
        return None
    m = _LEADING_INT_PATTERN.match(str(value))
    if not m:
        return None
    rank = int(m.group(1))
    return rank or None


def normalize_rate(value: object) -> float | None:
    """Accept a rate on either a 0-1 or 0-100 scale and return it in [0, 1]."""
    n = parse_number(value)
    if n is None:
        return None
    if abs(n) > PERCENT_THRESHOLD:
        n = n / 100
    return clamp(n, 0.0, 1.0)


def ko_rate(kos: object, wins: object) -> float:
    w = parse_number(wins) or 0
    k = parse_number(kos) or 0
    if w <= 0:
        return 0.0
    return clamp(k / w, 0.0, 1.0)


def ko_against_rate(kos_against: object, losses: object) -> float:
    losses_n = parse_number(losses) or 0
    kod = parse_number(kos_against) or 0
    if losses_n <= 0:
        return 0.0
    return clamp(kod / losses_n, 0.0, 1.0)


def _cell(row: RawRow, column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


def _first_present(row: RawRow, columns: Iterable[str]) -> str | None:
    """Return the first non-blank cell among accepted column spellings."""
    for column in columns:
        value = row.get(column)
        if value is not None and str(value).strip():
            return str(value)
    return None


def has_name(row: RawRow | None) -> bool:
    return bool(row) and bool(_cell(row, NAME_COLUMN))


def normalize_row(row: RawRow, position: int) -> BotRecord:
    """Build a BotRecord from one raw row.

    `position` is the 1-based index of the row among named rows and is used
    as the official rank when the Rank column is missing or unusable.
    """
    wins = parse_int(row.get("W"))
    losses = parse_int(row.get("L"))
    kos = parse_int(row.get("KOs"))

    win_raw = _first_present(row, WINRATE_COLUMNS)
    win_rate = normalize_rate(win_raw)

    ko_win_raw = row.get(KO_WINRATE_COLUMN)
    ko_win_rate = normalize_rate(ko_win_raw)
    if ko_win_rate is None:
        ko_win_rate = ko_rate(kos, wins)

    kos_against_n = parse_number(_first_present(row, KOS_AGAINST_COLUMNS))
    kos_against = int(kos_against_n) if kos_against_n is not None else None

    rank_change = _first_present(row, RANK_CHANGE_COLUMNS)

    weapon_type = _cell(row, WEAPON_TYPE_COLUMN)
    weapon_specific = _cell(row, WEAPON_SPECIFIC_COLUMN)

    rank = parse_rank(row.get(RANK_COLUMN))

    return BotRecord(
        name=_cell(row, NAME_COLUMN),
        official_rank=rank if rank is not None else position,
        rank_change_raw=rank_change if rank_change is not None else NO_CHANGE_MARKER,
        events=parse_int(row.get("Events")),
        fights=parse_int(row.get("Fights")),
        wins=wins,
        losses=losses,
        points=parse_number(row.get(POINTS_COLUMN)),
        kos=kos,
        kos_against=kos_against,
        win_rate_raw=parse_number(win_raw),
        ko_win_rate_raw=parse_number(ko_win_raw),
        win_rate_normalized=win_rate if win_rate is not None else 0.0,
        ko_win_rate_normalized=ko_win_rate,
        ko_against_rate_normalized=ko_against_rate(kos_against, losses),
        weapon_type_raw=weapon_type,
        weapon_specific_raw=weapon_specific,
        weapon_type_normalized=normalize_text(weapon_type),
        weapon_specific_normalized=normalize_text(weapon_specific),
        weapon_category=classify_weapon(weapon_type, weapon_specific),
    )


def normalize_rows(rows: Iterable[RawRow]) -> list[BotRecord]:
    """Drop rows without a bot name and normalize the rest in input order."""
    named = [r for r in rows if has_name(r)]
    records = [normalize_row(row, idx) for idx, row in enumerate(named, start=1)]
    logger.debug("Normalized %d named rows", len(records))
    return records
