"""Rank change token parser.

Tokens come from the "Rank Change" column and describe movement since the
previous ranking snapshot. Accepted forms, tried in RANK_CHANGE_RULES order:

    ""  "-"  "—"  "–"         no change
    "!"  "new"  "rookie"      new entry
    ">3"  "> 3"  ">"          up 3 / up 1
    "<2"  "<"                 down 2 / down 1
    "▲3"  "▼"                 legacy glyphs
    "+4"  "-4"  "−4"          signed integers
    "up2"  "Down"             words
    "5"  "-5"  "0"            bare numbers

Anything else reads as no change; parsing never raises.
"""

import math
import re
from collections.abc import Callable

from botstats.models import RankChange, RankDirection

UP_GLYPH = "▲"
DOWN_GLYPH = "▼"
NO_CHANGE_LABEL = "—"
NEW_LABEL = "!"

_DASHES = {"-", "—", "–"}
_NEW_WORDS = re.compile(r"\bnew\b|\brookie\b")
_UP_CHEVRON = re.compile(r">([0-9]+)?")
_DOWN_CHEVRON = re.compile(r"<([0-9]+)?")
_UP_GLYPH = re.compile(r"▲([0-9]+)?")
_DOWN_GLYPH = re.compile(r"▼([0-9]+)?")
_SIGNED = re.compile(r"([+\-−])([0-9]+)")
_UP_WORD = re.compile(r"up([0-9]+)?")
_DOWN_WORD = re.compile(r"down([0-9]+)?")
_BARE_NUMBER = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)(e[+-]?[0-9]+)?")

NO_CHANGE = RankChange(RankDirection.SAME, 0, NO_CHANGE_LABEL)
NEW_ENTRY = RankChange(RankDirection.NEW, None, NEW_LABEL)

# (raw string stripped, lowercased with all whitespace removed) -> result
RankChangeRule = Callable[[str, str], RankChange | None]


def _whole(n: float) -> int | float:
    return int(n) if float(n).is_integer() else n


def up(magnitude: int | float) -> RankChange:
    return RankChange(RankDirection.UP, magnitude, f"{UP_GLYPH}{magnitude}")


def down(magnitude: int | float) -> RankChange:
    return RankChange(RankDirection.DOWN, magnitude, f"{DOWN_GLYPH}{magnitude}")


def _count(m: re.Match) -> int:
    return int(m.group(1)) if m.group(1) else 1


def _blank(raw: str, compact: str) -> RankChange | None:
    return NO_CHANGE if not raw else None


def _dash(raw: str, compact: str) -> RankChange | None:
    return NO_CHANGE if compact in _DASHES else None


def _new_entry(raw: str, compact: str) -> RankChange | None:
    if "!" in compact or _NEW_WORDS.search(raw.lower()):
        return NEW_ENTRY
    return None


def _chevron(raw: str, compact: str) -> RankChange | None:
    m = _UP_CHEVRON.fullmatch(compact)
    if m:
        return up(_count(m))
    m = _DOWN_CHEVRON.fullmatch(compact)
    if m:
        return down(_count(m))
    return None


def _glyph(raw: str, compact: str) -> RankChange | None:
    m = _UP_GLYPH.fullmatch(compact)
    if m:
        return up(_count(m))
    m = _DOWN_GLYPH.fullmatch(compact)
    if m:
        return down(_count(m))
    return None


def _signed(raw: str, compact: str) -> RankChange | None:
    m = _SIGNED.fullmatch(compact)
    if not m:
        return None
    value = int(m.group(2))
    return up(value) if m.group(1) == "+" else down(value)


def _word(raw: str, compact: str) -> RankChange | None:
    m = _UP_WORD.fullmatch(compact)
    if m:
        return up(_count(m))
    m = _DOWN_WORD.fullmatch(compact)
    if m:
        return down(_count(m))
    return None


def _bare_number(raw: str, compact: str) -> RankChange | None:
    if not _BARE_NUMBER.fullmatch(compact):
        return None
    n = float(compact)
    if not math.isfinite(n):
        return None
    if n > 0:
        return up(_whole(n))
    if n < 0:
        return down(_whole(abs(n)))
    return NO_CHANGE


RANK_CHANGE_RULES: tuple[tuple[str, RankChangeRule], ...] = (
    ("blank", _blank),
    ("dash", _dash),
    ("new", _new_entry),
    ("chevron", _chevron),
    ("glyph", _glyph),
    ("signed", _signed),
    ("word", _word),
    ("bare_number", _bare_number),
)


def parse_rank_change(raw: object) -> RankChange:
    """Parse a rank change token into direction, magnitude and display label."""
    raw_str = "" if raw is None else str(raw).strip()
    compact = re.sub(r"\s+", "", raw_str).lower()
    for _name, rule in RANK_CHANGE_RULES:
        result = rule(raw_str, compact)
        if result is not None:
            return result
    return NO_CHANGE
