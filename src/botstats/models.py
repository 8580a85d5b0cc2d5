"""Data models."""

from collections.abc import Mapping
from dataclasses import dataclass

# One CSV row exactly as read: header name -> cell text. Stored as a
# read-only MappingProxyType so later stages cannot write back into it.
RawRow = Mapping[str, str]


class WeaponCategory:
    OVERHEAD = "overhead"
    CONTROL = "control"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    OTHER = "other"


class RankDirection:
    UP = "up"
    DOWN = "down"
    NEW = "new"
    SAME = "same"


@dataclass(frozen=True)
class BotRecord:
    name: str
    official_rank: int
    rank_change_raw: str
    events: int
    fights: int
    wins: int
    losses: int
    points: float | None  # None when the Points column is absent or blank
    kos: int
    kos_against: int | None
    win_rate_raw: float | None
    ko_win_rate_raw: float | None
    win_rate_normalized: float  # [0, 1]
    ko_win_rate_normalized: float  # [0, 1]
    ko_against_rate_normalized: float  # [0, 1]
    weapon_type_raw: str
    weapon_specific_raw: str
    weapon_type_normalized: str
    weapon_specific_normalized: str
    weapon_category: str

    @property
    def has_weapon(self) -> bool:
        return bool(self.weapon_type_raw or self.weapon_specific_raw)

    @property
    def has_points(self) -> bool:
        return self.points is not None


@dataclass(frozen=True)
class RankChange:
    direction: str  # up / down / new / same
    magnitude: int | float | None  # None only for "new"
    label: str


@dataclass(frozen=True)
class ScoreConfig:
    include_control_ko: bool = False
    wr_weight: float = 0.7
    ko_weight: float = 0.3


@dataclass(frozen=True)
class FilterConfig:
    weapon_type: str = "all"  # normalized weapon type key or "all"
    min_fights: int = 0


@dataclass(frozen=True)
class ScoredBot:
    record: BotRecord
    score: float
    rank: int  # 1-based within the scored population


@dataclass(frozen=True)
class WinrateBucket:
    label: str  # e.g. "80-85%"
    lower: float
    upper: float
    count: int


@dataclass(frozen=True)
class LoadInfo:
    source_name: str
    bot_count: int
    with_weapons: int
    has_points: bool
    loaded_at: str  # ISO format


@dataclass(frozen=True)
class WeaponGroup:
    key: str  # normalized weapon text
    label: str  # most common original spelling
    count: int


@dataclass(frozen=True)
class InsightRow:
    record: BotRecord
    e_rank: int | None
    delta: int  # official rank - E-Rank; positive means underrated officially
    rank_change: RankChange
    score: float
    point_mods: float | None
    bonus_estimate: float | None
    rookie_deficit: int
    points_per_fight: float | None
    ko_diff_per_fight: float | None


@dataclass(frozen=True)
class SpecificBest:
    key: str
    label: str
    best_official: BotRecord
    best_effectiveness: BotRecord
