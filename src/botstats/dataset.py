"""Ingestion snapshots and the filtered, ranked views derived from them.

One ingestion produces one immutable Dataset (raw rows plus normalized
bots). Filters and the scoring toggle never touch the snapshot; every change
builds a fresh DatasetView from the snapshot and the new configuration.
"""

import itertools
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from botstats.fetch import load_source_text
from botstats.io_csv import filter_raw_rows, parse_csv_text
from botstats.models import (
    BotRecord,
    FilterConfig,
    LoadInfo,
    RawRow,
    ScoredBot,
    ScoreConfig,
)
from botstats.normalize import has_name, normalize_rows
from botstats.scoring import effectiveness_rank_map, rank_by_effectiveness

logger = logging.getLogger(__name__)

ALL_WEAPON_TYPES = "all"


@dataclass(frozen=True)
class DatasetView:
    filters: FilterConfig
    scoring: ScoreConfig
    bots: tuple[BotRecord, ...]
    ranked: tuple[ScoredBot, ...]
    rank_map: dict[str, int] = field(hash=False)


@dataclass(frozen=True)
class Dataset:
    fieldnames: tuple[str, ...]
    raw_rows: tuple[RawRow, ...]
    bots: tuple[BotRecord, ...]
    info: LoadInfo

    @property
    def has_weapon_columns(self) -> bool:
        return any(b.has_weapon for b in self.bots)

    def filter(self, config: FilterConfig) -> list[BotRecord]:
        """Select the in-scope population; input order is preserved."""
        src = list(self.bots)
        if self.has_weapon_columns and config.weapon_type != ALL_WEAPON_TYPES:
            src = [b for b in src if b.weapon_type_normalized == config.weapon_type]
        if config.min_fights > 0:
            src = [b for b in src if b.fights >= config.min_fights]
        return src

    def view(
        self,
        filters: FilterConfig = FilterConfig(),
        scoring: ScoreConfig = ScoreConfig(),
    ) -> DatasetView:
        """Filter, then score and rank exactly the filtered population."""
        bots = self.filter(filters)
        ranked = rank_by_effectiveness(bots, scoring)
        return DatasetView(
            filters=filters,
            scoring=scoring,
            bots=tuple(bots),
            ranked=tuple(ranked),
            rank_map=effectiveness_rank_map(ranked),
        )

    def export_raw_rows(self, bots: Iterable[BotRecord]) -> list[RawRow]:
        """Original rows (no derived fields) for the given bots."""
        names = {b.name for b in bots}
        return filter_raw_rows(self.raw_rows, names)


def build_dataset(
    fieldnames: list[str],
    rows: list[RawRow],
    source_name: str = "data.csv",
) -> Dataset:
    """Normalize a complete batch of raw rows into a snapshot."""
    named = tuple(r for r in rows if has_name(r))
    bots = tuple(normalize_rows(named))
    info = LoadInfo(
        source_name=source_name,
        bot_count=len(bots),
        with_weapons=sum(1 for b in bots if b.has_weapon),
        has_points=any(b.has_points for b in bots),
        loaded_at=datetime.now(timezone.utc).isoformat(),
    )
    logger.info(
        "Built dataset from %s: %d bots (%d skipped without name), "
        "weapons=%d, points=%s",
        source_name, len(bots), len(rows) - len(named),
        info.with_weapons, info.has_points,
    )
    return Dataset(
        fieldnames=tuple(fieldnames),
        raw_rows=named,
        bots=bots,
        info=info,
    )


class DatasetStore:
    """Holds the current snapshot; the newest ingestion request wins.

    Each ingestion takes a ticket before reading its source. A result is
    published only if no later ticket has been issued in the meantime, so a
    slow earlier load can never overwrite a newer one or be merged with it.
    """

    def __init__(self) -> None:
        self._tickets = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()
        self.current: Dataset | None = None

    def begin(self) -> int:
        with self._lock:
            self._latest = next(self._tickets)
            return self._latest

    def commit(self, ticket: int, dataset: Dataset) -> bool:
        with self._lock:
            if ticket != self._latest:
                logger.warning(
                    "Discarding stale ingestion #%d of %s (latest is #%d)",
                    ticket, dataset.info.source_name, self._latest,
                )
                return False
            self.current = dataset
        logger.info("Published snapshot #%d: %d bots", ticket, len(dataset.bots))
        return True

    def ingest(self, source: str | Path) -> Dataset | None:
        """Read, parse and normalize a source, then publish it.

        Returns the published dataset, or None if a newer ingestion started
        while this one was reading. Source failures propagate and leave the
        current snapshot untouched.
        """
        ticket = self.begin()
        text = load_source_text(source)
        fieldnames, rows = parse_csv_text(text)
        name = source.rsplit("/", 1)[-1] if isinstance(source, str) else Path(source).name
        dataset = build_dataset(fieldnames, rows, source_name=name or "data.csv")
        if self.commit(ticket, dataset):
            return dataset
        return None
