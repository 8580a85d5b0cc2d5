"""CSV read/write for raw stat rows.

Raw rows keep every cell exactly as read so a filtered export reproduces
the untouched columns of the source file.
"""

import csv
import io
import logging
from collections.abc import Collection, Iterable, Sequence
from pathlib import Path
from types import MappingProxyType

from botstats.models import RawRow
from botstats.normalize import NAME_COLUMN

logger = logging.getLogger(__name__)


def parse_csv_text(text: str) -> tuple[list[str], list[RawRow]]:
    """Parse header-delimited CSV text into (fieldnames, raw rows).

    Blank lines are skipped, short rows are padded with "" and surplus
    cells beyond the header are dropped.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.DictReader(io.StringIO(text, newline=""), restval="")
    fieldnames = list(reader.fieldnames or [])
    if len(set(fieldnames)) != len(fieldnames):
        duplicates = sorted({f for f in fieldnames if fieldnames.count(f) > 1})
        logger.warning(
            "Duplicate header columns %s: only the last value of each is kept",
            duplicates,
        )
    rows: list[RawRow] = []
    dropped = 0
    for row in reader:
        extra = row.pop(None, None)
        if extra:
            dropped += 1
        rows.append(MappingProxyType(row))
    if dropped:
        logger.debug("Dropped surplus cells from %d rows", dropped)
    logger.info("Parsed %d rows with %d columns", len(rows), len(fieldnames))
    return fieldnames, rows


def filter_raw_rows(rows: Iterable[RawRow], names: Collection[str]) -> list[RawRow]:
    """Keep raw rows whose bot name is in `names`, in source order."""
    return [r for r in rows if (r.get(NAME_COLUMN) or "").strip() in names]


def export_rows(fieldnames: Sequence[str], rows: Iterable[RawRow]) -> str:
    """Serialize raw rows back to CSV text with LF line endings."""
    buf = io.StringIO(newline="")
    writer = csv.DictWriter(
        buf, fieldnames=list(fieldnames), quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n", extrasaction="ignore",
    )
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


def write_csv(path: Path, fieldnames: Sequence[str], rows: Sequence[RawRow]) -> None:
    """Write raw rows to a CSV file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(export_rows(fieldnames, rows))
    logger.info("Wrote %d rows to %s", len(rows), path)
