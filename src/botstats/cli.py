"""CLI entry point and main processing flow."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from botstats import insights, leaderboards
from botstats.dataset import ALL_WEAPON_TYPES, Dataset, DatasetStore, DatasetView
from botstats.io_csv import write_csv
from botstats.models import BotRecord, FilterConfig, InsightRow, ScoreConfig
from botstats.normalize import normalize_text
from botstats.rank_change import parse_rank_change
from botstats.util import BotstatsError

logger = logging.getLogger("botstats")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="botstats",
        description="Normalize combat-robot stat CSVs and rank bots by effectiveness.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", help="Path to a stats CSV file")
    source.add_argument("--url", help="URL of a stats CSV (e.g. a hosted sample.csv)")
    parser.add_argument(
        "--weapon-type", default=ALL_WEAPON_TYPES,
        help="Only include this weapon type (normalized key, default: all)",
    )
    parser.add_argument(
        "--min-fights", type=int, default=0,
        help="Only include bots with at least this many fights (default: 0)",
    )
    parser.add_argument(
        "--include-control-ko", action="store_true", default=False,
        help="Count KO rate for control bots in the E-Score (default: off)",
    )
    parser.add_argument(
        "--context", choices=sorted(insights.MIN_FIGHT_CONTEXTS),
        default=insights.DEFAULT_CONTEXT,
        help="Ranking context for the rookie fight threshold (default: 3lb-year)",
    )
    parser.add_argument(
        "--leader-min-fights", type=int, default=None,
        help="Minimum fights for style and points leaderboards "
        "(default: the context's fight threshold)",
    )
    parser.add_argument(
        "--top", type=int, default=leaderboards.TOP_N,
        help="Entries per leaderboard (default: 10)",
    )
    parser.add_argument("--export", help="Write the filtered original rows to this CSV")
    parser.add_argument("--report", help="Write the JSON report here (default: stdout)")
    parser.add_argument(
        "--log-level", choices=["INFO", "DEBUG"], default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def _bot_entry(b: BotRecord, rank_map: dict[str, int]) -> dict:
    rc = parse_rank_change(b.rank_change_raw)
    return {
        "bot": b.name,
        "rank": b.official_rank,
        "e_rank": rank_map.get(b.name),
        "rank_change": rc.label,
        "category": b.weapon_category,
        "fights": b.fights,
        "win_rate": round(b.win_rate_normalized, 4),
        "ko_rate": round(b.ko_win_rate_normalized, 4),
        "ko_against_rate": round(b.ko_against_rate_normalized, 4),
        "confidence": round(insights.confidence_from_fights(b.fights), 3),
    }


def _rounded(value: float | None, digits: int = 4) -> float | None:
    return None if value is None else round(value, digits)


def _row_entry(r: InsightRow, rank_map: dict[str, int]) -> dict:
    entry = _bot_entry(r.record, rank_map)
    entry.update({
        "score": round(r.score, 4),
        "delta": r.delta,
        "point_mods": r.point_mods,
        "bonus_estimate": r.bonus_estimate,
        "rookie_deficit": r.rookie_deficit,
        "points_per_fight": _rounded(r.points_per_fight),
        "ko_diff_per_fight": _rounded(r.ko_diff_per_fight),
    })
    return entry


def build_report(
    dataset: Dataset,
    view: DatasetView,
    context: str,
    leader_min_fights: int,
    top: int,
) -> dict:
    """Assemble the JSON-serializable summary of one view."""
    threshold = insights.min_fight_threshold(context)
    rows = leaderboards.derive_rows(view.bots, view.rank_map, view.scoring, threshold)
    rank_map = view.rank_map
    boards = {
        "overperformers": leaderboards.overperformers(rows, top),
        "underperformers": leaderboards.underperformers(rows, top),
        "movers_up": leaderboards.movers_up(rows, top),
        "movers_down": leaderboards.movers_down(rows, top),
        "rookies": leaderboards.rookies(rows, top),
        "stable": leaderboards.stable(rows, top),
        "penalty_watchlist": leaderboards.penalty_watchlist(rows, threshold, top),
        "ko_artists": leaderboards.ko_artists(rows, leader_min_fights, top),
        "glass_cannons": leaderboards.glass_cannons(rows, leader_min_fights, top),
        "tanks": leaderboards.tanks(rows, leader_min_fights, top),
        "control_specialists": leaderboards.control_specialists(rows, leader_min_fights, top),
        "control_undervalued": leaderboards.control_undervalued(rows, top),
    }
    if any(b.has_points for b in view.bots):
        boards["points_per_fight"] = leaderboards.points_per_fight_leaders(
            rows, leader_min_fights, top,
        )
        boards["bonus_heavy"] = leaderboards.bonus_heavy(rows, leader_min_fights, top)

    return {
        "source": dataset.info.source_name,
        "loaded_at": dataset.info.loaded_at,
        "filters": {
            "weapon_type": view.filters.weapon_type,
            "min_fights": view.filters.min_fights,
            "include_control_ko": view.scoring.include_control_ko,
            "context": context,
            "min_fight_threshold": threshold,
            "leader_min_fights": leader_min_fights,
        },
        "summary": leaderboards.summary_stats(view.bots),
        "weapon_types": [
            {"key": g.key, "label": g.label, "count": g.count}
            for g in leaderboards.weapon_type_options(list(dataset.bots))
        ],
        "categories": leaderboards.category_counts(view.bots),
        "specific_weapons": [
            {"key": g.key, "label": g.label, "count": g.count}
            for g in leaderboards.specific_weapon_stats(view.bots)
        ],
        "winrate_histogram": {
            b.label: b.count for b in insights.winrate_buckets5(view.bots)
        },
        "rank_change_coverage": leaderboards.rank_change_coverage(rows),
        "top_by_official": [
            _bot_entry(b, rank_map) for b in leaderboards.top_by_official(view.bots, top)
        ],
        "top_by_effectiveness": [
            _bot_entry(b, rank_map)
            for b in leaderboards.top_by_effectiveness(view.bots, rank_map, top)
        ],
        "best_by_specific": [
            {
                "weapon": s.label,
                "best_official": s.best_official.name,
                "best_effectiveness": s.best_effectiveness.name,
            }
            for s in leaderboards.best_by_specific(view.bots, rank_map)
        ],
        "leaderboards": {
            name: [_row_entry(r, rank_map) for r in entries]
            for name, entries in boards.items()
        },
    }


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    _setup_logging(args.log_level)

    source = args.csv or args.url
    weapon_type = args.weapon_type
    if weapon_type != ALL_WEAPON_TYPES:
        weapon_type = normalize_text(weapon_type)
    filters = FilterConfig(weapon_type=weapon_type, min_fights=args.min_fights)
    leader_min_fights = args.leader_min_fights
    if leader_min_fights is None:
        leader_min_fights = insights.min_fight_threshold(args.context)
    scoring = ScoreConfig(include_control_ko=args.include_control_ko)

    logger.info("Starting botstats for source=%s", source)
    logger.info(
        "Options: weapon_type=%s min_fights=%d include_control_ko=%s context=%s",
        filters.weapon_type, filters.min_fights, scoring.include_control_ko, args.context,
    )

    start_time = time.time()

    try:
        store = DatasetStore()
        dataset = store.ingest(source)
        if dataset is None:
            raise BotstatsError(f"Ingestion of {source} was superseded")

        view = dataset.view(filters, scoring)
        report = build_report(
            dataset, view, args.context, leader_min_fights, args.top,
        )

        text = json.dumps(report, ensure_ascii=False, indent=2)
        if args.report:
            report_path = Path(args.report)
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(text + "\n", encoding="utf-8")
            logger.info("Wrote report to %s", report_path)
        else:
            sys.stdout.write(text + "\n")

        if args.export:
            write_csv(Path(args.export), dataset.fieldnames, dataset.export_raw_rows(view.bots))

        elapsed = time.time() - start_time
        logger.info("=== Summary ===")
        logger.info("Loaded bots: %d", dataset.info.bot_count)
        logger.info("In scope: %d", len(view.bots))
        logger.info("Elapsed: %.1fs", elapsed)

    except BotstatsError as e:
        logger.error("Fatal error: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        sys.exit(1)
