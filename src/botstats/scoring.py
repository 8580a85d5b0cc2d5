"""Effectiveness score (E-Score) and rank (E-Rank)."""

import logging
from collections.abc import Iterable, Sequence

from botstats.classify import is_flamethrower
from botstats.models import BotRecord, ScoredBot, ScoreConfig, WeaponCategory

logger = logging.getLogger(__name__)


def is_control_non_flame(record: BotRecord) -> bool:
    return (
        record.weapon_category == WeaponCategory.CONTROL
        and not is_flamethrower(record.weapon_specific_normalized)
    )


def effective_weights(record: BotRecord, config: ScoreConfig) -> tuple[float, float]:
    """Return (win rate weight, KO rate weight) for a record.

    Control bots without a flamethrower are scored on win rate alone unless
    the config asks to include their KO rate.
    """
    if is_control_non_flame(record) and not config.include_control_ko:
        return 1.0, 0.0
    return config.wr_weight, config.ko_weight


def effectiveness_score(record: BotRecord, config: ScoreConfig = ScoreConfig()) -> float:
    w_wr, w_ko = effective_weights(record, config)
    return record.win_rate_normalized * w_wr + record.ko_win_rate_normalized * w_ko


def rank_by_effectiveness(
    records: Sequence[BotRecord],
    config: ScoreConfig = ScoreConfig(),
) -> list[ScoredBot]:
    """Score and rank the whole population, highest score first.

    sorted() is stable, so equal scores keep the population's input order.
    Ranks are positions in this order and only mean something relative to
    the population that was passed in.
    """
    scored = [(r, effectiveness_score(r, config)) for r in records]
    ordered = sorted(scored, key=lambda pair: pair[1], reverse=True)
    ranked = [
        ScoredBot(record=r, score=s, rank=idx)
        for idx, (r, s) in enumerate(ordered, start=1)
    ]
    logger.debug(
        "Ranked %d bots (include_control_ko=%s)",
        len(ranked), config.include_control_ko,
    )
    return ranked


def effectiveness_rank_map(ranked: Iterable[ScoredBot]) -> dict[str, int]:
    """Map bot name -> E-Rank. Duplicate names collide; the last one wins."""
    result: dict[str, int] = {}
    for bot in ranked:
        name = bot.record.name
        if name in result:
            logger.debug(
                "Duplicate bot name %r: rank %d replaces %d",
                name, bot.rank, result[name],
            )
        result[name] = bot.rank
    return result
