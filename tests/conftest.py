"""Shared pytest fixtures for loading CSV test fixtures."""

from pathlib import Path

import pytest

from botstats.models import BotRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def sample_csv_path() -> Path:
    return FIXTURES_DIR / "sample.csv"


@pytest.fixture()
def sample_csv_text(sample_csv_path: Path) -> str:
    return sample_csv_path.read_text(encoding="utf-8")


def make_bot(**overrides) -> BotRecord:
    defaults = dict(
        name="Test Bot",
        official_rank=1,
        rank_change_raw="—",
        events=1,
        fights=10,
        wins=6,
        losses=4,
        points=None,
        kos=3,
        kos_against=1,
        win_rate_raw=0.6,
        ko_win_rate_raw=None,
        win_rate_normalized=0.6,
        ko_win_rate_normalized=0.5,
        ko_against_rate_normalized=0.25,
        weapon_type_raw="Vertical",
        weapon_specific_raw="Drum",
        weapon_type_normalized="vertical",
        weapon_specific_normalized="drum",
        weapon_category="vertical",
    )
    defaults.update(overrides)
    return BotRecord(**defaults)
