"""Tests for botstats.leaderboards."""

import pytest

from botstats import leaderboards as lb
from botstats.dataset import build_dataset
from botstats.io_csv import parse_csv_text
from botstats.models import ScoreConfig
from conftest import make_bot


@pytest.fixture()
def dataset(sample_csv_text: str):
    fieldnames, rows = parse_csv_text(sample_csv_text)
    return build_dataset(fieldnames, rows, source_name="sample.csv")


@pytest.fixture()
def view(dataset):
    return dataset.view()


@pytest.fixture()
def rows(view):
    return lb.derive_rows(view.bots, view.rank_map, view.scoring, 8)


def _names(entries) -> list[str]:
    return [e.record.name for e in entries]


class TestDeriveRows:
    def test_delta_and_e_rank(self, rows) -> None:
        by_name = {r.record.name: r for r in rows}
        assert by_name["Gripper"].e_rank == 1
        assert by_name["Gripper"].delta == 1
        assert by_name["Hammertime"].delta == -1
        assert by_name["Torchy"].delta == 0

    def test_points_metrics(self, rows) -> None:
        by_name = {r.record.name: r for r in rows}
        assert by_name["Hammertime"].point_mods == pytest.approx(2.5)
        assert by_name["Plain Jane"].point_mods == pytest.approx(-0.5)
        bar_fly = by_name["Bar Fly, Jr."]
        assert bar_fly.point_mods == pytest.approx(-1)
        assert bar_fly.rookie_deficit == 2
        assert bar_fly.bonus_estimate == pytest.approx(1)

    def test_missing_rank_gives_zero_delta(self) -> None:
        rows = lb.derive_rows([make_bot(name="Ghost")], {}, ScoreConfig(), 8)
        assert rows[0].e_rank is None
        assert rows[0].delta == 0


class TestRankBoards:
    def test_over_and_underperformers(self, rows) -> None:
        assert _names(lb.overperformers(rows)) == ["Gripper"]
        assert _names(lb.underperformers(rows)) == ["Hammertime"]

    def test_movers(self, rows) -> None:
        assert _names(lb.movers_up(rows)) == ["Torchy", "Hammertime"]
        assert _names(lb.movers_down(rows)) == ["Spin Doctor"]

    def test_rookies_and_stable(self, rows) -> None:
        assert _names(lb.rookies(rows)) == ["Bar Fly, Jr."]
        assert _names(lb.stable(rows)) == ["Gripper", "Plain Jane"]

    def test_rank_change_coverage(self, rows) -> None:
        assert lb.rank_change_coverage(rows) == {"up": 2, "down": 1, "new": 1, "same": 2}

    def test_limit(self, rows) -> None:
        assert len(lb.tanks(rows, 0, limit=2)) == 2


class TestPointsBoards:
    def test_points_per_fight_respects_min_fights(self, rows) -> None:
        assert _names(lb.points_per_fight_leaders(rows, 8)) == [
            "Hammertime", "Gripper", "Spin Doctor", "Torchy", "Plain Jane",
        ]

    def test_bonus_heavy(self, rows) -> None:
        assert _names(lb.bonus_heavy(rows, 8))[0] == "Hammertime"
        assert "Bar Fly, Jr." not in _names(lb.bonus_heavy(rows, 8))

    def test_no_points_means_empty_boards(self) -> None:
        rows = lb.derive_rows([make_bot(points=None)], {"Test Bot": 1}, ScoreConfig(), 8)
        assert lb.points_per_fight_leaders(rows, 0) == []
        assert lb.bonus_heavy(rows, 0) == []

    def test_penalty_watchlist(self, rows) -> None:
        assert _names(lb.penalty_watchlist(rows, 8)) == ["Bar Fly, Jr."]


class TestStyleBoards:
    def test_ko_artists(self, rows) -> None:
        assert _names(lb.ko_artists(rows, 8)) == [
            "Spin Doctor", "Hammertime", "Gripper", "Torchy", "Plain Jane",
        ]

    def test_glass_cannons(self, rows) -> None:
        assert _names(lb.glass_cannons(rows, 8))[:2] == ["Spin Doctor", "Hammertime"]

    def test_tanks(self, rows) -> None:
        assert _names(lb.tanks(rows, 8)) == [
            "Gripper", "Hammertime", "Torchy", "Spin Doctor", "Plain Jane",
        ]

    def test_control_boards_skip_flamethrowers(self, rows) -> None:
        assert _names(lb.control_specialists(rows, 8)) == ["Gripper"]
        assert _names(lb.control_undervalued(rows)) == ["Gripper"]


class TestOverview:
    def test_title_case(self) -> None:
        assert lb.title_case("full-body  spinner") == "Full Body Spinner"
        assert lb.title_case("") == ""

    def test_common_label_prefers_most_common_spelling(self) -> None:
        bots = [
            make_bot(weapon_specific_raw="drum"),
            make_bot(weapon_specific_raw="Drum"),
            make_bot(weapon_specific_raw="Drum"),
        ]
        assert lb.common_label(bots, "weapon_specific_raw", "drum") == "Drum"

    def test_common_label_falls_back_to_title_case(self) -> None:
        bots = [make_bot(weapon_type_raw="")]
        assert lb.common_label(bots, "weapon_type_raw", "full body") == "Full Body"

    def test_weapon_type_options(self, dataset) -> None:
        options = lb.weapon_type_options(list(dataset.bots))
        assert [(g.key, g.label, g.count) for g in options] == [
            ("control", "Control", 2),
            ("overhead", "Overhead", 1),
            ("vertical", "Vertical", 1),
            ("horizontal", "Horizontal", 1),
        ]

    def test_weapon_type_options_without_weapons(self) -> None:
        bots = [make_bot(weapon_type_raw="", weapon_specific_raw="")]
        assert lb.weapon_type_options(bots) == []

    def test_category_counts_in_display_order(self, dataset) -> None:
        counts = lb.category_counts(dataset.bots)
        assert list(counts) == ["horizontal", "vertical", "overhead", "control", "other"]
        assert counts["control"] == 2
        assert lb.category_counts([]) == dict.fromkeys(counts, 0)

    def test_specific_weapon_stats(self, dataset) -> None:
        stats = lb.specific_weapon_stats(list(dataset.bots))
        assert {g.key for g in stats} == {"hammer", "clamp", "drum", "bar", "flamethrower"}

    def test_best_by_specific(self, view) -> None:
        best = lb.best_by_specific(view.bots, view.rank_map)
        assert [s.label for s in best] == ["Bar", "Clamp", "Drum", "Flamethrower", "Hammer"]
        assert best[1].best_effectiveness.name == "Gripper"

    def test_top_lists(self, view) -> None:
        assert [b.name for b in lb.top_by_official(view.bots, 3)] == [
            "Hammertime", "Gripper", "Spin Doctor",
        ]
        assert [b.name for b in lb.top_by_effectiveness(view.bots, view.rank_map, 3)] == [
            "Gripper", "Hammertime", "Spin Doctor",
        ]

    def test_summary_stats(self, view) -> None:
        stats = lb.summary_stats(view.bots)
        assert stats["bot_count"] == 6
        assert stats["total_fights"] == 82
        assert 0 < stats["avg_win_rate_pct"] < 100

    def test_summary_stats_empty(self) -> None:
        assert lb.summary_stats([]) == {
            "bot_count": 0, "avg_win_rate_pct": 0.0, "avg_ko_rate_pct": 0.0, "total_fights": 0,
        }
