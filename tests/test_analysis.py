import pandas as pd
import pytest

from lotto_analyzer import analysis
from tests.conftest import build_draws


# -- Frequency --------------------------------------------------------------

def test_count_main_numbers_example(example_draws):
    freqs = dict(analysis.count_main_numbers(example_draws))
    assert freqs == {1: 2, 2: 2, 3: 2, 4: 2, 5: 2, 6: 1, 7: 1, 8: 1, 9: 1, 10: 1}


def test_count_bonus_numbers_example(example_draws):
    assert dict(analysis.count_bonus_numbers(example_draws)) == {10: 2, 11: 1}


def test_frequency_sorted_desc_and_least_asc(samples):
    main = analysis.count_main_numbers(samples)
    counts = [c for _, c in main]
    assert counts == sorted(counts, reverse=True)

    least = analysis.least_common(samples)
    assert [c for _, c in least] == sorted(counts)
    assert dict(least) == dict(main)


def test_frequency_total_is_five_per_draw(samples):
    assert sum(c for _, c in analysis.count_main_numbers(samples)) == 5 * len(samples)


def test_bonus_ignores_missing():
    df = build_draws([([1, 2, 3, 4, 5], None), ([6, 7, 8, 9, 10], 3)])
    assert analysis.count_bonus_numbers(df) == [(3, 1)]


def test_frequency_empty(empty_draws):
    assert analysis.count_main_numbers(empty_draws) == []
    assert analysis.count_bonus_numbers(empty_draws) == []
    assert analysis.least_common(empty_draws) == []
    assert analysis.average_frequency([]) == 0.0


def test_frequency_analysis_bundle(example_draws):
    result = analysis.frequency_analysis(example_draws)
    assert result["total_draws"] == 3
    assert result["average"] == 1.5
    assert len(result["dataframe"]) == 10
    assert analysis.top_numbers(result["main"], 2) == result["main"][:2]


def test_engines_are_repeatable(samples):
    assert analysis.count_main_numbers(samples) == analysis.count_main_numbers(samples)
    assert analysis.count_pairs(samples) == analysis.count_pairs(samples)
    assert analysis.number_gap_analysis(samples) == analysis.number_gap_analysis(samples)


# -- Pairs ------------------------------------------------------------------

def test_pairs_example(example_draws):
    pairs = {p["pair"]: p["count"] for p in analysis.count_pairs(example_draws)}
    assert pairs[(1, 2)] == 2
    assert pairs[(6, 7)] == 1
    assert (1, 6) not in pairs


def test_pairs_canonical_order():
    df = build_draws([([9, 3, 7, 1, 5], None), ([7, 3, 20, 30, 40], None)])
    pairs = {p["pair"]: p["count"] for p in analysis.count_pairs(df)}
    assert pairs[(3, 7)] == 2
    assert (7, 3) not in pairs


def test_pairs_invariants(samples):
    pairs = analysis.count_pairs(samples)
    assert all(a < b for a, b in (p["pair"] for p in pairs))
    assert all(p["count"] >= 1 for p in pairs)
    assert sum(p["count"] for p in pairs) == 10 * len(samples)
    counts = [p["count"] for p in pairs]
    assert counts == sorted(counts, reverse=True)


def test_pair_last_date_is_most_recent(example_draws):
    pairs = {p["pair"]: p for p in analysis.count_pairs(example_draws)}
    assert pairs[(1, 2)]["last_date"] == example_draws["date"].iloc[0]


def test_pairs_containing(example_draws):
    pairs = analysis.count_pairs(example_draws)
    found = analysis.pairs_containing(6, pairs)
    assert len(found) == 4
    assert all(6 in p["pair"] for p in found)
    assert len(analysis.top_pairs(pairs, 3)) == 3


# -- Gap / Due --------------------------------------------------------------

def _gap_for(entries, number):
    return next(e for e in entries if e["number"] == number)


def test_gap_example_number_one(example_draws):
    entries = analysis.number_gap_analysis(example_draws)
    e = _gap_for(entries, 1)
    assert e["appearances"] == 2
    assert e["current_gap"] == 0
    assert e["avg_gap"] == 1.5
    assert e["due_ratio"] == 0.0
    assert e["band"] == "under-due"
    assert e["last_seen"] == "10/28/2025"


def test_gap_covers_all_numbers(example_draws):
    entries = analysis.number_gap_analysis(example_draws)
    assert sorted(e["number"] for e in entries) == list(range(1, 71))
    ratios = [e["due_ratio"] for e in entries]
    assert ratios == sorted(ratios, reverse=True)


def test_gap_never_seen_sentinel(example_draws):
    e = _gap_for(analysis.number_gap_analysis(example_draws), 42)
    assert e["appearances"] == 0
    assert e["due_ratio"] == 99.0
    assert e["avg_gap"] == 3.0
    assert e["current_gap"] == 3
    assert e["last_seen_date"] is None
    assert e["last_seen"] == "Never"


def test_gap_seen_once(example_draws):
    e = _gap_for(analysis.number_gap_analysis(example_draws), 6)
    assert e["appearances"] == 1
    assert e["avg_gap"] == 3.0
    assert e["current_gap"] == 2
    assert e["due_ratio"] == pytest.approx(2 / 3)


def test_gap_formula_for_repeated_numbers(samples):
    total = len(samples)
    for e in analysis.number_gap_analysis(samples):
        if e["appearances"] > 1:
            assert e["due_ratio"] == e["current_gap"] / (total / e["appearances"])


def test_gap_empty(empty_draws):
    assert analysis.number_gap_analysis(empty_draws) == []


@pytest.mark.parametrize("ratio,band", [
    (0.0, "under-due"),
    (0.79, "under-due"),
    (0.8, "approaching"),
    (0.99, "approaching"),
    (1.0, "mildly overdue"),
    (1.49, "mildly overdue"),
    (1.5, "notably overdue"),
    (1.99, "notably overdue"),
    (2.0, "very overdue"),
    (99.0, "very overdue"),
])
def test_due_band(ratio, band):
    assert analysis.due_band(ratio) == band


def test_overdue_filters_exclude_rare_numbers():
    entries = [
        {"number": 1, "appearances": 0, "due_ratio": 99.0},
        {"number": 2, "appearances": 1, "due_ratio": 3.0},
        {"number": 3, "appearances": 4, "due_ratio": 2.5},
        {"number": 4, "appearances": 3, "due_ratio": 1.2},
        {"number": 5, "appearances": 3, "due_ratio": 1.0},
    ]
    assert [e["number"] for e in analysis.overdue_entries(entries)] == [3, 4]
    assert [e["number"] for e in analysis.very_overdue_entries(entries)] == [3]
    assert [e["number"] for e in analysis.most_overdue(entries)] == [3, 4, 5]


# -- Hot streaks ------------------------------------------------------------

def test_hot_streaks_window_limit():
    rows = [([1, 2, 3, 4, 5], None)] * 20 + [([6, 7, 8, 9, 10], None)] * 30
    df = build_draws(rows, step_days=1)
    streaks = analysis.hot_streaks(df)
    numbers = {s["number"] for s in streaks}
    assert numbers == {1, 2, 3, 4, 5}
    assert all(s["streak"] == 20 for s in streaks)


def test_hot_streaks_dates_in_collection_order(example_draws):
    streaks = analysis.hot_streaks(example_draws)
    assert streaks[0]["streak"] == 2
    top = next(s for s in streaks if s["number"] == 1)
    assert top["appearances"] == ["10/28/2025", "10/25/2025"]


def test_hot_streaks_small_selection(example_draws):
    total = sum(s["streak"] for s in analysis.hot_streaks(example_draws))
    assert total == 15


# -- Distributions & summaries -----------------------------------------------

def test_even_odd_distribution(example_draws):
    eo = analysis.even_odd_distribution(example_draws)
    assert eo["distribution"][(2, 3)] == 2
    assert eo["distribution"][(3, 2)] == 1
    assert eo["distribution"][(5, 0)] == 0
    assert eo["most_common"] == (2, 3)
    assert eo["avg_even"] == pytest.approx(2.33)


def test_high_low_distribution():
    df = build_draws([([36, 40, 50, 1, 2], None), ([1, 2, 3, 4, 35], None)])
    hl = analysis.high_low_distribution(df)
    assert hl["distribution"][(3, 2)] == 1
    assert hl["distribution"][(0, 5)] == 1
    assert hl["avg_high"] == 1.5


def test_sum_analysis(example_draws):
    sa = analysis.sum_analysis(example_draws)
    assert list(sa["sums"]) == [15, 15, 40]
    assert list(sa["total_sums"]) == [25, 25, 51]
    assert sa["stats"]["mode"] == 15
    assert sa["stats"]["min"] == 15
    assert sa["stats"]["max"] == 40


def test_sum_analysis_empty(empty_draws):
    assert analysis.sum_analysis(empty_draws)["stats"] == {}


def test_calculate_statistics(example_draws):
    st = analysis.calculate_statistics(example_draws)
    assert st["Total Draws"] == "3"
    assert st["Avg Sum"] == "23.3"
    assert st["Avg Even"] == "2.3"
    assert st["Avg High"] == "0.0"


def test_calculate_statistics_empty(empty_draws):
    assert analysis.calculate_statistics(empty_draws) == {}


def test_dashboard_highlights(example_draws):
    hl = analysis.dashboard_highlights(example_draws)
    assert hl["most_frequent"] == (1, 2)
    assert hl["most_frequent_bonus"] == (10, 2)
    assert hl["top_pair"]["pair"] == (1, 2)


def test_number_detail(samples):
    now = pd.Timestamp("2025-10-29")
    detail = analysis.number_detail(samples, 2, now=now)
    assert detail["frequency"] == 4
    assert detail["last_seen"] == "Yesterday"
    assert detail["avg_gap"] == 7
    assert detail["recent_appearances"][0] == "10/28/2025"

    recent = analysis.number_detail(samples, 2, time_range="7d", now=now)
    assert recent["frequency"] == 1
    assert recent["avg_gap"] == 0


def test_number_detail_bonus(samples):
    detail = analysis.number_detail(samples, 19, bonus=True, now=pd.Timestamp("2025-11-07"))
    assert detail["frequency"] == 3
    assert detail["last_seen"] == "24 days ago"


def test_filter_time_range_rejects_unknown(samples):
    with pytest.raises(ValueError):
        analysis.filter_time_range(samples, "2w")


def test_get_full_analysis(samples):
    results = analysis.get_full_analysis(samples)
    assert set(results) >= {"frequency", "pairs", "gaps", "hot_streaks",
                            "even_odd", "high_low", "sums", "statistics"}


def test_frequency_grid_main(example_draws):
    grid = analysis.frequency_grid(example_draws)
    assert len(grid) == 7
    assert all(len(row) == 10 for row in grid)
    assert grid[0] == [2, 2, 2, 2, 2, 1, 1, 1, 1, 1]
    assert sum(map(sum, grid)) == 15


def test_frequency_grid_bonus(example_draws):
    grid = analysis.frequency_grid(example_draws, bonus=True)
    assert len(grid) == 5
    assert grid[1] == [0, 0, 0, 0, 2]
    assert grid[2][0] == 1


def test_frequency_grid_empty(empty_draws):
    assert sum(map(sum, analysis.frequency_grid(empty_draws))) == 0
