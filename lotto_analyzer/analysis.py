"""
Mega Millions - Statistical Analysis Engine

Frequency, pair, gap/due-ratio and hot-streak engines plus the even/odd,
high/low and sum summaries shown on the dashboard.

Every function takes a newest-first draw DataFrame (see ``draws.py``) and
is pure: the same frame always gives the same result. An empty frame gives
empty results, never an error.
"""
from collections import Counter
from itertools import combinations

import numpy as np
import pandas as pd
from scipy import stats

from lotto_analyzer.draws import (
    BONUS_MAX,
    HIGH_BOUND,
    MAIN_COUNT,
    MAIN_MAX,
    NUM_COLS,
    bonus_of,
    date_string,
    main_numbers,
)

ALL_NUMBERS = list(range(1, MAIN_MAX + 1))
HOT_STREAK_WINDOW = 20
NEVER_SEEN_RATIO = 99.0  # due ratio for numbers that never appeared

# (upper bound, label) - checked in order, last band is open-ended
DUE_BANDS = [
    (0.8, "under-due"),
    (1.0, "approaching"),
    (1.5, "mildly overdue"),
    (2.0, "notably overdue"),
    (float("inf"), "very overdue"),
]

TIME_RANGES = {
    "7d": pd.DateOffset(days=7),
    "30d": pd.DateOffset(days=30),
    "90d": pd.DateOffset(days=90),
    "1y": pd.DateOffset(years=1),
    "all": None,
}


def _sorted_desc(counter):
    """(number, count) pairs, highest count first. Ties keep first-seen order."""
    return sorted(counter.items(), key=lambda x: x[1], reverse=True)


# ===================================================================
# 1. Frequency Engine
# ===================================================================

def count_main_numbers(df: pd.DataFrame) -> list:
    """Occurrences of each observed main number, most frequent first."""
    counter = Counter()
    for row in df[NUM_COLS].values:
        for n in row:
            counter[int(n)] += 1
    return _sorted_desc(counter)


def count_bonus_numbers(df: pd.DataFrame) -> list:
    """Occurrences of each observed bonus number. Draws without one are ignored."""
    counter = Counter(int(b) for b in df["bonus_number"].dropna())
    return _sorted_desc(counter)


def least_common(df: pd.DataFrame) -> list:
    """Same counts as count_main_numbers, least frequent first."""
    return sorted(count_main_numbers(df), key=lambda x: x[1])


def top_numbers(frequencies, limit):
    return list(frequencies[:limit])


def average_frequency(frequencies) -> float:
    """Mean count across the numbers that appeared at least once."""
    if not frequencies:
        return 0.0
    return sum(c for _, c in frequencies) / len(frequencies)


def frequency_analysis(df: pd.DataFrame) -> dict:
    """
    Main and bonus frequency tables in one bundle.

    Returns
    -------
    dict with keys:
        main        : list of (number, count) descending
        bonus       : list of (number, count) descending
        least       : list of (number, count) ascending
        average     : float mean main count
        total_draws : int
        dataframe   : pd.DataFrame with one row per observed main number
    """
    main = count_main_numbers(df)
    total_draws = len(df)
    total_slots = MAIN_COUNT * total_draws if total_draws > 0 else 1

    records = []
    for rank, (num, cnt) in enumerate(main, 1):
        records.append({
            "number": num,
            "count": cnt,
            "pct_of_draws": round(100.0 * cnt / max(total_draws, 1), 2),
            "pct_of_slots": round(100.0 * cnt / total_slots, 4),
            "rank": rank,
        })

    return {
        "main": main,
        "bonus": count_bonus_numbers(df),
        "least": least_common(df),
        "average": average_frequency(main),
        "total_draws": total_draws,
        "dataframe": pd.DataFrame(records, columns=["number", "count", "pct_of_draws",
                                                    "pct_of_slots", "rank"]),
    }


# ===================================================================
# 2. Pair Engine
# ===================================================================

def count_pairs(df: pd.DataFrame) -> list:
    """
    Every unordered pair of main numbers seen together in a draw.

    Pairs are keyed by the sorted tuple so (3, 7) is the same pair whatever
    order the numbers were drawn in.

    Returns
    -------
    list of dicts {pair: (a, b) with a < b, count, last_date}, by count desc
    """
    pair_counter: Counter = Counter()
    pair_last: dict = {}

    for _, row in df.iterrows():
        nums = sorted(main_numbers(row))
        for pair in combinations(nums, 2):
            pair_counter[pair] += 1
            # newest-first, so the first sighting is the latest
            pair_last.setdefault(pair, row["date"])

    return [
        {"pair": pair, "count": count, "last_date": pair_last[pair]}
        for pair, count in _sorted_desc(pair_counter)
    ]


def top_pairs(pairs, limit):
    return list(pairs[:limit])


def pairs_containing(number, pairs):
    """All pairs that include ``number``."""
    return [p for p in pairs if number in p["pair"]]


# ===================================================================
# 3. Gap / Due-Ratio Engine
# ===================================================================

def due_band(ratio: float) -> str:
    """Classify a due ratio into its severity band."""
    for upper, label in DUE_BANDS:
        if ratio < upper:
            return label
    return DUE_BANDS[-1][1]


def number_gap_analysis(df: pd.DataFrame) -> list:
    """
    How overdue each number 1-70 is against its own cadence.

    For a selection of D newest-first draws:
        avg_gap     = D / appearances
        current_gap = index of the most recent draw containing the number
        due_ratio   = current_gap / avg_gap

    Numbers seen at most once have no meaningful average: avg_gap is D and
    due_ratio is 99.0 (never seen) or current_gap / D (seen once).

    Returns
    -------
    list of dicts {number, appearances, avg_gap, current_gap, due_ratio,
    last_seen_date, last_seen, band}, by due_ratio desc
    """
    total_draws = len(df)
    if total_draws == 0:
        return []

    appearances = Counter()
    first_index = {}
    first_date = {}
    for idx, (_, row) in enumerate(df.iterrows()):
        for n in main_numbers(row):
            appearances[n] += 1
            if n not in first_index:
                first_index[n] = idx
                first_date[n] = row["date"]

    entries = []
    for n in ALL_NUMBERS:
        count = appearances.get(n, 0)
        current_gap = first_index.get(n, total_draws)
        last_date = first_date.get(n)

        if count <= 1:
            avg_gap = float(total_draws)
            due_ratio = NEVER_SEEN_RATIO if count == 0 else current_gap / total_draws
        else:
            avg_gap = total_draws / count
            due_ratio = current_gap / avg_gap

        entries.append({
            "number": n,
            "appearances": count,
            "avg_gap": avg_gap,
            "current_gap": current_gap,
            "due_ratio": due_ratio,
            "last_seen_date": last_date,
            "last_seen": date_string(last_date) if last_date is not None else "Never",
            "band": due_band(due_ratio),
        })

    entries.sort(key=lambda e: e["due_ratio"], reverse=True)
    return entries


def overdue_entries(entries):
    return [e for e in entries if e["due_ratio"] > 1.0 and e["appearances"] > 1]


def very_overdue_entries(entries):
    return [e for e in entries if e["due_ratio"] > 2.0 and e["appearances"] > 1]


def most_overdue(entries, limit=3):
    """Top entries by due ratio, ignoring numbers seen at most once."""
    return [e for e in entries if e["appearances"] > 1][:limit]


# ===================================================================
# 4. Hot-Streak Engine
# ===================================================================

def hot_streaks(df: pd.DataFrame, window: int = HOT_STREAK_WINDOW) -> list:
    """
    Appearance counts inside the most recent ``window`` draws.

    Returns
    -------
    list of dicts {number, streak, appearances}, by streak desc.
    ``appearances`` holds M/D/YYYY date strings in collection order.
    """
    seen: dict = {}
    for _, row in df.head(window).iterrows():
        label = date_string(row["date"])
        for n in main_numbers(row):
            seen.setdefault(n, []).append(label)

    streaks = [
        {"number": n, "streak": len(dates), "appearances": dates}
        for n, dates in seen.items()
    ]
    streaks.sort(key=lambda s: s["streak"], reverse=True)
    return streaks


# ===================================================================
# 5. Even / Odd and High / Low
# ===================================================================

def _split_distribution(df, count_fn, labels):
    total = len(df)
    dist: Counter = Counter()
    per_draw = []
    for _, row in df.iterrows():
        first = count_fn(main_numbers(row))
        dist[(first, MAIN_COUNT - first)] += 1
        per_draw.append(first)

    for k in range(MAIN_COUNT + 1):
        dist.setdefault((k, MAIN_COUNT - k), 0)

    avg_first = float(np.mean(per_draw)) if per_draw else 0.0
    records = [{labels[0]: k[0], labels[1]: k[1], "count": v,
                "pct": round(100.0 * v / total, 2) if total else 0.0}
               for k, v in sorted(dist.items())]
    return {
        "distribution": dict(dist),
        f"avg_{labels[0]}": round(avg_first, 2),
        f"avg_{labels[1]}": round(MAIN_COUNT - avg_first, 2) if per_draw else 0.0,
        "most_common": max(dist, key=dist.get) if total else None,
        "dataframe": pd.DataFrame(records),
    }


def even_odd_distribution(df: pd.DataFrame) -> dict:
    """How draws split between even and odd main numbers (5/0 .. 0/5)."""
    return _split_distribution(
        df, lambda nums: sum(1 for n in nums if n % 2 == 0), ("even", "odd")
    )


def high_low_distribution(df: pd.DataFrame) -> dict:
    """Same structure as even/odd. Low = 1-35, High = 36-70."""
    return _split_distribution(
        df, lambda nums: sum(1 for n in nums if n > HIGH_BOUND), ("high", "low")
    )


# ===================================================================
# 6. Sum Analysis
# ===================================================================

def sum_analysis(df: pd.DataFrame) -> dict:
    """
    Sum of the 5 main numbers per draw, plus the total with the bonus.

    Returns
    -------
    dict with keys:
        stats       : dict of descriptive stats (empty for no draws)
        sums        : pd.Series of main-number sums, collection order
        total_sums  : pd.Series of sums including the bonus
    """
    sums = df[NUM_COLS].sum(axis=1).astype(int)
    total_sums = sums + df["bonus_number"].fillna(0).astype(int)

    if len(sums) == 0:
        return {"stats": {}, "sums": sums, "total_sums": total_sums}

    mode_result = stats.mode(sums.values, keepdims=True)
    descriptive = {
        "mean": round(float(sums.mean()), 2),
        "median": float(sums.median()),
        "mode": int(mode_result.mode[0]),
        "std": round(float(sums.std()), 2) if len(sums) > 1 else 0.0,
        "min": int(sums.min()),
        "max": int(sums.max()),
    }
    return {"stats": descriptive, "sums": sums, "total_sums": total_sums}


def calculate_statistics(df: pd.DataFrame) -> dict:
    """Headline numbers for the selection, formatted for display."""
    if len(df) == 0:
        return {}

    nums = df[NUM_COLS].values
    avg_sum = nums.sum(axis=1).mean()
    avg_even = (nums % 2 == 0).sum(axis=1).mean()
    avg_high = (nums > HIGH_BOUND).sum(axis=1).mean()

    return {
        "Total Draws": str(len(df)),
        "Avg Sum": f"{avg_sum:.1f}",
        "Avg Even": f"{avg_even:.1f}",
        "Avg High": f"{avg_high:.1f}",
    }


# ===================================================================
# 7. Dashboard & Number Detail
# ===================================================================

def dashboard_highlights(df: pd.DataFrame, recent: int = 10) -> dict:
    """Most frequent main/bonus number, the hot number and the top pair."""
    main = count_main_numbers(df)
    bonus = count_bonus_numbers(df)
    hot = count_main_numbers(df.head(recent))
    pairs = count_pairs(df)
    return {
        "most_frequent": main[0] if main else None,
        "most_frequent_bonus": bonus[0] if bonus else None,
        "hot_number": hot[0] if hot else None,
        "top_pair": pairs[0] if pairs else None,
    }


def filter_time_range(df: pd.DataFrame, time_range: str = "all", now=None) -> pd.DataFrame:
    """Keep draws on or after ``now`` minus the range ("7d", "30d", "90d", "1y", "all")."""
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range: {time_range}")
    offset = TIME_RANGES[time_range]
    if offset is None:
        return df
    now = pd.Timestamp(now) if now is not None else pd.Timestamp.now()
    return df[df["date"] >= now - offset]


def frequency_grid(df: pd.DataFrame, bonus: bool = False) -> list:
    """Counts laid out row by row: 7x10 for main numbers, 5x5 for bonus balls."""
    counts = dict(count_bonus_numbers(df) if bonus else count_main_numbers(df))
    top, width = (BONUS_MAX, 5) if bonus else (MAIN_MAX, 10)
    return [
        [counts.get(start + c, 0) for c in range(width)]
        for start in range(1, top + 1, width)
    ]


def number_detail(df: pd.DataFrame, number: int, bonus: bool = False,
                  time_range: str = "all", now=None) -> dict:
    """Frequency, last seen, average gap and recent dates for one number."""
    now = pd.Timestamp(now) if now is not None else pd.Timestamp.now()
    draws = filter_time_range(df, time_range, now)

    hits = []
    for _, row in draws.iterrows():
        if bonus:
            if bonus_of(row) == number:
                hits.append(row["date"])
        elif number in main_numbers(row):
            hits.append(row["date"])

    if hits:
        days = (now.normalize() - pd.Timestamp(hits[0]).normalize()).days
        if days == 0:
            last_seen = "Today"
        elif days == 1:
            last_seen = "Yesterday"
        else:
            last_seen = f"{days} days ago"
    else:
        last_seen = "Never"

    return {
        "number": number,
        "frequency": len(hits),
        "last_seen": last_seen,
        "avg_gap": len(draws) // len(hits) if len(hits) > 1 else 0,
        "recent_appearances": [date_string(d) for d in hits[:8]],
    }


# ===================================================================
# Master Runner
# ===================================================================

def get_full_analysis(df: pd.DataFrame) -> dict:
    """
    Run every analysis function and return a dict of all results.

    Parameters
    ----------
    df : pd.DataFrame
        Newest-first draw data.

    Returns
    -------
    dict mapping analysis name -> result
    """
    results = {}

    print("[Analysis] Running frequency analysis ...")
    results["frequency"] = frequency_analysis(df)

    print("[Analysis] Running pair analysis ...")
    results["pairs"] = count_pairs(df)

    print("[Analysis] Running gap / due-ratio analysis ...")
    results["gaps"] = number_gap_analysis(df)

    print("[Analysis] Running hot streak analysis ...")
    results["hot_streaks"] = hot_streaks(df)

    print("[Analysis] Running even/odd and high/low distributions ...")
    results["even_odd"] = even_odd_distribution(df)
    results["high_low"] = high_low_distribution(df)

    print("[Analysis] Running sum analysis ...")
    results["sums"] = sum_analysis(df)
    results["statistics"] = calculate_statistics(df)

    print("[Analysis] All analyses complete.")
    return results


# -------------------------------------------------------------------
# CLI entry point
# -------------------------------------------------------------------

if __name__ == "__main__":
    from lotto_analyzer.fetcher import load_data

    df = load_data()
    all_results = get_full_analysis(df)

    print("\n" + "=" * 60)
    print("MEGA MILLIONS STATISTICAL ANALYSIS SUMMARY")
    print("=" * 60)

    freq = all_results["frequency"]
    print(f"\nTotal draws analysed: {freq['total_draws']}")
    print(f"Top-5 most frequent main numbers: {freq['main'][:5]}")
    print(f"Top-5 least frequent main numbers: {freq['least'][:5]}")
    print(f"Top-5 bonus numbers: {freq['bonus'][:5]}")

    top = all_results["pairs"][:5]
    print(f"\nTop pairs: {[(p['pair'], p['count']) for p in top]}")

    overdue = most_overdue(all_results["gaps"])
    print(f"Most overdue: {[(e['number'], round(e['due_ratio'], 2)) for e in overdue]}")

    print(f"\nSum stats: {all_results['sums']['stats']}")
    print(f"Statistics: {all_results['statistics']}")
