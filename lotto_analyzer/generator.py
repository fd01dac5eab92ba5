"""
Lucky Number Generator for Mega Millions

Blends recency, due-ratio, pair and mid-frequency signals into a pick of
5 main numbers + 1 bonus ball. This is a sampler, not a prediction.

Stages (later stages skip numbers already chosen):
 1. Recency scores      - weight 2^((D - i) / 60) per draw, half-life 60
 2. Due numbers         - current_gap / avg_gap > 1.0, seen more than once
 3. Slot 1              - random pick from recency ranks 1-8 (skips the top)
 4. Slot 2              - 70% top-6 / 30% any-of-12 from recency ranks 1-12
 5. Slot 3              - most overdue number
 6. Slot 4              - next overdue, preferring a different decade
 7. Slot 5              - pair anchor from the shuffled top 15 pairs
 8. Fill                - mid-frequency pool (ranks 9-36), then uniform 1-70
 9. Decade balance      - one swap when 2 or fewer decades are used
10. Bonus               - weighted roll over the top 10 recency-scored bonus balls

Every stage takes the list chosen so far and returns the extended list.
The random source is injected so tests can pass a seeded ``random.Random``.
"""
import random
from collections import defaultdict

import pandas as pd

from lotto_analyzer.analysis import (
    count_main_numbers,
    count_pairs,
    number_gap_analysis,
)
from lotto_analyzer.draws import BONUS_MAX, MAIN_COUNT, MAIN_MAX, bonus_of, main_numbers

HALF_LIFE = 60.0
SLOT1_RANKS = (1, 9)        # recency ranks 1..8
SLOT2_RANKS = (1, 13)       # recency ranks 1..12
SLOT2_TOP = 6
SLOT2_TOP_CHANCE = 0.7
SLOT2_ATTEMPTS = 30
PAIR_ANCHOR_TOP = 15
MID_POOL_SKIP = 8
MID_POOL_SIZE = 28
FILL_ATTEMPTS = 50
MIN_DECADES = 3
BONUS_TOP = 10
DECADES = range(1, 8)


def decade(n):
    """1-10 -> 1, 11-20 -> 2, ... 61-70 -> 7."""
    return (n - 1) // 10 + 1


def _dedupe(numbers):
    """Drop repeats, keeping first occurrence order."""
    seen = set()
    out = []
    for n in numbers:
        if n not in seen:
            seen.add(n)
            out.append(n)
    return out


# ── Scoring ──────────────────────────────────────────────────────────────

def recency_weight(index, total):
    """Exponential decay weight for the draw at ``index`` (0 = newest)."""
    return 2 ** ((total - index) / HALF_LIFE)


def recency_scores(df: pd.DataFrame) -> dict:
    """Sum of recency weights per main number."""
    total = len(df)
    scores = defaultdict(float)
    for i, (_, row) in enumerate(df.iterrows()):
        w = recency_weight(i, total)
        for n in main_numbers(row):
            scores[n] += w
    return dict(scores)


def bonus_recency_scores(df: pd.DataFrame) -> dict:
    """
    Recency weights per bonus ball.

    Only draws with a bonus are counted; positions are numbered within
    that subset.
    """
    bonuses = [b for b in (bonus_of(row) for _, row in df.iterrows()) if b is not None]
    total = len(bonuses)
    scores = defaultdict(float)
    for i, bonus in enumerate(bonuses):
        scores[bonus] += recency_weight(i, total)
    return dict(scores)


def rank_by_score(scores: dict) -> list:
    return [n for n, _ in sorted(scores.items(), key=lambda x: x[1], reverse=True)]


def due_numbers(gaps) -> list:
    """Numbers seen more than once whose due ratio is above 1.0, most overdue first."""
    due = [e for e in gaps if e["appearances"] > 1 and e["due_ratio"] > 1.0]
    due.sort(key=lambda e: e["due_ratio"], reverse=True)
    return [e["number"] for e in due]


def mid_frequency_pool(frequencies) -> list:
    """Numbers ranked 9th-36th by raw frequency."""
    return [n for n, _ in frequencies[MID_POOL_SKIP:MID_POOL_SKIP + MID_POOL_SIZE]]


def weighted_top_pick(pool, rng):
    """70% chance of one of the first 6, otherwise any of the pool."""
    if rng.random() < SLOT2_TOP_CHANCE:
        return rng.choice(pool[:SLOT2_TOP])
    return rng.choice(pool)


# ── Stages ───────────────────────────────────────────────────────────────

def pick_recency_slot(chosen, recency_sorted, rng):
    """Slot 1: skip the hottest number, take one of the next 8."""
    lo, hi = SLOT1_RANKS
    candidates = [n for n in recency_sorted[lo:hi] if n not in chosen]
    if not candidates:
        return list(chosen)
    return list(chosen) + [rng.choice(candidates)]


def pick_weighted_recency_slot(chosen, recency_sorted, rng):
    """Slot 2: weighted pick from recency ranks 1-12, retried to avoid repeats."""
    lo, hi = SLOT2_RANKS
    pool = recency_sorted[lo:hi]
    if not pool:
        return list(chosen)
    for _ in range(SLOT2_ATTEMPTS):
        pick = weighted_top_pick(pool, rng)
        if pick not in chosen:
            return list(chosen) + [pick]
    return list(chosen)


def pick_most_due_slot(chosen, due_sorted):
    """Slot 3: the most overdue number not already chosen."""
    for n in due_sorted:
        if n not in chosen:
            return list(chosen) + [n]
    return list(chosen)


def pick_second_due_slot(chosen, due_sorted, anchor=None):
    """
    Slot 4: the next overdue number, preferring a decade other than
    ``anchor``'s. Falls back to the next overdue number in any decade.
    """
    remaining = [n for n in due_sorted if n not in chosen]
    if not remaining:
        return list(chosen)
    if anchor is not None:
        for n in remaining:
            if decade(n) != decade(anchor):
                return list(chosen) + [n]
    return list(chosen) + [remaining[0]]


def pick_pair_anchor_slot(chosen, pairs, rng):
    """
    Slot 5: walk the shuffled top 15 pairs and take the first member not
    yet chosen. If every pair is fully used, add a member of a random top
    pair anyway; the fill stage removes the repeat.
    """
    top = [p["pair"] for p in pairs[:PAIR_ANCHOR_TOP]]
    if not top:
        return list(chosen)

    shuffled = list(top)
    rng.shuffle(shuffled)
    for a, b in shuffled:
        if a not in chosen:
            return list(chosen) + [a]
        if b not in chosen:
            return list(chosen) + [b]

    return list(chosen) + [rng.choice(rng.choice(top))]


def fill_from_pool(chosen, mid_pool, rng):
    """Top up to 5 distinct numbers: mid-frequency pool first, then uniform 1-70."""
    picked = _dedupe(chosen)
    if mid_pool:
        for _ in range(FILL_ATTEMPTS):
            if len(picked) >= MAIN_COUNT:
                break
            n = rng.choice(mid_pool)
            if n not in picked:
                picked.append(n)
    while len(picked) < MAIN_COUNT:
        n = rng.randint(1, MAIN_MAX)
        if n not in picked:
            picked.append(n)
    return picked


def balance_decades(chosen, mid_pool, rng):
    """
    If the pick spans 2 or fewer decades, swap one random slot for a
    mid-frequency number from an unused decade. Applied at most once.
    """
    picked = list(chosen)
    used = {decade(n) for n in picked}
    if len(used) >= MIN_DECADES:
        return picked

    missing = [d for d in DECADES if d not in used]
    target = rng.choice(missing)
    candidates = [n for n in mid_pool if decade(n) == target]
    if not candidates:
        return picked

    picked[rng.randrange(len(picked))] = rng.choice(candidates)
    picked = _dedupe(picked)
    while len(picked) < MAIN_COUNT:
        n = rng.randint(1, MAIN_MAX)
        if n not in picked:
            picked.append(n)
    return picked


def pick_bonus(df, rng):
    """Weighted roll over the 10 highest recency-scored bonus balls."""
    scores = bonus_recency_scores(df)
    if not scores:
        return rng.randint(1, BONUS_MAX)

    top = sorted(scores.items(), key=lambda x: x[1], reverse=True)[:BONUS_TOP]
    total = sum(s for _, s in top)
    roll = rng.random() * total
    cumulative = 0.0
    for n, s in top:
        cumulative += s
        if roll <= cumulative:
            return n
    return top[-1][0]


# ── Generator ────────────────────────────────────────────────────────────

def generate_lucky_numbers(df, frequencies=None, pairs=None, gaps=None, rng=None):
    """
    Generate 5 distinct main numbers and a bonus ball from the selection.

    Parameters
    ----------
    df : pd.DataFrame
        Selected draws, newest-first.
    frequencies, pairs, gaps : list, optional
        Precomputed engine output; computed from ``df`` when omitted.
    rng : random.Random, optional
        Random source. A fresh one is created per call when omitted.

    Returns
    -------
    dict with keys available, numbers, bonus_number, slots
    or {available: False, reason} when there is nothing to work from.
    """
    if df is None or len(df) == 0:
        return {"available": False, "reason": "No draws selected"}

    if frequencies is None:
        frequencies = count_main_numbers(df)
    if not frequencies:
        return {"available": False, "reason": "No frequency data"}

    if pairs is None:
        pairs = count_pairs(df)
    if gaps is None:
        gaps = number_gap_analysis(df)
    if rng is None:
        rng = random.Random()

    recency_sorted = rank_by_score(recency_scores(df))
    due_sorted = due_numbers(gaps)
    mid_pool = mid_frequency_pool(frequencies)

    slots = {}
    chosen = []

    chosen = pick_recency_slot(chosen, recency_sorted, rng)
    slots["recency"] = chosen[-1] if chosen else None

    before = len(chosen)
    chosen = pick_weighted_recency_slot(chosen, recency_sorted, rng)
    slots["weighted_recency"] = chosen[-1] if len(chosen) > before else None

    before = len(chosen)
    chosen = pick_most_due_slot(chosen, due_sorted)
    slots["most_due"] = chosen[-1] if len(chosen) > before else None

    before = len(chosen)
    chosen = pick_second_due_slot(chosen, due_sorted, anchor=slots["most_due"])
    slots["second_due"] = chosen[-1] if len(chosen) > before else None

    before = len(chosen)
    chosen = pick_pair_anchor_slot(chosen, pairs, rng)
    slots["pair_anchor"] = chosen[-1] if len(chosen) > before else None

    chosen = fill_from_pool(chosen, mid_pool, rng)
    chosen = balance_decades(chosen, mid_pool, rng)

    return {
        "available": True,
        "numbers": sorted(chosen),
        "bonus_number": pick_bonus(df, rng),
        "slots": slots,
    }
