#!/usr/bin/env python3
"""
Standalone analysis script.
Prints the headline tables and one lucky number pick.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lotto_analyzer.fetcher import load_data
from lotto_analyzer import analysis
from lotto_analyzer.generator import generate_lucky_numbers


def main():
    print("Loading data...")
    df = load_data()
    print(f"Loaded {len(df)} draws")

    results = analysis.get_full_analysis(df)

    print(f"\n{'='*60}")
    print("MOST FREQUENT MAIN NUMBERS - TOP 15")
    print(f"{'='*60}")
    for i, (num, count) in enumerate(results["frequency"]["main"][:15]):
        print(f"  #{i+1:2d}. Number {num:2d} - {count} times")

    print(f"\n{'='*60}")
    print("TOP PAIRS")
    print(f"{'='*60}")
    for p in results["pairs"][:10]:
        a, b = p["pair"]
        print(f"  {a:2d}-{b:2d}: {p['count']} times")

    print(f"\n{'='*60}")
    print("HOT STREAKS (last 20 draws)")
    print(f"{'='*60}")
    for s in results["hot_streaks"][:10]:
        print(f"  Number {s['number']:2d}: {s['streak']} times")

    print(f"\n{'='*60}")
    print("MOST OVERDUE")
    print(f"{'='*60}")
    for e in analysis.most_overdue(results["gaps"], limit=10):
        print(f"  Number {e['number']:2d}: due ratio {e['due_ratio']:.2f} "
              f"({e['band']}), last seen {e['last_seen']}")

    pick = generate_lucky_numbers(
        df,
        frequencies=results["frequency"]["main"],
        pairs=results["pairs"],
        gaps=results["gaps"],
    )
    print(f"\n{'='*60}")
    if pick["available"]:
        print(f"LUCKY NUMBERS: {', '.join(str(n) for n in pick['numbers'])} "
              f"+ Bonus: {pick['bonus_number']}")
    else:
        print(f"LUCKY NUMBERS: unavailable ({pick['reason']})")

    print(f"\n{'='*70}")
    print("DISCLAIMER: Lottery draws are random. These statistics describe the")
    print("past only and do not predict future results. Play responsibly.")
    print(f"{'='*70}")


if __name__ == "__main__":
    main()
